import logging
from collections import Counter
from typing import Callable, Dict, List, Optional

from inventory_app.application.activity import ActivityService
from inventory_app.application.data_access import DataAccess, empty_page, make_cache_key, page_range, to_page
from inventory_app.core.domain.models import Organization, OrganizationSummary, Page
from inventory_app.core.exceptions import NotFoundError
from inventory_app.core.ports.backend import Query
from inventory_app.core.timeutils import utcnow
from inventory_app.core.validation import require_fields

logger = logging.getLogger(__name__)

ORGANIZATIONS_TABLE = "organizations"
ORGANIZATION_INVALIDATES = ("organizations:",)


class OrganizationService:
    def __init__(self, data: DataAccess, activity: ActivityService, ttl: float = 300, clock: Callable = utcnow):
        self.data = data
        self.activity = activity
        self.ttl = ttl
        self._clock = clock

    def fetch_organizations(
        self, page: int = 1, page_size: int = 20, is_active: Optional[bool] = None
    ) -> Page[Organization]:
        key = make_cache_key("organizations", page=page, page_size=page_size, is_active=is_active)

        def fetch() -> Page[Organization]:
            query = Query()
            if is_active is not None:
                query.eq("is_active", is_active)
            query.order("created_at", ascending=False).range(*page_range(page, page_size)).count()
            return to_page(
                self.data.backend.select(ORGANIZATIONS_TABLE, query), page, page_size, Organization.model_validate
            )

        return self.data.read(
            lambda: self.data.cached(key, fetch, self.ttl),
            empty_page(page, page_size),
            {"operation": "fetch_organizations"},
        )

    def create_organization(self, name: str, user_id: Optional[str] = None) -> Organization:
        require_fields({"name": name}, ("name",), "Organization name is required")
        row = self.data.mutate(
            lambda: self.data.backend.insert(ORGANIZATIONS_TABLE, {"name": name.strip(), "is_active": True}),
            ORGANIZATION_INVALIDATES,
            {"operation": "create_organization"},
        )
        self.activity.record_audit("INSERT", ORGANIZATIONS_TABLE, {"id": row["id"], "name": row["name"]}, user_id)
        return Organization.model_validate(row)

    def set_organization_status(self, organization_id: str, is_active: bool, user_id: Optional[str] = None) -> Organization:
        rows = self.data.mutate(
            lambda: self.data.backend.update(
                ORGANIZATIONS_TABLE,
                {"is_active": is_active, "updated_at": self._clock()},
                Query().eq("id", organization_id),
            ),
            ORGANIZATION_INVALIDATES,
            {"operation": "set_organization_status", "organization_id": organization_id},
        )
        if not rows:
            raise NotFoundError("Organization not found")
        self.activity.record_audit(
            "UPDATE", ORGANIZATIONS_TABLE, {"id": organization_id, "is_active": is_active}, user_id
        )
        return Organization.model_validate(rows[0])

    def organization_summary(self) -> List[OrganizationSummary]:
        """Per organization: member count, active items, orders and the latest order date."""

        def fetch() -> List[OrganizationSummary]:
            backend = self.data.backend
            organizations = backend.select(ORGANIZATIONS_TABLE, Query().order("name")).rows
            members = Counter(row["organization_id"] for row in backend.select("user_organizations").rows)
            items = Counter(
                row["organization_id"]
                for row in backend.select("items", Query().is_null("deleted_at")).rows
            )
            orders = backend.select("orders").rows
            order_counts = Counter(row["organization_id"] for row in orders)
            last_order: Dict[str, object] = {}
            for row in orders:
                org_id, created = row["organization_id"], row.get("created_at")
                if created is not None and (org_id not in last_order or created > last_order[org_id]):
                    last_order[org_id] = created

            return [
                OrganizationSummary(
                    organization_id=org["id"],
                    organization_name=org["name"],
                    total_users=members.get(org["id"], 0),
                    total_items=items.get(org["id"], 0),
                    total_orders=order_counts.get(org["id"], 0),
                    last_order_date=last_order.get(org["id"]),
                )
                for org in organizations
            ]

        return self.data.read(fetch, [], {"operation": "organization_summary"})
