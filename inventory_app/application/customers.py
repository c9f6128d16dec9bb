import logging
from typing import Callable, Optional

from inventory_app.application.activity import ActivityService
from inventory_app.application.data_access import DataAccess, empty_page, make_cache_key, page_range, to_page
from inventory_app.core.domain.models import Customer, CustomerInput, Page
from inventory_app.core.exceptions import NotFoundError
from inventory_app.core.ports.backend import Query
from inventory_app.core.timeutils import utcnow
from inventory_app.core.validation import require_email, require_fields

logger = logging.getLogger(__name__)

CUSTOMERS_TABLE = "customers"
CUSTOMER_INVALIDATES = ("customers:",)
REQUIRED_CUSTOMER_FIELDS = ("name", "email", "phone", "address")


class CustomerService:
    def __init__(self, data: DataAccess, activity: ActivityService, ttl: float = 300, clock: Callable = utcnow):
        self.data = data
        self.activity = activity
        self.ttl = ttl
        self._clock = clock

    def fetch_customers(self, page: int = 1, page_size: int = 20, search: Optional[str] = None) -> Page[Customer]:
        key = make_cache_key("customers", page=page, page_size=page_size, search=search)

        def fetch() -> Page[Customer]:
            query = (
                Query()
                .search(("name", "email"), search)
                .order("name")
                .range(*page_range(page, page_size))
                .count()
            )
            return to_page(self.data.backend.select(CUSTOMERS_TABLE, query), page, page_size, Customer.model_validate)

        return self.data.read(
            lambda: self.data.cached(key, fetch, self.ttl),
            empty_page(page, page_size),
            {"operation": "fetch_customers"},
        )

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        def fetch() -> Optional[Customer]:
            rows = self.data.backend.select(CUSTOMERS_TABLE, Query().eq("id", customer_id)).rows
            return Customer.model_validate(rows[0]) if rows else None

        return self.data.read(fetch, None, {"operation": "get_customer", "customer_id": customer_id})

    def _prepare(self, data: CustomerInput) -> dict:
        values = data.model_dump()
        require_fields(values, REQUIRED_CUSTOMER_FIELDS)
        require_email(values["email"])
        if not values.get("organization_id"):
            values.pop("organization_id")
        return values

    def create_customer(self, data: CustomerInput, user_id: Optional[str] = None) -> Customer:
        values = self._prepare(data)
        row = self.data.mutate(
            lambda: self.data.backend.insert(CUSTOMERS_TABLE, values),
            CUSTOMER_INVALIDATES,
            {"operation": "create_customer"},
        )
        self.activity.record_audit("INSERT", CUSTOMERS_TABLE, {"id": row["id"]}, user_id)
        return Customer.model_validate(row)

    def update_customer(self, customer_id: str, data: CustomerInput, user_id: Optional[str] = None) -> Customer:
        values = self._prepare(data)
        values["updated_at"] = self._clock()
        rows = self.data.mutate(
            lambda: self.data.backend.update(CUSTOMERS_TABLE, values, Query().eq("id", customer_id)),
            CUSTOMER_INVALIDATES,
            {"operation": "update_customer", "customer_id": customer_id},
        )
        if not rows:
            raise NotFoundError("Customer not found")
        self.activity.record_audit("UPDATE", CUSTOMERS_TABLE, {"id": customer_id}, user_id)
        return Customer.model_validate(rows[0])

    def delete_customer(self, customer_id: str, user_id: Optional[str] = None) -> None:
        rows = self.data.mutate(
            lambda: self.data.backend.delete(CUSTOMERS_TABLE, Query().eq("id", customer_id)),
            CUSTOMER_INVALIDATES,
            {"operation": "delete_customer", "customer_id": customer_id},
        )
        if not rows:
            raise NotFoundError("Customer not found")
        self.activity.record_audit("DELETE", CUSTOMERS_TABLE, {"id": customer_id}, user_id)
