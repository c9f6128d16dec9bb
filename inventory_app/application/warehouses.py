import logging
from collections import Counter
from typing import Callable, Optional

from inventory_app.application.activity import ActivityService
from inventory_app.application.data_access import DataAccess, empty_page, make_cache_key, page_range, to_page
from inventory_app.core.domain.models import Page, Warehouse, WarehouseSave
from inventory_app.core.exceptions import NotFoundError
from inventory_app.core.ports.backend import Query
from inventory_app.core.timeutils import utcnow
from inventory_app.core.validation import require_fields

logger = logging.getLogger(__name__)

WAREHOUSES_TABLE = "warehouses"
WAREHOUSE_INVALIDATES = ("warehouses:", "items:", "dashboard:")


class WarehouseService:
    def __init__(self, data: DataAccess, activity: ActivityService, ttl: float = 300, clock: Callable = utcnow):
        self.data = data
        self.activity = activity
        self.ttl = ttl
        self._clock = clock

    def fetch_warehouses(
        self, page: int = 1, page_size: int = 20, organization_id: Optional[str] = None
    ) -> Page[Warehouse]:
        """Warehouses by name, each with the number of active items it holds."""
        key = make_cache_key("warehouses", page=page, page_size=page_size, organization_id=organization_id)

        def fetch() -> Page[Warehouse]:
            query = Query()
            if organization_id:
                query.eq("organization_id", organization_id)
            query.order("name").range(*page_range(page, page_size)).count()
            result = self.data.backend.select(WAREHOUSES_TABLE, query)

            ids = [row["id"] for row in result.rows]
            counts: Counter = Counter()
            if ids:
                items = self.data.backend.select(
                    "items", Query().in_("warehouse_id", ids).is_null("deleted_at")
                ).rows
                counts = Counter(item["warehouse_id"] for item in items)

            return to_page(
                result, page, page_size,
                lambda row: Warehouse(**row, items_count=counts.get(row["id"], 0)),
            )

        return self.data.read(
            lambda: self.data.cached(key, fetch, self.ttl),
            empty_page(page, page_size),
            {"operation": "fetch_warehouses"},
        )

    def save_warehouse(self, data: WarehouseSave, user_id: Optional[str] = None) -> Warehouse:
        """Insert when ``data.id`` is empty, otherwise update."""
        values = data.model_dump(exclude={"id"})
        require_fields(values, ("name", "location"), "Name and location are required")
        if not values.get("organization_id"):
            values.pop("organization_id")

        if data.id:
            values["updated_at"] = self._clock()
            rows = self.data.mutate(
                lambda: self.data.backend.update(WAREHOUSES_TABLE, values, Query().eq("id", data.id)),
                WAREHOUSE_INVALIDATES,
                {"operation": "update_warehouse", "warehouse_id": data.id},
            )
            if not rows:
                raise NotFoundError("Warehouse not found")
            row, action = rows[0], "UPDATE"
        else:
            row = self.data.mutate(
                lambda: self.data.backend.insert(WAREHOUSES_TABLE, values),
                WAREHOUSE_INVALIDATES,
                {"operation": "create_warehouse"},
            )
            action = "INSERT"

        self.activity.record_audit(action, WAREHOUSES_TABLE, {"id": row["id"], "name": row["name"]}, user_id)
        return Warehouse(**row)

    def delete_warehouse(self, warehouse_id: str, user_id: Optional[str] = None) -> None:
        rows = self.data.mutate(
            lambda: self.data.backend.delete(WAREHOUSES_TABLE, Query().eq("id", warehouse_id)),
            WAREHOUSE_INVALIDATES,
            {"operation": "delete_warehouse", "warehouse_id": warehouse_id},
        )
        if not rows:
            raise NotFoundError("Warehouse not found")
        self.activity.record_audit("DELETE", WAREHOUSES_TABLE, {"id": warehouse_id}, user_id)
