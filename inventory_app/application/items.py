"""
Inventory items: listing, editing, image attachment and the recycle-bin
lifecycle (soft delete, restore, purge).
"""
import logging
from datetime import timedelta
from typing import Any, Callable, Dict, Iterable, Optional

from inventory_app.application.activity import ActivityService
from inventory_app.application.data_access import (
    DataAccess,
    empty_page,
    make_cache_key,
    page_range,
    total_pages,
)
from inventory_app.application.uploads import ImageUploader
from inventory_app.core.domain.item_api_models import (
    PLACEHOLDER_IMAGE,
    DeletedItemView,
    ItemSortField,
    ItemView,
    PurgeResult,
    StockStatus,
)
from inventory_app.core.domain.models import ItemInput, Page
from inventory_app.core.exceptions import NotFoundError, ValidationError
from inventory_app.core.formatters import DEFAULT_CURRENCY, SUPPORTED_CURRENCIES, format_currency
from inventory_app.core.ports.backend import Query, Row
from inventory_app.core.timeutils import utcnow
from inventory_app.core.validation import require_fields

logger = logging.getLogger(__name__)

ITEMS_TABLE = "items"
WAREHOUSES_TABLE = "warehouses"

# Every item mutation touches these cached views
ITEM_INVALIDATES = ("items:", "warehouses:", "dashboard:")

SORTABLE_COLUMNS = {field.value for field in ItemSortField}
REQUIRED_ITEM_FIELDS = ("sku", "name", "warehouse_id")


def is_low_stock(row: Row) -> bool:
    return (row.get("quantity") or 0) <= (row.get("low_stock_threshold") or 0)


def to_item_view(row: Row, location: str = "", language: str = "en", view_cls=ItemView, **extra: Any) -> ItemView:
    """Normalise a raw item row for display."""
    currency = row.get("currency") or DEFAULT_CURRENCY
    quantity = row.get("quantity") or 0
    initial_price = (row.get("bought_price") or 0) + (row.get("shipment_fees") or 0)
    selling_price = row.get("selling_price") or 0

    return view_cls(
        id=row["id"],
        stockCode=row.get("sku") or "",
        productName=row.get("name") or "",
        image=row.get("image") or PLACEHOLDER_IMAGE,
        boxes=row.get("boxes") or 0,
        unitsPerBox=row.get("units_per_box") or 0,
        initialPrice=initial_price,
        sellingPrice=selling_price,
        location=location,
        warehouseId=row.get("warehouse_id"),
        stockStatus=StockStatus.IN_STOCK if quantity > 0 else StockStatus.OUT_OF_STOCK,
        unitsLeft=quantity,
        lowStockThreshold=row.get("low_stock_threshold") or 0,
        currency=currency,
        formattedInitialPrice=format_currency(initial_price, currency, language),
        formattedSellingPrice=format_currency(selling_price, currency, language),
        deletedAt=row.get("deleted_at"),
        createdAt=row.get("created_at"),
        updatedAt=row.get("updated_at"),
        **extra,
    )


class ItemService:
    def __init__(
        self,
        data: DataAccess,
        activity: ActivityService,
        uploader: Optional[ImageUploader] = None,
        items_ttl: float = 120,
        retention_days: int = 30,
        clock: Callable = utcnow,
    ):
        self.data = data
        self.activity = activity
        self.uploader = uploader
        self.items_ttl = items_ttl
        self.retention_days = retention_days
        self._clock = clock

    # ========================================================================
    # READS
    # ========================================================================

    def _warehouse_names(self, warehouse_ids: Iterable[Optional[str]]) -> Dict[str, str]:
        ids = sorted({wid for wid in warehouse_ids if wid})
        if not ids:
            return {}
        result = self.data.backend.select(WAREHOUSES_TABLE, Query().in_("id", ids))
        return {row["id"]: row["name"] for row in result.rows}

    def fetch_items(
        self,
        page: int = 1,
        page_size: int = 20,
        warehouse_id: Optional[str] = None,
        search: Optional[str] = None,
        is_deleted: bool = False,
        low_stock: bool = False,
        sort_by: str = "name",
        sort_order: str = "asc",
        language: str = "en",
    ) -> Page[ItemView]:
        """
        Fetch one page of items.

        ``low_stock`` is applied to the fetched page only, so a page may hold
        fewer than ``page_size`` rows while ``count`` reports the unfiltered
        total.
        """
        key = make_cache_key(
            "items",
            page=page, page_size=page_size, warehouse_id=warehouse_id, search=search,
            is_deleted=is_deleted, low_stock=low_stock, sort_by=sort_by,
            sort_order=sort_order, language=language,
        )

        def fetch() -> Page[ItemView]:
            query = Query()
            if is_deleted:
                query.not_null("deleted_at")
            else:
                query.is_null("deleted_at")
            if warehouse_id:
                query.eq("warehouse_id", warehouse_id)
            query.search(("name", "sku"), search)
            column = sort_by if sort_by in SORTABLE_COLUMNS else "name"
            query.order(column, ascending=sort_order != "desc")
            query.range(*page_range(page, page_size)).count()

            result = self.data.backend.select(ITEMS_TABLE, query)
            rows = [row for row in result.rows if is_low_stock(row)] if low_stock else result.rows
            names = self._warehouse_names(row.get("warehouse_id") for row in rows)
            count = result.count or 0
            return Page(
                data=[to_item_view(row, names.get(row.get("warehouse_id"), ""), language) for row in rows],
                count=count,
                page=page,
                page_size=page_size,
                total_pages=total_pages(count, page_size),
            )

        return self.data.read(
            lambda: self.data.cached(key, fetch, self.items_ttl),
            empty_page(page, page_size),
            {"operation": "fetch_items"},
        )

    def get_item(self, item_id: str, language: str = "en") -> Optional[ItemView]:
        def fetch() -> Optional[ItemView]:
            rows = self.data.backend.select(ITEMS_TABLE, Query().eq("id", item_id)).rows
            if not rows:
                return None
            names = self._warehouse_names([rows[0].get("warehouse_id")])
            return to_item_view(rows[0], names.get(rows[0].get("warehouse_id"), ""), language)

        return self.data.read(fetch, None, {"operation": "get_item", "item_id": item_id})

    def fetch_deleted_items(self, page: int = 1, page_size: int = 20, language: str = "en") -> Page[DeletedItemView]:
        """Trashed items, most recently deleted first."""
        key = make_cache_key("items", trash=True, page=page, page_size=page_size, language=language)

        def fetch() -> Page[DeletedItemView]:
            query = (
                Query()
                .not_null("deleted_at")
                .order("deleted_at", ascending=False)
                .range(*page_range(page, page_size))
                .count()
            )
            result = self.data.backend.select(ITEMS_TABLE, query)
            names = self._warehouse_names(row.get("warehouse_id") for row in result.rows)
            count = result.count or 0
            return Page(
                data=[
                    to_item_view(
                        row,
                        names.get(row.get("warehouse_id"), ""),
                        language,
                        view_cls=DeletedItemView,
                        daysRemaining=self.days_remaining(row["deleted_at"]),
                    )
                    for row in result.rows
                ],
                count=count,
                page=page,
                page_size=page_size,
                total_pages=total_pages(count, page_size),
            )

        return self.data.read(
            lambda: self.data.cached(key, fetch, self.items_ttl),
            empty_page(page, page_size),
            {"operation": "fetch_deleted_items"},
        )

    def days_remaining(self, deleted_at) -> int:
        elapsed = self._clock() - deleted_at
        return max(0, self.retention_days - elapsed.days)

    # ========================================================================
    # WRITES
    # ========================================================================

    def _prepare(self, data: ItemInput) -> Dict[str, Any]:
        values = data.model_dump()
        require_fields(values, REQUIRED_ITEM_FIELDS)
        if values["currency"] not in SUPPORTED_CURRENCIES:
            raise ValidationError(f"Unsupported currency: {values['currency']}")
        values["quantity"] = values["boxes"] * values["units_per_box"]
        if not values.get("image"):
            values.pop("image")
        if not values.get("organization_id"):
            values.pop("organization_id")
        return values

    def _single(self, rows, message: str) -> Row:
        if not rows:
            raise NotFoundError(message)
        return rows[0]

    def _view(self, row: Row, language: str = "en") -> ItemView:
        names = self._warehouse_names([row.get("warehouse_id")])
        return to_item_view(row, names.get(row.get("warehouse_id"), ""), language)

    def create_item(self, data: ItemInput, user_id: Optional[str] = None) -> ItemView:
        values = self._prepare(data)
        row = self.data.mutate(
            lambda: self.data.backend.insert(ITEMS_TABLE, values),
            ITEM_INVALIDATES,
            {"operation": "create_item"},
        )
        self.activity.record_audit("INSERT", ITEMS_TABLE, {"id": row["id"], "sku": row["sku"]}, user_id)
        logger.info(f"Created item {row['id']} ({row['sku']})")
        return self._view(row)

    def update_item(self, item_id: str, data: ItemInput, user_id: Optional[str] = None) -> ItemView:
        values = self._prepare(data)
        values["updated_at"] = self._clock()
        rows = self.data.mutate(
            lambda: self.data.backend.update(ITEMS_TABLE, values, Query().eq("id", item_id)),
            ITEM_INVALIDATES,
            {"operation": "update_item", "item_id": item_id},
        )
        row = self._single(rows, "Item not found")
        self.activity.record_audit("UPDATE", ITEMS_TABLE, {"id": item_id, "sku": row["sku"]}, user_id)
        return self._view(row)

    def soft_delete_item(self, item_id: str, user_id: Optional[str] = None) -> ItemView:
        """Move an item to the recycle bin. Only ``deleted_at`` changes."""
        rows = self.data.mutate(
            lambda: self.data.backend.update(
                ITEMS_TABLE, {"deleted_at": self._clock()}, Query().eq("id", item_id).is_null("deleted_at")
            ),
            ITEM_INVALIDATES,
            {"operation": "soft_delete_item", "item_id": item_id},
        )
        row = self._single(rows, "Item not found")
        self.activity.record_audit("SOFT_DELETE", ITEMS_TABLE, {"id": item_id}, user_id)
        return self._view(row)

    def restore_item(self, item_id: str, user_id: Optional[str] = None) -> ItemView:
        rows = self.data.mutate(
            lambda: self.data.backend.update(
                ITEMS_TABLE, {"deleted_at": None}, Query().eq("id", item_id).not_null("deleted_at")
            ),
            ITEM_INVALIDATES,
            {"operation": "restore_item", "item_id": item_id},
        )
        row = self._single(rows, "Item not found in recycle bin")
        self.activity.record_audit("RESTORE", ITEMS_TABLE, {"id": item_id}, user_id)
        return self._view(row)

    def purge_item(self, item_id: str, user_id: Optional[str] = None) -> None:
        """Permanently remove a trashed item. Active items cannot be purged."""
        rows = self.data.mutate(
            lambda: self.data.backend.delete(ITEMS_TABLE, Query().eq("id", item_id).not_null("deleted_at")),
            ITEM_INVALIDATES,
            {"operation": "purge_item", "item_id": item_id},
        )
        self._single(rows, "Item not found in recycle bin")
        self.activity.record_audit("DELETE", ITEMS_TABLE, {"id": item_id}, user_id)

    def purge_expired_items(self, now=None, user_id: Optional[str] = None) -> PurgeResult:
        """Remove items that have been in the recycle bin longer than the retention window."""
        cutoff = (now or self._clock()) - timedelta(days=self.retention_days)
        rows = self.data.mutate(
            lambda: self.data.backend.delete(
                ITEMS_TABLE, Query().not_null("deleted_at").lt("deleted_at", cutoff)
            ),
            ITEM_INVALIDATES,
            {"operation": "purge_expired_items"},
        )
        if rows:
            self.activity.record_audit(
                "DELETE", ITEMS_TABLE, {"ids": [row["id"] for row in rows], "reason": "retention"}, user_id
            )
            logger.info(f"Purged {len(rows)} expired items from the recycle bin")
        return PurgeResult(purged=len(rows))

    def attach_image(
        self,
        item_id: str,
        filename: str,
        payload: bytes,
        content_type: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> ItemView:
        if self.uploader is None:
            raise RuntimeError("No image uploader configured")

        def upload_and_store():
            url = self.uploader.upload(filename, payload, content_type=content_type, folder=ITEMS_TABLE)
            return self.data.backend.update(
                ITEMS_TABLE, {"image": url, "updated_at": self._clock()}, Query().eq("id", item_id)
            )

        rows = self.data.mutate(upload_and_store, ITEM_INVALIDATES, {"operation": "attach_image", "item_id": item_id})
        row = self._single(rows, "Item not found")
        self.activity.record_audit("UPDATE", ITEMS_TABLE, {"id": item_id, "image": row["image"]}, user_id)
        return self._view(row)
