import logging
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional

from inventory_app.application.data_access import DataAccess, make_cache_key
from inventory_app.application.items import is_low_stock
from inventory_app.application.user_settings import SettingsService
from inventory_app.core.formatters import format_currency
from inventory_app.core.ports.backend import Query
from inventory_app.core.timeutils import utcnow

logger = logging.getLogger(__name__)

MONTHS_SHOWN = 6


def month_buckets(now, months: int = MONTHS_SHOWN) -> "OrderedDict[str, int]":
    """Zeroed ``YYYY-MM`` buckets for the last ``months`` months, oldest first."""
    year, month = now.year, now.month
    keys = []
    for _ in range(months):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return OrderedDict((key, 0) for key in reversed(keys))


class DashboardService:
    def __init__(self, data: DataAccess, settings: SettingsService, ttl: float = 300, clock: Callable = utcnow):
        self.data = data
        self.settings = settings
        self.ttl = ttl
        self._clock = clock

    def get_summary(self, user_id: Optional[str] = None) -> Dict[str, Any]:
        prefs = self.settings.get_settings(user_id)
        key = make_cache_key("dashboard", user_id=user_id, currency=prefs.currency, language=prefs.language)

        def fetch() -> Dict[str, Any]:
            backend = self.data.backend
            items = backend.select("items", Query().is_null("deleted_at")).rows
            orders = backend.select("orders").rows

            revenue = sum(row.get("total_amount") or 0 for row in orders if row.get("status") != "cancelled")
            buckets = month_buckets(self._clock())
            for row in orders:
                created = row.get("created_at")
                if created is None:
                    continue
                bucket = f"{created.year:04d}-{created.month:02d}"
                if bucket in buckets:
                    buckets[bucket] += 1

            return {
                "total_products": len(items),
                "low_stock_count": sum(1 for row in items if is_low_stock(row)),
                "total_orders": len(orders),
                "revenue": revenue,
                "formatted_revenue": format_currency(revenue, prefs.currency, prefs.language),
                "orders_per_month": [{"month": month, "orders": count} for month, count in buckets.items()],
            }

        empty = {
            "total_products": 0,
            "low_stock_count": 0,
            "total_orders": 0,
            "revenue": 0,
            "formatted_revenue": format_currency(0, prefs.currency, prefs.language),
            "orders_per_month": [],
        }
        return self.data.read(
            lambda: self.data.cached(key, fetch, self.ttl), empty, {"operation": "get_summary"}
        )
