import logging
from typing import Dict, List, Optional

from inventory_app.application.data_access import DataAccess, empty_page, page_range, to_page
from inventory_app.core.domain.models import Notification, Page
from inventory_app.core.ports.backend import Query

logger = logging.getLogger(__name__)

NOTIFICATIONS_TABLE = "notifications"


class NotificationService:
    """Notifications are read fresh every time; they are not cached."""

    def __init__(self, data: DataAccess):
        self.data = data

    def fetch_notifications(
        self,
        page: int = 1,
        page_size: int = 10,
        unread_only: bool = False,
        user_id: Optional[str] = None,
    ) -> Page[Notification]:
        def fetch() -> Page[Notification]:
            query = Query()
            if user_id:
                query.eq("user_id", user_id)
            if unread_only:
                query.eq("is_read", False)
            query.order("created_at", ascending=False).range(*page_range(page, page_size)).count()
            return to_page(
                self.data.backend.select(NOTIFICATIONS_TABLE, query), page, page_size, Notification.model_validate
            )

        return self.data.read(fetch, empty_page(page, page_size), {"operation": "fetch_notifications"})

    def unread_count(self, user_id: Optional[str] = None) -> int:
        def fetch() -> int:
            query = Query().eq("is_read", False).range(0, 0).count()
            if user_id:
                query.eq("user_id", user_id)
            return self.data.backend.select(NOTIFICATIONS_TABLE, query).count or 0

        return self.data.read(fetch, 0, {"operation": "unread_count"})

    def create_notification(self, message: str, user_id: Optional[str] = None, type: str = "info") -> Notification:
        row = self.data.mutate(
            lambda: self.data.backend.insert(
                NOTIFICATIONS_TABLE, {"message": message, "user_id": user_id, "type": type, "is_read": False}
            ),
            (),
            {"operation": "create_notification"},
        )
        return Notification.model_validate(row)

    def mark_notifications_as_read(self, ids: List[str]) -> Dict[str, object]:
        """Mark the given notifications read. An empty list is a no-op."""
        if not ids:
            return {"success": True, "count": 0}
        rows = self.data.mutate(
            lambda: self.data.backend.update(NOTIFICATIONS_TABLE, {"is_read": True}, Query().in_("id", ids)),
            (),
            {"operation": "mark_notifications_as_read"},
        )
        return {"success": True, "count": len(rows)}
