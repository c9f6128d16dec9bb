"""
Whole-dataset backup and restore.

A backup document is ``{timestamp, items, orders, settings}``, read fully
into memory. Restore checks only the document's shape before upserting.
"""
import logging
from typing import Any, Callable, Dict, Optional

from inventory_app.application.activity import ActivityService
from inventory_app.application.data_access import DataAccess
from inventory_app.application.user_settings import SettingsService
from inventory_app.core.exceptions import BackupFormatError
from inventory_app.core.ports.backend import Query
from inventory_app.core.timeutils import utcnow

logger = logging.getLogger(__name__)

BACKUP_KEYS = ("items", "orders", "settings")
RESTORE_INVALIDATES = ("items:", "orders:", "warehouses:", "dashboard:", "settings:")


def validate_backup(document: Any) -> None:
    if not isinstance(document, dict):
        raise BackupFormatError("Invalid backup file format")
    missing = [key for key in BACKUP_KEYS if key not in document]
    if missing:
        raise BackupFormatError(f"Invalid backup file format: missing {', '.join(missing)}")
    for key in ("items", "orders"):
        if not isinstance(document[key], list):
            raise BackupFormatError(f"Invalid backup file format: {key} must be a list")


class BackupService:
    def __init__(
        self,
        data: DataAccess,
        settings: SettingsService,
        activity: ActivityService,
        clock: Callable = utcnow,
    ):
        self.data = data
        self.settings = settings
        self.activity = activity
        self._clock = clock

    def create_backup(self, user_id: Optional[str] = None) -> Dict[str, Any]:
        backend = self.data.backend
        document = {
            "timestamp": self._clock().isoformat(),
            "items": backend.select("items", Query().order("created_at")).rows,
            "orders": backend.select("orders", Query().order("created_at")).rows,
            "settings": self.settings.get_settings(user_id).model_dump(),
        }
        self.activity.record_system_log(
            "backup_created",
            {"items": len(document["items"]), "orders": len(document["orders"])},
            user_id,
        )
        logger.info(f"Backup created with {len(document['items'])} items and {len(document['orders'])} orders")
        return document

    def restore_backup(self, document: Any, user_id: Optional[str] = None) -> Dict[str, int]:
        validate_backup(document)
        backend = self.data.backend

        def restore() -> Dict[str, int]:
            items = backend.upsert("items", document["items"]) if document["items"] else []
            orders = backend.upsert("orders", document["orders"]) if document["orders"] else []
            return {"items": len(items), "orders": len(orders)}

        restored = self.data.mutate(restore, RESTORE_INVALIDATES, {"operation": "restore_backup"})
        self.activity.record_system_log("backup_restored", restored, user_id)
        logger.info(f"Backup restored: {restored}")
        return restored
