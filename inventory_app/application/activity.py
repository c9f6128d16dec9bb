"""
Append-only activity records: system logs and the audit trail.
"""
import logging
from typing import Any, Dict, Optional

from inventory_app.application.data_access import DataAccess, empty_page, page_range, to_page
from inventory_app.core.domain.models import AuditLog, Page, SystemLog
from inventory_app.core.ports.backend import Query

logger = logging.getLogger(__name__)

SYSTEM_LOGS_TABLE = "system_logs"
AUDIT_LOGS_TABLE = "system_audit_logs"


class ActivityService:
    def __init__(self, data: DataAccess):
        self.data = data

    def record_system_log(
        self, action: str, details: Optional[Dict[str, Any]] = None, user_id: Optional[str] = None
    ) -> Optional[SystemLog]:
        """Write a system log row. A failed write is recorded but never breaks the caller."""
        try:
            row = self.data.backend.insert(
                SYSTEM_LOGS_TABLE,
                {"action": action, "details": details or {}, "user_id": user_id},
            )
        except Exception as exc:
            self.data.errors.handle(exc, {"action": action}, show_notification=False)
            return None
        return SystemLog.model_validate(row)

    def record_audit(
        self,
        action: str,
        table_name: str,
        details: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
        organization_id: Optional[str] = None,
    ) -> Optional[AuditLog]:
        try:
            row = self.data.backend.insert(
                AUDIT_LOGS_TABLE,
                {
                    "action": action,
                    "schema_name": "public",
                    "table_name": table_name,
                    "query_details": details or {},
                    "user_id": user_id,
                    "organization_id": organization_id,
                },
            )
        except Exception as exc:
            self.data.errors.handle(exc, {"action": action, "table": table_name}, show_notification=False)
            return None
        return AuditLog.model_validate(row)

    def fetch_system_logs(self, page: int = 1, page_size: int = 20) -> Page[SystemLog]:
        def fetch():
            query = Query().order("created_at", ascending=False).range(*page_range(page, page_size)).count()
            return to_page(self.data.backend.select(SYSTEM_LOGS_TABLE, query), page, page_size, SystemLog.model_validate)

        return self.data.read(fetch, empty_page(page, page_size), {"operation": "fetch_system_logs"})

    def fetch_audit_logs(self, page: int = 1, page_size: int = 20, table_name: Optional[str] = None) -> Page[AuditLog]:
        def fetch():
            query = Query()
            if table_name:
                query.eq("table_name", table_name)
            query.order("created_at", ascending=False).range(*page_range(page, page_size)).count()
            return to_page(self.data.backend.select(AUDIT_LOGS_TABLE, query), page, page_size, AuditLog.model_validate)

        return self.data.read(fetch, empty_page(page, page_size), {"operation": "fetch_audit_logs"})
