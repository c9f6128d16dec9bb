"""
Service container: builds the shared cache, error handler and every service
once per process. The FastAPI app keeps it on ``app.state.container``.
"""
import logging
import threading
import time
from typing import Any, Callable, Dict, List

from inventory_app.application.activity import ActivityService
from inventory_app.application.auth import AuthService
from inventory_app.application.backup import BackupService
from inventory_app.application.customers import CustomerService
from inventory_app.application.dashboard import DashboardService
from inventory_app.application.data_access import DataAccess
from inventory_app.application.items import ItemService
from inventory_app.application.notifications import NotificationService
from inventory_app.application.orders import OrderService
from inventory_app.application.organizations import OrganizationService
from inventory_app.application.uploads import ImageUploader
from inventory_app.application.user_settings import SettingsService
from inventory_app.application.users import UserManagementService
from inventory_app.application.warehouses import WarehouseService
from inventory_app.config.settings import AppSettings
from inventory_app.core.cache import TimedCache
from inventory_app.core.errors import ErrorHandler, ErrorLogEntry
from inventory_app.core.ports.backend import BackendPort
from inventory_app.core.ports.external import AuthPort, ChangeEvent, RealtimePort, StoragePort
from inventory_app.core.timeutils import utcnow

logger = logging.getLogger(__name__)

# Cache prefixes dropped when a table changes; other tables drop "<table>:"
TABLE_INVALIDATES: Dict[str, tuple] = {
    "items": ("items:", "warehouses:", "dashboard:"),
    "warehouses": ("warehouses:", "items:"),
    "orders": ("orders:", "dashboard:"),
    "order_items": ("orders:", "dashboard:"),
    "settings": ("settings:", "dashboard:"),
    "user_organizations": ("organizations:",),
}

# Log tables change on every write; clients are not told about them
SILENT_TABLES = frozenset({"system_logs", "system_audit_logs"})

Listener = Callable[[Dict[str, Any]], None]


class ServiceContainer:
    def __init__(
        self,
        settings: AppSettings,
        backend: BackendPort,
        storage: StoragePort,
        auth: AuthPort,
        realtime: RealtimePort,
        cache_clock: Callable[[], float] = time.monotonic,
        clock: Callable = utcnow,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.backend = backend
        self.realtime = realtime
        self._listeners: List[Listener] = []
        self._listeners_lock = threading.Lock()

        self.cache = TimedCache(settings.cache_max_entries, clock=cache_clock)
        self.errors = ErrorHandler(settings.error_log_capacity, notifier=self._notify)
        self.data = DataAccess(backend, self.cache, self.errors, settings.cache_ttl_seconds)

        ttl = settings.cache_ttl_seconds
        self.activity = ActivityService(self.data)
        self.uploader = ImageUploader(storage, settings.storage_bucket, settings.upload_max_retries, sleep=sleep)
        self.items = ItemService(
            self.data, self.activity, self.uploader,
            items_ttl=settings.items_cache_ttl_seconds,
            retention_days=settings.trash_retention_days,
            clock=clock,
        )
        self.warehouses = WarehouseService(self.data, self.activity, ttl, clock)
        self.organizations = OrganizationService(self.data, self.activity, ttl, clock)
        self.notifications = NotificationService(self.data)
        self.orders = OrderService(self.data, self.activity, ttl, clock)
        self.customers = CustomerService(self.data, self.activity, ttl, clock)
        self.settings_service = SettingsService(
            self.data,
            {"currency": settings.default_currency, "language": settings.default_language},
            clock,
        )
        self.backup = BackupService(self.data, self.settings_service, self.activity, clock)
        self.dashboard = DashboardService(self.data, self.settings_service, ttl, clock)
        self.auth = AuthService(auth, self.data, settings.password_reset_redirect)
        self.users = UserManagementService(self.data, self.auth, self.activity, clock)

        self._unsubscribe = realtime.subscribe("*", "*", self._on_change)

    # ========================================================================
    # REALTIME
    # ========================================================================

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Receive every outgoing realtime message (changes and toasts)."""
        with self._listeners_lock:
            self._listeners.append(listener)

        def remove() -> None:
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return remove

    def _emit(self, message: Dict[str, Any]) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(message)

    def _on_change(self, event: ChangeEvent) -> None:
        prefixes = TABLE_INVALIDATES.get(event.table, (f"{event.table}:",))
        self.cache.invalidate_prefix(*prefixes)
        if event.table not in SILENT_TABLES:
            self._emit({"type": "change", **event.to_dict()})

    def _notify(self, entry: ErrorLogEntry) -> None:
        self._emit({
            "type": "toast",
            "level": "error",
            "category": entry.category.value,
            "message": entry.message,
        })

    def close(self) -> None:
        self._unsubscribe()


def build_container(settings: AppSettings, engine=None) -> ServiceContainer:
    """Wire the production adapters."""
    from inventory_app.adapters.secondary.auth.supabase_auth import SupabaseAuth
    from inventory_app.adapters.secondary.database.sql_backend import SqlBackend
    from inventory_app.adapters.secondary.realtime.change_feed import ChangeFeed
    from inventory_app.adapters.secondary.storage.supabase_storage import SupabaseStorage

    if engine is None:
        from inventory_app.adapters.secondary.database.config import build_engine
        engine = build_engine(settings.database_url)

    realtime = ChangeFeed()
    return ServiceContainer(
        settings,
        backend=SqlBackend(engine, realtime),
        storage=SupabaseStorage(settings.supabase_url, settings.supabase_anon_key, settings.storage_timeout),
        auth=SupabaseAuth(settings.supabase_url, settings.supabase_anon_key, settings.auth_timeout),
        realtime=realtime,
    )
