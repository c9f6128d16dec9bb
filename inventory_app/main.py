import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inventory_app.adapters.primary.api.admin_router import router as admin_router
from inventory_app.adapters.primary.api.auth_router import router as auth_router
from inventory_app.adapters.primary.api.customers_router import router as customers_router
from inventory_app.adapters.primary.api.dashboard_router import router as dashboard_router
from inventory_app.adapters.primary.api.errors import setup_exception_handlers
from inventory_app.adapters.primary.api.items_router import router as items_router
from inventory_app.adapters.primary.api.notifications_router import router as notifications_router
from inventory_app.adapters.primary.api.orders_router import router as orders_router
from inventory_app.adapters.primary.api.recycle_bin_router import router as recycle_bin_router
from inventory_app.adapters.primary.api.settings_router import router as settings_router
from inventory_app.adapters.primary.api.warehouses_router import router as warehouses_router
from inventory_app.adapters.primary.websocket.changes_websocket import router as ws_router
from inventory_app.adapters.primary.websocket.manager import manager
from inventory_app.application.container import ServiceContainer, build_container
from inventory_app.config.settings import AppSettings, load_settings
from inventory_app.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(settings: Optional[AppSettings] = None, container: Optional[ServiceContainer] = None) -> FastAPI:
    settings = settings or (container.settings if container else load_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, settings.log_dir, settings.log_format)
        if container is None:
            # Create tables (for local SQLite runs; the hosted database is migrated separately)
            from inventory_app.adapters.secondary.database.orm import Base
            Base.metadata.create_all(bind=app.state.container.backend.engine)
        remove_listener = app.state.container.add_listener(manager.publish_threadsafe)
        yield
        remove_listener()

    app = FastAPI(title="Inventory Management API", lifespan=lifespan)
    app.state.container = container or build_container(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(items_router, prefix="/api/v1")
    app.include_router(recycle_bin_router, prefix="/api/v1")
    app.include_router(warehouses_router, prefix="/api/v1")
    app.include_router(orders_router, prefix="/api/v1")
    app.include_router(customers_router, prefix="/api/v1")
    app.include_router(notifications_router, prefix="/api/v1")
    app.include_router(settings_router, prefix="/api/v1")
    app.include_router(dashboard_router, prefix="/api/v1")
    app.include_router(admin_router, prefix="/api/v1")
    app.include_router(ws_router)

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    return app


app = create_app()
