"""
Router for user settings, backup/restore and the activity and error logs.
"""
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Query, status

from inventory_app.adapters.primary.api.dependencies import get_container, get_current_user
from inventory_app.application.container import ServiceContainer
from inventory_app.core.domain.models import CurrentUser, Page, SettingsUpdate, SystemLog, UserSettings

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/", response_model=UserSettings)
def get_settings(
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    return container.settings_service.get_settings(user.id)


@router.put("/", response_model=UserSettings)
def update_settings(
    payload: SettingsUpdate,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    return container.settings_service.update_settings(user.id, payload)


@router.get("/backup")
def download_backup(
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    """Full backup document: ``{timestamp, items, orders, settings}``."""
    return container.backup.create_backup(user.id)


@router.post("/restore")
def restore_backup(
    document: Dict[str, Any] = Body(...),
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    restored = container.backup.restore_backup(document, user.id)
    return {"status": "Success", "restored": restored}


@router.get("/system-logs", response_model=Page[SystemLog])
def list_system_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    return container.activity.fetch_system_logs(page, page_size)


@router.get("/errors")
def recent_errors(
    limit: int = Query(10, ge=1, le=50),
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    """Most recent handled errors, newest first."""
    return [entry.to_dict() for entry in container.errors.get_recent(limit)]


@router.delete("/errors", status_code=status.HTTP_204_NO_CONTENT)
def clear_errors(
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    container.errors.clear()
