from fastapi import APIRouter, Depends, Query

from inventory_app.adapters.primary.api.dependencies import get_container, get_current_user
from inventory_app.application.container import ServiceContainer
from inventory_app.core.domain.models import CurrentUser, MarkAsReadRequest, Notification, Page

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/", response_model=Page[Notification])
def list_notifications(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    unread_only: bool = Query(False),
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    return container.notifications.fetch_notifications(page, page_size, unread_only, user.id)


@router.get("/unread-count")
def unread_count(
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    return {"count": container.notifications.unread_count(user.id)}


@router.post("/mark-read")
def mark_as_read(
    payload: MarkAsReadRequest,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    return container.notifications.mark_notifications_as_read(payload.ids)
