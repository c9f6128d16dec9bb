"""
Router for the recycle bin: trashed items, restore and permanent delete.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from inventory_app.adapters.primary.api.dependencies import get_container, get_current_user
from inventory_app.adapters.primary.api.items_router import user_language
from inventory_app.application.container import ServiceContainer
from inventory_app.core.domain.item_api_models import DeletedItemView, ItemView, PurgeResult
from inventory_app.core.domain.models import CurrentUser, Page

router = APIRouter(prefix="/recycle-bin", tags=["Recycle Bin"])


@router.get("/", response_model=Page[DeletedItemView])
def list_deleted_items(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    language: Optional[str] = Query(None),
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    """Trashed items, most recently deleted first, with the days left before purge."""
    return container.items.fetch_deleted_items(page, page_size, user_language(container, user, language))


@router.post("/{item_id}/restore", response_model=ItemView)
def restore_item(
    item_id: str,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    return container.items.restore_item(item_id, user.id)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def purge_item(
    item_id: str,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    container.items.purge_item(item_id, user.id)


@router.post("/purge-expired", response_model=PurgeResult)
def purge_expired_items(
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    """Permanently deletes items trashed longer than the retention window."""
    return container.items.purge_expired_items(user_id=user.id)
