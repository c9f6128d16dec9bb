"""
Router for inventory items.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from inventory_app.adapters.primary.api.dependencies import get_container, get_current_user
from inventory_app.application.container import ServiceContainer
from inventory_app.core.domain.item_api_models import ItemSortField, ItemView, SortOrder
from inventory_app.core.domain.models import CurrentUser, ItemInput, Page
from inventory_app.core.exceptions import NotFoundError, ValidationError

router = APIRouter(prefix="/items", tags=["Items"])


def user_language(container: ServiceContainer, user: CurrentUser, language: Optional[str]) -> str:
    return language or container.settings_service.get_settings(user.id).language


@router.get("/", response_model=Page[ItemView])
def list_items(
    page: int = Query(1, ge=1, description="Page number, starting at 1"),
    page_size: int = Query(20, ge=1, le=100, description="Rows per page"),
    warehouse_id: Optional[str] = Query(None, description="Only items stored in this warehouse"),
    search: Optional[str] = Query(None, description="Case-insensitive match on name or SKU"),
    low_stock: bool = Query(False, description="Only items at or below their low-stock threshold"),
    sort_by: ItemSortField = Query(ItemSortField.NAME),
    sort_order: SortOrder = Query(SortOrder.ASC),
    language: Optional[str] = Query(None, description="Language for formatted prices (ar, fr, en)"),
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    """
    Lists active items.

    **Includes per item:**
    - Stock code, name, image (placeholder when missing)
    - Initial price (bought price + shipment fees) and selling price
    - Warehouse name as location
    - Stock status and units left
    """
    return container.items.fetch_items(
        page=page,
        page_size=page_size,
        warehouse_id=warehouse_id,
        search=search,
        low_stock=low_stock,
        sort_by=sort_by.value,
        sort_order=sort_order.value,
        language=user_language(container, user, language),
    )


@router.get("/{item_id}", response_model=ItemView)
def get_item(
    item_id: str,
    language: Optional[str] = Query(None),
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    item = container.items.get_item(item_id, user_language(container, user, language))
    if item is None:
        raise NotFoundError("Item not found")
    return item


@router.post("/", response_model=ItemView, status_code=status.HTTP_201_CREATED)
def create_item(
    payload: ItemInput,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    """Adds an item. ``quantity`` is computed as boxes x units per box."""
    return container.items.create_item(payload, user.id)


@router.put("/{item_id}", response_model=ItemView)
def update_item(
    item_id: str,
    payload: ItemInput,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    return container.items.update_item(item_id, payload, user.id)


@router.delete("/{item_id}", response_model=ItemView)
def delete_item(
    item_id: str,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    """Moves the item to the recycle bin."""
    return container.items.soft_delete_item(item_id, user.id)


@router.post("/{item_id}/image", response_model=ItemView)
def upload_item_image(
    item_id: str,
    file: UploadFile = File(...),
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    """Uploads an image (image/*, at most the configured size) and attaches it to the item."""
    if not (file.content_type or "").startswith("image/"):
        raise ValidationError("Please upload an image file")

    data = file.file.read()
    limit = container.settings.max_image_bytes
    if len(data) > limit:
        raise ValidationError(f"Image must be smaller than {limit // (1024 * 1024)}MB")

    return container.items.attach_image(item_id, file.filename or "image", data, file.content_type, user.id)
