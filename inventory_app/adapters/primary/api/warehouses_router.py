from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from inventory_app.adapters.primary.api.dependencies import get_container, get_current_user
from inventory_app.application.container import ServiceContainer
from inventory_app.core.domain.models import CurrentUser, Page, Warehouse, WarehouseSave

router = APIRouter(prefix="/warehouses", tags=["Warehouses"])


@router.get("/", response_model=Page[Warehouse])
def list_warehouses(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    organization_id: Optional[str] = Query(None),
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    return container.warehouses.fetch_warehouses(page, page_size, organization_id)


@router.post("/", response_model=Warehouse, status_code=status.HTTP_201_CREATED)
def create_warehouse(
    payload: WarehouseSave,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    return container.warehouses.save_warehouse(payload.model_copy(update={"id": None}), user.id)


@router.put("/{warehouse_id}", response_model=Warehouse)
def update_warehouse(
    warehouse_id: str,
    payload: WarehouseSave,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    return container.warehouses.save_warehouse(payload.model_copy(update={"id": warehouse_id}), user.id)


@router.delete("/{warehouse_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_warehouse(
    warehouse_id: str,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    container.warehouses.delete_warehouse(warehouse_id, user.id)
