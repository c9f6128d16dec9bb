"""
Router for orders.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from inventory_app.adapters.primary.api.dependencies import get_container, get_current_user
from inventory_app.application.container import ServiceContainer
from inventory_app.core.domain.models import (
    CurrentUser,
    Order,
    OrderCreate,
    OrderStatus,
    OrderStatusUpdate,
    Page,
)
from inventory_app.core.exceptions import NotFoundError

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get("/", response_model=Page[Order])
def list_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    order_status: Optional[OrderStatus] = Query(None, alias="status", description="Filter by status"),
    customer_id: Optional[str] = Query(None, description="Filter by customer"),
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    """Lists orders, newest first."""
    return container.orders.fetch_orders(page, page_size, order_status.value if order_status else None, customer_id)


@router.get("/{order_id}", response_model=Order)
def get_order_detail(
    order_id: str,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    """Order with its line items."""
    order = container.orders.get_order(order_id)
    if order is None:
        raise NotFoundError("Order not found")
    return order


@router.post("/", response_model=Order, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreate,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    """Creates an order; the total is the sum of quantity x price over its lines."""
    return container.orders.create_order(
        payload.customer_id, payload.lines, payload.status, payload.organization_id, user.id
    )


@router.put("/{order_id}/status", response_model=Order)
def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    return container.orders.update_order_status(order_id, payload.status, user.id)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(
    order_id: str,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    container.orders.delete_order(order_id, user.id)
