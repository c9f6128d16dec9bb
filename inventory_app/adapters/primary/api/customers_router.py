from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from inventory_app.adapters.primary.api.dependencies import get_container, get_current_user
from inventory_app.application.container import ServiceContainer
from inventory_app.core.domain.models import CurrentUser, Customer, CustomerInput, Page
from inventory_app.core.exceptions import NotFoundError

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.get("/", response_model=Page[Customer])
def list_customers(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, description="Case-insensitive match on name or email"),
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    return container.customers.fetch_customers(page, page_size, search)


@router.get("/{customer_id}", response_model=Customer)
def get_customer(
    customer_id: str,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    customer = container.customers.get_customer(customer_id)
    if customer is None:
        raise NotFoundError("Customer not found")
    return customer


@router.post("/", response_model=Customer, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerInput,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    return container.customers.create_customer(payload, user.id)


@router.put("/{customer_id}", response_model=Customer)
def update_customer(
    customer_id: str,
    payload: CustomerInput,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    return container.customers.update_customer(customer_id, payload, user.id)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: str,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    container.customers.delete_customer(customer_id, user.id)
