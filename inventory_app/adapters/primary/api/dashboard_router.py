from fastapi import APIRouter, Depends

from inventory_app.adapters.primary.api.dependencies import get_container, get_current_user
from inventory_app.application.container import ServiceContainer
from inventory_app.core.domain.models import CurrentUser

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/")
def get_dashboard(
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    """
    Totals for the dashboard cards.

    **Includes:**
    - Active products and how many are low on stock
    - Order count and revenue of non-cancelled orders
    - Orders per month for the last six months
    """
    return container.dashboard.get_summary(user.id)
