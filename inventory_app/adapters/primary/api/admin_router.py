"""
Router for administrators: user accounts, organizations and the audit trail.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from inventory_app.adapters.primary.api.dependencies import get_container, require_admin
from inventory_app.application.container import ServiceContainer
from inventory_app.core.domain.models import (
    AssignOrganizationRequest,
    AuditLog,
    CurrentUser,
    Organization,
    OrganizationCreate,
    OrganizationSummary,
    Page,
    PasswordResetRequest,
    Profile,
    StatusUpdate,
    UserCreate,
)

router = APIRouter(prefix="/admin", tags=["Administration"])


# ============================================================================
# USERS
# ============================================================================

@router.get("/users", response_model=List[Profile])
def list_users(
    container: ServiceContainer = Depends(get_container),
    admin: CurrentUser = Depends(require_admin),
):
    return container.users.list_users()


@router.post("/users", response_model=Profile, status_code=status.HTTP_201_CREATED)
def add_user(
    payload: UserCreate,
    container: ServiceContainer = Depends(get_container),
    admin: CurrentUser = Depends(require_admin),
):
    return container.users.add_user(payload, admin.id)


@router.put("/users/{user_id}/status", response_model=Profile)
def set_user_status(
    user_id: str,
    payload: StatusUpdate,
    container: ServiceContainer = Depends(get_container),
    admin: CurrentUser = Depends(require_admin),
):
    return container.users.set_user_status(user_id, payload.is_active, admin.id)


@router.post("/users/{user_id}/organizations")
def assign_user_to_organization(
    user_id: str,
    payload: AssignOrganizationRequest,
    container: ServiceContainer = Depends(get_container),
    admin: CurrentUser = Depends(require_admin),
):
    return container.users.assign_user_to_organization(user_id, payload.organization_id, admin.id)


@router.post("/users/password-reset")
def send_password_reset(
    payload: PasswordResetRequest,
    container: ServiceContainer = Depends(get_container),
    admin: CurrentUser = Depends(require_admin),
):
    container.users.send_password_reset(payload.email)
    return {"status": "Success", "message": "Password reset link sent"}


# ============================================================================
# ORGANIZATIONS
# ============================================================================

@router.get("/organizations", response_model=Page[Organization])
def list_organizations(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    is_active: Optional[bool] = Query(None),
    container: ServiceContainer = Depends(get_container),
    admin: CurrentUser = Depends(require_admin),
):
    return container.organizations.fetch_organizations(page, page_size, is_active)


@router.post("/organizations", response_model=Organization, status_code=status.HTTP_201_CREATED)
def create_organization(
    payload: OrganizationCreate,
    container: ServiceContainer = Depends(get_container),
    admin: CurrentUser = Depends(require_admin),
):
    return container.organizations.create_organization(payload.name, admin.id)


@router.put("/organizations/{organization_id}/status", response_model=Organization)
def set_organization_status(
    organization_id: str,
    payload: StatusUpdate,
    container: ServiceContainer = Depends(get_container),
    admin: CurrentUser = Depends(require_admin),
):
    return container.organizations.set_organization_status(organization_id, payload.is_active, admin.id)


@router.get("/summary", response_model=List[OrganizationSummary])
def organization_summary(
    container: ServiceContainer = Depends(get_container),
    admin: CurrentUser = Depends(require_admin),
):
    return container.organizations.organization_summary()


# ============================================================================
# AUDIT
# ============================================================================

@router.get("/audit-logs", response_model=Page[AuditLog])
def list_audit_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    table_name: Optional[str] = Query(None),
    container: ServiceContainer = Depends(get_container),
    admin: CurrentUser = Depends(require_admin),
):
    return container.activity.fetch_audit_logs(page, page_size, table_name)
