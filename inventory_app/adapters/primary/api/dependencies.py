"""
FastAPI dependencies shared by the routers.
"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from inventory_app.application.container import ServiceContainer
from inventory_app.core.domain.models import CurrentUser
from inventory_app.core.exceptions import AuthenticationError, PermissionDeniedError

bearer_scheme = HTTPBearer(auto_error=False)


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    container: ServiceContainer = Depends(get_container),
) -> CurrentUser:
    """Resolve the bearer token with the hosted auth service."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")
    return container.auth.current_user(credentials.credentials)


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_admin:
        raise PermissionDeniedError("Administrator role required")
    return user
