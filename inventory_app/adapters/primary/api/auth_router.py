"""
Router for sign-up, login and password flows.
"""
from fastapi import APIRouter, Depends, status

from inventory_app.adapters.primary.api.dependencies import get_container, get_current_user
from inventory_app.application.container import ServiceContainer
from inventory_app.core.domain.models import (
    CurrentUser,
    LoginRequest,
    PasswordResetRequest,
    PasswordUpdateRequest,
    SignUpRequest,
)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def sign_up(payload: SignUpRequest, container: ServiceContainer = Depends(get_container)):
    user = container.auth.sign_up(
        payload.email, payload.password, payload.first_name, payload.last_name
    )
    return {
        "status": "Success",
        "message": "Successfully signed up! Please check your email for verification.",
        "user": user,
    }


@router.post("/login")
def login(payload: LoginRequest, container: ServiceContainer = Depends(get_container)):
    """Returns the session issued by the hosted auth service (access and refresh tokens)."""
    return container.auth.login(payload.email, payload.password)


@router.post("/logout")
def logout(
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    container.auth.logout(user.access_token)
    return {"status": "Success", "message": "Successfully logged out!"}


@router.post("/reset-password")
def reset_password(payload: PasswordResetRequest, container: ServiceContainer = Depends(get_container)):
    container.auth.reset_password(payload.email)
    return {"status": "Success", "message": "Password reset link sent to your email"}


@router.post("/update-password")
def update_password(
    payload: PasswordUpdateRequest,
    container: ServiceContainer = Depends(get_container),
    user: CurrentUser = Depends(get_current_user),
):
    container.auth.update_password(user.access_token, payload.new_password)
    return {"status": "Success", "message": "Password updated successfully"}


@router.get("/me", response_model=CurrentUser, response_model_exclude={"access_token"})
def me(user: CurrentUser = Depends(get_current_user)):
    return user
