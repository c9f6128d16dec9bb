"""
Sign-up, login and password flows on top of the hosted auth service.

Input is validated before any remote call. Remote rejections are recorded
with the error handler and re-raised with a message fit for display.
"""
import logging
from typing import Any, Dict, Optional

from inventory_app.application.data_access import DataAccess
from inventory_app.core.domain.models import CurrentUser, Profile, UserRole
from inventory_app.core.exceptions import AuthenticationError, BackendError, ValidationError
from inventory_app.core.ports.backend import Query
from inventory_app.core.ports.external import AuthPort
from inventory_app.core.validation import WEAK_PASSWORD_MESSAGE, is_strong_password, require_email

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"

# (substring of the remote message, message shown instead)
SIGN_UP_MESSAGES = (
    ("User already registered", "An account with this email already exists"),
)
LOGIN_MESSAGES = (
    ("Invalid login credentials", "Invalid email or password"),
    ("Email not confirmed", "Please verify your email before logging in"),
)


def friendly_message(error: Exception, table, fallback: str) -> str:
    message = getattr(error, "message", None) or str(error)
    for needle, replacement in table:
        if needle in message:
            return replacement
    return message or fallback


class AuthService:
    def __init__(self, auth: AuthPort, data: DataAccess, reset_redirect: Optional[str] = None):
        self.auth = auth
        self.data = data
        self.reset_redirect = reset_redirect

    def _remote(self, call, context: Dict[str, Any], messages=(), fallback: str = "Authentication failed"):
        try:
            return call()
        except AuthenticationError as exc:
            self.data.errors.handle(exc, context)
            raise AuthenticationError(friendly_message(exc, messages, fallback)) from exc
        except Exception as exc:
            self.data.errors.handle(exc, context)
            raise

    def sign_up(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
    ) -> Dict[str, Any]:
        """Self-service registration. New accounts get the user role; only administrators grant others."""
        if not email or not password or not first_name or not last_name:
            raise ValidationError("All fields are required")
        require_email(email)
        if not is_strong_password(password):
            raise ValidationError(WEAK_PASSWORD_MESSAGE)

        metadata = {"first_name": first_name, "last_name": last_name}
        payload = self._remote(
            lambda: self.auth.sign_up(email, password, metadata),
            {"operation": "sign_up"},
            SIGN_UP_MESSAGES,
            "Failed to sign up",
        )
        logger.info(f"Signed up {email}")
        return payload.get("user", payload)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        if not email or not password:
            raise ValidationError("Email and password are required")
        require_email(email)

        payload = self._remote(
            lambda: self.auth.sign_in_with_password(email, password),
            {"operation": "login"},
            LOGIN_MESSAGES,
            "Failed to log in",
        )
        logger.info(f"Logged in {email}")
        return payload

    def logout(self, access_token: str) -> None:
        self._remote(lambda: self.auth.sign_out(access_token), {"operation": "logout"}, fallback="Failed to log out")

    def reset_password(self, email: str) -> None:
        if not email:
            raise ValidationError("Email is required")
        require_email(email)
        self._remote(
            lambda: self.auth.reset_password_for_email(email, self.reset_redirect),
            {"operation": "reset_password"},
            fallback="Failed to send password reset email",
        )

    def update_password(self, access_token: str, new_password: str) -> None:
        if not new_password:
            raise ValidationError("New password is required")
        if not is_strong_password(new_password):
            raise ValidationError(WEAK_PASSWORD_MESSAGE)
        self._remote(
            lambda: self.auth.update_user(access_token, {"password": new_password}),
            {"operation": "update_password"},
            fallback="Failed to update password",
        )

    def current_user(self, access_token: str) -> CurrentUser:
        """Resolve a bearer token to the user and their profile row."""
        user = self._remote(lambda: self.auth.get_user(access_token), {"operation": "current_user"})
        if not user or not user.get("id"):
            raise AuthenticationError("Not authenticated")

        # Lookup failures propagate instead of reading as a missing profile
        try:
            rows = self.data.backend.select(PROFILES_TABLE, Query().eq("id", user["id"])).rows
        except Exception as exc:
            self.data.errors.handle(exc, {"operation": "load_profile"})
            if isinstance(exc, BackendError):
                raise
            raise BackendError(f"Failed to load profile: {exc}") from exc

        profile = Profile.model_validate(rows[0]) if rows else None
        # Roles come from the profile only
        role = profile.role if profile and profile.role else UserRole.USER.value

        if profile is not None and not profile.is_active:
            raise AuthenticationError("This account has been deactivated")

        return CurrentUser(
            id=user["id"],
            email=user.get("email"),
            role=role,
            profile=profile,
            access_token=access_token,
        )
