"""
Input checks run before any backend call.
"""
import re
from typing import Any, Iterable, Mapping

from inventory_app.core.exceptions import ValidationError

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# At least 8 characters with an uppercase letter, a lowercase letter and a digit.
PASSWORD_REGEX = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)[a-zA-Z\d]{8,}$")

WEAK_PASSWORD_MESSAGE = (
    "Password must be at least 8 characters and include uppercase, lowercase, and numbers"
)


def is_valid_email(email: str) -> bool:
    return bool(email) and EMAIL_REGEX.match(email) is not None


def is_strong_password(password: str) -> bool:
    return bool(password) and PASSWORD_REGEX.match(password) is not None


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def missing_fields(data: Mapping[str, Any], fields: Iterable[str]) -> list:
    return [name for name in fields if _is_blank(data.get(name))]


def require_fields(data: Mapping[str, Any], fields: Iterable[str], message: str = "") -> None:
    """Raise ValidationError naming every blank required field."""
    missing = missing_fields(data, fields)
    if missing:
        raise ValidationError(message or f"Missing required fields: {', '.join(missing)}")


def require_email(email: str) -> None:
    if not is_valid_email(email):
        raise ValidationError("Please enter a valid email address")
