"""
Centralized error classification and logging.

Errors are bucketed by matching their message against an ordered table of
keyword rules; exception types only decide when no keyword matches. The
result is a heuristic: a message that mentions "token" for an unrelated
reason is still classified as an authentication error.
"""
import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from itertools import islice
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

import requests

from inventory_app.core.exceptions import (
    AuthenticationError,
    BackendError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class ErrorCategory(str, Enum):
    AUTH = "Authentication"
    DATABASE = "Database"
    NETWORK = "Network"
    VALIDATION = "Validation"
    STORAGE = "Storage"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class ClassificationRule:
    category: ErrorCategory
    keywords: Tuple[str, ...]
    exception_types: Tuple[Type[BaseException], ...] = ()

    def matches_message(self, message: str) -> bool:
        return any(keyword in message for keyword in self.keywords)

    def matches_type(self, error: Any) -> bool:
        return bool(self.exception_types) and isinstance(error, self.exception_types)


# Evaluated top to bottom, first match wins. Keywords are tried against every
# rule before any exception type is considered.
CLASSIFICATION_RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule(
        ErrorCategory.AUTH,
        ("auth", "Authentication", "JWT", "token", "credential", "permission"),
        (AuthenticationError,),
    ),
    ClassificationRule(
        ErrorCategory.DATABASE,
        ("database", "DB", "SQL", "query", "constraint"),
        (BackendError,),
    ),
    ClassificationRule(
        ErrorCategory.NETWORK,
        ("network", "timeout", "connection", "offline"),
        (
            ConnectionError,
            TimeoutError,
            requests.exceptions.ConnectionError,
            requests.exceptions.Timeout,
        ),
    ),
    ClassificationRule(
        ErrorCategory.VALIDATION,
        ("validation", "invalid", "required"),
        (ValidationError,),
    ),
    ClassificationRule(
        ErrorCategory.STORAGE,
        ("storage", "upload", "file"),
        (StorageError,),
    ),
)

CATEGORY_MESSAGES: Dict[ErrorCategory, str] = {
    ErrorCategory.AUTH: "Authentication error. Please try signing in again.",
    ErrorCategory.DATABASE: "Unable to retrieve data. Please try again later.",
    ErrorCategory.NETWORK: "Network connection issue. Please check your internet connection.",
    ErrorCategory.VALIDATION: "Please check your input and try again.",
    ErrorCategory.STORAGE: "Error handling files. Please try again.",
    ErrorCategory.UNKNOWN: "An unexpected error occurred. Please try again.",
}

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"


def error_message(error: Any) -> str:
    """Return the error's own message, or an empty string if it has none."""
    if error is None:
        return ""
    if isinstance(error, dict):
        return str(error.get("message") or "")
    message = getattr(error, "message", None)
    if message:
        return str(message)
    return str(error) if isinstance(error, BaseException) else ""


def classify_error(error: Any) -> ErrorCategory:
    if error is None:
        return ErrorCategory.UNKNOWN
    message = error_message(error)
    for rule in CLASSIFICATION_RULES:
        if rule.matches_message(message):
            return rule.category
    for rule in CLASSIFICATION_RULES:
        if rule.matches_type(error):
            return rule.category
    return ErrorCategory.UNKNOWN


def user_friendly_message(error: Any, category: ErrorCategory) -> str:
    if error is None:
        return UNKNOWN_ERROR_MESSAGE
    return error_message(error) or CATEGORY_MESSAGES[category]


@dataclass
class ErrorLogEntry:
    message: str
    category: ErrorCategory
    timestamp: datetime
    original_error: Any = None
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "category": self.category.value,
            "timestamp": self.timestamp.isoformat(),
            "error_type": type(self.original_error).__name__ if self.original_error is not None else None,
            "context": self.context,
        }


Notifier = Callable[[ErrorLogEntry], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorHandler:
    """
    Classifies errors and keeps the most recent ones in a ring buffer.

    One instance is shared by the whole process (see the service container);
    tests build their own.
    """

    def __init__(
        self,
        capacity: int = 50,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.capacity = capacity
        self.notifier = notifier
        self._clock = clock
        self._entries: deque = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def handle(
        self,
        error: Any,
        context: Optional[Dict[str, Any]] = None,
        show_notification: bool = True,
    ) -> ErrorLogEntry:
        category = classify_error(error)
        entry = ErrorLogEntry(
            message=user_friendly_message(error, category),
            category=category,
            timestamp=self._clock(),
            original_error=error,
            context=dict(context or {}),
        )

        with self._lock:
            # deque(maxlen) drops the oldest entry from the right
            self._entries.appendleft(entry)

        logger.error(
            f"[{entry.category.value}] {entry.message}",
            extra={"error_context": entry.context},
        )

        if show_notification and self.notifier is not None:
            self.notifier(entry)

        return entry

    def get_recent(self, limit: int = 10) -> List[ErrorLogEntry]:
        with self._lock:
            return list(islice(self._entries, max(limit, 0)))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def try_catch(
        self,
        fn: Callable[[], Any],
        context: Optional[Dict[str, Any]] = None,
        show_notification: bool = True,
    ) -> Tuple[Any, Optional[ErrorLogEntry]]:
        """Run ``fn``; return ``(result, None)`` or ``(None, entry)`` on failure."""
        try:
            return fn(), None
        except Exception as exc:
            return None, self.handle(exc, context, show_notification)
