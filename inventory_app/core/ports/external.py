"""
Ports for the hosted services other than the database: object storage,
authentication and the realtime change feed.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

Payload = Dict[str, Any]


class StoragePort(ABC):
    @abstractmethod
    def upload(self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None) -> None:
        pass

    @abstractmethod
    def public_url(self, bucket: str, path: str) -> str:
        pass


class AuthPort(ABC):
    """
    Hosted auth. Methods return the remote JSON payload and raise
    ``AuthenticationError`` carrying the remote message on rejection.
    """

    @abstractmethod
    def sign_up(self, email: str, password: str, metadata: Optional[Payload] = None) -> Payload:
        pass

    @abstractmethod
    def sign_in_with_password(self, email: str, password: str) -> Payload:
        pass

    @abstractmethod
    def sign_out(self, access_token: str) -> None:
        pass

    @abstractmethod
    def reset_password_for_email(self, email: str, redirect_to: Optional[str] = None) -> None:
        pass

    @abstractmethod
    def update_user(self, access_token: str, attributes: Payload) -> Payload:
        pass

    @abstractmethod
    def get_user(self, access_token: str) -> Payload:
        pass


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    event: str  # INSERT | UPDATE | DELETE
    record: Optional[Payload] = None
    old_record: Optional[Payload] = None
    schema: str = "public"

    def to_dict(self) -> Payload:
        return {
            "schema": self.schema,
            "table": self.table,
            "eventType": self.event,
            "new": self.record or {},
            "old": self.old_record or {},
        }


ChangeCallback = Callable[[ChangeEvent], None]


class RealtimePort(ABC):
    @abstractmethod
    def subscribe(self, table: str, event: str, callback: ChangeCallback) -> Callable[[], None]:
        """Register ``callback``; ``"*"`` matches any table or event. Returns an unsubscribe function."""

    @abstractmethod
    def publish(self, event: ChangeEvent) -> None:
        pass
