import logging
from typing import Callable, List, Optional

from inventory_app.application.activity import ActivityService
from inventory_app.application.auth import AuthService
from inventory_app.application.data_access import DataAccess
from inventory_app.core.domain.models import Profile, UserCreate
from inventory_app.core.exceptions import NotFoundError
from inventory_app.core.ports.backend import Query
from inventory_app.core.timeutils import utcnow

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"
MEMBERSHIPS_TABLE = "user_organizations"


class UserManagementService:
    """Administrative operations on user accounts."""

    def __init__(self, data: DataAccess, auth: AuthService, activity: ActivityService, clock: Callable = utcnow):
        self.data = data
        self.auth = auth
        self.activity = activity
        self._clock = clock

    def list_users(self) -> List[Profile]:
        return self.data.read(
            lambda: [
                Profile.model_validate(row)
                for row in self.data.backend.select(
                    PROFILES_TABLE, Query().order("created_at", ascending=False)
                ).rows
            ],
            [],
            {"operation": "list_users"},
        )

    def add_user(self, data: UserCreate, admin_id: Optional[str] = None) -> Profile:
        """Register the account with the auth service, then make sure a profile row exists."""
        user = self.auth.sign_up(data.email, data.password, data.first_name, data.last_name)
        profile = {
            "id": user["id"],
            "email": data.email,
            "first_name": data.first_name,
            "last_name": data.last_name,
            "role": data.role.value,
            "is_active": True,
        }
        rows = self.data.mutate(
            lambda: self.data.backend.upsert(PROFILES_TABLE, [profile]),
            ("profiles:",),
            {"operation": "add_user"},
        )
        self.activity.record_audit("INSERT", PROFILES_TABLE, {"id": user["id"], "email": data.email}, admin_id)
        return Profile.model_validate(rows[0])

    def set_user_status(self, user_id: str, is_active: bool, admin_id: Optional[str] = None) -> Profile:
        rows = self.data.mutate(
            lambda: self.data.backend.update(
                PROFILES_TABLE, {"is_active": is_active, "updated_at": self._clock()}, Query().eq("id", user_id)
            ),
            ("profiles:",),
            {"operation": "set_user_status", "user_id": user_id},
        )
        if not rows:
            raise NotFoundError("User not found")
        self.activity.record_audit("UPDATE", PROFILES_TABLE, {"id": user_id, "is_active": is_active}, admin_id)
        return Profile.model_validate(rows[0])

    def assign_user_to_organization(self, user_id: str, organization_id: str, admin_id: Optional[str] = None) -> dict:
        """Add the membership unless it already exists."""
        backend = self.data.backend

        def assign() -> dict:
            existing = backend.select(
                MEMBERSHIPS_TABLE, Query().eq("user_id", user_id).eq("organization_id", organization_id)
            ).rows
            if existing:
                return {**existing[0], "created": False}
            row = backend.insert(MEMBERSHIPS_TABLE, {"user_id": user_id, "organization_id": organization_id})
            return {**row, "created": True}

        membership = self.data.mutate(
            assign, ("organizations:",), {"operation": "assign_user_to_organization", "user_id": user_id}
        )
        if membership["created"]:
            self.activity.record_audit(
                "INSERT", MEMBERSHIPS_TABLE,
                {"user_id": user_id, "organization_id": organization_id},
                admin_id, organization_id,
            )
        return membership

    def send_password_reset(self, email: str) -> None:
        self.auth.reset_password(email)
