"""
Tests for authentication and user management.

Tests cover:
- Validation before any remote call
- Mapping of remote messages to friendly ones
- Resolving the current user and role
- Admin user management
"""
import pytest

from inventory_app.core.domain.models import UserCreate, UserRole
from inventory_app.core.exceptions import AuthenticationError, BackendError, ValidationError
from inventory_app.core.validation import WEAK_PASSWORD_MESSAGE, is_strong_password, is_valid_email


class TestValidationRules:

    @pytest.mark.parametrize("email,valid", [
        ("user@shop.test", True),
        ("first.last@sub.domain.ma", True),
        ("no-at-sign", False),
        ("spaces in@x.com", False),
        ("missing@tld", False),
        ("", False),
    ])
    def test_email(self, email, valid):
        assert is_valid_email(email) is valid

    @pytest.mark.parametrize("password,strong", [
        ("Secret123", True),
        ("secret123", False),
        ("SECRET123", False),
        ("SecretABC", False),
        ("Sec123", False),
    ])
    def test_password_strength(self, password, strong):
        assert is_strong_password(password) is strong


class TestAuthService:
    """Test suite for AuthService"""

    def test_sign_up_requires_all_fields(self, container, auth):
        with pytest.raises(ValidationError) as exc_info:
            container.auth.sign_up("new@shop.test", "Secret123", "", "Doe")

        assert exc_info.value.message == "All fields are required"
        assert auth.calls == []

    def test_sign_up_rejects_weak_password(self, container, auth):
        with pytest.raises(ValidationError) as exc_info:
            container.auth.sign_up("new@shop.test", "weak", "Jane", "Doe")

        assert exc_info.value.message == WEAK_PASSWORD_MESSAGE
        assert auth.calls == []

    def test_sign_up_duplicate_email_message(self, container, auth):
        auth.add_user("taken@shop.test")

        with pytest.raises(AuthenticationError) as exc_info:
            container.auth.sign_up("taken@shop.test", "Secret123", "Jane", "Doe")

        assert exc_info.value.message == "An account with this email already exists"

    def test_login_success(self, container, auth):
        user_id = auth.add_user("clerk@shop.test", "Secret123")

        session = container.auth.login("clerk@shop.test", "Secret123")

        assert session["access_token"] == f"token-{user_id}"

    def test_login_invalid_credentials_message(self, container, auth):
        """Test: Remote 'Invalid login credentials' is shown as a friendly message and logged"""
        auth.add_user("clerk@shop.test", "Secret123")

        with pytest.raises(AuthenticationError) as exc_info:
            container.auth.login("clerk@shop.test", "Wrong1234")

        assert exc_info.value.message == "Invalid email or password"
        assert container.errors.get_recent(1)[0].category.value == "Authentication"

    def test_login_unconfirmed_email_message(self, container, auth):
        auth.add_user("late@shop.test", "Secret123", confirmed=False)

        with pytest.raises(AuthenticationError) as exc_info:
            container.auth.login("late@shop.test", "Secret123")

        assert exc_info.value.message == "Please verify your email before logging in"

    def test_login_invalid_email_skips_remote(self, container, auth):
        with pytest.raises(ValidationError):
            container.auth.login("not-an-email", "Secret123")
        assert auth.calls == []

    def test_update_password_validates(self, container, auth):
        user_id = auth.add_user("clerk@shop.test")

        with pytest.raises(ValidationError):
            container.auth.update_password(f"token-{user_id}", "short")

        container.auth.update_password(f"token-{user_id}", "NewSecret1")
        assert ("update_user", f"token-{user_id}") in auth.calls

    def test_reset_password(self, container, auth):
        container.auth.reset_password("clerk@shop.test")
        assert ("reset_password", "clerk@shop.test") in auth.calls

    def test_current_user_role_from_profile(self, container, auth, backend):
        """Test: The role comes from the profile row"""
        user_id = auth.add_user("boss@shop.test", role="user")
        backend.insert("profiles", {"id": user_id, "email": "boss@shop.test", "role": "admin"})

        user = container.auth.current_user(f"token-{user_id}")

        assert user.is_admin
        assert user.profile.email == "boss@shop.test"

    def test_metadata_role_is_ignored(self, container, auth):
        """Test: An admin role in auth metadata without a profile yields a plain user"""
        user_id = auth.add_user("sneaky@shop.test", role="admin")

        user = container.auth.current_user(f"token-{user_id}")

        assert user.role == "user"
        assert not user.is_admin

    def test_sign_up_does_not_store_role(self, container, auth):
        container.auth.sign_up("new@shop.test", "Secret123", "Jane", "Doe")

        assert auth.sign_up_metadata["new@shop.test"] == {"first_name": "Jane", "last_name": "Doe"}

    def test_profile_lookup_failure_denies_access(self, container, auth, backend):
        """Test: A failing profile read raises instead of resolving the user"""
        user_id = auth.add_user("gone@shop.test")
        backend.insert("profiles", {"id": user_id, "email": "gone@shop.test", "is_active": False})

        def broken(table, query=None):
            raise BackendError("Database read from profiles failed: server closed the connection")

        container.data.backend.select = broken

        with pytest.raises(BackendError):
            container.auth.current_user(f"token-{user_id}")
        assert container.errors.get_recent(1)[0].context == {"operation": "load_profile"}

    def test_profile_lookup_unexpected_failure_is_backend_error(self, container, auth):
        user_id = auth.add_user("clerk@shop.test")

        def broken(table, query=None):
            raise RuntimeError("driver crashed")

        container.data.backend.select = broken

        with pytest.raises(BackendError) as exc_info:
            container.auth.current_user(f"token-{user_id}")
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_current_user_deactivated(self, container, auth, backend):
        user_id = auth.add_user("gone@shop.test")
        backend.insert("profiles", {"id": user_id, "email": "gone@shop.test", "is_active": False})

        with pytest.raises(AuthenticationError):
            container.auth.current_user(f"token-{user_id}")

    def test_current_user_bad_token(self, container):
        with pytest.raises(AuthenticationError):
            container.auth.current_user("garbage")


class TestUserManagement:
    """Test suite for UserManagementService"""

    def test_add_user_creates_profile(self, container, backend):
        profile = container.users.add_user(UserCreate(
            email="new@shop.test", password="Secret123", first_name="Nadia", last_name="Amrani",
            role=UserRole.ADMIN,
        ))

        assert profile.role == "admin"
        assert [p.email for p in container.users.list_users()] == ["new@shop.test"]

    def test_set_user_status(self, container, backend, auth):
        user_id = auth.add_user("clerk@shop.test")
        backend.insert("profiles", {"id": user_id, "email": "clerk@shop.test"})

        profile = container.users.set_user_status(user_id, False)

        assert profile.is_active is False

    def test_assign_is_idempotent(self, container, backend, auth):
        org = container.organizations.create_organization("Souk Co")
        user_id = auth.add_user("clerk@shop.test")
        backend.insert("profiles", {"id": user_id, "email": "clerk@shop.test"})

        first = container.users.assign_user_to_organization(user_id, org.id)
        second = container.users.assign_user_to_organization(user_id, org.id)

        assert first["created"] is True
        assert second["created"] is False
        assert len(backend.select("user_organizations").rows) == 1
