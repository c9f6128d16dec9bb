"""
Shared fixtures: in-memory SQLite backend, fake hosted services and a
fully wired service container.
"""

import uuid
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from tests.database_test_config import (
    test_engine,
    create_test_database,
    drop_test_database
)

from inventory_app.adapters.secondary.database.sql_backend import SqlBackend
from inventory_app.adapters.secondary.realtime.change_feed import ChangeFeed
from inventory_app.application.container import ServiceContainer
from inventory_app.config.settings import AppSettings
from inventory_app.core.domain.models import ItemInput
from inventory_app.core.exceptions import AuthenticationError, StorageError
from inventory_app.core.ports.external import AuthPort, StoragePort


# ============================================================================
# FAKES
# ============================================================================

class FakeClock:
    """Monotonic clock for the cache, advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeNow:
    """Wall clock returning naive UTC datetimes, advanced by hand."""

    def __init__(self, start: datetime = datetime(2026, 10, 18, 12, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeStorage(StoragePort):
    """Object storage that fails the first ``failures`` uploads."""

    def __init__(self, failures: int = 0):
        self.failures = failures
        self.attempts = []
        self.objects = {}

    def upload(self, bucket, path, data, content_type=None):
        self.attempts.append((bucket, path, len(data)))
        if self.failures > 0:
            self.failures -= 1
            raise StorageError("Storage upload failed with status 503: unavailable")
        self.objects[(bucket, path)] = (data, content_type)

    def public_url(self, bucket, path):
        return f"https://storage.test/storage/v1/object/public/{bucket}/{path}"


class FakeAuth(AuthPort):
    """Hosted auth kept in memory. Tokens are ``token-<user id>``."""

    def __init__(self):
        self.users = {}
        self.calls = []
        self.sign_up_metadata = {}

    def add_user(self, email, password="Secret123", role="user", confirmed=True):
        user_id = str(uuid.uuid4())
        self.users[email] = {
            "id": user_id,
            "email": email,
            "password": password,
            "confirmed": confirmed,
            "user_metadata": {"role": role},
        }
        return user_id

    def _public(self, user):
        return {"id": user["id"], "email": user["email"], "user_metadata": user["user_metadata"]}

    def sign_up(self, email, password, metadata=None):
        self.calls.append(("sign_up", email))
        self.sign_up_metadata[email] = dict(metadata or {})
        if email in self.users:
            raise AuthenticationError("User already registered")
        self.add_user(email, password, (metadata or {}).get("role", "user"))
        self.users[email]["user_metadata"].update(metadata or {})
        return self._public(self.users[email])

    def sign_in_with_password(self, email, password):
        self.calls.append(("sign_in", email))
        user = self.users.get(email)
        if user is None or user["password"] != password:
            raise AuthenticationError("Invalid login credentials")
        if not user["confirmed"]:
            raise AuthenticationError("Email not confirmed")
        return {"access_token": f"token-{user['id']}", "token_type": "bearer", "user": self._public(user)}

    def sign_out(self, access_token):
        self.calls.append(("sign_out", access_token))

    def reset_password_for_email(self, email, redirect_to=None):
        self.calls.append(("reset_password", email))

    def update_user(self, access_token, attributes):
        self.calls.append(("update_user", access_token))
        user = self._by_token(access_token)
        user.update(attributes)
        return self._public(user)

    def get_user(self, access_token):
        return self._public(self._by_token(access_token))

    def _by_token(self, access_token):
        for user in self.users.values():
            if access_token == f"token-{user['id']}":
                return user
        raise AuthenticationError("invalid JWT: unable to parse or verify signature")


# ============================================================================
# DATABASE FIXTURES - in-memory SQLite
# ============================================================================

@pytest.fixture(scope="function", autouse=True)
def setup_test_database():
    """Fresh schema for every test"""
    create_test_database()
    yield
    drop_test_database()


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def backend(feed):
    return SqlBackend(test_engine, feed)


# ============================================================================
# SERVICE FIXTURES
# ============================================================================

@pytest.fixture
def cache_clock():
    return FakeClock()


@pytest.fixture
def now():
    return FakeNow()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def auth():
    return FakeAuth()


@pytest.fixture
def settings(tmp_path):
    return AppSettings(log_dir=str(tmp_path / "logs"))


@pytest.fixture
def container(settings, backend, storage, auth, feed, cache_clock, now, sleeps):
    services = ServiceContainer(
        settings,
        backend=backend,
        storage=storage,
        auth=auth,
        realtime=feed,
        cache_clock=cache_clock,
        clock=now,
        sleep=sleeps.append,
    )
    yield services
    services.close()


# ============================================================================
# DATA FIXTURES
# ============================================================================

@pytest.fixture
def warehouse(backend):
    return backend.insert("warehouses", {"name": "Casablanca Main", "location": "Casablanca"})


@pytest.fixture
def make_item(container, warehouse):
    """Create items through the service with sensible defaults"""
    def _make(**overrides):
        values = {
            "sku": "SKU-001",
            "name": "Argan Oil 250ml",
            "warehouse_id": warehouse["id"],
            "boxes": 2,
            "units_per_box": 12,
            "bought_price": 40.0,
            "shipment_fees": 5.0,
            "selling_price": 75.0,
            "low_stock_threshold": 5,
        }
        values.update(overrides)
        return container.items.create_item(ItemInput(**values))
    return _make


@pytest.fixture
def customer(backend):
    return backend.insert("customers", {
        "name": "Atlas Traders",
        "email": "orders@atlas.test",
        "phone": "+212600000000",
        "address": "12 Rue de Fes, Rabat",
    })


# ============================================================================
# API FIXTURES
# ============================================================================

@pytest.fixture
def client(container):
    from inventory_app.main import create_app
    return TestClient(create_app(container=container))


@pytest.fixture
def user_headers(auth):
    user_id = auth.add_user("clerk@shop.test")
    return {"Authorization": f"Bearer token-{user_id}"}


@pytest.fixture
def admin_headers(auth, backend):
    user_id = auth.add_user("admin@shop.test")
    backend.insert("profiles", {"id": user_id, "email": "admin@shop.test", "role": "admin"})
    return {"Authorization": f"Bearer token-{user_id}"}
