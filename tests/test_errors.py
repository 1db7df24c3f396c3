"""
Tests for fault handling at the HTTP boundary.

Store failures become a generic 500 with no stack trace and no cause in
the body (the cause is added only in DEBUG outside production); store
timeouts anywhere in a request become a retryable 503.
"""

import pytest
from sqlalchemy.exc import OperationalError

from app.config import settings
from app.database import get_db
from app.exceptions import StoreTimeoutError
from app.main import app
from app.security import create_access_token
from app.services import catalog_service, seed_service
from app.services.user_directory import UserDirectory
from conftest import USER_EMAIL, USER_PASSWORD, SlowSession, login, register


async def store_down(self, *args, **kwargs):
    raise OperationalError("SELECT users", {}, Exception("connection refused"))


async def store_slow(self, *args, **kwargs):
    raise StoreTimeoutError("find_by_email", 5.0)


class TestStoreFailures:

    async def test_login_store_failure_is_500(self, client, monkeypatch):
        monkeypatch.setattr(UserDirectory, "find_by_email", store_down)

        response = await login(client, USER_EMAIL, USER_PASSWORD)
        assert response.status_code == 500
        assert response.json() == {"message": "Login failed", "error_type": "internal_error"}
        assert "connection refused" not in response.text
        assert "Traceback" not in response.text

    async def test_register_store_failure_is_500(self, client, monkeypatch):
        monkeypatch.setattr(UserDirectory, "count_by_kind", store_down)

        response = await register(client, "new@example.com", "StrongPass99!")
        assert response.status_code == 500
        assert response.json()["message"] == "Registration failed"

    async def test_success_path_persist_failure_is_500(
        self, client, registered_user, monkeypatch
    ):
        monkeypatch.setattr(UserDirectory, "record_successful_login", store_down)

        response = await login(client, USER_EMAIL, USER_PASSWORD)
        assert response.status_code == 500
        assert "token" not in response.json()

    async def test_debug_mode_includes_cause(self, client, monkeypatch):
        monkeypatch.setattr(settings, "DEBUG", True)
        monkeypatch.setattr(UserDirectory, "find_by_email", store_down)

        response = await login(client, USER_EMAIL, USER_PASSWORD)
        assert response.status_code == 500
        assert "connection refused" in response.json()["error"]

    async def test_production_never_includes_cause(self, client, monkeypatch):
        monkeypatch.setattr(settings, "DEBUG", True)
        monkeypatch.setattr(settings, "ENVIRONMENT", "production")
        monkeypatch.setattr(UserDirectory, "find_by_email", store_down)

        response = await login(client, USER_EMAIL, USER_PASSWORD)
        assert response.status_code == 500
        assert response.json() == {"message": "Login failed", "error_type": "internal_error"}
        assert "SELECT users" not in response.text


class TestStoreTimeouts:

    async def test_login_timeout_is_retryable_503(self, client, monkeypatch):
        monkeypatch.setattr(UserDirectory, "find_by_email", store_slow)

        response = await login(client, USER_EMAIL, USER_PASSWORD)
        assert response.status_code == 503
        assert response.json()["error_type"] == "service_unavailable"
        assert response.headers["Retry-After"] == "1"

    async def test_register_timeout_is_retryable_503(self, client, monkeypatch):
        monkeypatch.setattr(UserDirectory, "find_by_email", store_slow)

        response = await register(client, "new@example.com", "StrongPass99!")
        assert response.status_code == 503


async def stalled_db():
    yield SlowSession()


class TestStoreTimeoutsOutsideTheWorkflow:
    """Every store call is bounded, not just the ones the auth workflow makes."""

    @pytest.fixture(autouse=True)
    def short_timeout(self, monkeypatch):
        monkeypatch.setattr(settings, "DB_TIMEOUT_SECONDS", 0.05)

    async def test_current_user_lookup_times_out(self, client):
        app.dependency_overrides[get_db] = stalled_db
        token = create_access_token(user_id="usr-001", email=USER_EMAIL, roles="User")

        response = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 503
        assert response.json()["error_type"] == "service_unavailable"
        assert response.headers["Retry-After"] == "1"

    async def test_catalog_route_times_out(self, client):
        app.dependency_overrides[get_db] = stalled_db
        token = create_access_token(user_id="usr-001", email=USER_EMAIL, roles="User")

        response = await client.get("/rules", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 503

    async def test_catalog_queries_are_bounded(self):
        with pytest.raises(StoreTimeoutError):
            await catalog_service.list_products(SlowSession())
        with pytest.raises(StoreTimeoutError):
            await catalog_service.get_rule(SlowSession(), "rul-001")

    async def test_seed_counts_are_bounded(self):
        with pytest.raises(StoreTimeoutError):
            await seed_service.database_status(SlowSession())
