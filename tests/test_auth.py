"""
Tests for authentication endpoints (register, login, me).

These tests verify:
  - Registration returns a token plus a camelCase user summary
  - Duplicate email registration is rejected and creates no second row
  - Login round-trips: the token's subject is the registered user's id
  - Unknown email, inactive user and wrong password share one 401 message
  - Missing/blank fields and malformed bodies are 400 invalid_request
  - The password hash never appears in any response
  - /auth/me accepts a valid token and rejects missing/forged ones
"""

from sqlalchemy import func, select, update

from app.models.user import User
from app.security import decode_access_token
from conftest import USER_EMAIL, USER_PASSWORD, fetch_user, login, register


# ---------------------------------------------------------------------------
# Register Tests
# ---------------------------------------------------------------------------

class TestRegister:
    """Tests for POST /auth/register."""

    async def test_register_success(self, client):
        """A valid registration returns 200 with token and user summary."""
        response = await register(
            client,
            "new@example.com",
            "StrongPass99!",
            name="Jane Doe",
            organizationId="org-001",
            organizationName="Acme Brokers",
        )
        assert response.status_code == 200
        data = response.json()
        assert "token" in data
        assert data["user"] == {
            "id": "usr-001",
            "name": "Jane Doe",
            "email": "new@example.com",
            "roles": "User",
            "organizationId": "org-001",
            "organizationName": "Acme Brokers",
        }

    async def test_register_assigns_sequential_ids(self, client):
        first = await register(client, "one@example.com", "StrongPass99!")
        second = await register(client, "two@example.com", "StrongPass99!")
        assert first.json()["user"]["id"] == "usr-001"
        assert second.json()["user"]["id"] == "usr-002"

    async def test_register_name_defaults_to_email(self, client):
        response = await register(client, "noname@example.com", "StrongPass99!")
        assert response.status_code == 200
        assert response.json()["user"]["name"] == "noname@example.com"

    async def test_register_stores_hash_not_password(self, client, session_factory):
        await register(client, "hash@example.com", "StrongPass99!")
        user = await fetch_user(session_factory, "hash@example.com")
        assert user.password_hash != "StrongPass99!"
        assert user.password_hash.startswith("$argon2id$")
        assert user.is_active is True
        assert user.failed_login_attempts == 0

    async def test_register_response_has_no_password_hash(self, client):
        response = await register(client, "safe@example.com", "StrongPass99!")
        assert set(response.json()) == {"token", "user"}
        assert set(response.json()["user"]) == {
            "id", "name", "email", "roles", "organizationId", "organizationName",
        }
        assert "argon2" not in response.text

    async def test_register_duplicate_email(self, client, session_factory):
        """Registering an already-registered email returns 400 and no second row."""
        first = await register(client, "dup@example.com", "StrongPass99!")
        assert first.status_code == 200

        for _ in range(3):
            response = await register(client, "dup@example.com", "OtherPass99!")
            assert response.status_code == 400
            assert response.json()["error_type"] == "duplicate_email"
            assert response.json()["message"] == "User with this email already exists"

        async with session_factory() as session:
            count = await session.execute(
                select(func.count()).select_from(User).where(User.email == "dup@example.com")
            )
            assert count.scalar_one() == 1

    async def test_register_email_is_case_sensitive(self, client):
        await register(client, "Case@example.com", "StrongPass99!")
        response = await register(client, "case@example.com", "StrongPass99!")
        assert response.status_code == 200

    async def test_register_missing_password(self, client):
        response = await client.post("/auth/register", json={"email": "x@example.com"})
        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_request"
        assert response.json()["message"] == "Email and password are required"

    async def test_register_blank_email(self, client):
        response = await register(client, "   ", "StrongPass99!")
        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_request"

    async def test_register_malformed_body(self, client):
        response = await client.post(
            "/auth/register",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_request"


# ---------------------------------------------------------------------------
# Login Tests
# ---------------------------------------------------------------------------

class TestLogin:
    """Tests for POST /auth/login."""

    async def test_login_success(self, client, registered_user):
        response = await login(client, USER_EMAIL, USER_PASSWORD)
        assert response.status_code == 200
        data = response.json()
        assert data["user"]["id"] == registered_user["user"]["id"]
        assert data["user"]["email"] == USER_EMAIL
        assert data["user"]["name"] == "Test Broker"
        assert "passwordHash" not in data["user"]

    async def test_login_token_subject_is_user_id(self, client, registered_user):
        response = await login(client, USER_EMAIL, USER_PASSWORD)
        claims = decode_access_token(response.json()["token"])
        assert claims.sub == registered_user["user"]["id"]
        assert claims.email == USER_EMAIL
        assert claims.role == "User"

    async def test_login_stamps_last_login(self, client, registered_user, session_factory):
        before = await fetch_user(session_factory, USER_EMAIL)
        assert before.last_login_at is None

        await login(client, USER_EMAIL, USER_PASSWORD)

        after = await fetch_user(session_factory, USER_EMAIL)
        assert after.last_login_at is not None
        assert after.last_login_at.tzinfo is not None

    async def test_login_wrong_password(self, client, registered_user):
        response = await login(client, USER_EMAIL, "WrongPassword!")
        assert response.status_code == 401
        assert response.json() == {
            "message": "Invalid email or password",
            "error_type": "invalid_credentials",
        }

    async def test_login_unknown_email_on_empty_store(self, client):
        """Same body as a wrong password, and no stack trace."""
        response = await login(client, "nouser@x.com", "whatever")
        assert response.status_code == 401
        assert response.json() == {
            "message": "Invalid email or password",
            "error_type": "invalid_credentials",
        }
        assert "Traceback" not in response.text

    async def test_login_inactive_user_looks_unknown(
        self, client, registered_user, session_factory
    ):
        async with session_factory() as session:
            await session.execute(
                update(User).where(User.email == USER_EMAIL).values(is_active=False)
            )
            await session.commit()

        response = await login(client, USER_EMAIL, USER_PASSWORD)
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    async def test_login_inactive_user_does_not_count_failures(
        self, client, registered_user, session_factory
    ):
        async with session_factory() as session:
            await session.execute(
                update(User).where(User.email == USER_EMAIL).values(is_active=False)
            )
            await session.commit()

        await login(client, USER_EMAIL, "WrongPassword!")
        user = await fetch_user(session_factory, USER_EMAIL)
        assert user.failed_login_attempts == 0

    async def test_login_missing_fields(self, client):
        response = await client.post("/auth/login", json={"email": "a@example.com"})
        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_request"

    async def test_login_blank_password(self, client, registered_user):
        response = await login(client, USER_EMAIL, "  ")
        assert response.status_code == 400
        assert response.json()["message"] == "Email and password are required"

    async def test_login_email_is_exact_match(self, client, registered_user):
        response = await login(client, USER_EMAIL.upper(), USER_PASSWORD)
        assert response.status_code == 401

    async def test_register_then_login_with_unicode_password(self, client):
        password = "pässwörd-密码-🔑"
        registered = await register(client, "unicode@example.com", password)
        assert registered.status_code == 200

        response = await login(client, "unicode@example.com", password)
        assert response.status_code == 200
        claims = decode_access_token(response.json()["token"])
        assert claims.sub == registered.json()["user"]["id"]


# ---------------------------------------------------------------------------
# Current user / token validation
# ---------------------------------------------------------------------------

class TestCurrentUser:
    """Tests for GET /auth/me."""

    async def test_me_with_valid_token(self, member_client):
        response = await member_client.get("/auth/me")
        assert response.status_code == 200
        assert response.json()["email"] == USER_EMAIL
        assert response.json()["id"] == "usr-001"

    async def test_me_without_token(self, client):
        response = await client.get("/auth/me")
        assert response.status_code == 401

    async def test_me_with_forged_token(self, client):
        response = await client.get(
            "/auth/me",
            headers={"Authorization": "Bearer totally.fake.token"},
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Could not validate credentials"

    async def test_me_with_tampered_signature(self, client, registered_user):
        token = registered_user["token"]
        head, payload, signature = token.split(".")
        flipped = ("A" if signature[0] != "A" else "B") + signature[1:]
        response = await client.get(
            "/auth/me",
            headers={"Authorization": f"Bearer {head}.{payload}.{flipped}"},
        )
        assert response.status_code == 401

    async def test_me_rejects_deactivated_user(
        self, member_client, session_factory
    ):
        async with session_factory() as session:
            await session.execute(
                update(User).where(User.email == USER_EMAIL).values(is_active=False)
            )
            await session.commit()

        response = await member_client.get("/auth/me")
        assert response.status_code == 401
