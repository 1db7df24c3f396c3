"""
Authentication service — login and registration business logic.

This module contains the core auth logic, separated from HTTP concerns.
Both workflows return an AuthResult: either a user plus a fresh token, or
one of the ErrorKind outcomes the router turns into a 4xx response.
Expected outcomes are never raised. Faults are: a store or crypto failure
is logged here and re-raised as InternalServiceError, and a store timeout
propagates as StoreTimeoutError.

Login flow (evaluated in order, stopping at the first failure):
  1. Email and password must both be non-blank       → invalid_request
  2. Look up the user by exact email; unknown         → invalid_credentials
  3. Inactive user, treated exactly like unknown      → invalid_credentials
  4. lockout_end in the future                        → account_locked
  5. Wrong password: bump the failure counter, lock the account for
     LOCKOUT_MINUTES once it reaches MAX_FAILED_LOGIN_ATTEMPTS, commit
                                                      → invalid_credentials
  6. Success: reset counter, clear lockout, stamp last_login_at, commit,
     issue a token

Registration flow:
  1. Email and password must both be non-blank       → invalid_request
  2. Email already registered                         → duplicate_email
  3. Sequential "usr-NNN" id, Argon2id hash, role "User", active
  4. Insert and commit, issue a token

Security notes:
  - Unknown email, inactive account and wrong password share one response
    so the endpoint can't be used to enumerate accounts. The lockout
    response is distinct: only someone who already knows the email can
    trigger it.
  - Password hashing is CPU-bound and runs in the threadpool so it doesn't
    stall the event loop.
  - Sequential user ids can collide under concurrent registration. The
    losing insert fails on the primary key and is reported as an internal
    error; it is not retried with a new id.
"""

from dataclasses import dataclass
from datetime import timedelta

from fastapi.concurrency import run_in_threadpool
from jose import JWTError
from passlib.exc import MissingBackendError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import utcnow
from app.exceptions import ErrorKind, InternalServiceError
from app.logging_config import get_logger
from app.models.user import DEFAULT_ROLE, User
from app.security import create_access_token, hash_password, verify_password
from app.services.id_generation import generate_sequential_id
from app.services.user_directory import UserDirectory

logger = get_logger(__name__)

# Faults caught at the workflow boundary and reported as internal_error
_FAULTS = (SQLAlchemyError, JWTError, MissingBackendError)


@dataclass
class AuthResult:
    """Outcome of a login or registration attempt."""
    error: ErrorKind | None = None
    user: User | None = None
    token: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _issue_token(user: User) -> str:
    return create_access_token(
        user_id=user.id,
        email=user.email,
        roles=user.roles or DEFAULT_ROLE,
        organization_id=user.organization_id,
    )


async def login(
    db: AsyncSession,
    email: str | None,
    password: str | None,
) -> AuthResult:
    """
    Authenticate a user and return a token.

    Args:
        db: The request's database session.
        email: Login email, matched exactly.
        password: Plaintext password to verify.
    """
    if _is_blank(email) or _is_blank(password):
        return AuthResult(error=ErrorKind.INVALID_REQUEST)

    directory = UserDirectory(db)
    try:
        user = await directory.find_by_email(email)
        if user is None or not user.is_active:
            return AuthResult(error=ErrorKind.INVALID_CREDENTIALS)

        now = utcnow()
        if user.is_locked(now):
            logger.info("Login refused for locked user %s", user.id)
            return AuthResult(error=ErrorKind.ACCOUNT_LOCKED)

        if not await run_in_threadpool(verify_password, password, user.password_hash):
            threshold = settings.MAX_FAILED_LOGIN_ATTEMPTS
            attempts = await directory.record_failed_login(
                user,
                threshold=threshold,
                lockout_until=now + timedelta(minutes=settings.LOCKOUT_MINUTES),
            )
            await directory.commit()
            if attempts >= threshold:
                logger.warning(
                    "User %s locked out after %d failed logins", user.id, attempts
                )
            else:
                logger.info("Failed login for user %s (%d/%d)", user.id, attempts, threshold)
            return AuthResult(error=ErrorKind.INVALID_CREDENTIALS)

        await directory.record_successful_login(user, now)
        await directory.commit()
        token = _issue_token(user)
    except _FAULTS as exc:
        logger.exception("Login failed")
        raise InternalServiceError("Login failed") from exc

    logger.info("User %s logged in", user.id)
    return AuthResult(user=user, token=token)


async def register(
    db: AsyncSession,
    email: str | None,
    password: str | None,
    name: str | None = None,
    organization_id: str | None = None,
    organization_name: str | None = None,
) -> AuthResult:
    """
    Register a new user and return a token so they're logged in immediately.

    Args:
        db: The request's database session.
        email: Must not already be registered.
        password: Plaintext password (hashed before storage).
        name: Display name; defaults to the email.
        organization_id: Optional tenant id.
        organization_name: Optional tenant display name.
    """
    if _is_blank(email) or _is_blank(password):
        return AuthResult(error=ErrorKind.INVALID_REQUEST)

    directory = UserDirectory(db)
    try:
        if await directory.find_by_email(email) is not None:
            return AuthResult(error=ErrorKind.DUPLICATE_EMAIL)

        user = User(
            id=await generate_sequential_id(directory, "user"),
            name=name or email,
            email=email,
            password_hash=await run_in_threadpool(hash_password, password),
            roles=DEFAULT_ROLE,
            organization_id=organization_id,
            organization_name=organization_name,
            failed_login_attempts=0,
            is_active=True,
            created_at=utcnow(),
        )

        try:
            await directory.save(user)
            await directory.commit()
        except IntegrityError:
            await directory.rollback()
            # Lost a race with a concurrent registration for the same email
            if await directory.find_by_email(email) is not None:
                return AuthResult(error=ErrorKind.DUPLICATE_EMAIL)
            raise

        token = _issue_token(user)
    except _FAULTS as exc:
        logger.exception("Registration failed")
        raise InternalServiceError("Registration failed") from exc

    logger.info("Registered user %s", user.id)
    return AuthResult(user=user, token=token)
