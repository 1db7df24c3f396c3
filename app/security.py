"""
Security utilities: password hashing and JWT tokens.

This module centralizes all cryptographic operations so they're easy to
audit and update.

1. PASSWORD HASHING (Argon2id)
   - Passwords are never stored in plaintext
   - Argon2id is memory-hard and time-hard; every hash carries its own
     random salt, so hashing the same password twice gives two different
     strings that both verify
   - The work factor (time cost, memory cost, parallelism) comes from
     settings so hashing stays bounded under load
   - A stored hash that can't be parsed verifies as False instead of raising

2. JWT TOKENS (HS256)
   - Issued after login/registration, carrying the user's id ("sub"),
     email, role and optional organization id
   - Signed with SECRET_KEY and stamped with issuer, audience, issued-at
     and expiry (ACCESS_TOKEN_EXPIRE_MINUTES, default 60)
   - Validation checks signature, issuer, audience and expiry with no
     leeway; every failure surfaces as the same InvalidTokenError
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import settings


# ---------------------------------------------------------------------------
# 1. Password Hashing (Argon2)
# ---------------------------------------------------------------------------

pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__time_cost=settings.ARGON2_TIME_COST,
    argon2__memory_cost=settings.ARGON2_MEMORY_COST,
    argon2__parallelism=settings.ARGON2_PARALLELISM,
)


def hash_password(plain_password: str) -> str:
    """
    Hash a plaintext password using Argon2id.

    Returns:
        An Argon2 hash string (e.g., "$argon2id$v=19$m=65536,t=3,p=4$...").
    """
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """
    Verify a plaintext password against a stored Argon2 hash.

    Returns False for a wrong password and for a stored hash that is empty,
    malformed or produced by an unknown scheme.
    """
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


# ---------------------------------------------------------------------------
# 2. JWT Tokens
# ---------------------------------------------------------------------------


class InvalidTokenError(Exception):
    """The token is unusable. Deliberately carries no reason."""

    def __init__(self):
        super().__init__("Could not validate credentials")


@dataclass(frozen=True)
class TokenClaims:
    """Identity claims carried by an access token."""
    sub: str
    email: str
    role: str
    iat: int
    exp: int
    organization_id: str | None = None


def create_access_token(
    user_id: str,
    email: str,
    roles: str,
    organization_id: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed JWT access token.

    Args:
        user_id: Becomes the "sub" claim.
        email: The user's email.
        roles: The user's role label, stored as the "role" claim.
        organization_id: Optional tenant id; omitted from the token when None.
        expires_delta: Optional custom lifetime. Defaults to
                       ACCESS_TOKEN_EXPIRE_MINUTES from settings.

    Returns:
        An encoded JWT string.
    """
    issued_at = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": user_id,
        "email": email,
        "role": roles,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + expires_delta).timestamp()),
    }
    if organization_id is not None:
        to_encode["organization_id"] = organization_id

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> TokenClaims:
    """
    Decode and verify a JWT access token.

    Raises:
        InvalidTokenError: If the signature, issuer, audience or expiry
            check fails, or the payload is missing required claims.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
            options={"require_sub": True, "require_exp": True, "leeway": 0},
        )
        return TokenClaims(
            sub=payload["sub"],
            email=payload["email"],
            role=payload["role"],
            iat=payload["iat"],
            exp=payload["exp"],
            organization_id=payload.get("organization_id"),
        )
    except (JWTError, KeyError, TypeError):
        raise InvalidTokenError() from None
