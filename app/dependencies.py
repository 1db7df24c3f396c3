"""
FastAPI dependencies for authentication and authorization.

  get_current_user (JWT -> User)
      └── require_role(*roles) (User -> User)
            └── require_admin               [role "admin"]

Every protected endpoint declares one of these as a parameter. FastAPI
calls the dependency first, and if it fails (invalid token, wrong role)
the request is rejected before the route handler runs.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import ADMIN_ROLE, User
from app.security import InvalidTokenError, decode_access_token
from app.services.user_directory import bounded


# Looks for "Authorization: Bearer <token>". tokenUrl is only used by the
# Swagger UI's "Authorize" button.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Validate the bearer token and return the User it names.

    Bad signature, wrong issuer/audience, expiry, an unknown subject and
    an inactive user all produce the same 401.

    Raises:
        HTTPException 401: If the token is invalid or the user is unusable.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        claims = decode_access_token(token)
    except InvalidTokenError:
        raise credentials_exception

    result = await bounded(
        "get_current_user",
        db.execute(select(User).where(User.id == claims.sub)),
    )
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        raise credentials_exception

    return user


def require_role(*roles: str):
    """
    Build a dependency that admits users holding any of `roles`
    (compared case-insensitively).

    Usage:
        @router.post("/rules")
        async def create_rule(user: User = Depends(require_role("admin", "carrier"))):
            ...

    Raises:
        HTTPException 403: If the user holds none of the roles.
    """
    detail = f"{' or '.join(roles).capitalize()} access required"

    async def check_role(user: User = Depends(get_current_user)) -> User:
        if not user.has_role(*roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=detail,
            )
        return user

    return check_role


require_admin = require_role(ADMIN_ROLE)
