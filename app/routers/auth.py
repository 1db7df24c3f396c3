"""
Authentication router — login, registration and current-user endpoints.

Login and register are the only public (unauthenticated) endpoints that
touch user data. Everything else requires a valid JWT.

Endpoints:
  POST /auth/login     — Authenticate and get a token
  POST /auth/register  — Register a new user and get a token
  GET  /auth/me        — The user behind the bearer token

Security audit notes:
  - Plaintext passwords exist only in memory during request processing;
    they are hashed before any database operation and never logged.
  - Tokens appear only in response bodies; the auth service logs user ids,
    never emails, passwords or tokens.
  - Business failures come back from the service as AuthResult errors and
    are rendered here; store and crypto faults are raised by the service
    and rendered by the handlers in app.exceptions.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user
from app.exceptions import error_response
from app.models.user import User
from app.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserSummary
from app.services import auth_service

router = APIRouter()


def _render(result: auth_service.AuthResult):
    if not result.ok:
        return error_response(result.error)
    return AuthResponse(
        token=result.token,
        user=UserSummary.model_validate(result.user),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Authenticate and get a token",
)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Authenticate with email and password.

    Returns a JWT bearer token that must be included in the Authorization
    header for subsequent requests:

        Authorization: Bearer <token>

    Five consecutive wrong passwords lock the account for 15 minutes.
    """
    result = await auth_service.login(
        db=db,
        email=request.email,
        password=request.password,
    )
    return _render(result)


@router.post(
    "/register",
    response_model=AuthResponse,
    summary="Register a new user",
)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a new user with the default "User" role.

    - **email**: Must not already be registered
    - **password**: Required, non-blank
    - **name**: Optional, defaults to the email
    - **organizationId** / **organizationName**: Optional tenant linkage
    """
    result = await auth_service.register(
        db=db,
        email=request.email,
        password=request.password,
        name=request.name,
        organization_id=request.organization_id,
        organization_name=request.organization_name,
    )
    return _render(result)


@router.get(
    "/me",
    response_model=UserSummary,
    summary="Get the authenticated user",
)
async def me(user: User = Depends(get_current_user)):
    return user
