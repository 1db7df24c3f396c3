"""
Pydantic schemas for authentication endpoints (login, register, me).

JSON fields are camelCase on the wire (organizationId, organizationName)
to match the frontend contract; Python code uses snake_case.

Email and password are optional at the schema level; a missing or blank
value reaches the workflow and comes back as 400 invalid_request.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class LoginRequest(CamelModel):
    """Request body for POST /auth/login."""
    email: str | None = Field(default=None, max_length=255)
    password: str | None = None


class RegisterRequest(CamelModel):
    """Request body for POST /auth/register."""
    name: str | None = Field(default=None, max_length=200)
    email: str | None = Field(default=None, max_length=255)
    password: str | None = None
    organization_id: str | None = Field(default=None, max_length=450)
    organization_name: str | None = Field(default=None, max_length=200)


class UserSummary(CamelModel):
    """Public representation of a User (never includes the password hash)."""
    id: str
    name: str
    email: str
    roles: str | None
    organization_id: str | None
    organization_name: str | None


class AuthResponse(CamelModel):
    """Response body for successful login/register — token + user summary."""
    token: str
    user: UserSummary
