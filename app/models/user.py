"""
User model — the authentication identity.

Each User is a login credential (email + Argon2id hash) with a single role
label and optional tenant linkage. Besides the identity columns, the row
carries the lockout bookkeeping the auth workflow maintains:

  - failed_login_attempts: consecutive wrong-password count, reset on success
  - lockout_end: while in the future, login is refused even with the right password
  - last_login_at: stamped on every successful login

Ids are human-readable strings ("usr-001") assigned by the id generation
service, not database-generated keys. Users are never deleted; set
is_active to False to disable one.
"""

from datetime import datetime

from sqlalchemy import String, Boolean, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, UTCDateTime, utcnow


DEFAULT_ROLE = "User"
ADMIN_ROLE = "admin"
CARRIER_ROLE = "carrier"


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(450), primary_key=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Login identifier, exact (case-sensitive) match
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Single role label, e.g. "User", "admin", "carrier"
    roles: Mapped[str | None] = mapped_column(
        String(200),
        default=DEFAULT_ROLE,
    )

    organization_id: Mapped[str | None] = mapped_column(String(450))
    organization_name: Mapped[str | None] = mapped_column(String(200))

    failed_login_attempts: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    lockout_end: Mapped[datetime | None] = mapped_column(UTCDateTime())
    last_login_at: Mapped[datetime | None] = mapped_column(UTCDateTime())

    # Inactive users are treated as unknown by the login workflow
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=utcnow,
        nullable=False,
    )

    def has_role(self, *roles: str) -> bool:
        """True if the user's role label matches any of `roles`, ignoring case."""
        return (self.roles or "").lower() in {role.lower() for role in roles}

    def is_locked(self, now: datetime) -> bool:
        return self.lockout_end is not None and self.lockout_end > now
