"""
User directory — the auth workflow's view of the persistent store.

The directory wraps the per-request AsyncSession handed out by get_db()
and is the only place the workflow touches the database. It provides:

  - find_by_email / save / count_by_kind: the basic lookups and writes
  - record_failed_login / record_successful_login: single-statement
    UPDATE ... RETURNING writes for the lockout bookkeeping, so two
    concurrent logins for the same account can't lose an increment of
    the failure counter (no read-modify-write in Python)
  - commit / rollback: the explicit transaction boundary for the request

Every store call is bounded by DB_TIMEOUT_SECONDS through bounded(), which
the dependencies and catalog services use too. A call that runs over
raises StoreTimeoutError, which the API reports as a retryable 503
instead of letting the request hang.
"""

import asyncio
from datetime import datetime
from typing import Awaitable, TypeVar

from sqlalchemy import case, func, literal, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from app.config import settings
from app.database import UTCDateTime
from app.exceptions import StoreTimeoutError
from app.models.catalog import Carrier, Product, Rule
from app.models.user import User

T = TypeVar("T")

# Organizations have no table of their own; like users, they are counted
# from the users table.
ENTITY_MODELS = {
    "user": User,
    "organization": User,
    "carrier": Carrier,
    "product": Product,
    "rule": Rule,
}


async def bounded(
    operation: str,
    awaitable: Awaitable[T],
    timeout: float | None = None,
) -> T:
    """
    Await a store call, giving up after `timeout` seconds
    (DB_TIMEOUT_SECONDS by default).

    Raises:
        StoreTimeoutError: If the call runs over.
    """
    if timeout is None:
        timeout = settings.DB_TIMEOUT_SECONDS
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError:
        raise StoreTimeoutError(operation, timeout) from None


class UserDirectory:
    """Store operations for one request, all bounded by a timeout."""

    def __init__(self, db: AsyncSession, timeout: float | None = None):
        self.db = db
        self.timeout = settings.DB_TIMEOUT_SECONDS if timeout is None else timeout

    async def _bounded(self, operation: str, awaitable: Awaitable[T]) -> T:
        return await bounded(operation, awaitable, self.timeout)

    async def find_by_email(self, email: str) -> User | None:
        """Exact, case-sensitive lookup."""
        result = await self._bounded(
            "find_by_email",
            self.db.execute(select(User).where(User.email == email)),
        )
        return result.scalar_one_or_none()

    async def save(self, user: User) -> None:
        """Insert or update the user and flush it to the database."""
        self.db.add(user)
        await self._bounded("save", self.db.flush())

    async def count_by_kind(self, kind: str) -> int:
        try:
            model = ENTITY_MODELS[kind]
        except KeyError:
            raise ValueError(f"Unknown entity kind: {kind!r}") from None
        result = await self._bounded(
            "count_by_kind",
            self.db.execute(select(func.count()).select_from(model)),
        )
        return result.scalar_one()

    async def record_failed_login(
        self,
        user: User,
        threshold: int,
        lockout_until: datetime,
    ) -> int:
        """
        Atomically increment the failure counter and lock the account once
        the new count reaches `threshold`.

        The increment and the lockout decision happen in one UPDATE, so the
        database serializes concurrent failures for the same row.

        Returns:
            The failure count after this attempt.
        """
        new_count = User.failed_login_attempts + 1
        stmt = (
            update(User)
            .where(User.id == user.id)
            .values(
                failed_login_attempts=new_count,
                lockout_end=case(
                    (new_count >= threshold, literal(lockout_until, UTCDateTime())),
                    else_=User.lockout_end,
                ),
            )
            .returning(User.failed_login_attempts, User.lockout_end)
            .execution_options(synchronize_session=False)
        )
        result = await self._bounded("record_failed_login", self.db.execute(stmt))
        count, lockout_end = result.one()

        # Keep the loaded instance in step without marking it dirty, so a
        # later flush can't overwrite the database value with a stale one.
        set_committed_value(user, "failed_login_attempts", count)
        set_committed_value(user, "lockout_end", lockout_end)
        return count

    async def record_successful_login(self, user: User, now: datetime) -> None:
        """Reset the failure counter, clear any lockout and stamp last_login_at."""
        stmt = (
            update(User)
            .where(User.id == user.id)
            .values(failed_login_attempts=0, lockout_end=None, last_login_at=now)
            .execution_options(synchronize_session=False)
        )
        await self._bounded("record_successful_login", self.db.execute(stmt))

        set_committed_value(user, "failed_login_attempts", 0)
        set_committed_value(user, "lockout_end", None)
        set_committed_value(user, "last_login_at", now)

    async def commit(self) -> None:
        await self._bounded("commit", self.db.commit())

    async def rollback(self) -> None:
        await self.db.rollback()
