"""
Id generation — human-readable identifiers for new records.

Two strategies, chosen by the caller per entity kind:

  Sequential: "<prefix>-<count+1>" zero-padded to 3 digits, e.g. "usr-007",
  where count is the current number of rows of that kind. Ids are stable
  and readable, but two concurrent creations can read the same count and
  produce the same id; the second insert then fails on the primary key.
  Good enough for registration at low volume, seeding and tests.

  Random: "<prefix>-<8 hex chars>" from a fresh uuid4, e.g. "car-3f9a0c1e".
  Safe under concurrency for practical purposes; use it for any creation
  path that sees real parallel traffic.

Prefixes:
  user → usr, carrier → car, product → prod, rule → rul, organization → org
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.services.user_directory import UserDirectory


ID_PREFIXES = {
    "user": "usr",
    "carrier": "car",
    "product": "prod",
    "rule": "rul",
    "organization": "org",
}


def _prefix(kind: str) -> str:
    try:
        return ID_PREFIXES[kind]
    except KeyError:
        raise ValueError(f"Unknown entity kind: {kind!r}") from None


def format_sequential_id(kind: str, count: int) -> str:
    """The id that follows `count` existing rows of `kind`."""
    return f"{_prefix(kind)}-{count + 1:03d}"


async def generate_sequential_id(
    db: AsyncSession | UserDirectory,
    kind: str,
) -> str:
    """
    Next sequential id for `kind`, based on the current row count.

    Not safe under concurrent creation (see module docstring).
    """
    directory = db if isinstance(db, UserDirectory) else UserDirectory(db)
    count = await directory.count_by_kind(kind)
    return format_sequential_id(kind, count)


def generate_random_id(kind: str) -> str:
    """Random id for `kind`: the prefix plus the first 8 hex chars of a uuid4."""
    return f"{_prefix(kind)}-{uuid.uuid4().hex[:8]}"
