"""
Seeding and diagnostics for the catalog tables.

seed_sample_data() inserts a small set of sample rules and products, but
only into tables that are still empty, so calling it twice is harmless.
Ids come from the sequential strategy, which is deterministic on an empty
table ("rul-001", "prod-001", ...).

database_status() reports row counts per table for the diagnostics
endpoint.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.logging_config import get_logger
from app.models.catalog import Carrier, Product, Rule
from app.models.user import User
from app.services import catalog_service
from app.services.user_directory import bounded

logger = get_logger(__name__)

SAMPLE_RULES = [
    {
        "title": "Health Insurance Basic Rule",
        "product": "Health Insurance",
        "naics_codes": "524114",
        "states": "CA;NY;TX",
        "outcome": "Eligible",
        "priority": "High",
    },
    {
        "title": "Motor Insurance Standard Rule",
        "product": "Motor Insurance",
        "naics_codes": "524126",
        "states": "FL;TX;CA",
        "outcome": "Eligible",
        "priority": "Medium",
    },
    {
        "title": "Commercial Insurance Rule",
        "product": "Commercial Insurance",
        "naics_codes": "524130",
        "states": "NY;NJ;CT",
        "outcome": "Restricted",
        "priority": "Low",
    },
]

SAMPLE_PRODUCTS = [
    {
        "name": "Health Insurance Premium",
        "carrier": "ABC Health Corp",
        "per_occurrence": 1_000_000,
        "aggregate": 2_000_000,
        "min_annual_revenue": 0,
        "max_annual_revenue": 5_000_000,
        "naics_allowed": "524114;621111",
    },
    {
        "name": "Motor Insurance Standard",
        "carrier": "XYZ Auto Insurance",
        "per_occurrence": 500_000,
        "aggregate": 1_000_000,
        "min_annual_revenue": 0,
        "max_annual_revenue": 2_000_000,
        "naics_allowed": "524126;441110",
    },
]


async def _count(db: AsyncSession, model) -> int:
    result = await bounded(
        f"count {model.__tablename__}",
        db.execute(select(func.count()).select_from(model)),
    )
    return result.scalar_one()


async def seed_sample_data(db: AsyncSession) -> dict[str, int]:
    """
    Insert sample rules and products into empty tables.

    Returns:
        How many rows were inserted per table, e.g. {"rules": 3, "products": 0}.
    """
    seeded = {"rules": 0, "products": 0}

    if await _count(db, Rule) == 0:
        for fields in SAMPLE_RULES:
            await catalog_service.create_rule(db, created_by="System", **fields)
        seeded["rules"] = len(SAMPLE_RULES)

    if await _count(db, Product) == 0:
        for fields in SAMPLE_PRODUCTS:
            await catalog_service.create_product(db, **fields)
        seeded["products"] = len(SAMPLE_PRODUCTS)

    logger.info("Seeded %d rules, %d products", seeded["rules"], seeded["products"])
    return seeded


async def database_status(db: AsyncSession) -> dict[str, int]:
    """Row counts for each table."""
    return {
        "users": await _count(db, User),
        "carriers": await _count(db, Carrier),
        "products": await _count(db, Product),
        "rules": await _count(db, Rule),
    }
