"""
Catalog service — carriers, products and appetite rules.

Plain persistence: paginated listing, lookup by id, and creation with a
sequential id from the id generation service ("car-001", "prod-001",
"rul-001"). Rules can also be replaced and deleted. Listings are ordered
by id so pages are stable.

Every query goes through bounded(), so a stalled store surfaces as
StoreTimeoutError instead of hanging the request.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import CarrierNotFoundError, ProductNotFoundError, RuleNotFoundError
from app.models.catalog import Carrier, Product, Rule
from app.services.id_generation import generate_sequential_id
from app.services.user_directory import bounded


async def _paginate(db: AsyncSession, query, order_by, page: int, page_size: int):
    total = await bounded(
        "count",
        db.execute(select(func.count()).select_from(query.subquery())),
    )
    result = await bounded(
        "list",
        db.execute(
            query.order_by(order_by)
            .limit(page_size)
            .offset((page - 1) * page_size)
        ),
    )
    return list(result.scalars().all()), total.scalar_one()


async def _get(db: AsyncSession, model, key_column, item_id: str, not_found):
    result = await bounded("get", db.execute(select(model).where(key_column == item_id)))
    item = result.scalar_one_or_none()
    if item is None:
        raise not_found(item_id)
    return item


async def _add(db: AsyncSession, item):
    db.add(item)
    await bounded("insert", db.flush())
    return item


# ---------------------------------------------------------------------------
# Carriers
# ---------------------------------------------------------------------------

async def list_carriers(db: AsyncSession, page: int = 1, page_size: int = 25):
    """Return (carriers on this page, total carrier count)."""
    return await _paginate(db, select(Carrier), Carrier.carrier_id, page, page_size)


async def get_carrier(db: AsyncSession, carrier_id: str) -> Carrier:
    """
    Raises:
        CarrierNotFoundError: If no carrier has this id.
    """
    return await _get(db, Carrier, Carrier.carrier_id, carrier_id, CarrierNotFoundError)


async def create_carrier(
    db: AsyncSession,
    legal_name: str,
    display_name: str,
    country: str | None = None,
    primary_contact_email: str | None = None,
) -> Carrier:
    carrier = Carrier(
        carrier_id=await generate_sequential_id(db, "carrier"),
        legal_name=legal_name,
        display_name=display_name,
        country=country.upper() if country else None,
        primary_contact_email=primary_contact_email,
    )
    return await _add(db, carrier)


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

async def list_products(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 25,
    carrier: str | None = None,
):
    """
    Return (products on this page, total matching products).

    Args:
        carrier: Only products whose carrier name matches exactly.
    """
    query = select(Product)
    if carrier is not None:
        query = query.where(Product.carrier == carrier)
    return await _paginate(db, query, Product.id, page, page_size)


async def get_product(db: AsyncSession, product_id: str) -> Product:
    return await _get(db, Product, Product.id, product_id, ProductNotFoundError)


async def create_product(db: AsyncSession, name: str, **fields) -> Product:
    product = Product(
        id=await generate_sequential_id(db, "product"),
        name=name,
        **fields,
    )
    return await _add(db, product)


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

async def list_rules(db: AsyncSession, page: int = 1, page_size: int = 25):
    return await _paginate(db, select(Rule), Rule.rule_id, page, page_size)


async def get_rule(db: AsyncSession, rule_id: str) -> Rule:
    return await _get(db, Rule, Rule.rule_id, rule_id, RuleNotFoundError)


async def create_rule(
    db: AsyncSession,
    title: str,
    created_by: str | None = None,
    **fields,
) -> Rule:
    rule = Rule(
        rule_id=await generate_sequential_id(db, "rule"),
        title=title,
        created_by=created_by,
        **fields,
    )
    return await _add(db, rule)


async def update_rule(db: AsyncSession, rule_id: str, **fields) -> Rule:
    """
    Replace a rule's editable fields. The id, creator and creation time
    are kept.

    Raises:
        RuleNotFoundError: If no rule has this id.
    """
    rule = await get_rule(db, rule_id)
    for name, value in fields.items():
        setattr(rule, name, value)
    await bounded("update", db.flush())
    return rule


async def delete_rule(db: AsyncSession, rule_id: str) -> None:
    """
    Raises:
        RuleNotFoundError: If no rule has this id.
    """
    rule = await get_rule(db, rule_id)
    await bounded("delete", db.delete(rule))
    await bounded("delete", db.flush())
