"""
Catalog router — carriers, products and appetite rules.

Endpoints:
  GET    /carriers               — [Admin] List carriers (paginated)
  GET    /carriers/{carrier_id}  — [Admin] Get one carrier
  POST   /carriers               — [Admin] Create a carrier
  GET    /products               — List products (paginated, optional ?carrier=)
  GET    /products/{product_id}  — Get one product
  POST   /products               — [Admin, Carrier] Create a product
  GET    /rules                  — List appetite rules (paginated)
  GET    /rules/{rule_id}        — Get one rule
  POST   /rules                  — [Admin, Carrier] Create a rule
  PUT    /rules/{rule_id}        — [Admin, Carrier] Replace a rule
  DELETE /rules/{rule_id}        — [Admin] Delete a rule

Pagination uses page (1-based) and pageSize (max 100) query parameters.
Unknown ids answer 404 with a "<kind>_not_found" error_type.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user, require_admin, require_role
from app.models.user import ADMIN_ROLE, CARRIER_ROLE, User
from app.schemas.catalog import (
    CarrierCreateRequest,
    CarrierResponse,
    Page,
    ProductCreateRequest,
    ProductResponse,
    RuleCreateRequest,
    RuleResponse,
)
from app.services import catalog_service

router = APIRouter()

# Product and rule writes are open to carrier accounts as well as admins
require_catalog_editor = require_role(ADMIN_ROLE, CARRIER_ROLE)


def _page(items, total: int, page: int, page_size: int) -> dict:
    return {"items": items, "total": total, "page": page, "page_size": page_size}


# ---------------------------------------------------------------------------
# Carriers
# ---------------------------------------------------------------------------

@router.get(
    "/carriers",
    response_model=Page[CarrierResponse],
    summary="[Admin] List carriers",
)
async def list_carriers(
    page: int = Query(1, ge=1),
    page_size: int = Query(25, ge=1, le=100, alias="pageSize"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    items, total = await catalog_service.list_carriers(db, page, page_size)
    return _page(items, total, page, page_size)


@router.get(
    "/carriers/{carrier_id}",
    response_model=CarrierResponse,
    summary="[Admin] Get a carrier",
)
async def get_carrier(
    carrier_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await catalog_service.get_carrier(db, carrier_id)


@router.post(
    "/carriers",
    response_model=CarrierResponse,
    summary="[Admin] Create a carrier",
)
async def create_carrier(
    request: CarrierCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a carrier; the server assigns the next "car-NNN" id."""
    return await catalog_service.create_carrier(db, **request.model_dump())


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

@router.get(
    "/products",
    response_model=Page[ProductResponse],
    summary="List products",
)
async def list_products(
    page: int = Query(1, ge=1),
    page_size: int = Query(25, ge=1, le=100, alias="pageSize"),
    carrier: str | None = Query(None, max_length=200),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List products, optionally only those offered by one carrier (exact name)."""
    items, total = await catalog_service.list_products(db, page, page_size, carrier=carrier)
    return _page(items, total, page, page_size)


@router.get(
    "/products/{product_id}",
    response_model=ProductResponse,
    summary="Get a product",
)
async def get_product(
    product_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await catalog_service.get_product(db, product_id)


@router.post(
    "/products",
    response_model=ProductResponse,
    summary="[Admin, Carrier] Create a product",
)
async def create_product(
    request: ProductCreateRequest,
    editor: User = Depends(require_catalog_editor),
    db: AsyncSession = Depends(get_db),
):
    return await catalog_service.create_product(db, **request.model_dump())


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

@router.get(
    "/rules",
    response_model=Page[RuleResponse],
    summary="List appetite rules",
)
async def list_rules(
    page: int = Query(1, ge=1),
    page_size: int = Query(25, ge=1, le=100, alias="pageSize"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    items, total = await catalog_service.list_rules(db, page, page_size)
    return _page(items, total, page, page_size)


@router.get(
    "/rules/{rule_id}",
    response_model=RuleResponse,
    summary="Get an appetite rule",
)
async def get_rule(
    rule_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await catalog_service.get_rule(db, rule_id)


@router.post(
    "/rules",
    response_model=RuleResponse,
    summary="[Admin, Carrier] Create a rule",
)
async def create_rule(
    request: RuleCreateRequest,
    editor: User = Depends(require_catalog_editor),
    db: AsyncSession = Depends(get_db),
):
    """Create a rule; created_by is the caller's email."""
    return await catalog_service.create_rule(
        db, created_by=editor.email, **request.model_dump()
    )


@router.put(
    "/rules/{rule_id}",
    response_model=RuleResponse,
    summary="[Admin, Carrier] Replace an appetite rule",
)
async def update_rule(
    rule_id: str,
    request: RuleCreateRequest,
    editor: User = Depends(require_catalog_editor),
    db: AsyncSession = Depends(get_db),
):
    """
    Replace every editable field of the rule with the request body.
    The rule id, created_by and created_at don't change.
    """
    return await catalog_service.update_rule(db, rule_id, **request.model_dump())


@router.delete(
    "/rules/{rule_id}",
    summary="[Admin] Delete an appetite rule",
)
async def delete_rule(
    rule_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await catalog_service.delete_rule(db, rule_id)
    return {"message": "Rule deleted successfully"}
