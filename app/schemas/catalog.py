"""
Pydantic schemas for the catalog endpoints (carriers, products, rules).

Ids are assigned by the server, so create requests never carry one.
List endpoints return a Page: the requested slice plus the total count.
"""

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import Field

from app.schemas.auth import CamelModel

T = TypeVar("T")


class Page(CamelModel, Generic[T]):
    items: list[T]
    page: int
    page_size: int
    total: int


class CarrierCreateRequest(CamelModel):
    """Request body for POST /carriers."""
    legal_name: str = Field(min_length=1, max_length=300)
    display_name: str = Field(min_length=1, max_length=200)
    country: str | None = Field(default=None, min_length=2, max_length=2)
    primary_contact_email: str | None = Field(default=None, max_length=255)


class CarrierResponse(CamelModel):
    carrier_id: str
    legal_name: str
    display_name: str
    country: str | None
    primary_contact_email: str | None
    created_at: datetime


class ProductCreateRequest(CamelModel):
    """Request body for POST /products."""
    name: str = Field(min_length=1, max_length=200)
    carrier: str | None = Field(default=None, max_length=200)
    per_occurrence: float | None = Field(default=None, ge=0)
    aggregate: float | None = Field(default=None, ge=0)
    min_annual_revenue: float | None = Field(default=None, ge=0)
    max_annual_revenue: float | None = Field(default=None, ge=0)
    naics_allowed: str | None = Field(default=None, max_length=1000)


class ProductResponse(CamelModel):
    id: str
    name: str
    carrier: str | None
    per_occurrence: float | None
    aggregate: float | None
    min_annual_revenue: float | None
    max_annual_revenue: float | None
    naics_allowed: str | None
    created_at: datetime


class RuleCreateRequest(CamelModel):
    """Request body for POST /rules."""
    title: str = Field(min_length=1, max_length=200)
    product: str | None = Field(default=None, max_length=200)
    carrier: str | None = Field(default=None, max_length=200)
    naics_codes: str | None = Field(default=None, max_length=1000)
    states: str | None = Field(default=None, max_length=500)
    status: str = Field(default="Active", max_length=50)
    outcome: str | None = Field(default=None, max_length=50)
    priority: str | None = Field(default=None, max_length=50)


class RuleResponse(CamelModel):
    rule_id: str
    title: str
    product: str | None
    carrier: str | None
    naics_codes: str | None
    states: str | None
    status: str
    outcome: str | None
    priority: str | None
    created_by: str | None
    created_at: datetime
