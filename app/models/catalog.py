"""
Catalog models — carriers, their products, and appetite rules.

These tables back the listing/creation endpoints and give the id
generation service something to count for the "carrier", "product" and
"rule" kinds. Multi-valued fields (NAICS codes, states) are stored as
";"-separated strings.
"""

from datetime import datetime

from sqlalchemy import String, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, UTCDateTime, utcnow


class Carrier(Base):
    __tablename__ = "carriers"

    carrier_id: Mapped[str] = mapped_column(String(450), primary_key=True)
    legal_name: Mapped[str] = mapped_column(String(300), nullable=False)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    # ISO 3166-1 alpha-2
    country: Mapped[str | None] = mapped_column(String(2))
    primary_contact_email: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=utcnow,
        nullable=False,
    )


class Product(Base):
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(450), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    # Carrier display name, as the rules reference it
    carrier: Mapped[str | None] = mapped_column(String(200))
    per_occurrence: Mapped[float | None] = mapped_column(Numeric(18, 2, asdecimal=False))
    aggregate: Mapped[float | None] = mapped_column(Numeric(18, 2, asdecimal=False))
    min_annual_revenue: Mapped[float | None] = mapped_column(Numeric(18, 2, asdecimal=False))
    max_annual_revenue: Mapped[float | None] = mapped_column(Numeric(18, 2, asdecimal=False))
    naics_allowed: Mapped[str | None] = mapped_column(String(1000))
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=utcnow,
        nullable=False,
    )


class Rule(Base):
    __tablename__ = "rules"

    rule_id: Mapped[str] = mapped_column(String(450), primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    product: Mapped[str | None] = mapped_column(String(200))
    carrier: Mapped[str | None] = mapped_column(String(200))
    naics_codes: Mapped[str | None] = mapped_column(String(1000))
    states: Mapped[str | None] = mapped_column(String(500))
    status: Mapped[str] = mapped_column(String(50), default="Active", nullable=False)
    outcome: Mapped[str | None] = mapped_column(String(50))
    priority: Mapped[str | None] = mapped_column(String(50))
    created_by: Mapped[str | None] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        default=utcnow,
        nullable=False,
    )
