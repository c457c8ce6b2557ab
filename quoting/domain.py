"""
Value types shared by the pricing, snapshot and lifecycle components.

These are plain pydantic records — no database, no I/O. The ORM rows in
models.py satisfy the same attribute names, so the engine accepts either.
"""

import enum
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class QuotationStatus(str, enum.Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    APPROVED = "Approved"
    REJECTED = "Rejected"


# Integer codes the admin client sends for status updates
STATUS_CODES = {
    0: QuotationStatus.DRAFT,
    1: QuotationStatus.SENT,
    2: QuotationStatus.APPROVED,
    3: QuotationStatus.REJECTED,
}


def parse_status(value) -> QuotationStatus:
    """Accept a QuotationStatus, its name ("Sent") or its integer code (1)."""
    if isinstance(value, QuotationStatus):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Unknown quotation status: {value!r}")
    if isinstance(value, int):
        if value not in STATUS_CODES:
            raise ValueError(f"Unknown quotation status code: {value}")
        return STATUS_CODES[value]
    text = str(value).strip()
    if text.isdigit():
        return parse_status(int(text))
    for status in QuotationStatus:
        if status.value.lower() == text.lower():
            return status
    raise ValueError(f"Unknown quotation status: {value!r}")


class Role(str, enum.Enum):
    STAFF = "Staff"
    ADMIN = "Admin"


class Actor(BaseModel):
    """Who is asking. Built from the authenticated user, never from globals."""

    role: Role = Role.STAFF
    user_id: Optional[int] = None

    class Config:
        frozen = True

    @classmethod
    def from_role(cls, role: Optional[str], user_id: Optional[int] = None) -> "Actor":
        # Anything that is not exactly "Admin" is treated as Staff
        return cls(role=Role.ADMIN if role == Role.ADMIN.value else Role.STAFF, user_id=user_id)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class MaterialRef(BaseModel):
    """The slice of a catalog material the engine reads."""

    id: int
    unit_price: Decimal

    class Config:
        frozen = True
        from_attributes = True


class QuotationItemInput(BaseModel):
    """A line as the builder submits it, before any price is attached."""

    product_name: str = ""
    width: Decimal
    height: Decimal
    depth: Decimal = Decimal("0")
    material_id: int
    quantity: int = 1

    class Config:
        frozen = True


class QuotationItem(QuotationItemInput):
    """A materialized line — snapshot price frozen at creation time."""

    unit_price_snapshot: Decimal
    total_price: Decimal


class Totals(BaseModel):
    subtotal: Decimal
    discount_amount: Decimal
    taxable_amount: Decimal
    tax_amount: Decimal
    grand_total: Decimal

    class Config:
        frozen = True


class PricedQuotation(BaseModel):
    """Materialized items plus totals, ready to hand to persistence."""

    items: List[QuotationItem]
    discount_percent: Decimal
    tax_percent: Decimal
    totals: Totals

    class Config:
        frozen = True


class QuotationRecord(BaseModel):
    """A persisted quotation as the lifecycle sees it."""

    id: Optional[int] = None
    customer_id: int
    status: QuotationStatus = QuotationStatus.DRAFT
    discount_percent: Decimal = Decimal("0")
    tax_percent: Decimal = Decimal("0")
    items: List[QuotationItem] = []
    total_amount: Decimal = Decimal("0")
    created_at: Optional[datetime] = None
    version: int = 1

    class Config:
        frozen = True
        from_attributes = True
