"""
Pricing calculator — area-based line pricing and document totals.

Pure math, no I/O. Width and height are millimetres; a material's
unit_price is per square metre, so

    unit price = (width × height / 1,000,000) × material.unit_price
    line total = unit price × quantity

Document totals:

    discount = subtotal × discount% / 100
    taxable  = subtotal − discount
    tax      = taxable × tax% / 100
    grand    = taxable + tax

All amounts are Decimal, rounded half-up to the currency minor unit only.
Depth is carried on the item for display and never priced.

Dimensions and percents are rounded to their stored scale (0.01) before
anything is priced, so a persisted quotation recomputes to exactly the
totals it was saved with.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Union

from .config import settings
from .domain import Totals
from .exceptions import (
    AmountOutOfRange,
    InvalidDimension,
    InvalidPercent,
    InvalidQuantity,
    UnknownMaterial,
)

MM2_PER_M2 = Decimal("1000000")
HUNDRED = Decimal("100")

# Column precision (digits, places), shared with models.py
MONEY_DIGITS, MONEY_PLACES = 18, 4
DIMENSION_DIGITS, DIMENSION_PLACES = 12, 2
PERCENT_DIGITS, PERCENT_PLACES = 5, 2

MAX_MONEY = Decimal(10) ** (MONEY_DIGITS - MONEY_PLACES) - Decimal(1).scaleb(-MONEY_PLACES)
MAX_DIMENSION = Decimal(10) ** (DIMENSION_DIGITS - DIMENSION_PLACES) - Decimal(1).scaleb(-DIMENSION_PLACES)
DIMENSION_QUANTUM = Decimal(1).scaleb(-DIMENSION_PLACES)
PERCENT_QUANTUM = Decimal(1).scaleb(-PERCENT_PLACES)


def to_decimal(value) -> Decimal:
    """Coerce ints, floats and strings to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


class PricingCalculator:
    """Deterministic money math for quotation lines and totals."""

    def __init__(self, minor_units: int = None):
        if minor_units is None:
            minor_units = settings.CURRENCY_MINOR_UNITS
        self.minor_units = minor_units
        self._quantum = Decimal(1).scaleb(-minor_units)

    def round_money(self, amount) -> Decimal:
        value = to_decimal(amount)
        if not value.is_finite() or abs(value) > MAX_MONEY:
            raise AmountOutOfRange(amount)
        return value.quantize(self._quantum, rounding=ROUND_HALF_UP)

    # --- Line level ---

    def line_unit_price(self, item, material) -> Decimal:
        width = self.check_dimension("width", item.width)
        height = self.check_dimension("height", item.height)
        if material is None or material.id != item.material_id:
            raise UnknownMaterial(item.material_id)

        area_m2 = width * height / MM2_PER_M2
        return self.round_money(area_m2 * to_decimal(material.unit_price))

    def line_total(self, item, material) -> Decimal:
        quantity = self.check_quantity(item.quantity)
        return self.round_money(self.line_unit_price(item, material) * quantity)

    def subtotal(self, items: Iterable, materials: Union[Mapping, Iterable]) -> Decimal:
        """Sum of line totals. `materials` is {id: material} or any iterable of materials."""
        lookup = _as_lookup(materials)
        total = Decimal(0)
        for item in items:
            total += self.line_total(item, lookup.get(item.material_id))
        return self.round_money(total)

    # --- Document level ---

    def aggregate(self, subtotal, discount_percent, tax_percent) -> Totals:
        discount_pct = self.check_percent("discount_percent", discount_percent)
        tax_pct = self.check_percent("tax_percent", tax_percent)

        subtotal = self.round_money(subtotal)
        discount_amount = self.round_money(subtotal * discount_pct / HUNDRED)
        taxable_amount = subtotal - discount_amount
        tax_amount = self.round_money(taxable_amount * tax_pct / HUNDRED)

        return Totals(
            subtotal=subtotal,
            discount_amount=discount_amount,
            taxable_amount=taxable_amount,
            tax_amount=tax_amount,
            grand_total=self.round_money(taxable_amount + tax_amount),
        )

    # --- Validation helpers ---

    def check_dimension(self, field: str, value, allow_zero: bool = False) -> Decimal:
        """Millimetres rounded to 0.01. Width/height must stay > 0, depth >= 0."""
        if value is None:
            raise InvalidDimension(field, value)
        raw = to_decimal(value)
        if not raw.is_finite() or raw > MAX_DIMENSION:
            raise InvalidDimension(field, value, f"{field} must be at most {MAX_DIMENSION} mm (got {value})")
        if raw < 0 or (raw == 0 and not allow_zero):
            raise InvalidDimension(field, value, _dimension_floor(field, value, allow_zero))

        dim = raw.quantize(DIMENSION_QUANTUM, rounding=ROUND_HALF_UP)
        if dim == 0 and not allow_zero:
            # 0.004 mm rounds away to nothing
            raise InvalidDimension(field, value)
        return dim

    def check_quantity(self, quantity) -> int:
        if isinstance(quantity, bool) or quantity is None:
            raise InvalidQuantity(quantity)
        if isinstance(quantity, int):
            whole = quantity
        else:
            value = to_decimal(quantity)
            if not value.is_finite() or value != value.to_integral_value():
                raise InvalidQuantity(quantity)
            whole = int(value)
        if whole < 1:
            raise InvalidQuantity(quantity)
        return whole

    def check_percent(self, field: str, value) -> Decimal:
        """Percent in [0, 100], rounded to 0.01."""
        if value is None:
            raise InvalidPercent(field, value)
        pct = to_decimal(value)
        if not pct.is_finite() or pct < 0 or pct > HUNDRED:
            raise InvalidPercent(field, value)
        return pct.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)


def _dimension_floor(field, value, allow_zero) -> str:
    if allow_zero:
        return f"{field} must be 0 or greater (got {value})"
    return f"{field} must be greater than 0 (got {value})"


def _as_lookup(materials) -> Mapping:
    if isinstance(materials, Mapping):
        return materials
    return {m.id: m for m in materials}


def json_number(value):
    """Decimal -> JSON number: int when whole, float otherwise."""
    if value is None:
        return None
    value = to_decimal(value)
    if value == value.to_integral_value():
        return int(value)
    return float(value)
