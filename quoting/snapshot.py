"""
Snapshot pricing — the one place live catalog prices enter a quotation.

materialize() reads each item's material at call time and returns new
QuotationItem records with unit_price_snapshot and total_price frozen.
Everything downstream (totals, PDF, dashboard) works from those stored
snapshots, so a later catalog price change never moves an existing
quotation's numbers.
"""

import logging
from typing import Callable, Iterable, List, Mapping, Union

from .domain import PricedQuotation, QuotationItem, Totals
from .exceptions import EmptyQuotation
from .pricing import PricingCalculator, to_decimal

logger = logging.getLogger(__name__)

MaterialLookup = Union[Mapping, Callable]


class SnapshotIntegrity:
    def __init__(self, calculator: PricingCalculator = None):
        self.calculator = calculator or PricingCalculator()

    def materialize(self, items: Iterable, material_lookup: MaterialLookup) -> List[QuotationItem]:
        """
        Freeze per-line prices.

        Args:
            items: line inputs (product_name, width, height, depth, material_id, quantity)
            material_lookup: {material_id: material} or a callable material_id -> material|None

        Returns:
            New QuotationItem records in input order. Inputs are not modified.
        """
        resolve = _resolver(material_lookup)
        calc = self.calculator
        frozen = []
        for item in items:
            material = resolve(item.material_id)
            quantity = calc.check_quantity(item.quantity)
            unit_price = calc.line_unit_price(item, material)
            frozen.append(QuotationItem(
                product_name=item.product_name or "",
                # Stored at the same 0.01 mm scale the price was computed from
                width=calc.check_dimension("width", item.width),
                height=calc.check_dimension("height", item.height),
                depth=calc.check_dimension("depth", item.depth or 0, allow_zero=True),
                material_id=item.material_id,
                quantity=quantity,
                unit_price_snapshot=unit_price,
                total_price=calc.round_money(unit_price * quantity),
            ))
        return frozen

    def totals_from_snapshot(self, items: Iterable, discount_percent, tax_percent) -> Totals:
        """Totals from stored snapshot prices only — never consults the catalog."""
        subtotal = sum((to_decimal(i.total_price) for i in items), to_decimal(0))
        return self.calculator.aggregate(subtotal, discount_percent, tax_percent)

    def price_document(
        self,
        items: Iterable,
        material_lookup: MaterialLookup,
        discount_percent,
        tax_percent,
    ) -> PricedQuotation:
        """Materialize items and compute totals for a quotation about to be created."""
        items = list(items)
        if not items:
            raise EmptyQuotation()

        # Percent errors surface before any material is read; the rounded
        # percents are what gets priced and stored
        discount_pct = self.calculator.check_percent("discount_percent", discount_percent)
        tax_pct = self.calculator.check_percent("tax_percent", tax_percent)

        frozen = self.materialize(items, material_lookup)
        totals = self.totals_from_snapshot(frozen, discount_pct, tax_pct)
        logger.debug(
            "Priced %d item(s): subtotal=%s grand_total=%s",
            len(frozen), totals.subtotal, totals.grand_total,
        )
        return PricedQuotation(
            items=frozen,
            discount_percent=discount_pct,
            tax_percent=tax_pct,
            totals=totals,
        )


def _resolver(material_lookup: MaterialLookup) -> Callable:
    if callable(material_lookup) and not isinstance(material_lookup, Mapping):
        return material_lookup
    return material_lookup.get
