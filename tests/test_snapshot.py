"""
Snapshot pricing tests — materialize, totals from snapshots, price_document.

Tests:
1-3.  materialize (prices frozen, inputs untouched, lookup styles)
4-6.  Catalog changes after materialize do not move existing snapshots
7-8.  Stored scale (dimensions, depth)
9-13. price_document (happy path, empty, percent errors first, errors propagate, rounded percents)
"""

from decimal import Decimal

import pytest

from quoting.domain import MaterialRef, QuotationItemInput
from quoting.exceptions import (
    EmptyQuotation,
    InvalidDimension,
    InvalidPercent,
    InvalidQuantity,
    UnknownMaterial,
)
from quoting.pricing import PricingCalculator
from quoting.snapshot import SnapshotIntegrity


def _item(material_id=1, width=2000, height=1000, quantity=3, name="Wardrobe", depth=600):
    return QuotationItemInput(
        product_name=name,
        width=width,
        height=height,
        depth=depth,
        material_id=material_id,
        quantity=quantity,
    )


@pytest.fixture
def snapshot():
    return SnapshotIntegrity(PricingCalculator(minor_units=0))


@pytest.fixture
def catalog():
    return {
        1: MaterialRef(id=1, unit_price=500000),
        2: MaterialRef(id=2, unit_price=800000),
    }


# ============================================================
# 1-3. materialize
# ============================================================

def test_materialize_freezes_prices(snapshot, catalog):
    frozen = snapshot.materialize([_item()], catalog)
    assert len(frozen) == 1
    line = frozen[0]
    assert line.unit_price_snapshot == Decimal("1000000")
    assert line.total_price == Decimal("3000000")
    assert line.product_name == "Wardrobe"
    assert line.depth == Decimal("600")


def test_materialize_returns_new_records(snapshot, catalog):
    """Input items come back untouched; outputs are separate objects."""
    original = _item()
    before = original.model_dump()
    frozen = snapshot.materialize([original], catalog)
    assert frozen[0] is not original
    assert original.model_dump() == before
    assert not hasattr(original, "unit_price_snapshot")


def test_materialize_accepts_callable_lookup_and_keeps_order(snapshot, catalog):
    items = [_item(material_id=2, name="Shelf"), _item(material_id=1, name="Desk")]
    frozen = snapshot.materialize(items, catalog.get)
    assert [line.product_name for line in frozen] == ["Shelf", "Desk"]
    assert frozen[0].unit_price_snapshot == Decimal("1600000")


# ============================================================
# 4-6. Snapshots ignore later catalog changes
# ============================================================

def test_totals_from_snapshot_ignore_catalog_changes(snapshot, catalog):
    frozen = snapshot.materialize([_item()], catalog)
    before = snapshot.totals_from_snapshot(frozen, 10, 8)

    catalog[1] = MaterialRef(id=1, unit_price=999999)
    after = snapshot.totals_from_snapshot(frozen, 10, 8)

    assert before == after
    assert after.subtotal == Decimal("3000000")


def test_totals_from_snapshot_matches_document_totals(snapshot, catalog):
    priced = snapshot.price_document([_item(), _item(material_id=2, quantity=1)], catalog, 5, 10)
    recomputed = snapshot.totals_from_snapshot(priced.items, 5, 10)
    assert recomputed == priced.totals


def test_rematerialize_after_price_change_leaves_old_snapshot(snapshot, catalog):
    """Same inputs, new catalog price: a new snapshot, the old record untouched."""
    inputs = [_item()]
    first = snapshot.materialize(inputs, catalog)
    original_line = first[0]

    catalog[1] = MaterialRef(id=1, unit_price=750000)
    second = snapshot.materialize(inputs, catalog)

    assert second[0].unit_price_snapshot == Decimal("1500000")
    assert second[0].unit_price_snapshot != original_line.unit_price_snapshot
    assert original_line.unit_price_snapshot == Decimal("1000000")
    assert original_line.total_price == Decimal("3000000")
    assert first[0] is original_line


# ============================================================
# 7-8. Stored scale
# ============================================================

def test_materialize_stores_dimensions_it_priced(snapshot, catalog):
    """Geometry is kept at 0.01 mm, the same value the price came from."""
    frozen = snapshot.materialize([_item(width=Decimal("2000.004"), depth=Decimal("600.005"))], catalog)
    line = frozen[0]
    assert line.width == Decimal("2000.00")
    assert line.depth == Decimal("600.01")
    assert line.unit_price_snapshot == Decimal("1000000")


@pytest.mark.parametrize("overrides,field", [
    ({"width": Decimal("0.004")}, "width"),
    ({"height": Decimal("0.001")}, "height"),
    ({"depth": -1}, "depth"),
])
def test_materialize_rejects_unstorable_dimensions(snapshot, catalog, overrides, field):
    with pytest.raises(InvalidDimension) as exc:
        snapshot.materialize([_item(**overrides)], catalog)
    assert exc.value.field == field


# ============================================================
# 9-13. price_document
# ============================================================

def test_price_document_worked_example(snapshot):
    """One line worth 10,000,000 at 10% discount / 8% tax → 9,720,000."""
    catalog = {1: MaterialRef(id=1, unit_price=5000000)}
    priced = snapshot.price_document([_item(quantity=1)], catalog, 10, 8)
    assert priced.totals.subtotal == Decimal("10000000")
    assert priced.totals.grand_total == Decimal("9720000")
    assert priced.discount_percent == Decimal("10")
    assert priced.tax_percent == Decimal("8")


def test_price_document_empty_raises(snapshot, catalog):
    with pytest.raises(EmptyQuotation):
        snapshot.price_document([], catalog, 0, 0)


def test_price_document_checks_percent_before_materials(snapshot):
    """A bad discount is reported even when the material is also missing."""
    with pytest.raises(InvalidPercent):
        snapshot.price_document([_item(material_id=42)], {}, 150, 0)


def test_price_document_propagates_line_errors(snapshot, catalog):
    with pytest.raises(UnknownMaterial) as exc:
        snapshot.price_document([_item(), _item(material_id=42)], catalog, 0, 0)
    assert exc.value.material_id == 42

    with pytest.raises(InvalidQuantity):
        snapshot.price_document([_item(quantity=0)], catalog, 0, 0)


def test_price_document_prices_with_stored_percents(snapshot, catalog):
    """Percents are rounded to 0.01 before pricing, so stored values reproduce the total."""
    priced = snapshot.price_document([_item(quantity=1)], catalog, Decimal("12.345"), Decimal("7.777"))
    assert priced.discount_percent == Decimal("12.35")
    assert priced.tax_percent == Decimal("7.78")

    recomputed = snapshot.totals_from_snapshot(priced.items, priced.discount_percent, priced.tax_percent)
    assert recomputed == priced.totals
