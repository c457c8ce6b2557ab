"""
Quotation lifecycle tests — transition table, error precedence, role gating.

Tests:
1-5.   Core transitions (Staff sends, Admin approves/rejects, Staff blocked, terminal)
6-9.   Error precedence (no-op, illegal edges, terminal before illegal)
10-12. request_transition returns a copy with only status changed
13-15. allowed_transitions, status parsing, Actor.from_role
"""

from decimal import Decimal

import pytest

from quoting.domain import Actor, QuotationItem, QuotationRecord, QuotationStatus, Role, parse_status
from quoting.exceptions import (
    IllegalTransition,
    NoOpTransition,
    TerminalState,
    Unauthorized,
    WorkflowError,
)
from quoting.lifecycle import QuotationLifecycle

STAFF = Actor(role=Role.STAFF, user_id=1)
ADMIN = Actor(role=Role.ADMIN, user_id=2)


def _quotation(status=QuotationStatus.DRAFT):
    item = QuotationItem(
        product_name="Wardrobe",
        width=Decimal("2000"),
        height=Decimal("1000"),
        depth=Decimal("600"),
        material_id=1,
        quantity=3,
        unit_price_snapshot=Decimal("1000000"),
        total_price=Decimal("3000000"),
    )
    return QuotationRecord(
        id=7,
        customer_id=1,
        status=status,
        discount_percent=Decimal("10"),
        tax_percent=Decimal("8"),
        items=[item],
        total_amount=Decimal("2916000"),
    )


@pytest.fixture
def lc():
    return QuotationLifecycle()


# ============================================================
# 1-5. Core transitions
# ============================================================

def test_staff_can_send_draft(lc):
    sent = lc.request_transition(_quotation(), QuotationStatus.SENT, STAFF)
    assert sent.status == QuotationStatus.SENT


def test_admin_can_approve_sent(lc):
    approved = lc.request_transition(_quotation(QuotationStatus.SENT), "Approved", ADMIN)
    assert approved.status == QuotationStatus.APPROVED


def test_admin_can_reject_sent(lc):
    rejected = lc.request_transition(_quotation(QuotationStatus.SENT), 3, ADMIN)
    assert rejected.status == QuotationStatus.REJECTED


def test_staff_cannot_approve(lc):
    with pytest.raises(Unauthorized) as exc:
        lc.request_transition(_quotation(QuotationStatus.SENT), QuotationStatus.APPROVED, STAFF)
    assert exc.value.role == "Staff"
    assert exc.value.code == "UNAUTHORIZED_TRANSITION"


def test_approved_is_terminal(lc):
    with pytest.raises(TerminalState):
        lc.request_transition(_quotation(QuotationStatus.APPROVED), QuotationStatus.DRAFT, ADMIN)


# ============================================================
# 6-9. Error precedence
# ============================================================

def test_same_status_is_noop(lc):
    with pytest.raises(NoOpTransition):
        lc.check_transition(QuotationStatus.SENT, QuotationStatus.SENT, ADMIN)


def test_noop_wins_over_terminal(lc):
    """Approved -> Approved is reported as a no-op, not a terminal-state error."""
    with pytest.raises(NoOpTransition):
        lc.check_transition(QuotationStatus.APPROVED, QuotationStatus.APPROVED, ADMIN)


@pytest.mark.parametrize("current,requested", [
    (QuotationStatus.SENT, QuotationStatus.DRAFT),
    (QuotationStatus.DRAFT, QuotationStatus.APPROVED),
    (QuotationStatus.DRAFT, QuotationStatus.REJECTED),
])
def test_edges_outside_table_are_illegal(lc, current, requested):
    """Illegal even for Admin — role is checked last."""
    with pytest.raises(IllegalTransition):
        lc.check_transition(current, requested, ADMIN)
    with pytest.raises(IllegalTransition):
        lc.check_transition(current, requested, STAFF)


def test_terminal_wins_over_illegal(lc):
    with pytest.raises(TerminalState):
        lc.check_transition(QuotationStatus.REJECTED, QuotationStatus.APPROVED, STAFF)


# ============================================================
# 10-12. request_transition copies
# ============================================================

def test_request_transition_keeps_pricing_fields(lc):
    original = _quotation(QuotationStatus.SENT)
    approved = lc.request_transition(original, QuotationStatus.APPROVED, ADMIN)

    assert approved is not original
    assert original.status == QuotationStatus.SENT
    assert approved.items == original.items
    assert approved.total_amount == original.total_amount
    assert approved.discount_percent == original.discount_percent
    assert approved.tax_percent == original.tax_percent


def test_request_transition_accepts_role_string(lc):
    approved = lc.request_transition(_quotation(QuotationStatus.SENT), "Approved", "Admin")
    assert approved.status == QuotationStatus.APPROVED


def test_workflow_errors_share_base(lc):
    for current, requested, actor in [
        (QuotationStatus.DRAFT, QuotationStatus.DRAFT, STAFF),
        (QuotationStatus.APPROVED, QuotationStatus.SENT, ADMIN),
        (QuotationStatus.SENT, QuotationStatus.DRAFT, ADMIN),
        (QuotationStatus.SENT, QuotationStatus.REJECTED, STAFF),
    ]:
        with pytest.raises(WorkflowError):
            lc.check_transition(current, requested, actor)


# ============================================================
# 13-15. Helpers
# ============================================================

def test_allowed_transitions_by_role(lc):
    assert lc.allowed_transitions(QuotationStatus.DRAFT, STAFF) == [QuotationStatus.SENT]
    assert lc.allowed_transitions(QuotationStatus.SENT, STAFF) == []
    assert lc.allowed_transitions(QuotationStatus.SENT, ADMIN) == [
        QuotationStatus.APPROVED,
        QuotationStatus.REJECTED,
    ]
    assert lc.allowed_transitions(QuotationStatus.APPROVED, ADMIN) == []
    assert lc.can_transition("Draft", "Sent", "Staff") is True
    assert lc.can_transition("Sent", "Approved", "Staff") is False


@pytest.mark.parametrize("value,expected", [
    ("Sent", QuotationStatus.SENT),
    ("approved", QuotationStatus.APPROVED),
    (0, QuotationStatus.DRAFT),
    ("3", QuotationStatus.REJECTED),
])
def test_parse_status_names_and_codes(value, expected):
    assert parse_status(value) == expected


@pytest.mark.parametrize("value", [4, -1, "Archived", True])
def test_parse_status_rejects_unknown(value):
    with pytest.raises(ValueError):
        parse_status(value)


def test_actor_from_role_defaults_to_staff():
    assert Actor.from_role("Admin").is_admin
    assert not Actor.from_role("admin").is_admin
    assert Actor.from_role(None).role == Role.STAFF
    assert Actor.from_role("Designer", user_id=5).user_id == 5
