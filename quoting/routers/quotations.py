"""
Quotation endpoints — preview, create, list, detail, status changes.

Create reads live material prices exactly once (SnapshotIntegrity) and
persists the frozen per-item prices in the same transaction as the header.
Status changes are re-checked here against the caller's role even though the
client already hides illegal buttons, then written with a version-guarded
UPDATE so two racing approvers cannot both win.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import update
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import actor_for, get_current_user
from ..database import get_db
from ..domain import Actor, MaterialRef, QuotationStatus, parse_status
from ..exceptions import ConcurrentModification
from ..lifecycle import lifecycle
from ..pricing import PricingCalculator, json_number
from ..snapshot import SnapshotIntegrity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quotations", tags=["quotations"])


def _material_lookup(items, db: Session) -> dict:
    """Fetch every referenced material once, as of now."""
    ids = {item.material_id for item in items}
    rows = db.query(models.Material).filter(models.Material.id.in_(ids)).all() if ids else []
    return {row.id: MaterialRef.model_validate(row) for row in rows}


def _price(request: schemas.QuotationCreate, db: Session):
    snapshot = SnapshotIntegrity(PricingCalculator())
    return snapshot.price_document(
        request.items,
        _material_lookup(request.items, db),
        request.discount_percent,
        request.tax_percent,
    )


def get_quotation_or_404(quotation_id: int, db: Session) -> models.Quotation:
    quotation = db.query(models.Quotation).filter(models.Quotation.id == quotation_id).first()
    if not quotation:
        raise HTTPException(status_code=404, detail="Quotation not found")
    return quotation


# --- Endpoints ---

@router.post("/preview")
def preview_quotation(
    request: schemas.QuotationCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    """Price a draft without saving it — the builder's running total."""
    priced = _price(request, db)
    return {
        "items": [_item_to_dict(i) for i in priced.items],
        "discount_percent": json_number(priced.discount_percent),
        "tax_percent": json_number(priced.tax_percent),
        **_totals_to_dict(priced.totals),
    }


@router.post("/")
def create_quotation(
    request: schemas.QuotationCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    customer = db.query(models.Customer).filter(models.Customer.id == request.customer_id).first()
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")

    priced = _price(request, db)

    db_quotation = models.Quotation(
        customer_id=customer.id,
        created_by_id=current_user.id,
        status=QuotationStatus.DRAFT,
        discount_percent=priced.discount_percent,
        tax_percent=priced.tax_percent,
        total_amount=priced.totals.grand_total,
        version=1,
    )
    for position, item in enumerate(priced.items):
        db_quotation.items.append(models.QuotationItem(position=position, **item.model_dump()))
    db.add(db_quotation)
    db.commit()
    db.refresh(db_quotation)

    logger.info(
        "Quotation %s created by %s: %d item(s), total %s",
        db_quotation.id, current_user.username, len(priced.items), priced.totals.grand_total,
    )
    return quotation_to_detail(db_quotation, actor_for(current_user))


@router.get("/")
def list_quotations(
    skip: int = 0,
    limit: int = 100,
    status: str = None,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    """Newest first. Optional ?status=Sent filter."""
    query = db.query(models.Quotation)
    if status:
        try:
            query = query.filter(models.Quotation.status == parse_status(status))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    quotations = query.order_by(
        models.Quotation.created_at.desc(), models.Quotation.id.desc(),
    ).offset(skip).limit(limit).all()
    return [_quotation_to_summary(q) for q in quotations]


@router.get("/{quotation_id}")
def get_quotation(
    quotation_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return quotation_to_detail(get_quotation_or_404(quotation_id, db), actor_for(current_user))


@router.put("/{quotation_id}/status")
def update_status(
    quotation_id: int,
    request: schemas.StatusUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    """
    Move a quotation along Draft → Sent → Approved/Rejected.

    Body: {"status": "Sent"} or {"status": 1}.
    Errors: 400 unknown status, 403 role not allowed, 409 illegal / terminal /
    no-op / lost race.
    """
    try:
        requested = parse_status(request.status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    quotation = get_quotation_or_404(quotation_id, db)
    actor = actor_for(current_user)
    lifecycle.check_transition(quotation.status, requested, actor)

    result = db.execute(
        update(models.Quotation)
        .where(models.Quotation.id == quotation.id)
        .where(models.Quotation.version == quotation.version)
        .values(status=requested, version=quotation.version + 1)
    )
    if result.rowcount != 1:
        db.rollback()
        raise ConcurrentModification(quotation.id, requested.value)
    db.commit()
    db.refresh(quotation)

    logger.info(
        "Quotation %s moved to %s by %s (%s)",
        quotation.id, requested.value, current_user.username, actor.role.value,
    )
    return quotation_to_detail(quotation, actor)


# --- Serialization ---

def _totals_to_dict(totals) -> dict:
    return {
        "subtotal": json_number(totals.subtotal),
        "discount_amount": json_number(totals.discount_amount),
        "taxable_amount": json_number(totals.taxable_amount),
        "tax_amount": json_number(totals.tax_amount),
        "total_amount": json_number(totals.grand_total),
    }


def _item_to_dict(i) -> dict:
    return {
        "product_name": i.product_name,
        "width": json_number(i.width),
        "height": json_number(i.height),
        "depth": json_number(i.depth),
        "material_id": i.material_id,
        "quantity": i.quantity,
        "unit_price_snapshot": json_number(i.unit_price_snapshot),
        "total_price": json_number(i.total_price),
    }


def _quotation_to_summary(q: models.Quotation) -> dict:
    return {
        "id": q.id,
        "customer_id": q.customer_id,
        "customer_name": q.customer.name if q.customer else None,
        "status": q.status.value,
        "total_amount": json_number(q.total_amount),
        "created_at": q.created_at.isoformat() if q.created_at else None,
    }


def quotation_to_detail(q: models.Quotation, actor: Actor) -> dict:
    # Breakdown comes from the stored snapshots, never from today's catalog
    totals = SnapshotIntegrity(PricingCalculator()).totals_from_snapshot(
        q.items, q.discount_percent, q.tax_percent,
    )
    customer = q.customer
    return {
        **_quotation_to_summary(q),
        "customer_phone": customer.phone if customer else None,
        "customer_address": customer.address if customer else None,
        "customer_email": customer.email if customer else None,
        "discount_percent": json_number(q.discount_percent),
        "tax_percent": json_number(q.tax_percent),
        "version": q.version,
        "items": [_item_to_dict(i) for i in q.items],
        "breakdown": _totals_to_dict(totals),
        "allowed_transitions": [s.value for s in lifecycle.allowed_transitions(q.status, actor)],
    }
