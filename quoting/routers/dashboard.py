"""
Dashboard summary — headline counts and a daily revenue series.

Revenue counts Approved quotations only, at their stored total_amount.
"""

from collections import OrderedDict
from datetime import datetime, timedelta
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import models
from ..auth import get_current_user
from ..database import get_db
from ..domain import QuotationStatus
from ..pricing import json_number

router = APIRouter(prefix="/dashboard", tags=["dashboard"], dependencies=[Depends(get_current_user)])


def build_revenue_series(quotations, days: int, today=None) -> list:
    """One point per calendar day, oldest first, zero-filled."""
    today = today or datetime.utcnow().date()
    start = today - timedelta(days=days - 1)
    buckets = OrderedDict((start + timedelta(days=n), Decimal(0)) for n in range(days))
    for q in quotations:
        if q.created_at is None:
            continue
        day = q.created_at.date()
        if day in buckets:
            buckets[day] += Decimal(q.total_amount or 0)
    return [{"date": day.isoformat(), "revenue": json_number(amount)} for day, amount in buckets.items()]


@router.get("/summary")
def get_summary(days: int = Query(30, ge=1, le=366), db: Session = Depends(get_db)):
    approved = db.query(models.Quotation).filter(
        models.Quotation.status == QuotationStatus.APPROVED,
    ).all()
    total_revenue = sum((Decimal(q.total_amount or 0) for q in approved), Decimal(0))

    return {
        "total_revenue": json_number(total_revenue),
        "total_quotations": db.query(models.Quotation).count(),
        "total_customers": db.query(models.Customer).count(),
        "total_products": db.query(models.ProductTemplate).count(),
        "chart_data": build_revenue_series(approved, days),
    }
