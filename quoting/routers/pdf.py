"""
PDF download endpoint.

GET /api/quotations/{quotation_id}/pdf — printable quotation.

Supports auth via:
1. Authorization: Bearer <token> header (standard)
2. ?token=<jwt> query param (for window.open / direct download links)
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from .. import models
from ..auth import actor_for, security, user_from_access_token
from ..database import get_db
from ..pdf_generator import generate_quotation_pdf
from .quotations import get_quotation_or_404, quotation_to_detail

router = APIRouter(prefix="/quotations", tags=["pdf"])


@router.get("/{quotation_id}/pdf")
def download_pdf(
    quotation_id: int,
    token: Optional[str] = Query(None),
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
):
    if token:
        current_user = user_from_access_token(token, db)
    elif credentials is not None:
        current_user = user_from_access_token(credentials.credentials, db)
    else:
        raise HTTPException(status_code=401, detail="Authentication required. Pass ?token= parameter.")

    quotation = get_quotation_or_404(quotation_id, db)
    detail = quotation_to_detail(quotation, actor_for(current_user))

    material_ids = {item.material_id for item in quotation.items}
    material_names = {
        m.id: m.name
        for m in db.query(models.Material).filter(models.Material.id.in_(material_ids)).all()
    } if material_ids else {}

    # bytearray -> bytes for Response
    pdf_bytes = bytes(generate_quotation_pdf(detail, material_names))

    filename = f"BG-{quotation.id}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
