"""
Material catalog. unit_price is per square metre and is read live only when a
quotation is created; changing it here never touches existing quotations.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..auth import get_current_user
from ..database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/materials", tags=["materials"], dependencies=[Depends(get_current_user)])

# Starter catalog, VND per m²
DEFAULT_MATERIALS = [
    {"name": "MDF chống ẩm 17mm", "unit": "m2", "unit_price": 450000},
    {"name": "MFC An Cường 18mm", "unit": "m2", "unit_price": 520000},
    {"name": "Gỗ sồi tự nhiên", "unit": "m2", "unit_price": 1850000},
    {"name": "Acrylic bóng gương", "unit": "m2", "unit_price": 980000},
    {"name": "Laminate vân gỗ", "unit": "m2", "unit_price": 690000},
]


def _get_or_404(material_id: int, db: Session) -> models.Material:
    material = db.query(models.Material).filter(models.Material.id == material_id).first()
    if not material:
        raise HTTPException(status_code=404, detail="Material not found")
    return material


@router.post("/seed")
def seed_materials(db: Session = Depends(get_db)):
    """Seed the starter catalog (skips names that already exist)."""
    added = 0
    for data in DEFAULT_MATERIALS:
        existing = db.query(models.Material).filter(models.Material.name == data["name"]).first()
        if not existing:
            db.add(models.Material(**data))
            added += 1
    db.commit()
    return {"ok": True, "seeded": added}

@router.post("/", response_model=schemas.Material)
def create_material(material: schemas.MaterialCreate, db: Session = Depends(get_db)):
    db_material = models.Material(**material.model_dump())
    db.add(db_material)
    db.commit()
    db.refresh(db_material)
    return db_material

@router.get("/", response_model=List[schemas.Material])
def list_materials(db: Session = Depends(get_db)):
    return db.query(models.Material).order_by(models.Material.name).all()

@router.get("/{material_id}", response_model=schemas.Material)
def get_material(material_id: int, db: Session = Depends(get_db)):
    return _get_or_404(material_id, db)

@router.put("/{material_id}", response_model=schemas.Material)
def update_material(material_id: int, update: schemas.MaterialUpdate, db: Session = Depends(get_db)):
    material = _get_or_404(material_id, db)
    changes = update.model_dump(exclude_unset=True)
    if "unit_price" in changes and changes["unit_price"] != material.unit_price:
        logger.info(
            "Material %s price %s -> %s (existing quotations keep their snapshots)",
            material.id, material.unit_price, changes["unit_price"],
        )
    for field, value in changes.items():
        setattr(material, field, value)
    db.commit()
    db.refresh(material)
    return material

@router.delete("/{material_id}")
def delete_material(material_id: int, db: Session = Depends(get_db)):
    material = _get_or_404(material_id, db)
    in_use = db.query(models.QuotationItem).filter(models.QuotationItem.material_id == material_id).count()
    if in_use:
        raise HTTPException(status_code=409, detail="Material is used by existing quotations and cannot be deleted")
    db.delete(material)
    db.commit()
    return {"ok": True}
