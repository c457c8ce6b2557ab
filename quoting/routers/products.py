from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..auth import get_current_user
from ..database import get_db

router = APIRouter(prefix="/products", tags=["products"], dependencies=[Depends(get_current_user)])


def _get_or_404(product_id: int, db: Session) -> models.ProductTemplate:
    product = db.query(models.ProductTemplate).filter(models.ProductTemplate.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _check_material(material_id, db: Session):
    if material_id is None:
        return
    exists = db.query(models.Material).filter(models.Material.id == material_id).first()
    if not exists:
        raise HTTPException(status_code=404, detail="Default material not found")


@router.post("/", response_model=schemas.ProductTemplate)
def create_product(product: schemas.ProductTemplateCreate, db: Session = Depends(get_db)):
    _check_material(product.default_material_id, db)
    db_product = models.ProductTemplate(**product.model_dump())
    db.add(db_product)
    db.commit()
    db.refresh(db_product)
    return db_product

@router.get("/", response_model=List[schemas.ProductTemplate])
def list_products(db: Session = Depends(get_db)):
    return db.query(models.ProductTemplate).order_by(models.ProductTemplate.name).all()

@router.get("/{product_id}", response_model=schemas.ProductTemplate)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return _get_or_404(product_id, db)

@router.put("/{product_id}", response_model=schemas.ProductTemplate)
def update_product(product_id: int, update: schemas.ProductTemplateUpdate, db: Session = Depends(get_db)):
    product = _get_or_404(product_id, db)
    changes = update.model_dump(exclude_unset=True)
    if "default_material_id" in changes:
        _check_material(changes["default_material_id"], db)
    for field, value in changes.items():
        setattr(product, field, value)
    db.commit()
    db.refresh(product)
    return product

@router.delete("/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db)):
    product = _get_or_404(product_id, db)
    db.delete(product)
    db.commit()
    return {"ok": True}
