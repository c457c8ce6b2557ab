from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..auth import get_current_user
from ..database import get_db

router = APIRouter(prefix="/customers", tags=["customers"], dependencies=[Depends(get_current_user)])


def _get_or_404(customer_id: int, db: Session) -> models.Customer:
    customer = db.query(models.Customer).filter(models.Customer.id == customer_id).first()
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.post("/", response_model=schemas.Customer)
def create_customer(customer: schemas.CustomerCreate, db: Session = Depends(get_db)):
    db_customer = models.Customer(**customer.model_dump())
    db.add(db_customer)
    db.commit()
    db.refresh(db_customer)
    return db_customer

@router.get("/", response_model=List[schemas.Customer])
def list_customers(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return db.query(models.Customer).order_by(models.Customer.name).offset(skip).limit(limit).all()

@router.get("/{customer_id}", response_model=schemas.Customer)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    return _get_or_404(customer_id, db)

@router.put("/{customer_id}", response_model=schemas.Customer)
def update_customer(customer_id: int, update: schemas.CustomerUpdate, db: Session = Depends(get_db)):
    customer = _get_or_404(customer_id, db)
    for field, value in update.model_dump(exclude_unset=True).items():
        setattr(customer, field, value)
    db.commit()
    db.refresh(customer)
    return customer

@router.delete("/{customer_id}")
def delete_customer(customer_id: int, db: Session = Depends(get_db)):
    customer = _get_or_404(customer_id, db)
    in_use = db.query(models.Quotation).filter(models.Quotation.customer_id == customer_id).count()
    if in_use:
        raise HTTPException(status_code=409, detail=f"Customer has {in_use} quotation(s) and cannot be deleted")
    db.delete(customer)
    db.commit()
    return {"ok": True}
