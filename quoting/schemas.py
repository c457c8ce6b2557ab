from pydantic import BaseModel, Field
from typing import Optional, List, Union
from decimal import Decimal
from datetime import datetime

from .pricing import MAX_MONEY


class CustomerBase(BaseModel):
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None

class CustomerCreate(CustomerBase):
    pass

class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None

class Customer(CustomerBase):
    id: int
    created_at: datetime
    class Config:
        from_attributes = True


class MaterialBase(BaseModel):
    name: str
    unit: str = "m2"
    unit_price: Decimal = Field(ge=0, le=MAX_MONEY)

class MaterialCreate(MaterialBase):
    pass

class MaterialUpdate(BaseModel):
    name: Optional[str] = None
    unit: Optional[str] = None
    unit_price: Optional[Decimal] = Field(default=None, ge=0, le=MAX_MONEY)

class Material(MaterialBase):
    id: int
    class Config:
        from_attributes = True


class ProductTemplateBase(BaseModel):
    name: str
    image_url: Optional[str] = None
    default_width: Decimal = Decimal("0")
    default_height: Decimal = Decimal("0")
    default_depth: Decimal = Decimal("0")
    pricing_formula: str = "W*H*Material"
    base_labor_cost: Decimal = Decimal("0")
    default_material_id: Optional[int] = None

class ProductTemplateCreate(ProductTemplateBase):
    pass

class ProductTemplateUpdate(BaseModel):
    name: Optional[str] = None
    image_url: Optional[str] = None
    default_width: Optional[Decimal] = None
    default_height: Optional[Decimal] = None
    default_depth: Optional[Decimal] = None
    pricing_formula: Optional[str] = None
    base_labor_cost: Optional[Decimal] = None
    default_material_id: Optional[int] = None

class ProductTemplate(ProductTemplateBase):
    id: int
    default_material: Optional[Material] = None
    class Config:
        from_attributes = True


class UserCreate(BaseModel):
    username: str
    password: str
    role: str = "Staff"

class User(BaseModel):
    id: int
    username: str
    role: str
    created_at: Optional[datetime] = None
    class Config:
        from_attributes = True


# --- Quotations ---
# Range checks are left to the pricing engine so each failure gets its typed code.

class QuotationItemCreate(BaseModel):
    product_name: str = ""
    width: Decimal
    height: Decimal
    depth: Decimal = Decimal("0")
    material_id: int
    quantity: int = 1

class QuotationCreate(BaseModel):
    customer_id: int
    items: List[QuotationItemCreate] = []
    discount_percent: Decimal = Decimal("0")
    tax_percent: Decimal = Decimal("0")

class StatusUpdate(BaseModel):
    # "Sent" or the client's integer code (0=Draft, 1=Sent, 2=Approved, 3=Rejected)
    status: Union[int, str]
