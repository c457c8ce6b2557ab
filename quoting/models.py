from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text, ForeignKey, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
from .database import Base
from .domain import QuotationStatus
from .pricing import (
    DIMENSION_DIGITS, DIMENSION_PLACES, MONEY_DIGITS, MONEY_PLACES, PERCENT_DIGITS, PERCENT_PLACES,
)

# Money and dimensions are exact decimals, never Float
MONEY = Numeric(MONEY_DIGITS, MONEY_PLACES)
DIMENSION = Numeric(DIMENSION_DIGITS, DIMENSION_PLACES)
PERCENT = Numeric(PERCENT_DIGITS, PERCENT_PLACES)


class User(Base):
    """Console accounts. role is 'Admin' or anything else (treated as Staff)."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, default="Staff", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    auth_tokens = relationship("AuthToken", back_populates="user", cascade="all, delete-orphan")


class AuthToken(Base):
    """JWT refresh token storage — access tokens are stateless."""
    __tablename__ = "auth_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    token_hash = Column(String, nullable=False)
    token_type = Column(String, default="refresh")
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="auth_tokens")


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    phone = Column(String)
    email = Column(String)
    address = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    quotations = relationship("Quotation", back_populates="customer")


class Material(Base):
    """Catalog material. unit_price is per square metre."""
    __tablename__ = "materials"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    unit = Column(String, default="m2")
    unit_price = Column(MONEY, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ProductTemplate(Base):
    """Preset product the builder can drop into a quotation with default dimensions."""
    __tablename__ = "product_templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    image_url = Column(String, nullable=True)
    default_width = Column(DIMENSION, default=0)
    default_height = Column(DIMENSION, default=0)
    default_depth = Column(DIMENSION, default=0)
    # Display only; pricing always uses the area formula
    pricing_formula = Column(String, default="W*H*Material")
    base_labor_cost = Column(MONEY, default=0)
    default_material_id = Column(Integer, ForeignKey("materials.id"), nullable=True)

    default_material = relationship("Material")


class Quotation(Base):
    __tablename__ = "quotations"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    status = Column(
        Enum(QuotationStatus, values_callable=lambda e: [s.value for s in e]),
        default=QuotationStatus.DRAFT,
        nullable=False,
    )
    discount_percent = Column(PERCENT, default=0)
    tax_percent = Column(PERCENT, default=0)
    total_amount = Column(MONEY, default=0)
    # Bumped on every status write
    version = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer = relationship("Customer", back_populates="quotations")
    created_by = relationship("User")
    items = relationship(
        "QuotationItem",
        back_populates="quotation",
        cascade="all, delete-orphan",
        order_by="QuotationItem.position",
    )


class QuotationItem(Base):
    """A priced line. unit_price_snapshot is frozen at creation and never recomputed."""
    __tablename__ = "quotation_items"

    id = Column(Integer, primary_key=True, index=True)
    quotation_id = Column(Integer, ForeignKey("quotations.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    product_name = Column(String, default="")
    width = Column(DIMENSION, nullable=False)
    height = Column(DIMENSION, nullable=False)
    depth = Column(DIMENSION, default=0)
    material_id = Column(Integer, ForeignKey("materials.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price_snapshot = Column(MONEY, nullable=False)
    total_price = Column(MONEY, nullable=False)

    quotation = relationship("Quotation", back_populates="items")
    material = relationship("Material")
