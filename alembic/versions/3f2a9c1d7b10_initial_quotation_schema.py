"""initial quotation schema

Revision ID: 3f2a9c1d7b10
Revises:
Create Date: 2026-10-19 09:12:44.381205

Users, customers, materials, product templates, quotations and their
snapshot-priced items. Idempotent on databases already built by
Base.metadata.create_all().
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.Numeric(18, 4)
DIMENSION = sa.Numeric(12, 2)
PERCENT = sa.Numeric(5, 2)

QUOTATION_STATUS = sa.Enum("Draft", "Sent", "Approved", "Rejected", name="quotationstatus")


def _table_exists(table_name):
    bind = op.get_bind()
    return table_name in sa.inspect(bind).get_table_names()


def upgrade() -> None:
    if not _table_exists("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("username", sa.String(), nullable=False, unique=True),
            sa.Column("password_hash", sa.String(), nullable=False),
            sa.Column("role", sa.String(), nullable=False, server_default="Staff"),
            sa.Column("created_at", sa.DateTime()),
        )

    if not _table_exists("auth_tokens"):
        op.create_table(
            "auth_tokens",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
            sa.Column("token_hash", sa.String(), nullable=False),
            sa.Column("token_type", sa.String()),
            sa.Column("expires_at", sa.DateTime(), nullable=False),
            sa.Column("created_at", sa.DateTime()),
        )

    if not _table_exists("customers"):
        op.create_table(
            "customers",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("phone", sa.String()),
            sa.Column("email", sa.String()),
            sa.Column("address", sa.Text()),
            sa.Column("created_at", sa.DateTime()),
        )

    if not _table_exists("materials"):
        op.create_table(
            "materials",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("unit", sa.String()),
            sa.Column("unit_price", MONEY, nullable=False),
            sa.Column("updated_at", sa.DateTime()),
        )

    if not _table_exists("product_templates"):
        op.create_table(
            "product_templates",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("image_url", sa.String()),
            sa.Column("default_width", DIMENSION),
            sa.Column("default_height", DIMENSION),
            sa.Column("default_depth", DIMENSION),
            sa.Column("pricing_formula", sa.String()),
            sa.Column("base_labor_cost", MONEY),
            sa.Column("default_material_id", sa.Integer(), sa.ForeignKey("materials.id")),
        )

    if not _table_exists("quotations"):
        op.create_table(
            "quotations",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), nullable=False),
            sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("users.id")),
            sa.Column("status", QUOTATION_STATUS, nullable=False),
            sa.Column("discount_percent", PERCENT),
            sa.Column("tax_percent", PERCENT),
            sa.Column("total_amount", MONEY),
            sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
            sa.Column("created_at", sa.DateTime()),
            sa.Column("updated_at", sa.DateTime()),
        )

    if not _table_exists("quotation_items"):
        op.create_table(
            "quotation_items",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("quotation_id", sa.Integer(), sa.ForeignKey("quotations.id"), nullable=False),
            sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("product_name", sa.String()),
            sa.Column("width", DIMENSION, nullable=False),
            sa.Column("height", DIMENSION, nullable=False),
            sa.Column("depth", DIMENSION),
            sa.Column("material_id", sa.Integer(), sa.ForeignKey("materials.id"), nullable=False),
            sa.Column("quantity", sa.Integer(), nullable=False),
            sa.Column("unit_price_snapshot", MONEY, nullable=False),
            sa.Column("total_price", MONEY, nullable=False),
        )


def downgrade() -> None:
    for table in ("quotation_items", "quotations", "product_templates",
                  "materials", "customers", "auth_tokens", "users"):
        if _table_exists(table):
            op.drop_table(table)
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        op.execute(sa.text("DROP TYPE IF EXISTS quotationstatus"))
