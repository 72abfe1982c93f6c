"""create stock ledger tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _reference_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(f"ix_{name}_id", name, ["id"], unique=False)
    op.create_index(f"ix_{name}_code", name, ["code"], unique=True)


def _column_indexes(table: str, *columns: str) -> None:
    for column in columns:
        op.create_index(f"ix_{table}_{column}", table, [column], unique=False)


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("unit", sa.String(length=30), nullable=True),
        sa.Column("price", sa.Numeric(14, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )
    op.create_index("ix_products_id", "products", ["id"], unique=False)
    op.create_index("ix_products_code", "products", ["code"], unique=True)

    for name in ("suppliers", "customers", "contracts", "bills", "accounts"):
        _reference_table(name)

    op.create_table(
        "warehouses",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("total_value_in", sa.Numeric(18, 2), nullable=False),
        sa.Column("total_value_out", sa.Numeric(18, 2), nullable=False),
        sa.Column("total_stock_value", sa.Numeric(18, 2), nullable=False),
        sa.Column("last_checked_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_warehouses_id", "warehouses", ["id"], unique=False)
    op.create_index("ix_warehouses_code", "warehouses", ["code"], unique=True)

    op.create_table(
        "inventory_records",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=100), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("product_code", sa.String(length=50), nullable=False),
        sa.Column("warehouse_code", sa.String(length=50), nullable=False),
        sa.Column("balance_before", sa.Integer(), nullable=False),
        sa.Column("total_in", sa.Integer(), nullable=False),
        sa.Column("total_out", sa.Integer(), nullable=False),
        sa.Column("current_balance", sa.Integer(), nullable=False),
        sa.Column("min_threshold", sa.Integer(), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["product_code"], ["products.code"]),
        sa.ForeignKeyConstraint(["warehouse_code"], ["warehouses.code"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("balance_before >= 0", name="ck_inventory_records_balance_before_non_negative"),
        sa.CheckConstraint("min_threshold >= 0", name="ck_inventory_records_min_threshold_non_negative"),
    )
    op.create_index("ix_inventory_records_id", "inventory_records", ["id"], unique=False)
    op.create_index("ix_inventory_records_code", "inventory_records", ["code"], unique=True)
    op.create_index("ix_inventory_records_year", "inventory_records", ["year"], unique=False)
    op.create_index("ix_inventory_records_product_code", "inventory_records", ["product_code"], unique=False)
    op.create_index("ix_inventory_records_warehouse_code", "inventory_records", ["warehouse_code"], unique=False)
    op.create_index(
        "ix_inventory_records_product_warehouse_year",
        "inventory_records",
        ["product_code", "warehouse_code", "year"],
        unique=False,
    )

    op.create_table(
        "stock_ins",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.Column("product_code", sa.String(length=50), nullable=False),
        sa.Column("received_date", sa.Date(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("warehouse_code", sa.String(length=50), nullable=True),
        sa.Column("supplier_code", sa.String(length=50), nullable=True),
        sa.Column("bill_code", sa.String(length=50), nullable=True),
        sa.Column("contract_code", sa.String(length=50), nullable=True),
        sa.Column("inventory_code", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["product_code"], ["products.code"]),
        sa.ForeignKeyConstraint(["warehouse_code"], ["warehouses.code"]),
        sa.ForeignKeyConstraint(["supplier_code"], ["suppliers.code"]),
        sa.ForeignKeyConstraint(["bill_code"], ["bills.code"]),
        sa.ForeignKeyConstraint(["contract_code"], ["contracts.code"]),
        sa.ForeignKeyConstraint(["inventory_code"], ["inventory_records.code"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("quantity > 0", name="ck_stock_ins_quantity_positive"),
    )
    op.create_index("ix_stock_ins_id", "stock_ins", ["id"], unique=False)
    op.create_index("ix_stock_ins_code", "stock_ins", ["code"], unique=True)
    op.create_index("ix_stock_ins_seq", "stock_ins", ["seq"], unique=False)
    op.create_index("ix_stock_ins_received_date", "stock_ins", ["received_date"], unique=False)
    op.create_index("ix_stock_ins_inventory_code", "stock_ins", ["inventory_code"], unique=False)
    op.create_index("ix_stock_ins_product_warehouse", "stock_ins", ["product_code", "warehouse_code"], unique=False)
    _column_indexes("stock_ins", "product_code", "warehouse_code", "supplier_code", "bill_code", "contract_code")

    op.create_table(
        "stock_outs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.Column("product_code", sa.String(length=50), nullable=False),
        sa.Column("issued_date", sa.Date(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("warehouse_code", sa.String(length=50), nullable=True),
        sa.Column("customer_code", sa.String(length=50), nullable=True),
        sa.Column("responsible_code", sa.String(length=50), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["product_code"], ["products.code"]),
        sa.ForeignKeyConstraint(["warehouse_code"], ["warehouses.code"]),
        sa.ForeignKeyConstraint(["customer_code"], ["customers.code"]),
        sa.ForeignKeyConstraint(["responsible_code"], ["accounts.code"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("quantity > 0", name="ck_stock_outs_quantity_positive"),
    )
    op.create_index("ix_stock_outs_id", "stock_outs", ["id"], unique=False)
    op.create_index("ix_stock_outs_code", "stock_outs", ["code"], unique=True)
    op.create_index("ix_stock_outs_seq", "stock_outs", ["seq"], unique=False)
    op.create_index("ix_stock_outs_issued_date", "stock_outs", ["issued_date"], unique=False)
    op.create_index("ix_stock_outs_product_warehouse", "stock_outs", ["product_code", "warehouse_code"], unique=False)
    _column_indexes("stock_outs", "product_code", "warehouse_code", "customer_code", "responsible_code")

    op.create_table(
        "stock_out_allocations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("stock_out_id", sa.Integer(), nullable=False),
        sa.Column("inventory_code", sa.String(length=100), nullable=True),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["stock_out_id"], ["stock_outs.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["inventory_code"], ["inventory_records.code"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("quantity > 0", name="ck_stock_out_allocations_quantity_positive"),
    )
    op.create_index("ix_stock_out_allocations_id", "stock_out_allocations", ["id"], unique=False)
    op.create_index("ix_stock_out_allocations_stock_out_id", "stock_out_allocations", ["stock_out_id"], unique=False)
    op.create_index(
        "ix_stock_out_allocations_inventory_code", "stock_out_allocations", ["inventory_code"], unique=False
    )

    op.create_table(
        "inventory_checks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("product_code", sa.String(length=50), nullable=True),
        sa.Column("warehouse_code", sa.String(length=50), nullable=True),
        sa.Column("inventory_code", sa.String(length=100), nullable=True),
        sa.Column("system_quantity", sa.Integer(), nullable=False),
        sa.Column("actual_quantity", sa.Integer(), nullable=False),
        sa.Column("variance", sa.Integer(), nullable=False),
        sa.Column("check_date", sa.Date(), nullable=False),
        sa.Column("responsible_code", sa.String(length=50), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["product_code"], ["products.code"]),
        sa.ForeignKeyConstraint(["warehouse_code"], ["warehouses.code"]),
        sa.ForeignKeyConstraint(["inventory_code"], ["inventory_records.code"]),
        sa.ForeignKeyConstraint(["responsible_code"], ["accounts.code"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_inventory_checks_id", "inventory_checks", ["id"], unique=False)
    op.create_index("ix_inventory_checks_code", "inventory_checks", ["code"], unique=True)
    op.create_index("ix_inventory_checks_year", "inventory_checks", ["year"], unique=False)
    op.create_index("ix_inventory_checks_inventory_code", "inventory_checks", ["inventory_code"], unique=False)
    _column_indexes("inventory_checks", "product_code", "warehouse_code", "responsible_code")
    op.create_index(
        "ix_inventory_checks_warehouse_date", "inventory_checks", ["warehouse_code", "check_date"], unique=False
    )

    op.create_table(
        "sequence_counters",
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("value", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("name"),
    )


def downgrade() -> None:
    op.drop_table("sequence_counters")
    op.drop_table("inventory_checks")
    op.drop_table("stock_out_allocations")
    op.drop_table("stock_outs")
    op.drop_table("stock_ins")
    op.drop_table("inventory_records")
    op.drop_table("warehouses")
    for name in ("accounts", "bills", "contracts", "customers", "suppliers"):
        op.drop_table(name)
    op.drop_table("products")
