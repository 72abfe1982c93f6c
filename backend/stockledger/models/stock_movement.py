from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Date,
    ForeignKey,
    CheckConstraint,
    Index,
    func,
)
from sqlalchemy.orm import relationship

from stockledger.database import Base


class StockIn(Base):
    __tablename__ = "stock_ins"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_ins_quantity_positive"),
        Index("ix_stock_ins_product_warehouse", "product_code", "warehouse_code"),
    )

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, nullable=False, index=True)
    seq = Column(Integer, nullable=False, index=True)
    product_code = Column(String(50), ForeignKey("products.code"), nullable=False, index=True)
    received_date = Column(Date, nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    warehouse_code = Column(String(50), ForeignKey("warehouses.code"), nullable=True, index=True)
    supplier_code = Column(String(50), ForeignKey("suppliers.code"), nullable=True, index=True)
    bill_code = Column(String(50), ForeignKey("bills.code"), nullable=True, index=True)
    contract_code = Column(String(50), ForeignKey("contracts.code"), nullable=True, index=True)
    # Record the quantity was posted to; reversals target exactly this row.
    inventory_code = Column(
        String(100), ForeignKey("inventory_records.code", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)


class StockOut(Base):
    __tablename__ = "stock_outs"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_outs_quantity_positive"),
        Index("ix_stock_outs_product_warehouse", "product_code", "warehouse_code"),
    )

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, nullable=False, index=True)
    seq = Column(Integer, nullable=False, index=True)
    product_code = Column(String(50), ForeignKey("products.code"), nullable=False, index=True)
    issued_date = Column(Date, nullable=False, index=True)
    # Requested quantity, kept even when the ledger could only cover part of it.
    quantity = Column(Integer, nullable=False)
    warehouse_code = Column(String(50), ForeignKey("warehouses.code"), nullable=True, index=True)
    customer_code = Column(String(50), ForeignKey("customers.code"), nullable=True, index=True)
    responsible_code = Column(String(50), ForeignKey("accounts.code"), nullable=True, index=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    allocations = relationship(
        "StockOutAllocation",
        back_populates="stock_out",
        cascade="all, delete-orphan",
        order_by="StockOutAllocation.id",
    )

    @property
    def allocated_quantity(self) -> int:
        return sum(a.quantity for a in self.allocations)

    @property
    def unallocated_quantity(self) -> int:
        if not self.warehouse_code:
            return 0
        return max(self.quantity - self.allocated_quantity, 0)


class StockOutAllocation(Base):
    """How much of a stock-out was drawn from one inventory record."""

    __tablename__ = "stock_out_allocations"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_out_allocations_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    stock_out_id = Column(Integer, ForeignKey("stock_outs.id", ondelete="CASCADE"), nullable=False, index=True)
    inventory_code = Column(
        String(100), ForeignKey("inventory_records.code", ondelete="SET NULL"), nullable=True, index=True
    )
    year = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)

    stock_out = relationship("StockOut", back_populates="allocations")
