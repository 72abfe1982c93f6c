from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    CheckConstraint,
    Index,
    func,
)
from sqlalchemy.orm import relationship

from stockledger.database import Base


class InventoryRecord(Base):
    """Running balance of one product in one warehouse for one year."""

    __tablename__ = "inventory_records"
    __table_args__ = (
        CheckConstraint("balance_before >= 0", name="ck_inventory_records_balance_before_non_negative"),
        CheckConstraint("min_threshold >= 0", name="ck_inventory_records_min_threshold_non_negative"),
        Index("ix_inventory_records_product_warehouse_year", "product_code", "warehouse_code", "year"),
    )

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(100), unique=True, nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)
    product_code = Column(String(50), ForeignKey("products.code"), nullable=False, index=True)
    warehouse_code = Column(String(50), ForeignKey("warehouses.code"), nullable=False, index=True)
    balance_before = Column(Integer, nullable=False, default=0)
    total_in = Column(Integer, nullable=False, default=0)
    total_out = Column(Integer, nullable=False, default=0)
    current_balance = Column(Integer, nullable=False, default=0)
    min_threshold = Column(Integer, nullable=False, default=0)
    seq = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    product = relationship("Product")
    warehouse = relationship("Warehouse")

    @property
    def is_low_stock(self) -> bool:
        return (self.current_balance or 0) <= (self.min_threshold or 0)
