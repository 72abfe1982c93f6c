from sqlalchemy import Column, Integer, String, DateTime, Date, Text, ForeignKey, Index, func

from stockledger.database import Base


class InventoryCheck(Base):
    __tablename__ = "inventory_checks"
    __table_args__ = (
        Index("ix_inventory_checks_warehouse_date", "warehouse_code", "check_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, nullable=False, index=True)
    seq = Column(Integer, nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)
    product_code = Column(String(50), ForeignKey("products.code"), nullable=True, index=True)
    warehouse_code = Column(String(50), ForeignKey("warehouses.code"), nullable=True, index=True)
    inventory_code = Column(String(100), ForeignKey("inventory_records.code"), nullable=True, index=True)
    # Snapshot of the record's current_balance when the count was taken.
    system_quantity = Column(Integer, nullable=False, default=0)
    actual_quantity = Column(Integer, nullable=False)
    variance = Column(Integer, nullable=False)
    check_date = Column(Date, nullable=False)
    responsible_code = Column(String(50), ForeignKey("accounts.code"), nullable=True, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)
