from sqlalchemy import Column, Integer, String, Numeric, DateTime, Date, Text, func

from stockledger.database import Base


class Warehouse(Base):
    __tablename__ = "warehouses"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    location = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default="active")
    # Cached rollups; inventory records stay authoritative.
    total_value_in = Column(Numeric(18, 2), nullable=False, default=0)
    total_value_out = Column(Numeric(18, 2), nullable=False, default=0)
    total_stock_value = Column(Numeric(18, 2), nullable=False, default=0)
    last_checked_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)
