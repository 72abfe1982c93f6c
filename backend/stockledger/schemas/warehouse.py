from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class WarehouseResponse(BaseModel):
    id: int
    code: str
    name: str
    location: Optional[str] = None
    status: str
    total_value_in: Decimal
    total_value_out: Decimal
    total_stock_value: Decimal
    last_checked_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RevaluationResponse(BaseModel):
    warehouse_code: str
    previous_stock_value: Decimal
    recomputed_stock_value: Decimal
    difference: Decimal
