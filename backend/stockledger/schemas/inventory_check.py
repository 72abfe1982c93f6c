from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class InventoryCheckCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    year: int = Field(..., ge=1900, le=9999)
    actual_quantity: int = Field(..., ge=0)
    check_date: date
    product_code: Optional[str] = None
    warehouse_code: Optional[str] = None
    inventory_code: Optional[str] = None
    responsible_code: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)


class InventoryCheckUpdate(BaseModel):
    year: Optional[int] = Field(None, ge=1900, le=9999)
    actual_quantity: Optional[int] = Field(None, ge=0)
    check_date: Optional[date] = None
    product_code: Optional[str] = None
    warehouse_code: Optional[str] = None
    inventory_code: Optional[str] = None
    responsible_code: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)


class InventoryCheckResponse(BaseModel):
    id: int
    code: str
    seq: int
    year: int
    product_code: Optional[str] = None
    warehouse_code: Optional[str] = None
    inventory_code: Optional[str] = None
    system_quantity: int
    actual_quantity: int
    variance: int
    check_date: date
    responsible_code: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
