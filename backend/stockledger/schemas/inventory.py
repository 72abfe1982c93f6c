from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class InventoryCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=100)
    year: int = Field(..., ge=1900, le=9999)
    product_code: str = Field(..., min_length=1, max_length=50)
    warehouse_code: str = Field(..., min_length=1, max_length=50)
    balance_before: int = Field(0, ge=0)
    total_in: int = Field(0, ge=0)
    total_out: int = Field(0, ge=0)
    current_balance: int = 0
    min_threshold: int = Field(0, ge=0)


class InventoryUpdate(BaseModel):
    year: Optional[int] = Field(None, ge=1900, le=9999)
    product_code: Optional[str] = Field(None, min_length=1, max_length=50)
    warehouse_code: Optional[str] = Field(None, min_length=1, max_length=50)
    balance_before: Optional[int] = Field(None, ge=0)
    total_in: Optional[int] = Field(None, ge=0)
    total_out: Optional[int] = Field(None, ge=0)
    current_balance: Optional[int] = None
    min_threshold: Optional[int] = Field(None, ge=0)


class InventoryResponse(BaseModel):
    id: int
    code: str
    year: int
    product_code: str
    warehouse_code: str
    balance_before: int
    total_in: int
    total_out: int
    current_balance: int
    min_threshold: int
    seq: Optional[int] = None
    is_low_stock: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ReconciliationReport(BaseModel):
    inventory_code: str
    balance_before: int
    stored_total_in: int
    posted_total_in: int
    stored_total_out: int
    allocated_total_out: int
    stored_balance: int
    expected_balance: int
    drift: int
    balanced: bool
