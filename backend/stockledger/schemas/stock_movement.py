from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class StockInCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    product_code: str = Field(..., min_length=1, max_length=50)
    received_date: date
    quantity: int = Field(..., gt=0)
    warehouse_code: Optional[str] = None
    supplier_code: Optional[str] = None
    bill_code: Optional[str] = None
    contract_code: Optional[str] = None


class StockInUpdate(BaseModel):
    product_code: Optional[str] = Field(None, min_length=1, max_length=50)
    received_date: Optional[date] = None
    quantity: Optional[int] = Field(None, gt=0)
    warehouse_code: Optional[str] = None
    supplier_code: Optional[str] = None
    bill_code: Optional[str] = None
    contract_code: Optional[str] = None


class StockInResponse(BaseModel):
    id: int
    code: str
    seq: int
    product_code: str
    received_date: date
    quantity: int
    warehouse_code: Optional[str] = None
    supplier_code: Optional[str] = None
    bill_code: Optional[str] = None
    contract_code: Optional[str] = None
    inventory_code: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class StockOutCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    product_code: str = Field(..., min_length=1, max_length=50)
    issued_date: date
    quantity: int = Field(..., gt=0)
    warehouse_code: Optional[str] = None
    customer_code: Optional[str] = None
    responsible_code: Optional[str] = None


class StockOutUpdate(BaseModel):
    product_code: Optional[str] = Field(None, min_length=1, max_length=50)
    issued_date: Optional[date] = None
    quantity: Optional[int] = Field(None, gt=0)
    warehouse_code: Optional[str] = None
    customer_code: Optional[str] = None
    responsible_code: Optional[str] = None


class AllocationResponse(BaseModel):
    inventory_code: Optional[str] = None
    year: int
    quantity: int

    class Config:
        from_attributes = True


class StockOutResponse(BaseModel):
    id: int
    code: str
    seq: int
    product_code: str
    issued_date: date
    quantity: int
    warehouse_code: Optional[str] = None
    customer_code: Optional[str] = None
    responsible_code: Optional[str] = None
    allocations: List[AllocationResponse] = []
    allocated_quantity: int
    unallocated_quantity: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
