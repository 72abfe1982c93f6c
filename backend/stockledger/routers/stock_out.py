"""
Stock-Out Router: Thin Controller (SRP / DIP)
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from stockledger.config import settings
from stockledger.database import get_db
from stockledger.schemas.common import ApiResponse, Page, build_page
from stockledger.schemas.stock_movement import StockOutCreate, StockOutUpdate, StockOutResponse
from stockledger.services.stock_out_service import StockOutService

router = APIRouter(prefix="/stock-out", tags=["Stock Out"])


def get_stock_out_service(db: Session = Depends(get_db)) -> StockOutService:
    return StockOutService(db)


def _created_message(row) -> str:
    if row.unallocated_quantity:
        return (
            f"Stock-out created; {row.unallocated_quantity} of {row.quantity} "
            "could not be covered by available inventory"
        )
    return "Stock-out created"


@router.get("", response_model=ApiResponse[Page[StockOutResponse]])
def list_stock_outs(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=200),
    product_code: Optional[str] = None,
    warehouse_code: Optional[str] = None,
    customer_code: Optional[str] = None,
    responsible_code: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    sort_by: str = Query("seq"),
    sort_dir: str = Query("desc", pattern="^(asc|desc)$"),
    service: StockOutService = Depends(get_stock_out_service),
):
    result = service.list_stock_outs(
        page=page, page_size=page_size,
        product_code=product_code, warehouse_code=warehouse_code,
        customer_code=customer_code, responsible_code=responsible_code,
        start_date=start_date, end_date=end_date,
        sort_by=sort_by, sort_dir=sort_dir,
    )
    items = [StockOutResponse.model_validate(r) for r in result.items]
    return ApiResponse(data=build_page(items, result.total, page, page_size))


@router.post("", response_model=ApiResponse[StockOutResponse], status_code=status.HTTP_201_CREATED)
def create_stock_out(
    data: StockOutCreate,
    service: StockOutService = Depends(get_stock_out_service),
):
    row = service.create_stock_out(data)
    return ApiResponse(message=_created_message(row), data=StockOutResponse.model_validate(row))


@router.get("/by-{lookup}/{code}", response_model=ApiResponse[List[StockOutResponse]])
def list_stock_outs_by(
    lookup: str,
    code: str,
    service: StockOutService = Depends(get_stock_out_service),
):
    if lookup not in ("product", "warehouse", "customer", "responsible"):
        raise ValueError(f"Unknown stock-out lookup '{lookup}'")
    rows = service.list_by(lookup, code)
    return ApiResponse(data=[StockOutResponse.model_validate(r) for r in rows])


@router.get("/{code}", response_model=ApiResponse[StockOutResponse])
def get_stock_out(
    code: str,
    service: StockOutService = Depends(get_stock_out_service),
):
    return ApiResponse(data=StockOutResponse.model_validate(service.get_stock_out(code)))


@router.put("/{code}", response_model=ApiResponse[StockOutResponse])
def update_stock_out(
    code: str,
    data: StockOutUpdate,
    service: StockOutService = Depends(get_stock_out_service),
):
    row = service.update_stock_out(code, data)
    return ApiResponse(message="Stock-out updated", data=StockOutResponse.model_validate(row))


@router.delete("/{code}", response_model=ApiResponse[None])
def delete_stock_out(
    code: str,
    service: StockOutService = Depends(get_stock_out_service),
):
    service.delete_stock_out(code)
    return ApiResponse(message="Stock-out deleted")
