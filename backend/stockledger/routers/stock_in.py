"""
Stock-In Router: Thin Controller (SRP / DIP)
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from stockledger.config import settings
from stockledger.database import get_db
from stockledger.schemas.common import ApiResponse, Page, build_page
from stockledger.schemas.stock_movement import StockInCreate, StockInUpdate, StockInResponse
from stockledger.services.stock_in_service import StockInService

router = APIRouter(prefix="/stock-in", tags=["Stock In"])


def get_stock_in_service(db: Session = Depends(get_db)) -> StockInService:
    return StockInService(db)


@router.get("", response_model=ApiResponse[Page[StockInResponse]])
def list_stock_ins(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=200),
    product_code: Optional[str] = None,
    warehouse_code: Optional[str] = None,
    supplier_code: Optional[str] = None,
    bill_code: Optional[str] = None,
    contract_code: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    sort_by: str = Query("seq"),
    sort_dir: str = Query("desc", pattern="^(asc|desc)$"),
    service: StockInService = Depends(get_stock_in_service),
):
    result = service.list_stock_ins(
        page=page, page_size=page_size,
        product_code=product_code, warehouse_code=warehouse_code,
        supplier_code=supplier_code, bill_code=bill_code, contract_code=contract_code,
        start_date=start_date, end_date=end_date,
        sort_by=sort_by, sort_dir=sort_dir,
    )
    items = [StockInResponse.model_validate(r) for r in result.items]
    return ApiResponse(data=build_page(items, result.total, page, page_size))


@router.post("", response_model=ApiResponse[StockInResponse], status_code=status.HTTP_201_CREATED)
def create_stock_in(
    data: StockInCreate,
    service: StockInService = Depends(get_stock_in_service),
):
    row = service.create_stock_in(data)
    return ApiResponse(message="Stock-in created", data=StockInResponse.model_validate(row))


@router.get("/by-{lookup}/{code}", response_model=ApiResponse[List[StockInResponse]])
def list_stock_ins_by(
    lookup: str,
    code: str,
    service: StockInService = Depends(get_stock_in_service),
):
    if lookup not in ("product", "warehouse", "supplier", "bill", "contract"):
        raise ValueError(f"Unknown stock-in lookup '{lookup}'")
    rows = service.list_by(lookup, code)
    return ApiResponse(data=[StockInResponse.model_validate(r) for r in rows])


@router.get("/{code}", response_model=ApiResponse[StockInResponse])
def get_stock_in(
    code: str,
    service: StockInService = Depends(get_stock_in_service),
):
    return ApiResponse(data=StockInResponse.model_validate(service.get_stock_in(code)))


@router.put("/{code}", response_model=ApiResponse[StockInResponse])
def update_stock_in(
    code: str,
    data: StockInUpdate,
    service: StockInService = Depends(get_stock_in_service),
):
    row = service.update_stock_in(code, data)
    return ApiResponse(message="Stock-in updated", data=StockInResponse.model_validate(row))


@router.delete("/{code}", response_model=ApiResponse[None])
def delete_stock_in(
    code: str,
    service: StockInService = Depends(get_stock_in_service),
):
    service.delete_stock_in(code)
    return ApiResponse(message="Stock-in deleted")
