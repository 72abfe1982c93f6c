"""
Inventory Router: Thin Controller (SRP / DIP)
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from stockledger.config import settings
from stockledger.database import get_db
from stockledger.schemas.common import ApiResponse, Page, build_page
from stockledger.schemas.inventory import (
    InventoryCreate,
    InventoryUpdate,
    InventoryResponse,
    ReconciliationReport,
)
from stockledger.services.inventory_service import InventoryService

router = APIRouter(prefix="/inventory", tags=["Inventory Records"])


def get_inventory_service(db: Session = Depends(get_db)) -> InventoryService:
    return InventoryService(db)


def _many(records) -> List[InventoryResponse]:
    return [InventoryResponse.model_validate(r) for r in records]


@router.get("", response_model=ApiResponse[Page[InventoryResponse]])
def list_inventory(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=200),
    product_code: Optional[str] = None,
    warehouse_code: Optional[str] = None,
    year: Optional[int] = None,
    low_stock: Optional[bool] = None,
    search: Optional[str] = None,
    service: InventoryService = Depends(get_inventory_service),
):
    result = service.list_inventory(
        page=page, page_size=page_size,
        product_code=product_code, warehouse_code=warehouse_code,
        year=year, low_stock=low_stock, search=search,
    )
    return ApiResponse(data=build_page(_many(result.items), result.total, page, page_size))


@router.post("", response_model=ApiResponse[InventoryResponse], status_code=status.HTTP_201_CREATED)
def create_inventory(
    data: InventoryCreate,
    service: InventoryService = Depends(get_inventory_service),
):
    record = service.create_inventory(data)
    message = "Inventory record created"
    if record.code != data.code:
        message = f"Inventory record created as '{record.code}' because '{data.code}' already exists"
    return ApiResponse(message=message, data=InventoryResponse.model_validate(record))


@router.get("/low-stock", response_model=ApiResponse[List[InventoryResponse]])
def list_low_stock(
    year: Optional[int] = None,
    service: InventoryService = Depends(get_inventory_service),
):
    return ApiResponse(data=_many(service.list_low_stock(year)))


@router.get("/by-product/{product_code}", response_model=ApiResponse[List[InventoryResponse]])
def get_inventory_by_product(
    product_code: str,
    year: Optional[int] = None,
    service: InventoryService = Depends(get_inventory_service),
):
    return ApiResponse(data=_many(service.get_by_product(product_code, year)))


@router.get("/by-warehouse/{warehouse_code}", response_model=ApiResponse[List[InventoryResponse]])
def get_inventory_by_warehouse(
    warehouse_code: str,
    year: Optional[int] = None,
    service: InventoryService = Depends(get_inventory_service),
):
    return ApiResponse(data=_many(service.get_by_warehouse(warehouse_code, year)))


@router.get("/{code}", response_model=ApiResponse[InventoryResponse])
def get_inventory(
    code: str,
    service: InventoryService = Depends(get_inventory_service),
):
    return ApiResponse(data=InventoryResponse.model_validate(service.get_inventory(code)))


@router.get("/{code}/reconciliation", response_model=ApiResponse[ReconciliationReport])
def reconcile_inventory(
    code: str,
    service: InventoryService = Depends(get_inventory_service),
):
    return ApiResponse(data=service.reconcile(code))


@router.put("/{code}", response_model=ApiResponse[InventoryResponse])
def update_inventory(
    code: str,
    data: InventoryUpdate,
    service: InventoryService = Depends(get_inventory_service),
):
    record = service.update_inventory(code, data)
    return ApiResponse(message="Inventory record updated", data=InventoryResponse.model_validate(record))


@router.delete("/{code}", response_model=ApiResponse[None])
def delete_inventory(
    code: str,
    service: InventoryService = Depends(get_inventory_service),
):
    service.delete_inventory(code)
    return ApiResponse(message="Inventory record deleted")
