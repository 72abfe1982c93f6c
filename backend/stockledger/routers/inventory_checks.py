"""
Inventory Check Router: Thin Controller (SRP / DIP)
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from stockledger.config import settings
from stockledger.database import get_db
from stockledger.schemas.common import ApiResponse, Page, build_page
from stockledger.schemas.inventory_check import (
    InventoryCheckCreate,
    InventoryCheckUpdate,
    InventoryCheckResponse,
)
from stockledger.services.inventory_check_service import InventoryCheckService

router = APIRouter(prefix="/inventory-checks", tags=["Inventory Checks"])


def get_inventory_check_service(db: Session = Depends(get_db)) -> InventoryCheckService:
    return InventoryCheckService(db)


@router.get("", response_model=ApiResponse[Page[InventoryCheckResponse]])
def list_inventory_checks(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=200),
    product_code: Optional[str] = None,
    warehouse_code: Optional[str] = None,
    responsible_code: Optional[str] = None,
    inventory_code: Optional[str] = None,
    year: Optional[int] = None,
    service: InventoryCheckService = Depends(get_inventory_check_service),
):
    result = service.list_checks(
        page=page, page_size=page_size,
        product_code=product_code, warehouse_code=warehouse_code,
        responsible_code=responsible_code, inventory_code=inventory_code, year=year,
    )
    items = [InventoryCheckResponse.model_validate(r) for r in result.items]
    return ApiResponse(data=build_page(items, result.total, page, page_size))


@router.post("", response_model=ApiResponse[InventoryCheckResponse], status_code=status.HTTP_201_CREATED)
def create_inventory_check(
    data: InventoryCheckCreate,
    service: InventoryCheckService = Depends(get_inventory_check_service),
):
    row = service.create_check(data)
    return ApiResponse(message="Inventory check created", data=InventoryCheckResponse.model_validate(row))


@router.get("/by-{lookup}/{code}", response_model=ApiResponse[List[InventoryCheckResponse]])
def list_inventory_checks_by(
    lookup: str,
    code: str,
    service: InventoryCheckService = Depends(get_inventory_check_service),
):
    if lookup not in ("product", "warehouse", "responsible"):
        raise ValueError(f"Unknown inventory check lookup '{lookup}'")
    rows = service.list_by(lookup, code)
    return ApiResponse(data=[InventoryCheckResponse.model_validate(r) for r in rows])


@router.get("/{code}", response_model=ApiResponse[InventoryCheckResponse])
def get_inventory_check(
    code: str,
    service: InventoryCheckService = Depends(get_inventory_check_service),
):
    return ApiResponse(data=InventoryCheckResponse.model_validate(service.get_check(code)))


@router.put("/{code}", response_model=ApiResponse[InventoryCheckResponse])
def update_inventory_check(
    code: str,
    data: InventoryCheckUpdate,
    service: InventoryCheckService = Depends(get_inventory_check_service),
):
    row = service.update_check(code, data)
    return ApiResponse(message="Inventory check updated", data=InventoryCheckResponse.model_validate(row))


@router.delete("/{code}", response_model=ApiResponse[None])
def delete_inventory_check(
    code: str,
    service: InventoryCheckService = Depends(get_inventory_check_service),
):
    service.delete_check(code)
    return ApiResponse(message="Inventory check deleted")
