"""
Warehouse Router: read-only aggregate views plus revaluation.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from stockledger.database import get_db
from stockledger.schemas.common import ApiResponse
from stockledger.schemas.warehouse import WarehouseResponse, RevaluationResponse
from stockledger.services.warehouse_service import WarehouseService

router = APIRouter(prefix="/warehouses", tags=["Warehouses"])


def get_warehouse_service(db: Session = Depends(get_db)) -> WarehouseService:
    return WarehouseService(db)


@router.get("", response_model=ApiResponse[List[WarehouseResponse]])
def list_warehouses(
    status: Optional[str] = None,
    service: WarehouseService = Depends(get_warehouse_service),
):
    return ApiResponse(data=[WarehouseResponse.model_validate(w) for w in service.list_warehouses(status)])


@router.get("/{code}", response_model=ApiResponse[WarehouseResponse])
def get_warehouse(
    code: str,
    service: WarehouseService = Depends(get_warehouse_service),
):
    return ApiResponse(data=WarehouseResponse.model_validate(service.get_warehouse(code)))


@router.post("/{code}/revalue", response_model=ApiResponse[RevaluationResponse])
def revalue_warehouse(
    code: str,
    service: WarehouseService = Depends(get_warehouse_service),
):
    return ApiResponse(message="Warehouse revalued", data=service.revalue(code))
