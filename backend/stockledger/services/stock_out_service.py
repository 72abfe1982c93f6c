"""
Stock-Out Service: outbound movements.

A stock-out draws its quantity from every inventory record of the
(product, warehouse) pair, newest year first, and keeps the breakdown in
``stock_out_allocations`` so an update or delete can give back exactly
what was taken.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from stockledger.core.exceptions import DuplicateCodeException, EntityNotFoundException
from stockledger.database import unit_of_work
from stockledger.models.stock_movement import StockOut
from stockledger.repositories.sequence_repository import SequenceRepository
from stockledger.repositories.stock_movement_repository import StockOutRepository
from stockledger.schemas.common import Page, build_page
from stockledger.schemas.stock_movement import StockOutCreate, StockOutUpdate
from stockledger.services.ledger import AllocationResult, InventoryLedger
from stockledger.services.references import ReferenceValidator
from stockledger.utils.events import (
    get_event_bus,
    EntityCreatedEvent,
    EntityUpdatedEvent,
    EntityDeletedEvent,
    StockShortfallEvent,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {"product_code", "issued_date", "quantity"}
LEDGER_FIELDS = ("product_code", "warehouse_code", "quantity")
LOOKUP_COLUMNS = {
    "product": "product_code",
    "warehouse": "warehouse_code",
    "customer": "customer_code",
    "responsible": "responsible_code",
}


class StockOutService:

    def __init__(self, db: Session):
        self._db = db
        self._repo = StockOutRepository(db)
        self._sequences = SequenceRepository(db)
        self._ledger = InventoryLedger(db)
        self._references = ReferenceValidator(db)
        self._bus = get_event_bus()

    def list_stock_outs(self, page: int = 1, page_size: int = 20, **filters) -> Page:
        items, total = self._repo.list_paginated(page=page, page_size=page_size, **filters)
        return build_page(items, total, page, page_size)

    def list_by(self, lookup: str, code: str) -> List[StockOut]:
        return self._repo.list_by(LOOKUP_COLUMNS[lookup], code)

    def get_stock_out(self, code: str) -> StockOut:
        row = self._repo.get_by_code(code)
        if not row:
            raise EntityNotFoundException("StockOut", code)
        return row

    def create_stock_out(self, data: StockOutCreate) -> StockOut:
        values = data.model_dump()
        with unit_of_work(self._db):
            if self._repo.exists(data.code):
                raise DuplicateCodeException("StockOut", data.code)
            self._references.ensure(values)

            values["seq"] = self._sequences.next_value("stock_out")
            row = self._repo.create(values)
            result = self._allocate(row)

        logger.info(
            "stock_out_created code=%s quantity=%s allocated=%s",
            row.code,
            row.quantity,
            row.allocated_quantity,
            extra={"warehouse_code": row.warehouse_code, "product_code": row.product_code},
        )
        self._publish_shortfall(row, result)
        self._bus.publish(EntityCreatedEvent(
            entity_type="stock_out", entity_id=row.code,
            new_values={"quantity": row.quantity, "allocated": row.allocated_quantity},
        ))
        return row

    def update_stock_out(self, code: str, data: StockOutUpdate) -> StockOut:
        updates = data.model_dump(exclude_unset=True)
        for key in REQUIRED_FIELDS:
            if key in updates and updates[key] is None:
                updates.pop(key)

        result: Optional[AllocationResult] = None
        with unit_of_work(self._db):
            row = self._repo.get_by_code(code, for_update=True)
            if not row:
                raise EntityNotFoundException("StockOut", code)
            self._references.ensure({k: v for k, v in updates.items() if getattr(row, k) != v})

            old_values = {"quantity": row.quantity, "allocated": row.allocated_quantity}
            reallocate = any(k in updates and updates[k] != getattr(row, k) for k in LEDGER_FIELDS)
            if reallocate:
                self._ledger.restore_out(row)
            self._repo.update(row, updates)
            if reallocate:
                result = self._allocate(row)

        logger.info("stock_out_updated code=%s reallocated=%s", code, reallocate)
        self._publish_shortfall(row, result)
        self._bus.publish(EntityUpdatedEvent(
            entity_type="stock_out", entity_id=code,
            old_values=old_values,
            new_values={"quantity": row.quantity, "allocated": row.allocated_quantity},
        ))
        return row

    def delete_stock_out(self, code: str) -> None:
        with unit_of_work(self._db):
            row = self._repo.get_by_code(code, for_update=True)
            if not row:
                raise EntityNotFoundException("StockOut", code)
            restored = self._ledger.restore_out(row)
            self._repo.delete(row)

        logger.info("stock_out_deleted code=%s restored=%s", code, restored)
        self._bus.publish(EntityDeletedEvent(entity_type="stock_out", entity_id=code))

    def _allocate(self, row: StockOut) -> Optional[AllocationResult]:
        # Without both sides of the pair the movement is recorded but never posted.
        if not (row.product_code and row.warehouse_code):
            return None
        result = self._ledger.allocate_out(row.product_code, row.warehouse_code, row.quantity)
        self._ledger.record_allocations(row, result)
        self._db.flush()
        return result

    def _publish_shortfall(self, row: StockOut, result: Optional[AllocationResult]) -> None:
        if result is None or not result.shortfall:
            return
        self._bus.publish(StockShortfallEvent(
            entity_type="stock_out", entity_id=row.code,
            product_code=row.product_code, warehouse_code=row.warehouse_code,
            requested=result.requested, available=result.available,
        ))
