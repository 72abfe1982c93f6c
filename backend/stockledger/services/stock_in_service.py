"""
Stock-In Service: inbound movements and their ledger postings.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from stockledger.core.exceptions import DuplicateCodeException, EntityNotFoundException
from stockledger.database import unit_of_work
from stockledger.models.inventory import InventoryRecord
from stockledger.models.stock_movement import StockIn
from stockledger.repositories.sequence_repository import SequenceRepository
from stockledger.repositories.stock_movement_repository import StockInRepository
from stockledger.schemas.common import Page, build_page
from stockledger.schemas.stock_movement import StockInCreate, StockInUpdate
from stockledger.services.ledger import InventoryLedger
from stockledger.services.references import ReferenceValidator
from stockledger.utils.events import get_event_bus, EntityCreatedEvent, EntityUpdatedEvent, EntityDeletedEvent

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {"product_code", "received_date", "quantity"}
LOOKUP_COLUMNS = {
    "product": "product_code",
    "warehouse": "warehouse_code",
    "supplier": "supplier_code",
    "bill": "bill_code",
    "contract": "contract_code",
}


class StockInService:

    def __init__(self, db: Session):
        self._db = db
        self._repo = StockInRepository(db)
        self._sequences = SequenceRepository(db)
        self._ledger = InventoryLedger(db)
        self._references = ReferenceValidator(db)
        self._bus = get_event_bus()

    def list_stock_ins(self, page: int = 1, page_size: int = 20, **filters) -> Page:
        items, total = self._repo.list_paginated(page=page, page_size=page_size, **filters)
        return build_page(items, total, page, page_size)

    def list_by(self, lookup: str, code: str) -> List[StockIn]:
        return self._repo.list_by(LOOKUP_COLUMNS[lookup], code)

    def get_stock_in(self, code: str) -> StockIn:
        row = self._repo.get_by_code(code)
        if not row:
            raise EntityNotFoundException("StockIn", code)
        return row

    def create_stock_in(self, data: StockInCreate) -> StockIn:
        values = data.model_dump()
        with unit_of_work(self._db):
            if self._repo.exists(data.code):
                raise DuplicateCodeException("StockIn", data.code)
            self._references.ensure(values)

            values["seq"] = self._sequences.next_value("stock_in")
            if data.warehouse_code:
                record = self._ledger.find_or_create(
                    data.product_code, data.warehouse_code, data.received_date.year
                )
                self._ledger.post_in(record, data.quantity)
                values["inventory_code"] = record.code
            row = self._repo.create(values)

        logger.info(
            "stock_in_created code=%s quantity=%s",
            row.code,
            row.quantity,
            extra={"inventory_code": row.inventory_code, "warehouse_code": row.warehouse_code},
        )
        self._bus.publish(EntityCreatedEvent(
            entity_type="stock_in", entity_id=row.code,
            new_values={"quantity": row.quantity, "inventory_code": row.inventory_code},
        ))
        return row

    def update_stock_in(self, code: str, data: StockInUpdate) -> StockIn:
        updates = data.model_dump(exclude_unset=True)
        for key in REQUIRED_FIELDS:
            if key in updates and updates[key] is None:
                updates.pop(key)

        with unit_of_work(self._db):
            row = self._repo.get_by_code(code, for_update=True)
            if not row:
                raise EntityNotFoundException("StockIn", code)
            self._references.ensure({k: v for k, v in updates.items() if getattr(row, k) != v})

            old = {
                "product_code": row.product_code,
                "warehouse_code": row.warehouse_code,
                "year": row.received_date.year,
                "quantity": row.quantity,
                "inventory_code": row.inventory_code,
            }
            self._repo.update(row, updates)
            new_key = (row.product_code, row.warehouse_code, row.received_date.year)
            key_changed = new_key != (old["product_code"], old["warehouse_code"], old["year"])

            if key_changed or row.quantity != old["quantity"]:
                self._repost(row, old, key_changed)

        logger.info("stock_in_updated code=%s", code, extra={"changes": sorted(updates)})
        self._bus.publish(EntityUpdatedEvent(
            entity_type="stock_in", entity_id=code,
            old_values={"quantity": old["quantity"], "inventory_code": old["inventory_code"]},
            new_values={"quantity": row.quantity, "inventory_code": row.inventory_code},
        ))
        return row

    def delete_stock_in(self, code: str) -> None:
        with unit_of_work(self._db):
            row = self._repo.get_by_code(code, for_update=True)
            if not row:
                raise EntityNotFoundException("StockIn", code)
            record = self._ledger.lock_record(row.inventory_code) if row.inventory_code else None
            if record is not None:
                self._ledger.reverse_in(record, row.quantity)
            elif row.warehouse_code:
                logger.warning("stock_in_unlinked code=%s; nothing to reverse", code)
            self._repo.delete(row)

        logger.info("stock_in_deleted code=%s", code)
        self._bus.publish(EntityDeletedEvent(entity_type="stock_in", entity_id=code))

    def _repost(self, row: StockIn, old: dict, key_changed: bool) -> None:
        """Take the old quantity off its record and post the current one."""
        previous = self._ledger.lock_record(old["inventory_code"]) if old["inventory_code"] else None
        if previous is not None:
            self._ledger.reverse_in(previous, old["quantity"])
        elif old["warehouse_code"]:
            logger.warning("stock_in_unlinked code=%s; nothing to reverse", row.code)

        if not row.warehouse_code:
            row.inventory_code = None
            return

        target: Optional[InventoryRecord] = previous if (previous is not None and not key_changed) else None
        if target is None:
            target = self._ledger.find_or_create(row.product_code, row.warehouse_code, row.received_date.year)
        self._ledger.post_in(target, row.quantity)
        row.inventory_code = target.code
        self._db.flush()
