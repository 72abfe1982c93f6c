"""
Inventory Check Service: physical counts and their variance.

A check snapshots the referenced record's ``current_balance`` and stores
``variance = actual - system``. It never touches the record's balances;
only the warehouse's last check date moves.
"""
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from stockledger.core.exceptions import (
    DuplicateCodeException,
    EntityNotFoundException,
    ReferenceNotFoundException,
)
from stockledger.database import unit_of_work
from stockledger.models.inventory_check import InventoryCheck
from stockledger.repositories.inventory_check_repository import InventoryCheckRepository
from stockledger.repositories.inventory_repository import InventoryRepository
from stockledger.repositories.sequence_repository import SequenceRepository
from stockledger.schemas.common import Page, build_page
from stockledger.schemas.inventory_check import InventoryCheckCreate, InventoryCheckUpdate
from stockledger.services.ledger import InventoryLedger
from stockledger.services.references import ReferenceValidator
from stockledger.utils.events import get_event_bus, EntityCreatedEvent, EntityUpdatedEvent, EntityDeletedEvent

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {"year", "actual_quantity", "check_date"}
LOOKUP_COLUMNS = {
    "product": "product_code",
    "warehouse": "warehouse_code",
    "responsible": "responsible_code",
}


class InventoryCheckService:

    def __init__(self, db: Session):
        self._db = db
        self._repo = InventoryCheckRepository(db)
        self._inventory = InventoryRepository(db)
        self._sequences = SequenceRepository(db)
        self._ledger = InventoryLedger(db)
        self._references = ReferenceValidator(db)
        self._bus = get_event_bus()

    def list_checks(self, page: int = 1, page_size: int = 20, **filters) -> Page:
        items, total = self._repo.list_paginated(page=page, page_size=page_size, **filters)
        return build_page(items, total, page, page_size)

    def list_by(self, lookup: str, code: str) -> List[InventoryCheck]:
        return self._repo.list_by(LOOKUP_COLUMNS[lookup], code)

    def get_check(self, code: str) -> InventoryCheck:
        row = self._repo.get_by_code(code)
        if not row:
            raise EntityNotFoundException("InventoryCheck", code)
        return row

    def create_check(self, data: InventoryCheckCreate) -> InventoryCheck:
        values = data.model_dump()
        with unit_of_work(self._db):
            if self._repo.exists(data.code):
                raise DuplicateCodeException("InventoryCheck", data.code)
            self._references.ensure(values)

            system_quantity = self._system_quantity(data.inventory_code)
            values["system_quantity"] = system_quantity
            values["variance"] = data.actual_quantity - system_quantity
            values["seq"] = self._sequences.next_value("inventory_check")
            row = self._repo.create(values)

            if row.warehouse_code:
                self._mark_checked(row.warehouse_code, row.check_date)

        logger.info(
            "inventory_check_created code=%s variance=%s",
            row.code,
            row.variance,
            extra={"inventory_code": row.inventory_code, "system_quantity": row.system_quantity},
        )
        self._bus.publish(EntityCreatedEvent(
            entity_type="inventory_check", entity_id=row.code,
            new_values={"system_quantity": row.system_quantity, "variance": row.variance},
        ))
        return row

    def update_check(self, code: str, data: InventoryCheckUpdate) -> InventoryCheck:
        updates = data.model_dump(exclude_unset=True)
        for key in REQUIRED_FIELDS:
            if key in updates and updates[key] is None:
                updates.pop(key)

        with unit_of_work(self._db):
            row = self._repo.get_by_code(code, for_update=True)
            if not row:
                raise EntityNotFoundException("InventoryCheck", code)
            changed = {k: v for k, v in updates.items() if getattr(row, k) != v}
            self._references.ensure(changed)
            if changed.get("inventory_code"):
                self._system_quantity(changed["inventory_code"])

            old_values = {"system_quantity": row.system_quantity, "variance": row.variance}
            self._repo.update(row, updates)

            if "inventory_code" in updates or "actual_quantity" in updates:
                row.system_quantity = self._system_quantity(row.inventory_code)
                row.variance = row.actual_quantity - row.system_quantity
            if "check_date" in updates and row.warehouse_code:
                self._mark_checked(row.warehouse_code, row.check_date)
            self._db.flush()

        self._bus.publish(EntityUpdatedEvent(
            entity_type="inventory_check", entity_id=code,
            old_values=old_values,
            new_values={"system_quantity": row.system_quantity, "variance": row.variance},
        ))
        return row

    def delete_check(self, code: str) -> None:
        with unit_of_work(self._db):
            row = self._repo.get_by_code(code)
            if not row:
                raise EntityNotFoundException("InventoryCheck", code)
            self._repo.delete(row)

        self._bus.publish(EntityDeletedEvent(entity_type="inventory_check", entity_id=code))

    def _system_quantity(self, inventory_code: Optional[str]) -> int:
        if not inventory_code:
            return 0
        record = self._inventory.get_by_code(inventory_code)
        if record is None:
            raise ReferenceNotFoundException("InventoryRecord", inventory_code, field="inventory_code")
        return record.current_balance or 0

    def _mark_checked(self, warehouse_code: str, check_date: date) -> None:
        warehouse = self._ledger.lock_warehouse(warehouse_code)
        warehouse.last_checked_date = check_date
