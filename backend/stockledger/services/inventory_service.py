"""
Inventory Service: inventory record CRUD, lookups and reconciliation.
"""
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from stockledger.core.exceptions import ConflictException, EntityNotFoundException
from stockledger.database import unit_of_work
from stockledger.models.inventory import InventoryRecord
from stockledger.repositories.inventory_check_repository import InventoryCheckRepository
from stockledger.repositories.inventory_repository import InventoryRepository
from stockledger.repositories.sequence_repository import SequenceRepository
from stockledger.repositories.stock_movement_repository import StockInRepository, StockOutRepository
from stockledger.schemas.common import Page, build_page
from stockledger.schemas.inventory import InventoryCreate, InventoryUpdate, ReconciliationReport
from stockledger.services.ledger import InventoryLedger
from stockledger.services.references import ReferenceValidator
from stockledger.utils.events import get_event_bus, EntityCreatedEvent, EntityUpdatedEvent, EntityDeletedEvent

logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = (
    "year", "product_code", "warehouse_code", "balance_before",
    "total_in", "total_out", "current_balance", "min_threshold",
)


def current_year() -> int:
    return date.today().year


class InventoryService:

    def __init__(self, db: Session):
        self._db = db
        self._repo = InventoryRepository(db)
        self._checks = InventoryCheckRepository(db)
        self._stock_ins = StockInRepository(db)
        self._stock_outs = StockOutRepository(db)
        self._sequences = SequenceRepository(db)
        self._ledger = InventoryLedger(db)
        self._references = ReferenceValidator(db)
        self._bus = get_event_bus()

    # ── reads ────────────────────────────────────────────────────────────

    def list_inventory(self, page: int = 1, page_size: int = 20, **filters) -> Page:
        items, total = self._repo.list_paginated(page=page, page_size=page_size, **filters)
        return build_page(items, total, page, page_size)

    def get_inventory(self, code: str) -> InventoryRecord:
        record = self._repo.get_by_code(code)
        if not record:
            raise EntityNotFoundException("InventoryRecord", code)
        return record

    def get_by_product(self, product_code: str, year: Optional[int] = None) -> List[InventoryRecord]:
        year = year or current_year()
        records = self._repo.list_by_product(product_code, year)
        if not records:
            raise EntityNotFoundException("InventoryRecord", f"product={product_code} year={year}")
        return records

    def get_by_warehouse(self, warehouse_code: str, year: Optional[int] = None) -> List[InventoryRecord]:
        year = year or current_year()
        records = self._repo.list_by_warehouse(warehouse_code, year)
        if not records:
            raise EntityNotFoundException("InventoryRecord", f"warehouse={warehouse_code} year={year}")
        return records

    def list_low_stock(self, year: Optional[int] = None) -> List[InventoryRecord]:
        return self._repo.list_low_stock(year or current_year())

    # ── writes ───────────────────────────────────────────────────────────

    def create_inventory(self, data: InventoryCreate) -> InventoryRecord:
        """Create a record; a taken code is retried as ``code_1``, ``code_2``, ..."""
        values = data.model_dump()
        with unit_of_work(self._db):
            self._references.ensure(
                {"product_code": data.product_code, "warehouse_code": data.warehouse_code}
            )
            values["code"] = self._repo.available_code(data.code)
            values["seq"] = self._sequences.next_value("inventory")
            record = self._repo.create(values)

            value = self._ledger.price_of(record.product_code) * (record.current_balance or 0)
            self._ledger.adjust_warehouse(record.warehouse_code, stock_value=value)

        if record.code != data.code:
            logger.info("inventory_code_substituted requested=%s assigned=%s", data.code, record.code)
        self._bus.publish(EntityCreatedEvent(
            entity_type="inventory", entity_id=record.code, new_values=self._snapshot(record),
        ))
        return record

    def update_inventory(self, code: str, data: InventoryUpdate) -> InventoryRecord:
        updates = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        with unit_of_work(self._db):
            record = self._repo.get_by_code(code, for_update=True)
            if not record:
                raise EntityNotFoundException("InventoryRecord", code)
            self._references.ensure(
                {k: v for k, v in updates.items() if k in ("product_code", "warehouse_code")}
            )

            old_values = self._snapshot(record)
            old_value = self._ledger.price_of(record.product_code) * (record.current_balance or 0)
            self._repo.update(record, updates)
            new_value = self._ledger.price_of(record.product_code) * (record.current_balance or 0)

            if old_values["warehouse_code"] != record.warehouse_code:
                self._ledger.adjust_warehouse(old_values["warehouse_code"], stock_value=-old_value)
                self._ledger.adjust_warehouse(record.warehouse_code, stock_value=new_value)
            elif new_value != old_value:
                self._ledger.adjust_warehouse(record.warehouse_code, stock_value=new_value - old_value)

        self._bus.publish(EntityUpdatedEvent(
            entity_type="inventory", entity_id=code,
            old_values=old_values, new_values=self._snapshot(record),
        ))
        return record

    def delete_inventory(self, code: str) -> None:
        with unit_of_work(self._db):
            record = self._repo.get_by_code(code, for_update=True)
            if not record:
                raise EntityNotFoundException("InventoryRecord", code)
            if self._checks.references_inventory(code):
                raise ConflictException(
                    f"InventoryRecord '{code}' is referenced by inventory checks and cannot be deleted"
                )

            value = self._ledger.price_of(record.product_code) * (record.current_balance or 0)
            self._ledger.adjust_warehouse(record.warehouse_code, stock_value=-value)
            detached = self._stock_ins.detach_inventory(code) + self._stock_outs.detach_inventory(code)
            self._repo.delete(record)

        logger.info("inventory_deleted code=%s detached_movements=%s", code, detached)
        self._bus.publish(EntityDeletedEvent(entity_type="inventory", entity_id=code))

    # ── reconciliation ───────────────────────────────────────────────────

    def reconcile(self, code: str) -> ReconciliationReport:
        """Compare the stored running totals with the movements that fed them."""
        record = self.get_inventory(code)
        posted_in = int(self._stock_ins.total_posted_to(code))
        allocated_out = int(self._stock_outs.total_allocated_from(code))
        expected = (record.balance_before or 0) + posted_in - allocated_out
        stored = record.current_balance or 0

        report = ReconciliationReport(
            inventory_code=record.code,
            balance_before=record.balance_before or 0,
            stored_total_in=record.total_in or 0,
            posted_total_in=posted_in,
            stored_total_out=record.total_out or 0,
            allocated_total_out=allocated_out,
            stored_balance=stored,
            expected_balance=expected,
            drift=stored - expected,
            balanced=(
                stored == expected
                and record.total_in == posted_in
                and record.total_out == allocated_out
            ),
        )
        if not report.balanced:
            logger.warning(
                "inventory_drift code=%s stored=%s expected=%s", code, stored, expected,
                extra={"drift": report.drift},
            )
        return report

    @staticmethod
    def _snapshot(record: InventoryRecord) -> dict:
        return {key: getattr(record, key) for key in SNAPSHOT_FIELDS}
