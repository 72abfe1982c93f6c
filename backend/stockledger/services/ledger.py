"""
Inventory ledger mechanics shared by the movement processors.

Every method here runs inside the caller's unit of work: rows are locked
with ``SELECT ... FOR UPDATE`` and changes are flushed, never committed.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from stockledger.config import settings
from stockledger.core.exceptions import ReferenceNotFoundException, ValidationException
from stockledger.models.inventory import InventoryRecord
from stockledger.models.stock_movement import StockOut, StockOutAllocation
from stockledger.models.warehouse import Warehouse
from stockledger.repositories.inventory_repository import InventoryRepository
from stockledger.repositories.reference_repository import ProductRepository, WarehouseRepository
from stockledger.repositories.sequence_repository import SequenceRepository

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def money(value) -> Decimal:
    return Decimal(str(value if value is not None else 0))


@dataclass
class PlannedTake:
    record: InventoryRecord
    quantity: int


@dataclass
class AllocationResult:
    requested: int
    available: int
    takes: List[PlannedTake] = field(default_factory=list)

    @property
    def allocated(self) -> int:
        return sum(t.quantity for t in self.takes)

    @property
    def unallocated(self) -> int:
        return self.requested - self.allocated

    @property
    def shortfall(self) -> bool:
        return self.available < self.requested


def allocate_newest_first(records: Iterable[InventoryRecord], quantity: int) -> Tuple[List[PlannedTake], int]:
    """Plan how `quantity` is drawn from `records`, most recent year first.

    Each record gives ``min(remaining, current_balance)``; records with
    nothing on hand are skipped. Returns the planned takes and whatever
    could not be covered.
    """
    remaining = quantity
    takes: List[PlannedTake] = []
    for record in sorted(records, key=lambda r: (-r.year, r.code)):
        if remaining <= 0:
            break
        on_hand = max(record.current_balance or 0, 0)
        take = min(remaining, on_hand)
        if take <= 0:
            continue
        takes.append(PlannedTake(record=record, quantity=take))
        remaining -= take
    return takes, remaining


class InventoryLedger:
    def __init__(self, db: Session):
        self._db = db
        self._inventory = InventoryRepository(db)
        self._products = ProductRepository(db)
        self._warehouses = WarehouseRepository(db)
        self._sequences = SequenceRepository(db)

    # ── lookups ──────────────────────────────────────────────────────────

    def price_of(self, product_code: str) -> Decimal:
        product = self._products.get_by_code(product_code)
        return money(product.price) if product else ZERO

    def lock_warehouse(self, warehouse_code: str) -> Warehouse:
        warehouse = self._warehouses.get_by_code(warehouse_code, for_update=True)
        if warehouse is None:
            raise ReferenceNotFoundException("Warehouse", warehouse_code, field="warehouse_code")
        return warehouse

    def lock_record(self, inventory_code: str) -> Optional[InventoryRecord]:
        return self._inventory.get_by_code(inventory_code, for_update=True)

    # ── warehouse rollups ────────────────────────────────────────────────

    def adjust_warehouse(
        self,
        warehouse_code: str,
        value_in: Decimal = ZERO,
        value_out: Decimal = ZERO,
        stock_value: Decimal = ZERO,
    ) -> Warehouse:
        warehouse = self.lock_warehouse(warehouse_code)
        warehouse.total_value_in = money(warehouse.total_value_in) + value_in
        warehouse.total_value_out = money(warehouse.total_value_out) + value_out
        warehouse.total_stock_value = money(warehouse.total_stock_value) + stock_value
        self._db.flush()
        return warehouse

    # ── stock in ─────────────────────────────────────────────────────────

    def find_or_create(self, product_code: str, warehouse_code: str, year: int) -> InventoryRecord:
        record = self._inventory.find_for_key(product_code, warehouse_code, year, for_update=True)
        if record is not None:
            return record

        code = self._inventory.available_code(f"INV-{product_code}-{warehouse_code}-{year}")
        record = self._inventory.create(
            {
                "code": code,
                "year": year,
                "product_code": product_code,
                "warehouse_code": warehouse_code,
                "balance_before": 0,
                "total_in": 0,
                "total_out": 0,
                "current_balance": 0,
                "min_threshold": 0,
                "seq": self._sequences.next_value("inventory"),
            }
        )
        logger.info(
            "inventory_record_opened code=%s",
            code,
            extra={"product_code": product_code, "warehouse_code": warehouse_code, "year": year},
        )
        return record

    def post_in(self, record: InventoryRecord, quantity: int) -> None:
        record.total_in = (record.total_in or 0) + quantity
        record.current_balance = (record.current_balance or 0) + quantity
        value = self.price_of(record.product_code) * quantity
        self.adjust_warehouse(record.warehouse_code, value_in=value, stock_value=value)

    def reverse_in(self, record: InventoryRecord, quantity: int) -> None:
        record.total_in = (record.total_in or 0) - quantity
        record.current_balance = (record.current_balance or 0) - quantity
        value = self.price_of(record.product_code) * quantity
        self.adjust_warehouse(record.warehouse_code, value_in=-value, stock_value=-value)

    # ── stock out ────────────────────────────────────────────────────────

    def allocate_out(self, product_code: str, warehouse_code: str, quantity: int) -> AllocationResult:
        records = self._inventory.list_for_pair(product_code, warehouse_code, for_update=True)
        if not records:
            raise ValidationException(
                f"No inventory for product '{product_code}' in warehouse '{warehouse_code}'",
                field="product_code",
            )

        available = sum(max(r.current_balance or 0, 0) for r in records)
        if available < quantity:
            if settings.reject_insufficient_stock:
                raise ValidationException(
                    f"Insufficient stock for product '{product_code}' in warehouse "
                    f"'{warehouse_code}': requested {quantity}, available {available}",
                    field="quantity",
                )
            logger.warning(
                "stock_out_shortfall product=%s warehouse=%s requested=%s available=%s",
                product_code,
                warehouse_code,
                quantity,
                available,
            )

        takes, _ = allocate_newest_first(records, quantity)
        for take in takes:
            take.record.current_balance -= take.quantity
            take.record.total_out = (take.record.total_out or 0) + take.quantity

        result = AllocationResult(requested=quantity, available=available, takes=takes)
        if result.allocated:
            value = self.price_of(product_code) * result.allocated
            self.adjust_warehouse(warehouse_code, value_out=value, stock_value=-value)
        self._db.flush()
        return result

    def restore_out(self, stock_out: StockOut) -> int:
        """Give back exactly what `stock_out` drew; returns the quantity restored."""
        restored = 0
        for allocation in list(stock_out.allocations):
            record = self.lock_record(allocation.inventory_code) if allocation.inventory_code else None
            if record is None:
                logger.warning(
                    "allocation_target_missing stock_out=%s inventory=%s quantity=%s",
                    stock_out.code,
                    allocation.inventory_code,
                    allocation.quantity,
                )
                continue
            record.current_balance = (record.current_balance or 0) + allocation.quantity
            record.total_out = (record.total_out or 0) - allocation.quantity
            value = self.price_of(record.product_code) * allocation.quantity
            self.adjust_warehouse(record.warehouse_code, value_out=-value, stock_value=value)
            restored += allocation.quantity
        stock_out.allocations.clear()
        self._db.flush()
        return restored

    @staticmethod
    def record_allocations(stock_out: StockOut, result: AllocationResult) -> None:
        for take in result.takes:
            stock_out.allocations.append(
                StockOutAllocation(
                    inventory_code=take.record.code,
                    year=take.record.year,
                    quantity=take.quantity,
                )
            )
