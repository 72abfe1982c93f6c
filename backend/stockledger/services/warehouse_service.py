import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from stockledger.core.exceptions import EntityNotFoundException
from stockledger.database import unit_of_work
from stockledger.models.warehouse import Warehouse
from stockledger.repositories.inventory_repository import InventoryRepository
from stockledger.repositories.reference_repository import WarehouseRepository
from stockledger.schemas.warehouse import RevaluationResponse
from stockledger.services.ledger import money
from stockledger.utils.events import get_event_bus, EntityUpdatedEvent

logger = logging.getLogger(__name__)


class WarehouseService:

    def __init__(self, db: Session):
        self._db = db
        self._repo = WarehouseRepository(db)
        self._inventory = InventoryRepository(db)
        self._bus = get_event_bus()

    def list_warehouses(self, status: Optional[str] = None) -> List[Warehouse]:
        return self._repo.list_by_status(status)

    def get_warehouse(self, code: str) -> Warehouse:
        warehouse = self._repo.get_by_code(code)
        if not warehouse:
            raise EntityNotFoundException("Warehouse", code)
        return warehouse

    def revalue(self, code: str) -> RevaluationResponse:
        """Rebuild the cached stock value from inventory records at current prices."""
        with unit_of_work(self._db):
            warehouse = self._repo.get_by_code(code, for_update=True)
            if not warehouse:
                raise EntityNotFoundException("Warehouse", code)
            previous = money(warehouse.total_stock_value)
            recomputed = self._inventory.stock_value_for_warehouse(code)
            warehouse.total_stock_value = recomputed

        logger.info("warehouse_revalued code=%s previous=%s recomputed=%s", code, previous, recomputed)
        self._bus.publish(EntityUpdatedEvent(
            entity_type="warehouse", entity_id=code,
            old_values={"total_stock_value": str(previous)},
            new_values={"total_stock_value": str(recomputed)},
        ))
        return RevaluationResponse(
            warehouse_code=code,
            previous_stock_value=previous,
            recomputed_stock_value=recomputed,
            difference=recomputed - previous,
        )
