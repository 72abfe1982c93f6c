# Repository Layer: Data Access (Repository Pattern, GoF)
from stockledger.repositories.base import BaseRepository
from stockledger.repositories.reference_repository import (
    ProductRepository,
    WarehouseRepository,
    ReferenceRepository,
)
from stockledger.repositories.inventory_repository import InventoryRepository
from stockledger.repositories.stock_movement_repository import StockInRepository, StockOutRepository
from stockledger.repositories.inventory_check_repository import InventoryCheckRepository
from stockledger.repositories.sequence_repository import SequenceRepository
