from stockledger.models.reference import Product, Supplier, Customer, Contract, Bill, Account
from stockledger.models.warehouse import Warehouse
from stockledger.models.inventory import InventoryRecord
from stockledger.models.stock_movement import StockIn, StockOut, StockOutAllocation
from stockledger.models.inventory_check import InventoryCheck
from stockledger.models.sequence import SequenceCounter

__all__ = [
    "Product",
    "Supplier",
    "Customer",
    "Contract",
    "Bill",
    "Account",
    "Warehouse",
    "InventoryRecord",
    "StockIn",
    "StockOut",
    "StockOutAllocation",
    "InventoryCheck",
    "SequenceCounter",
]
