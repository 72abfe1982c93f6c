# Routers package: Thin Controllers (SRP / DIP)
from stockledger.routers import (
    inventory,
    stock_in,
    stock_out,
    inventory_checks,
    warehouses,
)
