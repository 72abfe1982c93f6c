from typing import Dict, Optional, Type

from sqlalchemy.orm import Session

from stockledger.models.reference import Product, Supplier, Customer, Contract, Bill, Account
from stockledger.models.warehouse import Warehouse
from stockledger.repositories.base import BaseRepository


class ProductRepository(BaseRepository[Product]):
    def __init__(self, db: Session):
        super().__init__(Product, db)


class WarehouseRepository(BaseRepository[Warehouse]):
    def __init__(self, db: Session):
        super().__init__(Warehouse, db)

    def list_by_status(self, status: Optional[str] = None):
        q = self.db.query(Warehouse)
        if status is not None:
            q = q.filter(Warehouse.status == status)
        return q.order_by(Warehouse.code).all()


REFERENCE_MODELS: Dict[str, Type] = {
    "product": Product,
    "warehouse": Warehouse,
    "supplier": Supplier,
    "customer": Customer,
    "contract": Contract,
    "bill": Bill,
    "account": Account,
}


class ReferenceRepository:
    """Existence checks against the collaborator tables, keyed by entity kind."""

    def __init__(self, db: Session):
        self.db = db

    def exists(self, kind: str, code: str) -> bool:
        model = REFERENCE_MODELS[kind]
        return self.db.query(model.id).filter(model.code == code).first() is not None
