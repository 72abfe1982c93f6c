from typing import List, Optional

from sqlalchemy.orm import Query, Session

from stockledger.models.inventory_check import InventoryCheck
from stockledger.repositories.base import BaseRepository


class InventoryCheckRepository(BaseRepository[InventoryCheck]):
    def __init__(self, db: Session):
        super().__init__(InventoryCheck, db)

    def list_by(self, column: str, value: str) -> List[InventoryCheck]:
        return (
            self.db.query(InventoryCheck)
            .filter(getattr(InventoryCheck, column) == value)
            .order_by(InventoryCheck.check_date.desc(), InventoryCheck.seq.desc())
            .all()
        )

    def references_inventory(self, inventory_code: str) -> bool:
        return (
            self.db.query(InventoryCheck.id)
            .filter(InventoryCheck.inventory_code == inventory_code)
            .first()
            is not None
        )

    def _apply_filters(
        self,
        q: Query,
        product_code: Optional[str] = None,
        warehouse_code: Optional[str] = None,
        responsible_code: Optional[str] = None,
        inventory_code: Optional[str] = None,
        year: Optional[int] = None,
        **_,
    ) -> Query:
        if product_code is not None:
            q = q.filter(InventoryCheck.product_code == product_code)
        if warehouse_code is not None:
            q = q.filter(InventoryCheck.warehouse_code == warehouse_code)
        if responsible_code is not None:
            q = q.filter(InventoryCheck.responsible_code == responsible_code)
        if inventory_code is not None:
            q = q.filter(InventoryCheck.inventory_code == inventory_code)
        if year is not None:
            q = q.filter(InventoryCheck.year == year)
        return q

    def _apply_ordering(self, q: Query, **_) -> Query:
        return q.order_by(InventoryCheck.check_date.desc(), InventoryCheck.seq.desc())
