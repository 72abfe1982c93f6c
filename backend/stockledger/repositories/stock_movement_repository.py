from datetime import date
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from stockledger.models.stock_movement import StockIn, StockOut, StockOutAllocation
from stockledger.repositories.base import BaseRepository


def _ordered(q: Query, column, sort_dir: Optional[str], tiebreak) -> Query:
    if (sort_dir or "desc").lower() == "asc":
        return q.order_by(column.asc(), tiebreak.asc())
    return q.order_by(column.desc(), tiebreak.desc())


class StockInRepository(BaseRepository[StockIn]):
    SORTABLE = {"seq", "code", "received_date", "quantity"}

    def __init__(self, db: Session):
        super().__init__(StockIn, db)

    def list_by(self, column: str, value: str) -> List[StockIn]:
        return (
            self.db.query(StockIn)
            .filter(getattr(StockIn, column) == value)
            .order_by(StockIn.received_date.desc(), StockIn.seq.desc())
            .all()
        )

    def total_posted_to(self, inventory_code: str) -> int:
        return (
            self.db.query(func.coalesce(func.sum(StockIn.quantity), 0))
            .filter(StockIn.inventory_code == inventory_code)
            .scalar()
        ) or 0

    def detach_inventory(self, inventory_code: str) -> int:
        count = (
            self.db.query(StockIn)
            .filter(StockIn.inventory_code == inventory_code)
            .update({StockIn.inventory_code: None}, synchronize_session="fetch")
        )
        self.db.flush()
        return count

    def _apply_filters(
        self,
        q: Query,
        product_code: Optional[str] = None,
        warehouse_code: Optional[str] = None,
        supplier_code: Optional[str] = None,
        bill_code: Optional[str] = None,
        contract_code: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        **_,
    ) -> Query:
        if product_code is not None:
            q = q.filter(StockIn.product_code == product_code)
        if warehouse_code is not None:
            q = q.filter(StockIn.warehouse_code == warehouse_code)
        if supplier_code is not None:
            q = q.filter(StockIn.supplier_code == supplier_code)
        if bill_code is not None:
            q = q.filter(StockIn.bill_code == bill_code)
        if contract_code is not None:
            q = q.filter(StockIn.contract_code == contract_code)
        if start_date is not None:
            q = q.filter(StockIn.received_date >= start_date)
        if end_date is not None:
            q = q.filter(StockIn.received_date <= end_date)
        return q

    def _apply_ordering(self, q: Query, sort_by: Optional[str] = None, sort_dir: Optional[str] = None, **_) -> Query:
        column = getattr(StockIn, sort_by if sort_by in self.SORTABLE else "seq")
        return _ordered(q, column, sort_dir, StockIn.id)


class StockOutRepository(BaseRepository[StockOut]):
    SORTABLE = {"seq", "code", "issued_date", "quantity"}

    def __init__(self, db: Session):
        super().__init__(StockOut, db)

    def list_by(self, column: str, value: str) -> List[StockOut]:
        return (
            self.db.query(StockOut)
            .filter(getattr(StockOut, column) == value)
            .order_by(StockOut.issued_date.desc(), StockOut.seq.desc())
            .all()
        )

    def total_allocated_from(self, inventory_code: str) -> int:
        return (
            self.db.query(func.coalesce(func.sum(StockOutAllocation.quantity), 0))
            .filter(StockOutAllocation.inventory_code == inventory_code)
            .scalar()
        ) or 0

    def detach_inventory(self, inventory_code: str) -> int:
        count = (
            self.db.query(StockOutAllocation)
            .filter(StockOutAllocation.inventory_code == inventory_code)
            .update({StockOutAllocation.inventory_code: None}, synchronize_session="fetch")
        )
        self.db.flush()
        return count

    def _apply_filters(
        self,
        q: Query,
        product_code: Optional[str] = None,
        warehouse_code: Optional[str] = None,
        customer_code: Optional[str] = None,
        responsible_code: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        **_,
    ) -> Query:
        if product_code is not None:
            q = q.filter(StockOut.product_code == product_code)
        if warehouse_code is not None:
            q = q.filter(StockOut.warehouse_code == warehouse_code)
        if customer_code is not None:
            q = q.filter(StockOut.customer_code == customer_code)
        if responsible_code is not None:
            q = q.filter(StockOut.responsible_code == responsible_code)
        if start_date is not None:
            q = q.filter(StockOut.issued_date >= start_date)
        if end_date is not None:
            q = q.filter(StockOut.issued_date <= end_date)
        return q

    def _apply_ordering(self, q: Query, sort_by: Optional[str] = None, sort_dir: Optional[str] = None, **_) -> Query:
        column = getattr(StockOut, sort_by if sort_by in self.SORTABLE else "seq")
        return _ordered(q, column, sort_dir, StockOut.id)
