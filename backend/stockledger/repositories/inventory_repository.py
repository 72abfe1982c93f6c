from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session

from stockledger.models.inventory import InventoryRecord
from stockledger.models.reference import Product
from stockledger.repositories.base import BaseRepository

CENTS = Decimal("0.01")


class InventoryRepository(BaseRepository[InventoryRecord]):
    def __init__(self, db: Session):
        super().__init__(InventoryRecord, db)

    def find_for_key(
        self,
        product_code: str,
        warehouse_code: str,
        year: int,
        for_update: bool = False,
    ) -> Optional[InventoryRecord]:
        q = (
            self.db.query(InventoryRecord)
            .filter(
                InventoryRecord.product_code == product_code,
                InventoryRecord.warehouse_code == warehouse_code,
                InventoryRecord.year == year,
            )
            .order_by(InventoryRecord.code)
        )
        if for_update:
            q = q.with_for_update()
        return q.first()

    def list_for_pair(
        self,
        product_code: str,
        warehouse_code: str,
        for_update: bool = False,
    ) -> List[InventoryRecord]:
        """All years for a (product, warehouse) pair, newest year first."""
        q = (
            self.db.query(InventoryRecord)
            .filter(
                InventoryRecord.product_code == product_code,
                InventoryRecord.warehouse_code == warehouse_code,
            )
            .order_by(InventoryRecord.year.desc(), InventoryRecord.code)
        )
        if for_update:
            q = q.with_for_update()
        return q.all()

    def list_by_product(self, product_code: str, year: int) -> List[InventoryRecord]:
        return (
            self.db.query(InventoryRecord)
            .filter(InventoryRecord.product_code == product_code, InventoryRecord.year == year)
            .order_by(InventoryRecord.warehouse_code, InventoryRecord.code)
            .all()
        )

    def list_by_warehouse(self, warehouse_code: str, year: int) -> List[InventoryRecord]:
        return (
            self.db.query(InventoryRecord)
            .filter(InventoryRecord.warehouse_code == warehouse_code, InventoryRecord.year == year)
            .order_by(InventoryRecord.product_code, InventoryRecord.code)
            .all()
        )

    def list_low_stock(self, year: Optional[int] = None) -> List[InventoryRecord]:
        q = self.db.query(InventoryRecord).filter(
            InventoryRecord.current_balance <= InventoryRecord.min_threshold
        )
        if year is not None:
            q = q.filter(InventoryRecord.year == year)
        return q.order_by(InventoryRecord.current_balance, InventoryRecord.code).all()

    def available_code(self, base_code: str) -> str:
        """`base_code`, or the first free `base_code_N` when it is taken."""
        if not self.exists(base_code):
            return base_code
        suffix = 1
        while self.exists(f"{base_code}_{suffix}"):
            suffix += 1
        return f"{base_code}_{suffix}"

    def stock_value_for_warehouse(self, warehouse_code: str) -> Decimal:
        value = (
            self.db.query(func.coalesce(func.sum(Product.price * InventoryRecord.current_balance), 0))
            .select_from(InventoryRecord)
            .join(Product, Product.code == InventoryRecord.product_code)
            .filter(InventoryRecord.warehouse_code == warehouse_code)
            .scalar()
        )
        return Decimal(str(value or 0)).quantize(CENTS, rounding=ROUND_HALF_UP)

    def _apply_filters(
        self,
        q: Query,
        product_code: Optional[str] = None,
        warehouse_code: Optional[str] = None,
        year: Optional[int] = None,
        low_stock: Optional[bool] = None,
        search: Optional[str] = None,
        **_,
    ) -> Query:
        if product_code is not None:
            q = q.filter(InventoryRecord.product_code == product_code)
        if warehouse_code is not None:
            q = q.filter(InventoryRecord.warehouse_code == warehouse_code)
        if year is not None:
            q = q.filter(InventoryRecord.year == year)
        if low_stock:
            q = q.filter(InventoryRecord.current_balance <= InventoryRecord.min_threshold)
        if search:
            pattern = f"%{search}%"
            q = q.filter(
                or_(
                    InventoryRecord.code.ilike(pattern),
                    InventoryRecord.product_code.ilike(pattern),
                    InventoryRecord.warehouse_code.ilike(pattern),
                )
            )
        return q

    def _apply_ordering(self, q: Query, **_) -> Query:
        return q.order_by(InventoryRecord.year.desc(), InventoryRecord.code)
