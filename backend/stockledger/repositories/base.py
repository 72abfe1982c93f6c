"""
Generic repository (Repository Pattern).

Repositories flush but never commit: the calling service decides the
transaction boundary through ``stockledger.database.unit_of_work``.
"""
from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from stockledger.database import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    def __init__(self, model: Type[ModelT], db: Session):
        self.model = model
        self.db = db

    def get_by_code(self, code: str, for_update: bool = False) -> Optional[ModelT]:
        q = self.db.query(self.model).filter(self.model.code == code)
        if for_update:
            q = q.with_for_update()
        return q.first()

    def exists(self, code: str) -> bool:
        return self.db.query(self.model.id).filter(self.model.code == code).first() is not None

    def list_paginated(self, page: int = 1, page_size: int = 20, **filters) -> Tuple[List[ModelT], int]:
        q = self._apply_filters(self.db.query(self.model), **filters)
        total = q.order_by(None).with_entities(func.count(self.model.id)).scalar() or 0
        items = (
            self._apply_ordering(q, **filters)
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return items, total

    def create(self, data: Dict[str, Any]) -> ModelT:
        obj = self.model(**data)
        self.db.add(obj)
        self.db.flush()
        return obj

    def update(self, obj: ModelT, data: Dict[str, Any]) -> ModelT:
        for key, value in data.items():
            setattr(obj, key, value)
        self.db.flush()
        return obj

    def delete(self, obj: ModelT) -> None:
        self.db.delete(obj)
        self.db.flush()

    def _apply_filters(self, q: Query, **filters) -> Query:
        for key, value in filters.items():
            if value is not None and hasattr(self.model, key):
                q = q.filter(getattr(self.model, key) == value)
        return q

    def _apply_ordering(self, q: Query, **filters) -> Query:
        return q.order_by(self.model.id)
