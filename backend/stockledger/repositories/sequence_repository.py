from sqlalchemy import update
from sqlalchemy.orm import Session

from stockledger.models.sequence import SequenceCounter


class SequenceRepository:
    """Atomic increment-and-fetch counters for display sequence numbers."""

    def __init__(self, db: Session):
        self.db = db

    def next_value(self, name: str) -> int:
        result = self.db.execute(
            update(SequenceCounter)
            .where(SequenceCounter.name == name)
            .values(value=SequenceCounter.value + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.add(SequenceCounter(name=name, value=1))
            self.db.flush()
            return 1
        return self.db.query(SequenceCounter.value).filter(SequenceCounter.name == name).scalar()
