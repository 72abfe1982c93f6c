from sqlalchemy import Column, Integer, String

from stockledger.database import Base


class SequenceCounter(Base):
    """Per-entity display sequence, advanced with a single UPDATE."""

    __tablename__ = "sequence_counters"

    name = Column(String(50), primary_key=True)
    value = Column(Integer, nullable=False, default=0)
