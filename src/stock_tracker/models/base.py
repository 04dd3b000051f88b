"""
Declarative base and shared columns for Stock Tracker tables.

Every table gets a surrogate integer id and creation/modification timestamps.
"""

from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import declarative_base

from stock_tracker.utils.datetime_utils import utc_now

Base = declarative_base()


class BaseModel(Base):
    """Abstract parent of all models: id, created_at, updated_at."""

    __abstract__ = True

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    def __repr__(self) -> str:
        parts = []
        if self.id is not None:
            parts.append(f"id={self.id}")
        key = getattr(self, "key", None)
        if key is not None:
            parts.append(f"key='{key}'")
        return f"{type(self).__name__}({', '.join(parts)})"
