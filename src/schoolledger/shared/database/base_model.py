"""
SQLAlchemy Declarative Base
All ORM models inherit from this
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Datetimes are stored naive (local wall clock); conversion happens at the
    store boundary so the domain never sees driver-specific timestamp types.
    """

    type_annotation_map = {
        datetime: DateTime(timezone=False),
        dict: JSON,
    }

    def __repr__(self) -> str:
        pk = getattr(self, "id", None) or getattr(self, "date_key", None)
        return f"<{self.__class__.__name__}({pk})>"
