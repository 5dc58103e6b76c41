"""
Attendance records and per-day documents
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Mapping, Optional

from schoolledger.attendance.domain.value_objects import AttendanceStatus, AttributeKey


def normalize_attributes(attributes: Optional[Mapping[str, object]]) -> Dict[str, bool]:
    """Plain ``{str: bool}`` copy; enum keys are stored by value."""
    if not attributes:
        return {}
    return {(k.value if isinstance(k, AttributeKey) else str(k)): bool(v) for k, v in attributes.items()}


@dataclass(frozen=True, slots=True)
class AttendanceRecord:
    status: AttendanceStatus
    attributes: Dict[str, bool] = field(default_factory=dict)
    timestamp: Optional[datetime] = None    # assigned by the store on write

    def flag(self, key: AttributeKey) -> bool:
        return bool(self.attributes.get(key.value, False))


@dataclass(frozen=True, slots=True)
class AttendanceDay:
    """One document per DateKey: student id -> record."""
    date: date
    records: Dict[str, AttendanceRecord] = field(default_factory=dict)

    @property
    def is_holiday(self) -> bool:
        return any(r.status == AttendanceStatus.HOLIDAY for r in self.records.values())


@dataclass(frozen=True, slots=True)
class AttendanceEntry:
    """A single student's record on a given day."""
    date: date
    record: AttendanceRecord
