"""
Attendance Store Protocol (Interface)
"""
from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Protocol

from schoolledger.attendance.domain.entities import AttendanceDay, AttendanceEntry, AttendanceRecord
from schoolledger.attendance.domain.value_objects import AttendanceStatus


class AttendanceStore(Protocol):
    """
    One document per DateKey holding ``student id -> record``.

    Set operations merge into the day (other students untouched); removing a
    student re-persists the remaining map.
    """

    async def get_by_date(self, day: date) -> Dict[str, AttendanceRecord]:
        """Records for the day; empty mapping when the document does not exist"""
        ...

    async def get_record(self, day: date, student_id: str) -> Optional[AttendanceRecord]:
        """A single student's record for the day, or None"""
        ...

    async def get_by_student(self, student_id: str) -> List[AttendanceEntry]:
        """Every record for the student across days, newest day first"""
        ...

    async def get_in_range(self, start: date, end: date) -> List[AttendanceDay]:
        """Day documents with start <= day <= end, oldest first"""
        ...

    async def set_record(
        self,
        day: date,
        student_id: str,
        status: AttendanceStatus,
        attributes: Optional[Mapping[str, bool]] = None,
    ) -> AttendanceRecord:
        """Merge-write one student's record; the timestamp is assigned here"""
        ...

    async def bulk_set(
        self,
        day: date,
        student_ids: Iterable[str],
        status: AttendanceStatus,
        attributes: Optional[Mapping[str, bool]] = None,
    ) -> Dict[str, AttendanceRecord]:
        """Merge-write the same record for several students in one write"""
        ...

    async def remove_record(self, day: date, student_id: str) -> Optional[AttendanceRecord]:
        """Drop one student's record; returns what was removed, or None"""
        ...
