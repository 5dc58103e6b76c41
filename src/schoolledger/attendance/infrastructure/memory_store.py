from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from schoolledger.attendance.domain.entities import (
    AttendanceDay,
    AttendanceEntry,
    AttendanceRecord,
    normalize_attributes,
)
from schoolledger.attendance.domain.value_objects import AttendanceStatus
from schoolledger.shared.utils.dates import local_now, parse_key, to_key


class InMemoryAttendanceStore:
    """Day documents keyed by DateKey, kept in a dict."""

    def __init__(self, clock: Callable[[], datetime] = local_now) -> None:
        self._days: Dict[str, Dict[str, AttendanceRecord]] = {}
        self._clock = clock

    async def get_by_date(self, day: date) -> Dict[str, AttendanceRecord]:
        return dict(self._days.get(to_key(day), {}))

    async def get_record(self, day: date, student_id: str) -> Optional[AttendanceRecord]:
        return self._days.get(to_key(day), {}).get(student_id)

    async def get_by_student(self, student_id: str) -> List[AttendanceEntry]:
        entries = [
            AttendanceEntry(date=parse_key(key), record=records[student_id])
            for key, records in self._days.items()
            if student_id in records
        ]
        entries.sort(key=lambda e: e.date, reverse=True)
        return entries

    async def get_in_range(self, start: date, end: date) -> List[AttendanceDay]:
        lo, hi = to_key(start), to_key(end)
        return [
            AttendanceDay(date=parse_key(key), records=dict(records))
            for key, records in sorted(self._days.items())
            if lo <= key <= hi
        ]

    async def set_record(
        self,
        day: date,
        student_id: str,
        status: AttendanceStatus,
        attributes: Optional[Mapping[str, bool]] = None,
    ) -> AttendanceRecord:
        records = await self.bulk_set(day, [student_id], status, attributes)
        return records[student_id]

    async def bulk_set(
        self,
        day: date,
        student_ids: Iterable[str],
        status: AttendanceStatus,
        attributes: Optional[Mapping[str, bool]] = None,
    ) -> Dict[str, AttendanceRecord]:
        record = AttendanceRecord(
            status=AttendanceStatus(status),
            attributes=normalize_attributes(attributes),
            timestamp=self._clock(),
        )
        written = {sid: record for sid in student_ids}
        self._days.setdefault(to_key(day), {}).update(written)
        return written

    async def remove_record(self, day: date, student_id: str) -> Optional[AttendanceRecord]:
        key = to_key(day)
        remaining = dict(self._days.get(key, {}))
        removed = remaining.pop(student_id, None)
        if removed is not None:
            self._days[key] = remaining
        return removed
