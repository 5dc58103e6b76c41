"""
SQLAlchemy AttendanceStore

Each day is one row whose JSON column holds the student map, so merge and
replace writes are read-modify-write inside a single transaction.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import select

from schoolledger.attendance.domain.entities import (
    AttendanceDay,
    AttendanceEntry,
    AttendanceRecord,
    normalize_attributes,
)
from schoolledger.attendance.domain.value_objects import AttendanceStatus
from schoolledger.attendance.infrastructure.models import AttendanceDayModel
from schoolledger.shared.database import DatabaseSessionFactory
from schoolledger.shared.utils.dates import local_now, parse_key, to_key, to_local_datetime


def _record_from_doc(doc: Mapping[str, Any]) -> AttendanceRecord:
    ts = doc.get("timestamp")
    return AttendanceRecord(
        status=AttendanceStatus(doc["status"]),
        attributes=normalize_attributes(doc.get("attributes")),
        timestamp=to_local_datetime(ts) if ts else None,
    )


def _record_to_doc(record: AttendanceRecord) -> Dict[str, Any]:
    return {
        "status": record.status.value,
        "timestamp": record.timestamp.isoformat() if record.timestamp else None,
        "attributes": dict(record.attributes),
    }


def _records(model: Optional[AttendanceDayModel]) -> Dict[str, AttendanceRecord]:
    if model is None:
        return {}
    return {sid: _record_from_doc(doc) for sid, doc in (model.records or {}).items()}


class SqlAttendanceStore:
    def __init__(self, db: DatabaseSessionFactory, clock: Callable[[], datetime] = local_now) -> None:
        self._db = db
        self._clock = clock

    async def get_by_date(self, day: date) -> Dict[str, AttendanceRecord]:
        async with self._db.transaction("Fetch attendance") as session:
            return _records(await session.get(AttendanceDayModel, to_key(day)))

    async def get_record(self, day: date, student_id: str) -> Optional[AttendanceRecord]:
        return (await self.get_by_date(day)).get(student_id)

    async def get_by_student(self, student_id: str) -> List[AttendanceEntry]:
        stmt = select(AttendanceDayModel).order_by(AttendanceDayModel.date_key.desc())
        async with self._db.transaction("Fetch student attendance history") as session:
            rows = (await session.execute(stmt)).scalars().all()
            return [
                AttendanceEntry(date=parse_key(row.date_key), record=_record_from_doc(row.records[student_id]))
                for row in rows
                if student_id in (row.records or {})
            ]

    async def get_in_range(self, start: date, end: date) -> List[AttendanceDay]:
        stmt = (
            select(AttendanceDayModel)
            .where(AttendanceDayModel.date_key >= to_key(start), AttendanceDayModel.date_key <= to_key(end))
            .order_by(AttendanceDayModel.date_key)
        )
        async with self._db.transaction("Fetch attendance range") as session:
            rows = (await session.execute(stmt)).scalars().all()
            return [AttendanceDay(date=parse_key(row.date_key), records=_records(row)) for row in rows]

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
        key = to_key(day)
        async with self._db.transaction("Save attendance") as session:
            model = await session.get(AttendanceDayModel, key)
            if model is None:
                model = AttendanceDayModel(date_key=key, records={})
                session.add(model)
            merged = dict(model.records or {})
            merged.update({sid: _record_to_doc(r) for sid, r in written.items()})
            model.records = merged
        return written

    async def remove_record(self, day: date, student_id: str) -> Optional[AttendanceRecord]:
        async with self._db.transaction("Remove attendance") as session:
            model = await session.get(AttendanceDayModel, to_key(day))
            if model is None or student_id not in (model.records or {}):
                return None
            remaining = dict(model.records)
            removed = remaining.pop(student_id)
            model.records = remaining
            return _record_from_doc(removed)
