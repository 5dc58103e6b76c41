"""
Attendance Service - marks attendance and keeps the balance hint in step
with the fee each mark implies.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional

from schoolledger.attendance.application.dto import (
    AttendanceChange,
    AttendanceRemoval,
    BulkAttendanceResult,
    HolidayMarking,
    StudentAttendance,
)
from schoolledger.attendance.domain.entities import AttendanceRecord, normalize_attributes
from schoolledger.attendance.domain.fee_calculator import FeeCalculator
from schoolledger.attendance.domain.holidays import HolidayCalendar
from schoolledger.attendance.domain.protocols import AttendanceStore
from schoolledger.attendance.domain.value_objects import AttendanceStatus
from schoolledger.shared.exceptions import DomainError, InvalidAttendanceError
from schoolledger.shared.logging import get_logger
from schoolledger.shared.utils.dates import DateLike, to_local_date
from schoolledger.students.application.lifecycle import StudentLifecycle
from schoolledger.students.domain.entities import Student
from schoolledger.students.domain.value_objects import EnrollmentStatus

logger = get_logger(__name__)


def _parse_status(value: Any) -> AttendanceStatus:
    try:
        return AttendanceStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in AttendanceStatus)
        raise InvalidAttendanceError(
            f"Invalid attendance status. Must be one of: {allowed}",
            details={"status": str(value)},
        ) from None


def _parse_day(value: DateLike) -> date:
    try:
        return to_local_date(value)
    except ValueError:
        raise InvalidAttendanceError(f"Invalid attendance date: {value!r}") from None


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceStore,
        lifecycle: StudentLifecycle,
        fee_calculator: FeeCalculator,
        holidays: Optional[HolidayCalendar] = None,
    ) -> None:
        self._attendance = attendance
        self._lifecycle = lifecycle
        self._fees = fee_calculator
        self._holidays = holidays or HolidayCalendar()

    # ---------- reads ----------
    async def get_attendance_by_date(self, day: DateLike) -> Dict[str, AttendanceRecord]:
        return await self._attendance.get_by_date(_parse_day(day))

    async def get_eligible_students(self) -> List[Student]:
        """Enrolled and Pending Payment students, by first name."""
        enrolled = await self._lifecycle.get_students_by_status(EnrollmentStatus.ENROLLED)
        pending = await self._lifecycle.get_students_by_status(EnrollmentStatus.PENDING_PAYMENT)
        return sorted(enrolled + pending, key=lambda s: (s.first_name or "").lower())

    async def get_attendance_summary(self, day: DateLike) -> List[StudentAttendance]:
        students = await self.get_eligible_students()
        records = await self.get_attendance_by_date(day)
        return [StudentAttendance(student=s, attendance=records.get(s.id)) for s in students]

    # ---------- writes ----------
    async def mark_attendance(
        self,
        day: DateLike,
        student_id: str,
        status: AttendanceStatus | str,
        attributes: Optional[Mapping[str, bool]] = None,
    ) -> AttendanceChange:
        """Merge-write one record, then move the balance by the fee difference."""
        new_status = _parse_status(status)
        on = _parse_day(day)
        attrs = normalize_attributes(attributes)
        await self._lifecycle.get_student(student_id)

        previous = await self._attendance.get_record(on, student_id)
        await self._attendance.set_record(on, student_id, new_status, attrs)
        change = await self._apply_fee_change(student_id, previous, new_status, attrs)
        logger.info(
            "attendance_marked",
            date=on.isoformat(),
            student_id=student_id,
            status=new_status.value,
            fee_difference=change.fee_difference,
        )
        return change

    async def bulk_mark_attendance(
        self,
        day: DateLike,
        student_ids: Iterable[str],
        status: AttendanceStatus | str,
        attributes: Optional[Mapping[str, bool]] = None,
    ) -> BulkAttendanceResult:
        """
        One merge write for the whole group; balance adjustments run per
        student and failures are reported per student instead of aborting.
        """
        ids = list(dict.fromkeys(student_ids))
        if not ids:
            raise InvalidAttendanceError("No students selected")
        new_status = _parse_status(status)
        on = _parse_day(day)
        attrs = normalize_attributes(attributes)

        previous = await self._attendance.get_by_date(on)
        await self._attendance.bulk_set(on, ids, new_status, attrs)

        result = BulkAttendanceResult(date=on)
        for student_id in ids:
            try:
                change = await self._apply_fee_change(student_id, previous.get(student_id), new_status, attrs)
            except DomainError as exc:
                logger.warning("attendance_fee_adjustment_failed", student_id=student_id, error=exc.message)
                result.errors[student_id] = exc.message
                continue
            result.changes.append(change)
        logger.info("attendance_bulk_marked", date=on.isoformat(), count=len(ids), errors=len(result.errors))
        return result

    async def mark_holiday(self, day: DateLike) -> HolidayMarking:
        """Mark every eligible student as on holiday for the day."""
        on = _parse_day(day)
        students = await self.get_eligible_students()
        if students:
            result = await self.bulk_mark_attendance(on, [s.id for s in students], AttendanceStatus.HOLIDAY)
        else:
            result = BulkAttendanceResult(date=on)
        return HolidayMarking(date=on, holiday_name=self._holidays.holiday_name(on), result=result)

    async def remove_attendance(self, day: DateLike, student_id: str) -> AttendanceRemoval:
        on = _parse_day(day)
        previous = await self._attendance.get_record(on, student_id)
        if previous is None:
            return AttendanceRemoval(removed=False, reason="No attendance record found")

        removed = await self._attendance.remove_record(on, student_id)
        fee = self._fees.fee_for(previous)
        if fee > 0:
            await self._lifecycle.adjust_balance_for_fee(student_id, -fee)
        logger.info("attendance_removed", date=on.isoformat(), student_id=student_id, fee_adjustment=-fee)
        return AttendanceRemoval(
            removed=True,
            previous_status=previous.status,
            previous_attributes=dict(previous.attributes),
            fee_adjustment=-fee,
            removed_record=removed,
        )

    async def _apply_fee_change(
        self,
        student_id: str,
        previous: Optional[AttendanceRecord],
        status: AttendanceStatus,
        attributes: Mapping[str, bool],
    ) -> AttendanceChange:
        difference = self._fees.fee_difference(previous, status, attributes)
        updated = await self._lifecycle.adjust_balance_for_fee(student_id, difference)
        return AttendanceChange(
            student_id=student_id,
            previous_status=previous.status if previous else None,
            new_status=status,
            fee_difference=difference,
            balance_adjusted=updated is not None and difference != 0,
        )
