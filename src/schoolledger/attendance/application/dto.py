from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from schoolledger.attendance.domain.entities import AttendanceRecord
from schoolledger.attendance.domain.value_objects import AttendanceStatus
from schoolledger.students.domain.entities import Student


@dataclass(frozen=True, slots=True)
class AttendanceChange:
    student_id: str
    previous_status: Optional[AttendanceStatus]
    new_status: AttendanceStatus
    fee_difference: int
    balance_adjusted: bool


@dataclass(frozen=True, slots=True)
class BulkAttendanceResult:
    date: date
    changes: List[AttendanceChange] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class AttendanceRemoval:
    removed: bool
    reason: Optional[str] = None
    previous_status: Optional[AttendanceStatus] = None
    previous_attributes: Dict[str, bool] = field(default_factory=dict)
    fee_adjustment: int = 0
    removed_record: Optional[AttendanceRecord] = None


@dataclass(frozen=True, slots=True)
class StudentAttendance:
    student: Student
    attendance: Optional[AttendanceRecord]


@dataclass(frozen=True, slots=True)
class HolidayMarking:
    date: date
    holiday_name: Optional[str]
    result: BulkAttendanceResult
