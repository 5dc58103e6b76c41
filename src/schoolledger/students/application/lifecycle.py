"""
Student Lifecycle Service - profile creation, enrollment transitions and
direct balance maintenance.
"""
from __future__ import annotations

from typing import Any, List, Optional
from uuid import uuid4

from schoolledger.finance.application.balance_engine import BalanceEngine
from schoolledger.shared.exceptions import (
    InvalidStatusError,
    NotFoundError,
    OutstandingBalanceError,
    ValidationError,
)
from schoolledger.shared.logging import get_logger
from schoolledger.shared.utils.dates import local_now
from schoolledger.shared.validation import ValidationService
from schoolledger.students.domain.entities import Student
from schoolledger.students.domain.protocols import StudentStore
from schoolledger.students.domain.value_objects import EnrollmentStatus, Role

logger = get_logger(__name__)

_FROZEN_CLEARED = {"frozen_at": None, "frozen_fees_total": None, "frozen_balance": None}


def _parse_status(value: Any) -> EnrollmentStatus:
    try:
        return EnrollmentStatus.parse(value)
    except ValueError:
        allowed = ", ".join(s.value for s in EnrollmentStatus)
        raise InvalidStatusError(
            f"Invalid enrollment status. Must be one of: {allowed}",
            details={"status": str(value)},
        ) from None


def _require_positive(amount: Any) -> None:
    if not isinstance(amount, (int, float)) or isinstance(amount, bool) or amount <= 0:
        raise ValidationError("Amount must be a positive number", details={"amount": amount})


class StudentLifecycle:
    def __init__(
        self,
        students: StudentStore,
        balance_engine: BalanceEngine,
        validator: Optional[ValidationService] = None,
    ) -> None:
        self._students = students
        self._balances = balance_engine
        self._validator = validator or ValidationService()

    # ---------- reads ----------
    async def get_student(self, student_id: str) -> Student:
        student = await self._students.get(student_id)
        if student is None:
            raise NotFoundError(f"Student not found: {student_id}", code="student_not_found")
        return student

    async def get_all_students(self) -> List[Student]:
        return await self._students.list_all()

    async def get_students_by_status(self, status: EnrollmentStatus | str) -> List[Student]:
        return await self._students.list_by_status(_parse_status(status))

    # ---------- writes ----------
    async def add_student(
        self,
        first_name: str,
        last_name: str,
        email: str,
        *,
        student_id: Optional[str] = None,
    ) -> Student:
        """New profiles start as Pending Payment with a zero balance."""
        payload = {
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "role": Role.STUDENT.value,
            "enrollment_status": EnrollmentStatus.PENDING_PAYMENT.value,
            "balance": 0,
        }
        result = self._validator.validate_student(payload)
        if not result.valid:
            raise ValidationError("Invalid student data", details={"errors": result.errors})

        student = await self._students.add(
            Student(
                id=student_id or uuid4().hex,
                first_name=first_name.strip(),
                last_name=last_name.strip(),
                email=email.strip(),
            )
        )
        logger.info("student_created", student_id=student.id)
        return student

    async def initialize_student_profile(self, student_id: str) -> Student:
        """Reset an existing profile to the new-student defaults."""
        student = await self._students.update(
            student_id,
            {"enrollment_status": EnrollmentStatus.PENDING_PAYMENT, "balance": 0, **_FROZEN_CLEARED},
        )
        logger.info("student_profile_initialized", student_id=student_id)
        return student

    async def change_enrollment_status(self, student_id: str, new_status: EnrollmentStatus | str) -> Student:
        """
        Moving to Inactive freezes the student's obligations: the fees charged
        so far and the (non-negative) balance are captured with a timestamp,
        and later attendance no longer counts. Any other target status drops
        the freeze snapshot.
        """
        status = _parse_status(new_status)
        if status == EnrollmentStatus.INACTIVE:
            summary = await self._balances.calculate_student_balance(student_id)
            changes = {
                "enrollment_status": status,
                "frozen_fees_total": summary.total_fees_charged,
                "frozen_balance": max(0, summary.calculated_balance),
                "frozen_at": local_now().isoformat(),
            }
        else:
            changes = {"enrollment_status": status, **_FROZEN_CLEARED}

        updated = await self._students.update(student_id, changes)
        logger.info("enrollment_status_changed", student_id=student_id, status=status.value)
        return updated

    async def remove_student(self, student_id: str) -> Student:
        student = await self.get_student(student_id)
        if student.balance > 0:
            raise OutstandingBalanceError(
                "Cannot remove student with outstanding balance",
                details={"student_id": student_id, "balance": student.balance},
            )
        removed = await self._students.soft_remove(student_id)
        logger.info("student_removed", student_id=student_id)
        return removed

    async def clear_student_balance(self, student_id: str, reason: str = "") -> Student:
        return await self._balances.clear_student_balance(student_id, reason)

    async def add_balance(self, student_id: str, amount: float) -> Student:
        _require_positive(amount)
        student = await self.get_student(student_id)
        return await self._students.update(student_id, {"balance": student.balance + amount})

    async def reduce_balance(self, student_id: str, amount: float) -> Student:
        _require_positive(amount)
        student = await self.get_student(student_id)
        if student.balance - amount < 0:
            raise ValidationError(
                "Cannot reduce balance below zero",
                details={"balance": student.balance, "amount": amount},
            )
        return await self._students.update(student_id, {"balance": student.balance - amount})

    async def adjust_balance_for_fee(self, student_id: str, delta: float) -> Optional[Student]:
        """
        Apply an attendance fee change to the balance hint, clamped at zero.
        Frozen (Inactive) and Removed students are left untouched; returns None then.
        """
        student = await self.get_student(student_id)
        if student.enrollment_status in (EnrollmentStatus.INACTIVE, EnrollmentStatus.REMOVED):
            return None
        if delta == 0:
            return student
        return await self._students.update(student_id, {"balance": max(0, student.balance + delta)})
