"""
Read side of payments: per student, everything, and date ranges, each
joined with the student's display name.
"""
from __future__ import annotations

from typing import Dict, List

from schoolledger.payments.application.dto import PaymentView, StudentPayments
from schoolledger.payments.domain.entities import Payment
from schoolledger.payments.domain.protocols import PaymentStore
from schoolledger.shared.exceptions import NotFoundError, ValidationError, wrap_store_errors
from schoolledger.shared.utils.dates import DateLike, inclusive_range
from schoolledger.students.domain.protocols import StudentStore

UNKNOWN_STUDENT = "Unknown Student"


class PaymentQueryService:
    def __init__(self, payments: PaymentStore, students: StudentStore) -> None:
        self._payments = payments
        self._students = students

    async def _names(self) -> Dict[str, str]:
        return {s.id: s.full_name for s in await self._students.list_all()}

    def _join(self, payments: List[Payment], names: Dict[str, str]) -> List[PaymentView]:
        return [PaymentView(payment=p, student_name=names.get(p.student_id, UNKNOWN_STUDENT)) for p in payments]

    @wrap_store_errors("Failed to fetch student payments")
    async def get_payments_by_student(self, student_id: str) -> StudentPayments:
        student = await self._students.get(student_id)
        if student is None:
            raise NotFoundError(f"Student not found: {student_id}", code="student_not_found")
        return StudentPayments(student=student, payments=await self._payments.list_by_student(student_id))

    @wrap_store_errors("Failed to fetch payments")
    async def get_all_payments(self) -> List[PaymentView]:
        return self._join(await self._payments.list_all(), await self._names())

    @wrap_store_errors("Failed to fetch payments by date range")
    async def get_payments_by_date_range(self, start: DateLike, end: DateLike) -> List[PaymentView]:
        try:
            lo, hi = inclusive_range(start, end)
        except ValueError:
            raise ValidationError("Invalid date range", details={"start": str(start), "end": str(end)}) from None
        return self._join(await self._payments.list_by_date_range(lo, hi), await self._names())
