from __future__ import annotations

from typing import List, Optional

from schoolledger.attendance.domain.entities import AttendanceEntry
from schoolledger.attendance.domain.fee_calculator import FeeCalculator
from schoolledger.attendance.domain.protocols import AttendanceStore
from schoolledger.finance.application.dto import FeeTimeline
from schoolledger.finance.domain.reconciliation import reconcile
from schoolledger.payments.domain.entities import Payment
from schoolledger.payments.domain.protocols import PaymentStore
from schoolledger.shared.cache import TTLCache
from schoolledger.shared.exceptions import NotFoundError
from schoolledger.shared.utils.dates import to_local_date
from schoolledger.students.domain.entities import Student
from schoolledger.students.domain.protocols import StudentStore

CACHE_PREFIX = "fee-history:"


def _fingerprint(student: Student, attendance: List[AttendanceEntry], payments: List[Payment]) -> str:
    last_mark = max((e.record.timestamp for e in attendance if e.record.timestamp), default=None)
    last_payment = max((p.created_at for p in payments), default=None)
    return "|".join(
        str(part)
        for part in (
            len(attendance),
            last_mark.isoformat() if last_mark else "-",
            hash(tuple((e.date, e.record.status, tuple(sorted(e.record.attributes.items()))) for e in attendance)),
            len(payments),
            last_payment.isoformat() if last_payment else "-",
            hash(tuple((p.id, p.amount) for p in payments)),
            student.frozen_at or "-",
        )
    )


class FeeReconciliation:
    """
    Builds a student's fee timeline (FIFO payment matching plus synthetic
    payment rows) and memoizes it in the cache, keyed by the student id and
    a fingerprint of the source data so any new mark or payment misses.
    """

    def __init__(
        self,
        students: StudentStore,
        attendance: AttendanceStore,
        payments: PaymentStore,
        fee_calculator: FeeCalculator,
        cache: Optional[TTLCache] = None,
    ) -> None:
        self._students = students
        self._attendance = attendance
        self._payments = payments
        self._fees = fee_calculator
        self._cache = cache

    async def fee_timeline(self, student_id: str) -> FeeTimeline:
        student = await self._students.get(student_id)
        if student is None:
            raise NotFoundError(f"Student not found: {student_id}", code="student_not_found")

        attendance = await self._attendance.get_by_student(student_id)
        if student.is_inactive and student.frozen_at:
            frozen_on = to_local_date(student.frozen_at)
            attendance = [e for e in attendance if e.date <= frozen_on]
        payments = await self._payments.list_by_student(student_id)

        key = f"{CACHE_PREFIX}{student_id}:{_fingerprint(student, attendance, payments)}"
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                return FeeTimeline(fee_history=list(cached), payment_history=payments)

        history = reconcile(attendance, payments, self._fees)
        if self._cache is not None:
            self._cache.set(key, tuple(history))
        return FeeTimeline(fee_history=history, payment_history=payments)
