from __future__ import annotations

from typing import Any, Dict, Optional

import pytest

from schoolledger.attendance.application.service import AttendanceService
from schoolledger.attendance.domain.fee_calculator import FeeCalculator
from schoolledger.attendance.domain.holidays import HolidayCalendar
from schoolledger.attendance.domain.value_objects import AttendanceStatus
from schoolledger.attendance.infrastructure.memory_store import InMemoryAttendanceStore
from schoolledger.finance.application.balance_engine import BalanceEngine
from schoolledger.finance.application.fee_reconciliation import FeeReconciliation
from schoolledger.payments.application.expenses import ExpenseService
from schoolledger.payments.application.payment_queries import PaymentQueryService
from schoolledger.payments.domain.entities import NewPayment, Payment
from schoolledger.payments.domain.value_objects import PaymentMethod
from schoolledger.payments.infrastructure.memory_store import InMemoryExpenseStore, InMemoryPaymentStore
from schoolledger.reporting.application.report_service import ReportAggregator
from schoolledger.shared.cache import TTLCache
from schoolledger.shared.utils.dates import parse_key, to_local_datetime
from schoolledger.students.application.lifecycle import StudentLifecycle
from schoolledger.students.domain.entities import Student
from schoolledger.students.domain.value_objects import EnrollmentStatus
from schoolledger.students.infrastructure.memory_store import InMemoryStudentStore


def make_student(
    student_id: str,
    first_name: Optional[str] = None,
    last_name: str = "Test",
    status: EnrollmentStatus = EnrollmentStatus.ENROLLED,
    **extra: Any,
) -> Student:
    return Student(
        id=student_id,
        first_name=first_name or student_id,
        last_name=last_name,
        email=f"{student_id.lower()}@school.test",
        enrollment_status=status,
        **extra,
    )


class Ledger:
    """In-memory stores plus the services wired over them, with seeding helpers."""

    def __init__(self, include_inactive_students: bool = False) -> None:
        self.students = InMemoryStudentStore()
        self.attendance = InMemoryAttendanceStore()
        self.payments = InMemoryPaymentStore()
        self.expenses = InMemoryExpenseStore()
        self.cache = TTLCache()
        self.fees = FeeCalculator()
        self.holidays = HolidayCalendar()
        self.balance_engine = BalanceEngine(self.students, self.attendance, self.payments, self.fees)
        self.lifecycle = StudentLifecycle(self.students, self.balance_engine)
        self.attendance_service = AttendanceService(self.attendance, self.lifecycle, self.fees, self.holidays)
        self.payment_queries = PaymentQueryService(self.payments, self.students)
        self.expense_service = ExpenseService(self.expenses)
        self.reconciliation = FeeReconciliation(self.students, self.attendance, self.payments, self.fees, cache=self.cache)
        self.reports = ReportAggregator(
            self.students,
            self.attendance,
            self.payments,
            self.balance_engine,
            self.reconciliation,
            self.fees,
            include_inactive_students=include_inactive_students,
        )

    async def add_student(self, student_id: str, **kwargs: Any) -> Student:
        return await self.students.add(make_student(student_id, **kwargs))

    async def mark(self, day: str, student_id: str, status: str, attributes: Optional[Dict[str, bool]] = None) -> None:
        await self.attendance.set_record(parse_key(day), student_id, AttendanceStatus(status), attributes or {})

    async def pay(self, student_id: str, amount: float, day: str, method: str = "cash") -> Payment:
        return await self.payments.create(
            NewPayment(
                student_id=student_id,
                amount=amount,
                date=to_local_datetime(day),
                payment_method=PaymentMethod(method),
            )
        )


@pytest.fixture
def ledger() -> Ledger:
    return Ledger()


@pytest.fixture
def relaxed_ledger() -> Ledger:
    return Ledger(include_inactive_students=True)

