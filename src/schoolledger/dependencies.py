# src/schoolledger/dependencies.py
"""
Composition root. Stores and services are built once at startup and handed
to the app; routes reach them through ``request.app.state.container``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from schoolledger.attendance.application.service import AttendanceService
from schoolledger.attendance.domain.fee_calculator import FeeCalculator
from schoolledger.attendance.domain.holidays import HolidayCalendar
from schoolledger.attendance.domain.protocols import AttendanceStore
from schoolledger.config import Settings, get_settings
from schoolledger.finance.application.balance_engine import BalanceEngine
from schoolledger.finance.application.fee_reconciliation import FeeReconciliation
from schoolledger.payments.application.expenses import ExpenseService
from schoolledger.payments.application.payment_queries import PaymentQueryService
from schoolledger.payments.domain.protocols import ExpenseStore, PaymentStore
from schoolledger.reporting.application.report_service import ReportAggregator
from schoolledger.shared.cache import TTLCache
from schoolledger.shared.database import DatabaseSessionFactory
from schoolledger.shared.logging import get_logger
from schoolledger.students.application.lifecycle import StudentLifecycle
from schoolledger.students.domain.protocols import StudentStore

logger = get_logger(__name__)


@dataclass
class Container:
    settings: Settings
    students: StudentStore
    attendance: AttendanceStore
    payments: PaymentStore
    expenses: ExpenseStore
    cache: TTLCache
    fee_calculator: FeeCalculator
    holidays: HolidayCalendar
    balance_engine: BalanceEngine
    lifecycle: StudentLifecycle
    attendance_service: AttendanceService
    payment_queries: PaymentQueryService
    expense_service: ExpenseService
    fee_reconciliation: FeeReconciliation
    reports: ReportAggregator
    db: Optional[DatabaseSessionFactory] = None

    async def dispose(self) -> None:
        self.cache.dispose()
        if self.db is not None:
            await self.db.dispose()


def _memory_stores():
    from schoolledger.attendance.infrastructure.memory_store import InMemoryAttendanceStore
    from schoolledger.payments.infrastructure.memory_store import InMemoryExpenseStore, InMemoryPaymentStore
    from schoolledger.students.infrastructure.memory_store import InMemoryStudentStore

    return InMemoryStudentStore(), InMemoryAttendanceStore(), InMemoryPaymentStore(), InMemoryExpenseStore()


def _sql_stores(db: DatabaseSessionFactory):
    from schoolledger.attendance.infrastructure.sql_store import SqlAttendanceStore
    from schoolledger.payments.infrastructure.sql_store import SqlExpenseStore, SqlPaymentStore
    from schoolledger.students.infrastructure.sql_store import SqlStudentStore

    return SqlStudentStore(db), SqlAttendanceStore(db), SqlPaymentStore(db), SqlExpenseStore(db)


def build_container(settings: Optional[Settings] = None) -> Container:
    settings = settings or get_settings()

    db: Optional[DatabaseSessionFactory] = None
    if settings.uses_sql_store:
        db = DatabaseSessionFactory(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
        students, attendance, payments, expenses = _sql_stores(db)
    else:
        students, attendance, payments, expenses = _memory_stores()

    cache = TTLCache(settings.CACHE_DEFAULT_TTL_SECONDS, settings.CACHE_CLEANUP_INTERVAL_SECONDS)
    fees = FeeCalculator()
    holidays = HolidayCalendar()
    balance_engine = BalanceEngine(students, attendance, payments, fees)
    lifecycle = StudentLifecycle(students, balance_engine)
    reconciliation = FeeReconciliation(students, attendance, payments, fees, cache=cache)

    logger.info("container_built", store_backend=settings.STORE_BACKEND)
    return Container(
        settings=settings,
        students=students,
        attendance=attendance,
        payments=payments,
        expenses=expenses,
        cache=cache,
        fee_calculator=fees,
        holidays=holidays,
        balance_engine=balance_engine,
        lifecycle=lifecycle,
        attendance_service=AttendanceService(attendance, lifecycle, fees, holidays),
        payment_queries=PaymentQueryService(payments, students),
        expense_service=ExpenseService(expenses),
        fee_reconciliation=reconciliation,
        reports=ReportAggregator(
            students,
            attendance,
            payments,
            balance_engine,
            reconciliation,
            fees,
            include_inactive_students=settings.INCLUDE_INACTIVE_STUDENTS,
        ),
        db=db,
    )


# --- request-scoped accessors (FastAPI dependencies) ---
def get_container(request: Request) -> Container:
    return request.app.state.container


def get_lifecycle(request: Request) -> StudentLifecycle:
    return get_container(request).lifecycle


def get_balance_engine(request: Request) -> BalanceEngine:
    return get_container(request).balance_engine


def get_attendance_service(request: Request) -> AttendanceService:
    return get_container(request).attendance_service


def get_holidays(request: Request) -> HolidayCalendar:
    return get_container(request).holidays


def get_payment_queries(request: Request) -> PaymentQueryService:
    return get_container(request).payment_queries


def get_expense_service(request: Request) -> ExpenseService:
    return get_container(request).expense_service


def get_reports(request: Request) -> ReportAggregator:
    return get_container(request).reports
