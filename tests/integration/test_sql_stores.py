from datetime import date

import pytest

from schoolledger.attendance.domain.fee_calculator import FeeCalculator
from schoolledger.attendance.domain.value_objects import AttendanceStatus
from schoolledger.attendance.infrastructure.sql_store import SqlAttendanceStore
from schoolledger.finance.application.balance_engine import BalanceEngine
from schoolledger.payments.domain.entities import NewExpense, NewPayment
from schoolledger.payments.domain.value_objects import ExpenseCategory, PaymentMethod
from schoolledger.payments.infrastructure.sql_store import SqlExpenseStore, SqlPaymentStore
from schoolledger.shared.database import DatabaseSessionFactory
from schoolledger.shared.exceptions import NotFoundError
from schoolledger.shared.utils.dates import day_bounds, to_local_datetime
from schoolledger.students.application.lifecycle import StudentLifecycle
from schoolledger.students.domain.value_objects import EnrollmentStatus
from schoolledger.students.infrastructure.sql_store import SqlStudentStore


@pytest.fixture
async def db(tmp_path):
    factory = DatabaseSessionFactory(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    await factory.create_all()
    yield factory
    await factory.dispose()


@pytest.fixture
def stores(db):
    return SqlStudentStore(db), SqlAttendanceStore(db), SqlPaymentStore(db), SqlExpenseStore(db)


@pytest.mark.asyncio
async def test_attendance_days_merge_per_student(stores):
    _, attendance, _, _ = stores
    day = date(2023, 1, 2)
    await attendance.set_record(day, "A", AttendanceStatus.PRESENT, {"late": True, "colour": True})
    await attendance.bulk_set(day, ["B", "C"], AttendanceStatus.ABSENT)

    records = await attendance.get_by_date(day)
    assert set(records) == {"A", "B", "C"}
    assert records["A"].attributes == {"late": True, "colour": True}
    assert records["A"].timestamp is not None

    removed = await attendance.remove_record(day, "B")
    assert removed.status == AttendanceStatus.ABSENT
    assert await attendance.get_record(day, "B") is None
    assert await attendance.remove_record(day, "B") is None

    await attendance.set_record(date(2023, 2, 1), "A", AttendanceStatus.ABSENT)
    history = await attendance.get_by_student("A")
    assert [e.date for e in history] == [date(2023, 2, 1), date(2023, 1, 2)]
    assert [d.date for d in await attendance.get_in_range(date(2023, 1, 1), date(2023, 1, 31))] == [day]


@pytest.mark.asyncio
async def test_lifecycle_and_balances_on_sql(stores):
    students, attendance, payments, _ = stores
    fees = FeeCalculator()
    engine = BalanceEngine(students, attendance, payments, fees)
    lifecycle = StudentLifecycle(students, engine)

    await lifecycle.add_student("Ann", "Lee", "ann@school.test", student_id="A")
    await attendance.set_record(date(2023, 1, 2), "A", AttendanceStatus.ABSENT)
    await lifecycle.adjust_balance_for_fee("A", 5)
    receipt = await engine.record_payment("A", 2, "2023-01-03", "card")
    assert receipt.updated_student.balance == 3

    frozen = await lifecycle.change_enrollment_status("A", EnrollmentStatus.INACTIVE)
    reloaded = await students.get("A")
    assert reloaded.enrollment_status == EnrollmentStatus.INACTIVE
    assert (reloaded.frozen_fees_total, reloaded.frozen_balance) == (5, 3)
    assert reloaded.frozen_at == frozen.frozen_at

    cleared = await engine.clear_student_balance("A", "write-off")
    assert (await students.get("A")).balance_cleared == cleared.balance_cleared

    deleted = await engine.delete_payment(receipt.payment.id)
    assert deleted.updated_student.balance == 2
    assert await payments.list_by_student("A") == []

    with pytest.raises(NotFoundError):
        await students.update("ghost", {"balance": 1})


@pytest.mark.asyncio
async def test_payment_and_expense_queries(stores):
    _, _, payments, expenses = stores

    for amount, day in ((10, "2023-01-05"), (20, "2023-01-31"), (30, "2023-02-01")):
        await payments.create(
            NewPayment(student_id="A", amount=amount, date=to_local_datetime(day), payment_method=PaymentMethod.CASH)
        )

    january = await payments.list_by_date_range(*day_bounds("2023-01-01", "2023-01-31"))
    assert [p.amount for p in january] == [20, 10]
    assert [p.amount for p in await payments.list_all()] == [30, 20, 10]

    created = await expenses.create(
        NewExpense(
            category=ExpenseCategory.UTILITIES,
            description="Water",
            amount=12.5,
            date=to_local_datetime("2023-01-09"),
            admin_id="admin-1",
        )
    )
    assert (await expenses.get(created.id)).description == "Water"
    assert [e.id for e in await expenses.list_by_category(ExpenseCategory.UTILITIES)] == [created.id]
    await expenses.delete(created.id)
    assert await expenses.list_all() == []
