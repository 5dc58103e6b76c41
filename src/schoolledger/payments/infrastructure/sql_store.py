"""
SQLAlchemy Payment & Expense stores
"""
from __future__ import annotations

from datetime import datetime
from typing import Callable, List, Optional
from uuid import uuid4

from sqlalchemy import delete, select

from schoolledger.payments.domain.entities import Expense, NewExpense, NewPayment, Payment
from schoolledger.payments.domain.value_objects import ExpenseCategory, PaymentMethod
from schoolledger.payments.infrastructure.models import ExpenseModel, PaymentModel
from schoolledger.shared.database import DatabaseSessionFactory
from schoolledger.shared.utils.dates import local_now, to_local_datetime


class SqlPaymentStore:
    def __init__(self, db: DatabaseSessionFactory, clock: Callable[[], datetime] = local_now) -> None:
        self._db = db
        self._clock = clock

    def _to_entity(self, model: PaymentModel) -> Payment:
        return Payment(
            id=model.id,
            student_id=model.student_id,
            amount=model.amount,
            date=to_local_datetime(model.date),
            payment_method=PaymentMethod(model.payment_method),
            notes=model.notes or "",
            admin_id=model.admin_id,
            created_at=to_local_datetime(model.created_at),
        )

    async def create(self, payment: NewPayment) -> Payment:
        model = PaymentModel(
            id=uuid4().hex,
            student_id=payment.student_id,
            amount=payment.amount,
            date=payment.date,
            payment_method=PaymentMethod(payment.payment_method).value,
            notes=payment.notes,
            admin_id=payment.admin_id,
            created_at=self._clock(),
        )
        async with self._db.transaction("Create payment") as session:
            session.add(model)
        return self._to_entity(model)

    async def get(self, payment_id: str) -> Optional[Payment]:
        async with self._db.transaction("Fetch payment") as session:
            model = await session.get(PaymentModel, payment_id)
            return self._to_entity(model) if model else None

    async def _list(self, operation: str, *criteria) -> List[Payment]:
        stmt = select(PaymentModel).where(*criteria).order_by(PaymentModel.date.desc())
        async with self._db.transaction(operation) as session:
            return [self._to_entity(m) for m in (await session.execute(stmt)).scalars().all()]

    async def list_by_student(self, student_id: str) -> List[Payment]:
        return await self._list("Fetch student payments", PaymentModel.student_id == student_id)

    async def list_by_date_range(self, start: datetime, end: datetime) -> List[Payment]:
        return await self._list("Fetch payments by date range", PaymentModel.date >= start, PaymentModel.date <= end)

    async def list_all(self) -> List[Payment]:
        return await self._list("Fetch payments")

    async def delete(self, payment_id: str) -> None:
        async with self._db.transaction("Delete payment") as session:
            await session.execute(delete(PaymentModel).where(PaymentModel.id == payment_id))


class SqlExpenseStore:
    def __init__(self, db: DatabaseSessionFactory, clock: Callable[[], datetime] = local_now) -> None:
        self._db = db
        self._clock = clock

    def _to_entity(self, model: ExpenseModel) -> Expense:
        return Expense(
            id=model.id,
            category=ExpenseCategory(model.category),
            description=model.description,
            amount=model.amount,
            date=to_local_datetime(model.date),
            admin_id=model.admin_id,
            notes=model.notes or "",
            created_at=to_local_datetime(model.created_at),
        )

    async def create(self, expense: NewExpense) -> Expense:
        model = ExpenseModel(
            id=uuid4().hex,
            category=ExpenseCategory(expense.category).value,
            description=expense.description,
            amount=expense.amount,
            date=expense.date,
            admin_id=expense.admin_id,
            notes=expense.notes,
            created_at=self._clock(),
        )
        async with self._db.transaction("Create expense") as session:
            session.add(model)
        return self._to_entity(model)

    async def get(self, expense_id: str) -> Optional[Expense]:
        async with self._db.transaction("Fetch expense") as session:
            model = await session.get(ExpenseModel, expense_id)
            return self._to_entity(model) if model else None

    async def _list(self, operation: str, *criteria) -> List[Expense]:
        stmt = select(ExpenseModel).where(*criteria).order_by(ExpenseModel.date.desc())
        async with self._db.transaction(operation) as session:
            return [self._to_entity(m) for m in (await session.execute(stmt)).scalars().all()]

    async def list_all(self) -> List[Expense]:
        return await self._list("Fetch expenses")

    async def list_by_date_range(self, start: datetime, end: datetime) -> List[Expense]:
        return await self._list("Fetch expenses by date range", ExpenseModel.date >= start, ExpenseModel.date <= end)

    async def list_by_category(self, category: ExpenseCategory) -> List[Expense]:
        return await self._list("Fetch expenses by category", ExpenseModel.category == ExpenseCategory(category).value)

    async def delete(self, expense_id: str) -> None:
        async with self._db.transaction("Delete expense") as session:
            await session.execute(delete(ExpenseModel).where(ExpenseModel.id == expense_id))
