from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional
from uuid import uuid4

from schoolledger.payments.domain.entities import Expense, NewExpense, NewPayment, Payment
from schoolledger.payments.domain.value_objects import ExpenseCategory
from schoolledger.shared.utils.dates import local_now


def _new_id() -> str:
    return uuid4().hex


def _newest_first(items: Iterable, key=lambda x: x.date) -> list:
    return sorted(items, key=key, reverse=True)


class InMemoryPaymentStore:
    def __init__(
        self,
        payments: Iterable[Payment] = (),
        *,
        id_factory: Callable[[], str] = _new_id,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        self._items: Dict[str, Payment] = {p.id: p for p in payments}
        self._new_id = id_factory
        self._clock = clock

    async def create(self, payment: NewPayment) -> Payment:
        created = Payment(
            id=self._new_id(),
            student_id=payment.student_id,
            amount=payment.amount,
            date=payment.date,
            payment_method=payment.payment_method,
            notes=payment.notes,
            admin_id=payment.admin_id,
            created_at=self._clock(),
        )
        self._items[created.id] = created
        return created

    async def get(self, payment_id: str) -> Optional[Payment]:
        return self._items.get(payment_id)

    async def list_by_student(self, student_id: str) -> List[Payment]:
        return _newest_first(p for p in self._items.values() if p.student_id == student_id)

    async def list_by_date_range(self, start: datetime, end: datetime) -> List[Payment]:
        return _newest_first(p for p in self._items.values() if start <= p.date <= end)

    async def list_all(self) -> List[Payment]:
        return _newest_first(self._items.values())

    async def delete(self, payment_id: str) -> None:
        self._items.pop(payment_id, None)


class InMemoryExpenseStore:
    def __init__(
        self,
        expenses: Iterable[Expense] = (),
        *,
        id_factory: Callable[[], str] = _new_id,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        self._items: Dict[str, Expense] = {e.id: e for e in expenses}
        self._new_id = id_factory
        self._clock = clock

    async def create(self, expense: NewExpense) -> Expense:
        created = Expense(
            id=self._new_id(),
            category=expense.category,
            description=expense.description,
            amount=expense.amount,
            date=expense.date,
            admin_id=expense.admin_id,
            notes=expense.notes,
            created_at=self._clock(),
        )
        self._items[created.id] = created
        return created

    async def get(self, expense_id: str) -> Optional[Expense]:
        return self._items.get(expense_id)

    async def list_all(self) -> List[Expense]:
        return _newest_first(self._items.values())

    async def list_by_date_range(self, start: datetime, end: datetime) -> List[Expense]:
        return _newest_first(e for e in self._items.values() if start <= e.date <= end)

    async def list_by_category(self, category: ExpenseCategory) -> List[Expense]:
        return _newest_first(e for e in self._items.values() if e.category == category)

    async def delete(self, expense_id: str) -> None:
        self._items.pop(expense_id, None)
