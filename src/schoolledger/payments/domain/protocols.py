"""
Payment & Expense Store Protocols (Interfaces)
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Protocol

from schoolledger.payments.domain.entities import Expense, NewExpense, NewPayment, Payment
from schoolledger.payments.domain.value_objects import ExpenseCategory


class PaymentStore(Protocol):
    """Every listing is ordered by payment date, newest first."""

    async def create(self, payment: NewPayment) -> Payment:
        """Persist a payment; id and created_at are assigned by the store"""
        ...

    async def get(self, payment_id: str) -> Optional[Payment]:
        """Get payment by id; None when absent"""
        ...

    async def list_by_student(self, student_id: str) -> List[Payment]:
        """All payments of one student"""
        ...

    async def list_by_date_range(self, start: datetime, end: datetime) -> List[Payment]:
        """Payments with start <= date <= end"""
        ...

    async def list_all(self) -> List[Payment]:
        """Every payment"""
        ...

    async def delete(self, payment_id: str) -> None:
        """Remove the payment document"""
        ...


class ExpenseStore(Protocol):
    """Mirrors PaymentStore for operational expenses."""

    async def create(self, expense: NewExpense) -> Expense:
        ...

    async def get(self, expense_id: str) -> Optional[Expense]:
        ...

    async def list_all(self) -> List[Expense]:
        ...

    async def list_by_date_range(self, start: datetime, end: datetime) -> List[Expense]:
        ...

    async def list_by_category(self, category: ExpenseCategory) -> List[Expense]:
        ...

    async def delete(self, expense_id: str) -> None:
        ...
