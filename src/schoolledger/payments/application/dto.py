from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List

from schoolledger.payments.domain.entities import Expense, Payment
from schoolledger.students.domain.entities import Student


@dataclass(frozen=True, slots=True)
class PaymentView:
    """A payment joined with its student's display name."""
    payment: Payment
    student_name: str


@dataclass(frozen=True, slots=True)
class StudentPayments:
    student: Student
    payments: List[Payment] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class DeletedExpense:
    success: bool
    deleted_expense: Expense


@dataclass(frozen=True, slots=True)
class ExpenseRangeSummary:
    total_amount: float
    category_breakdown: Dict[str, float]
    expense_count: int
    start_date: datetime
    end_date: datetime
