"""
Payment and Expense documents
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from schoolledger.payments.domain.value_objects import ExpenseCategory, PaymentMethod


@dataclass(frozen=True, slots=True)
class NewPayment:
    student_id: str
    amount: float
    date: datetime
    payment_method: PaymentMethod
    notes: str = ""
    admin_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Payment:
    id: str
    student_id: str
    amount: float
    date: datetime          # naive local
    payment_method: PaymentMethod
    notes: str = ""
    admin_id: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True, slots=True)
class NewExpense:
    category: ExpenseCategory
    description: str
    amount: float
    date: datetime
    admin_id: str
    notes: str = ""


@dataclass(frozen=True, slots=True)
class Expense:
    id: str
    category: ExpenseCategory
    description: str
    amount: float
    date: datetime
    admin_id: str
    notes: str = ""
    created_at: datetime = field(default_factory=datetime.now)
