from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from schoolledger.finance.domain.reconciliation import FeeHistoryEntry
from schoolledger.payments.domain.entities import Payment
from schoolledger.students.domain.entities import Student


@dataclass(frozen=True, slots=True)
class BalanceSummary:
    total_fees_charged: float
    total_payments_made: float
    calculated_balance: float
    inactive: bool = False
    frozen_at: Optional[str] = None


@dataclass(frozen=True, slots=True)
class PaymentReceipt:
    payment: Payment
    updated_student: Student


@dataclass(frozen=True, slots=True)
class DeletedPayment:
    success: bool
    deleted_payment: Payment
    updated_student: Student


@dataclass(frozen=True, slots=True)
class FeeTimeline:
    fee_history: List[FeeHistoryEntry] = field(default_factory=list)
    payment_history: List[Payment] = field(default_factory=list)
