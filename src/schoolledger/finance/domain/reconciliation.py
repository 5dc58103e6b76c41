"""
FIFO matching of payments against attendance fees.

Fees are walked oldest first and consume the student's payment pool until it
runs out. Payments made on a day with no attendance record for the student
also show up as synthetic, already-paid entries so the timeline reads
complete; those never draw from the pool.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Sequence

from schoolledger.attendance.domain.entities import AttendanceEntry
from schoolledger.attendance.domain.fee_calculator import FeeCalculator
from schoolledger.attendance.domain.value_objects import AttendanceStatus
from schoolledger.payments.domain.entities import Payment
from schoolledger.shared.utils.dates import to_key, to_local_date


class FeePaymentStatus(str, Enum):
    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"


@dataclass(frozen=True, slots=True)
class FeeHistoryEntry:
    date: date
    status: AttendanceStatus
    fee: float
    payment_status: FeePaymentStatus
    paid_amount: float
    remaining_amount: float
    attributes: Dict[str, bool] = field(default_factory=dict)
    is_synthetic: bool = False
    payment_id: Optional[str] = None
    notes: Optional[str] = None


def reconcile(
    attendance: Sequence[AttendanceEntry],
    payments: Sequence[Payment],
    calculator: FeeCalculator,
) -> List[FeeHistoryEntry]:
    """Ordered fee timeline (ascending by day, stable for same-day ties)."""
    remaining = sum(p.amount for p in payments)
    timeline: List[FeeHistoryEntry] = []

    for entry in sorted(attendance, key=lambda e: to_key(e.date)):
        fee = calculator.fee(entry.record.status, entry.record.attributes)
        if fee <= 0:
            # zero fees stay visible; consumers decide whether to show them
            status, paid, owed = FeePaymentStatus.UNPAID, 0, 0
        elif remaining >= fee:
            status, paid, owed = FeePaymentStatus.PAID, fee, 0
            remaining -= fee
        elif remaining > 0:
            status, paid, owed = FeePaymentStatus.PARTIAL, remaining, fee - remaining
            remaining = 0
        else:
            status, paid, owed = FeePaymentStatus.UNPAID, 0, fee
        timeline.append(
            FeeHistoryEntry(
                date=to_local_date(entry.date),
                status=entry.record.status,
                attributes=dict(entry.record.attributes),
                fee=fee,
                payment_status=status,
                paid_amount=paid,
                remaining_amount=owed,
            )
        )

    attended_days = {to_key(e.date) for e in attendance}
    for payment in payments:
        if to_key(payment.date) in attended_days:
            continue
        timeline.append(
            FeeHistoryEntry(
                date=to_local_date(payment.date),
                status=AttendanceStatus.ABSENT,
                fee=payment.amount,
                payment_status=FeePaymentStatus.PAID,
                paid_amount=payment.amount,
                remaining_amount=0,
                is_synthetic=True,
                payment_id=payment.id,
                notes=payment.notes or None,
            )
        )

    # stable: attendance rows precede synthetic rows, payments keep store order
    timeline.sort(key=lambda e: to_key(e.date))
    return timeline
