"""
Balance Engine - per-student reconciliation of fees and payments.

The persisted ``Student.balance`` is a convenience hint that payment writes
keep roughly in step. :meth:`BalanceEngine.calculate_student_balance` always
recomputes from the sources and is the authoritative figure.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from schoolledger.attendance.domain.fee_calculator import FeeCalculator
from schoolledger.attendance.domain.protocols import AttendanceStore
from schoolledger.finance.application.dto import BalanceSummary, DeletedPayment, PaymentReceipt
from schoolledger.payments.domain.entities import NewPayment
from schoolledger.payments.domain.protocols import PaymentStore
from schoolledger.payments.domain.value_objects import PaymentMethod
from schoolledger.shared.exceptions import InvalidPaymentError, NotFoundError
from schoolledger.shared.logging import get_logger
from schoolledger.shared.utils.dates import local_now, to_local_datetime
from schoolledger.students.domain.entities import BalanceClearance, Student
from schoolledger.students.domain.protocols import StudentStore

logger = get_logger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class BalanceEngine:
    def __init__(
        self,
        students: StudentStore,
        attendance: AttendanceStore,
        payments: PaymentStore,
        fee_calculator: FeeCalculator,
    ) -> None:
        self._students = students
        self._attendance = attendance
        self._payments = payments
        self._fees = fee_calculator

    async def _require_student(self, student_id: str) -> Student:
        student = await self._students.get(student_id)
        if student is None:
            raise NotFoundError(f"Student not found: {student_id}", code="student_not_found")
        return student

    # ---------- reads ----------
    async def calculate_student_balance(self, student_id: str) -> BalanceSummary:
        student = await self._require_student(student_id)
        payments = await self._payments.list_by_student(student_id)
        total_payments = sum(p.amount for p in payments)

        if student.is_inactive:
            frozen_total = student.frozen_fees_total or 0
            return BalanceSummary(
                total_fees_charged=frozen_total,
                total_payments_made=total_payments,
                calculated_balance=max(0, frozen_total - total_payments),
                inactive=True,
                frozen_at=student.frozen_at,
            )

        history = await self._attendance.get_by_student(student_id)
        total_fees = sum(self._fees.fee_for(entry.record) for entry in history)
        return BalanceSummary(
            total_fees_charged=total_fees,
            total_payments_made=total_payments,
            calculated_balance=max(0, total_fees - total_payments),
        )

    # ---------- writes ----------
    async def record_payment(
        self,
        student_id: str,
        amount: float,
        date: Any,
        payment_method: PaymentMethod | str,
        *,
        notes: str = "",
        admin_id: Optional[str] = None,
    ) -> PaymentReceipt:
        """
        Validate, store the payment, then lower the balance hint (never below zero).

        The two writes are independent; if the second one fails the payment
        stands and the next balance calculation still comes out right.
        """
        if not _is_number(amount) or amount <= 0:
            raise InvalidPaymentError("Payment amount must be greater than zero")
        try:
            method = PaymentMethod(payment_method)
        except ValueError:
            raise InvalidPaymentError(
                f"Invalid payment method. Must be one of: {', '.join(m.value for m in PaymentMethod)}"
            ) from None
        if date is None or date == "":
            raise InvalidPaymentError("Payment date is required")
        try:
            paid_on: datetime = to_local_datetime(date)
        except ValueError:
            raise InvalidPaymentError(f"Invalid payment date: {date!r}") from None

        student = await self._require_student(student_id)
        payment = await self._payments.create(
            NewPayment(
                student_id=student_id,
                amount=amount,
                date=paid_on,
                payment_method=method,
                notes=notes or "",
                admin_id=admin_id,
            )
        )
        updated = await self._students.update(student_id, {"balance": max(0, student.balance - amount)})
        logger.info("payment_recorded", payment_id=payment.id, student_id=student_id, amount=amount, method=method.value)
        return PaymentReceipt(payment=payment, updated_student=updated)

    async def delete_payment(self, payment_id: str) -> DeletedPayment:
        """Removes the payment and gives its amount back to the balance hint."""
        payment = await self._payments.get(payment_id)
        if payment is None:
            raise NotFoundError(f"Payment not found: {payment_id}", code="payment_not_found")
        student = await self._require_student(payment.student_id)

        await self._payments.delete(payment_id)
        updated = await self._students.update(student.id, {"balance": max(0, student.balance + payment.amount)})
        logger.info("payment_deleted", payment_id=payment_id, student_id=student.id, amount=payment.amount)
        return DeletedPayment(success=True, deleted_payment=payment, updated_student=updated)

    async def clear_student_balance(self, student_id: str, reason: str = "") -> Student:
        student = await self._require_student(student_id)
        clearance = BalanceClearance(
            date=local_now().isoformat(),
            previous_balance=student.balance,
            reason=reason or "Balance cleared by administrator",
        )
        updated = await self._students.update(student_id, {"balance": 0, "balance_cleared": clearance})
        logger.info("balance_cleared", student_id=student_id, previous_balance=student.balance)
        return updated
