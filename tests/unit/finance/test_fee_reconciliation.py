from datetime import date

import pytest

from schoolledger.finance.domain.reconciliation import FeePaymentStatus
from schoolledger.shared.exceptions import NotFoundError
from schoolledger.students.domain.value_objects import EnrollmentStatus


async def _seed_two_fee_days(ledger):
    await ledger.add_student("D")
    await ledger.mark("2023-02-01", "D", "absent")                          # 5
    await ledger.mark("2023-03-01", "D", "present", {"late": True, "noShoes": True, "notInUniform": True})  # 3


@pytest.mark.asyncio
async def test_fifo_matching_oldest_fee_first(ledger):
    await _seed_two_fee_days(ledger)
    await ledger.mark("2023-02-15", "D", "present")
    await ledger.pay("D", 6, "2023-02-15")

    timeline = await ledger.reconciliation.fee_timeline("D")
    history = timeline.fee_history
    assert [h.date for h in history] == [date(2023, 2, 1), date(2023, 2, 15), date(2023, 3, 1)]

    first, zero, second = history
    assert (first.payment_status, first.paid_amount, first.remaining_amount) == (FeePaymentStatus.PAID, 5, 0)
    assert (zero.fee, zero.payment_status) == (0, FeePaymentStatus.UNPAID)
    assert (second.payment_status, second.paid_amount, second.remaining_amount) == (FeePaymentStatus.PARTIAL, 1, 2)
    assert not any(h.is_synthetic for h in history)


@pytest.mark.asyncio
async def test_payment_on_day_without_attendance_adds_synthetic_entry(ledger):
    await _seed_two_fee_days(ledger)
    payment = await ledger.pay("D", 6, "2023-04-10")

    history = (await ledger.reconciliation.fee_timeline("D")).fee_history
    assert [h.date for h in history] == [date(2023, 2, 1), date(2023, 3, 1), date(2023, 4, 10)]

    synthetic = history[-1]
    assert synthetic.is_synthetic
    assert synthetic.fee == 6
    assert synthetic.payment_status == FeePaymentStatus.PAID
    assert synthetic.paid_amount == 6 and synthetic.remaining_amount == 0
    assert synthetic.payment_id == payment.id

    # the real fees still absorb the whole payment
    assert history[0].payment_status == FeePaymentStatus.PAID
    assert (history[1].paid_amount, history[1].remaining_amount) == (1, 2)


@pytest.mark.asyncio
async def test_paid_amounts_never_exceed_payments(ledger):
    await ledger.add_student("E")
    for day in ("2023-01-02", "2023-01-03", "2023-01-04"):
        await ledger.mark(day, "E", "absent")
    await ledger.pay("E", 7, "2023-01-03")

    timeline = await ledger.reconciliation.fee_timeline("E")
    real = [h for h in timeline.fee_history if not h.is_synthetic]
    assert sum(h.paid_amount for h in real) <= sum(p.amount for p in timeline.payment_history)
    assert [h.payment_status for h in real] == [
        FeePaymentStatus.PAID,
        FeePaymentStatus.PARTIAL,
        FeePaymentStatus.UNPAID,
    ]
    assert real[2].remaining_amount == 5


@pytest.mark.asyncio
async def test_timeline_is_cached_until_sources_change(ledger):
    await _seed_two_fee_days(ledger)
    first = await ledger.reconciliation.fee_timeline("D")
    assert ledger.cache.size() == 1

    again = await ledger.reconciliation.fee_timeline("D")
    assert again.fee_history == first.fee_history
    assert ledger.cache.size() == 1

    await ledger.pay("D", 5, "2023-02-01")
    updated = await ledger.reconciliation.fee_timeline("D")
    assert updated.fee_history[0].payment_status == FeePaymentStatus.PAID
    assert ledger.cache.size() == 2


@pytest.mark.asyncio
async def test_inactive_timeline_stops_at_freeze(ledger):
    await ledger.add_student("F", status=EnrollmentStatus.INACTIVE, frozen_fees_total=5, frozen_at="2023-01-31T10:00:00")
    await ledger.mark("2023-01-10", "F", "absent")
    await ledger.mark("2023-02-10", "F", "absent")

    history = (await ledger.reconciliation.fee_timeline("F")).fee_history
    assert [h.date for h in history] == [date(2023, 1, 10)]


@pytest.mark.asyncio
async def test_unknown_student(ledger):
    with pytest.raises(NotFoundError):
        await ledger.reconciliation.fee_timeline("nobody")
