import pytest

from schoolledger.payments.domain.value_objects import PaymentMethod
from schoolledger.shared.exceptions import InvalidPaymentError, NotFoundError
from schoolledger.students.domain.value_objects import EnrollmentStatus


@pytest.mark.asyncio
async def test_balance_from_present_and_late(ledger):
    await ledger.add_student("A")
    await ledger.mark("2023-01-01", "A", "present", {"late": True, "noShoes": True})

    summary = await ledger.balance_engine.calculate_student_balance("A")
    assert summary.total_fees_charged == 2
    assert summary.total_payments_made == 0
    assert summary.calculated_balance == 2
    assert not summary.inactive


@pytest.mark.asyncio
async def test_inactive_student_uses_frozen_totals(ledger):
    await ledger.add_student(
        "B",
        status=EnrollmentStatus.INACTIVE,
        frozen_fees_total=80,
        frozen_balance=50,
        frozen_at="2024-01-01T00:00:00",
    )
    await ledger.pay("B", 30, "2023-12-20")
    await ledger.mark("2024-02-01", "B", "absent")

    summary = await ledger.balance_engine.calculate_student_balance("B")
    assert summary.total_fees_charged == 80
    assert summary.total_payments_made == 30
    assert summary.calculated_balance == 50
    assert summary.inactive
    assert summary.frozen_at == "2024-01-01T00:00:00"


@pytest.mark.asyncio
async def test_inactive_balance_is_clamped_at_zero(ledger):
    await ledger.add_student(
        "C", status=EnrollmentStatus.INACTIVE, frozen_fees_total=50, frozen_balance=-10, frozen_at="2024-01-01"
    )
    await ledger.pay("C", 60, "2024-01-02")

    summary = await ledger.balance_engine.calculate_student_balance("C")
    assert summary.calculated_balance == 0


@pytest.mark.asyncio
async def test_overpayment_never_goes_negative(ledger):
    await ledger.add_student("A")
    await ledger.mark("2023-01-02", "A", "absent")
    await ledger.pay("A", 100, "2023-01-03")

    summary = await ledger.balance_engine.calculate_student_balance("A")
    assert summary.calculated_balance == 0
    assert summary.total_payments_made == 100


@pytest.mark.asyncio
async def test_record_payment_lowers_balance_hint(ledger):
    await ledger.add_student("A", balance=10)

    receipt = await ledger.balance_engine.record_payment("A", 4, "2023-02-01", "card", notes="Feb")
    assert receipt.payment.amount == 4
    assert receipt.payment.payment_method == PaymentMethod.CARD
    assert receipt.payment.date.date().isoformat() == "2023-02-01"
    assert receipt.updated_student.balance == 6

    receipt = await ledger.balance_engine.record_payment("A", 50, "2023-02-02", "cash")
    assert receipt.updated_student.balance == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "amount, method, day, message",
    [
        (0, "cash", "2023-01-01", "Payment amount must be greater than zero"),
        (-3, "cash", "2023-01-01", "Payment amount must be greater than zero"),
        ("10", "cash", "2023-01-01", "Payment amount must be greater than zero"),
        (10, "bitcoin", "2023-01-01", "Invalid payment method"),
        (10, "cash", None, "Payment date is required"),
        (10, "cash", "someday", "Invalid payment date"),
    ],
)
async def test_record_payment_validation(ledger, amount, method, day, message):
    await ledger.add_student("A")
    with pytest.raises(InvalidPaymentError) as exc:
        await ledger.balance_engine.record_payment("A", amount, day, method)
    assert exc.value.message.startswith(message)
    assert await ledger.payments.list_all() == []


@pytest.mark.asyncio
async def test_record_payment_for_unknown_student(ledger):
    with pytest.raises(NotFoundError):
        await ledger.balance_engine.record_payment("ghost", 10, "2023-01-01", "cash")


@pytest.mark.asyncio
async def test_delete_payment_restores_balance(ledger):
    await ledger.add_student("A", balance=10)
    receipt = await ledger.balance_engine.record_payment("A", 4, "2023-02-01", "cash")

    deleted = await ledger.balance_engine.delete_payment(receipt.payment.id)
    assert deleted.success
    assert deleted.deleted_payment.id == receipt.payment.id
    assert deleted.updated_student.balance == 10
    assert await ledger.payments.get(receipt.payment.id) is None

    with pytest.raises(NotFoundError):
        await ledger.balance_engine.delete_payment(receipt.payment.id)


@pytest.mark.asyncio
async def test_clear_balance_keeps_audit_snapshot(ledger):
    await ledger.add_student("A", balance=12)
    cleared = await ledger.balance_engine.clear_student_balance("A", "Scholarship")
    assert cleared.balance == 0
    assert cleared.balance_cleared.previous_balance == 12
    assert cleared.balance_cleared.reason == "Scholarship"

    default = await ledger.balance_engine.clear_student_balance("A")
    assert default.balance_cleared.reason == "Balance cleared by administrator"
