import pytest

from schoolledger.payments.domain.value_objects import ExpenseCategory
from schoolledger.shared.exceptions import InvalidExpenseError, NotFoundError


async def _seed(ledger):
    svc = ledger.expense_service
    await svc.create_expense(120, "supplies", "Paper", "2023-01-10", "admin-1")
    await svc.create_expense(80, "supplies", "Ink", "2023-02-10", "admin-1", notes="urgent")
    return await svc.create_expense(300, ExpenseCategory.UTILITIES, "Power", "2023-02-20", "admin-2")


@pytest.mark.asyncio
async def test_create_and_summaries(ledger):
    power = await _seed(ledger)
    svc = ledger.expense_service

    assert power.category == ExpenseCategory.UTILITIES
    assert await svc.get_total_expenses() == 500
    assert await svc.get_expense_summary_by_category() == {"supplies": 200, "utilities": 300}
    assert [e.description for e in await svc.get_expenses_by_category("supplies")] == ["Ink", "Paper"]

    feb = await svc.get_expense_summary_by_date_range("2023-02-01", "2023-02-28")
    assert feb.total_amount == 380
    assert feb.expense_count == 2
    assert feb.category_breakdown == {"supplies": 80, "utilities": 300}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "amount, category, description, day, admin, message",
    [
        (0, "supplies", "x", "2023-01-01", "a", "Expense amount must be greater than zero"),
        (5, "snacks", "x", "2023-01-01", "a", "Invalid expense category"),
        (5, "supplies", "  ", "2023-01-01", "a", "Expense description is required"),
        (5, "supplies", "x", None, "a", "Expense date is required"),
        (5, "supplies", "x", "soon", "a", "Invalid expense date"),
        (5, "supplies", "x", "2023-01-01", "", "Admin ID is required"),
        (5, "supplies", 42, "2023-01-01", "a", "Expense description is required"),
        (5, "supplies", "x", "2023-01-01", 7, "Admin ID is required"),
    ],
)
async def test_validation(ledger, amount, category, description, day, admin, message):
    with pytest.raises(InvalidExpenseError) as exc:
        await ledger.expense_service.create_expense(amount, category, description, day, admin)
    assert exc.value.message.startswith(message)


@pytest.mark.asyncio
async def test_delete(ledger):
    power = await _seed(ledger)
    deleted = await ledger.expense_service.delete_expense(power.id)
    assert deleted.success and deleted.deleted_expense.id == power.id
    assert await ledger.expense_service.get_expense(power.id) is None

    with pytest.raises(NotFoundError) as exc:
        await ledger.expense_service.delete_expense(power.id)
    assert exc.value.message == "Expense not found"
