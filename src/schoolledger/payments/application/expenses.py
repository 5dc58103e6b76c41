"""
Expense Service - validation and summaries for operational expenses.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import replace
from typing import Any, Dict, List, Optional

from schoolledger.payments.application.dto import DeletedExpense, ExpenseRangeSummary
from schoolledger.payments.domain.entities import Expense, NewExpense
from schoolledger.payments.domain.protocols import ExpenseStore
from schoolledger.payments.domain.value_objects import ExpenseCategory
from schoolledger.shared.exceptions import InvalidExpenseError, NotFoundError
from schoolledger.shared.logging import get_logger
from schoolledger.shared.utils.dates import DateLike, inclusive_range, to_local_datetime

logger = get_logger(__name__)

_CATEGORIES = ", ".join(c.value for c in ExpenseCategory)


def _parse_category(value: Any) -> ExpenseCategory:
    try:
        return ExpenseCategory(value)
    except ValueError:
        raise InvalidExpenseError(f"Invalid expense category. Must be one of: {_CATEGORIES}") from None


def _by_category(expenses: List[Expense]) -> Dict[str, float]:
    summary: Dict[str, float] = defaultdict(float)
    for e in expenses:
        summary[e.category.value] += e.amount
    return dict(summary)


class ExpenseService:
    def __init__(self, expenses: ExpenseStore) -> None:
        self._expenses = expenses

    def validate_expense(
        self,
        amount: Any,
        category: Any,
        description: Optional[str],
        date: Any,
        admin_id: Optional[str],
    ) -> NewExpense:
        if not isinstance(amount, (int, float)) or isinstance(amount, bool) or amount <= 0:
            raise InvalidExpenseError("Expense amount must be greater than zero")
        parsed_category = _parse_category(category)
        if not isinstance(description, str) or not description.strip():
            raise InvalidExpenseError("Expense description is required")
        if date is None or date == "":
            raise InvalidExpenseError("Expense date is required")
        try:
            spent_on = to_local_datetime(date)
        except (TypeError, ValueError):
            raise InvalidExpenseError("Invalid expense date") from None
        if not isinstance(admin_id, str) or not admin_id.strip():
            raise InvalidExpenseError("Admin ID is required")
        return NewExpense(
            category=parsed_category,
            description=description.strip(),
            amount=amount,
            date=spent_on,
            admin_id=admin_id,
        )

    async def create_expense(
        self,
        amount: Any,
        category: Any,
        description: Optional[str],
        date: Any,
        admin_id: Optional[str],
        notes: str = "",
    ) -> Expense:
        draft = self.validate_expense(amount, category, description, date, admin_id)
        if notes:
            draft = replace(draft, notes=notes)
        expense = await self._expenses.create(draft)
        logger.info("expense_created", expense_id=expense.id, category=expense.category.value, amount=expense.amount)
        return expense

    async def get_expense(self, expense_id: str) -> Optional[Expense]:
        return await self._expenses.get(expense_id)

    async def get_all_expenses(self) -> List[Expense]:
        return await self._expenses.list_all()

    async def get_expenses_by_date_range(self, start: DateLike, end: DateLike) -> List[Expense]:
        try:
            lo, hi = inclusive_range(start, end)
        except ValueError:
            raise InvalidExpenseError("Invalid date range") from None
        return await self._expenses.list_by_date_range(lo, hi)

    async def get_expenses_by_category(self, category: ExpenseCategory | str) -> List[Expense]:
        return await self._expenses.list_by_category(_parse_category(category))

    async def delete_expense(self, expense_id: str) -> DeletedExpense:
        expense = await self._expenses.get(expense_id)
        if expense is None:
            raise NotFoundError("Expense not found", code="expense_not_found", details={"expense_id": expense_id})
        await self._expenses.delete(expense_id)
        logger.info("expense_deleted", expense_id=expense_id)
        return DeletedExpense(success=True, deleted_expense=expense)

    async def get_expense_summary_by_category(self) -> Dict[str, float]:
        return _by_category(await self._expenses.list_all())

    async def get_total_expenses(self) -> float:
        return sum(e.amount for e in await self._expenses.list_all())

    async def get_expense_summary_by_date_range(self, start: DateLike, end: DateLike) -> ExpenseRangeSummary:
        expenses = await self.get_expenses_by_date_range(start, end)
        lo, hi = inclusive_range(start, end)
        return ExpenseRangeSummary(
            total_amount=sum(e.amount for e in expenses),
            category_breakdown=_by_category(expenses),
            expense_count=len(expenses),
            start_date=lo,
            end_date=hi,
        )
