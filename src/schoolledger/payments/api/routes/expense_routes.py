from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.encoders import jsonable_encoder

from schoolledger.dependencies import get_expense_service
from schoolledger.payments.api.schemas import ExpenseCreateRequest
from schoolledger.payments.application.expenses import ExpenseService
from schoolledger.shared.exceptions import NotFoundError, ValidationError

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_expense(payload: ExpenseCreateRequest, svc: ExpenseService = Depends(get_expense_service)):
    expense = await svc.create_expense(
        payload.amount,
        payload.category,
        payload.description,
        payload.date,
        payload.admin_id,
        notes=payload.notes,
    )
    return jsonable_encoder(expense)


@router.get("")
async def list_expenses(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    category: Optional[str] = None,
    svc: ExpenseService = Depends(get_expense_service),
):
    if category:
        return jsonable_encoder(await svc.get_expenses_by_category(category))
    if start_date and end_date:
        return jsonable_encoder(await svc.get_expenses_by_date_range(start_date, end_date))
    return jsonable_encoder(await svc.get_all_expenses())


@router.get("/summary")
async def expense_summary(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    svc: ExpenseService = Depends(get_expense_service),
):
    if bool(start_date) != bool(end_date):
        raise ValidationError("start_date and end_date must be given together")
    if start_date and end_date:
        return jsonable_encoder(await svc.get_expense_summary_by_date_range(start_date, end_date))
    return {
        "total_amount": await svc.get_total_expenses(),
        "category_breakdown": await svc.get_expense_summary_by_category(),
    }


@router.get("/{expense_id}")
async def get_expense(expense_id: str, svc: ExpenseService = Depends(get_expense_service)):
    expense = await svc.get_expense(expense_id)
    if expense is None:
        raise NotFoundError("Expense not found", code="expense_not_found", details={"expense_id": expense_id})
    return jsonable_encoder(expense)


@router.delete("/{expense_id}")
async def delete_expense(expense_id: str, svc: ExpenseService = Depends(get_expense_service)):
    return jsonable_encoder(await svc.delete_expense(expense_id))
