from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.encoders import jsonable_encoder

from schoolledger.dependencies import get_balance_engine, get_payment_queries
from schoolledger.finance.application.balance_engine import BalanceEngine
from schoolledger.payments.api.schemas import PaymentCreateRequest
from schoolledger.payments.application.payment_queries import PaymentQueryService
from schoolledger.shared.api.pagination import paginate
from schoolledger.shared.exceptions import ValidationError

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def record_payment(payload: PaymentCreateRequest, engine: BalanceEngine = Depends(get_balance_engine)):
    receipt = await engine.record_payment(
        payload.student_id,
        payload.amount,
        payload.date,
        payload.payment_method,
        notes=payload.notes,
        admin_id=payload.admin_id,
    )
    return jsonable_encoder(receipt)


@router.get("")
async def list_payments(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    svc: PaymentQueryService = Depends(get_payment_queries),
):
    if bool(start_date) != bool(end_date):
        raise ValidationError("start_date and end_date must be given together")
    if start_date and end_date:
        payments = await svc.get_payments_by_date_range(start_date, end_date)
    else:
        payments = await svc.get_all_payments()
    return jsonable_encoder(paginate(payments, page, limit))


@router.get("/student/{student_id}")
async def student_payments(student_id: str, svc: PaymentQueryService = Depends(get_payment_queries)):
    return jsonable_encoder(await svc.get_payments_by_student(student_id))


@router.delete("/{payment_id}")
async def delete_payment(payment_id: str, engine: BalanceEngine = Depends(get_balance_engine)):
    return jsonable_encoder(await engine.delete_payment(payment_id))
