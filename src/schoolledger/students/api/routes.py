from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.encoders import jsonable_encoder

from schoolledger.dependencies import get_balance_engine, get_lifecycle
from schoolledger.finance.application.balance_engine import BalanceEngine
from schoolledger.shared.api.pagination import paginate
from schoolledger.students.api.schemas import (
    BalanceAmountRequest,
    BalanceClearRequest,
    EnrollmentStatusRequest,
    StudentCreateRequest,
)
from schoolledger.students.application.lifecycle import StudentLifecycle

router = APIRouter(prefix="/students", tags=["students"])


@router.get("")
async def list_students(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    page: Optional[int] = None,
    limit: Optional[int] = None,
    svc: StudentLifecycle = Depends(get_lifecycle),
):
    if status_filter:
        students = await svc.get_students_by_status(status_filter)
    else:
        students = await svc.get_all_students()
    return jsonable_encoder(paginate(students, page, limit))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_student(payload: StudentCreateRequest, svc: StudentLifecycle = Depends(get_lifecycle)):
    student = await svc.add_student(payload.first_name, payload.last_name, payload.email, student_id=payload.id)
    return jsonable_encoder(student)


@router.get("/{student_id}")
async def get_student(student_id: str, svc: StudentLifecycle = Depends(get_lifecycle)):
    return jsonable_encoder(await svc.get_student(student_id))


@router.get("/{student_id}/balance")
async def get_balance(student_id: str, engine: BalanceEngine = Depends(get_balance_engine)):
    return jsonable_encoder(await engine.calculate_student_balance(student_id))


@router.put("/{student_id}/status")
async def change_status(
    student_id: str,
    payload: EnrollmentStatusRequest,
    svc: StudentLifecycle = Depends(get_lifecycle),
):
    return jsonable_encoder(await svc.change_enrollment_status(student_id, payload.status))


@router.delete("/{student_id}")
async def remove_student(student_id: str, svc: StudentLifecycle = Depends(get_lifecycle)):
    return jsonable_encoder(await svc.remove_student(student_id))


@router.post("/{student_id}/balance/clear")
async def clear_balance(
    student_id: str,
    payload: BalanceClearRequest,
    svc: StudentLifecycle = Depends(get_lifecycle),
):
    return jsonable_encoder(await svc.clear_student_balance(student_id, payload.reason))


@router.post("/{student_id}/balance/add")
async def add_balance(
    student_id: str,
    payload: BalanceAmountRequest,
    svc: StudentLifecycle = Depends(get_lifecycle),
):
    return jsonable_encoder(await svc.add_balance(student_id, payload.amount))


@router.post("/{student_id}/balance/reduce")
async def reduce_balance(
    student_id: str,
    payload: BalanceAmountRequest,
    svc: StudentLifecycle = Depends(get_lifecycle),
):
    return jsonable_encoder(await svc.reduce_balance(student_id, payload.amount))
