from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder

from schoolledger.attendance.api.schemas import AttendanceMarkRequest, BulkAttendanceRequest, HolidayCalendarResponse
from schoolledger.attendance.application.service import AttendanceService
from schoolledger.attendance.domain.holidays import HolidayCalendar
from schoolledger.dependencies import get_attendance_service, get_holidays
from schoolledger.shared.exceptions import InvalidAttendanceError
from schoolledger.shared.utils.dates import fee_year_label, is_key, parse_key, to_key

router = APIRouter(prefix="/attendance", tags=["attendance"])


def _day(day: str):
    if not is_key(day):
        raise InvalidAttendanceError(f"Invalid attendance date: {day!r}", details={"expected": "YYYY-MM-DD"})
    return parse_key(day)


@router.get("/students/eligible")
async def eligible_students(svc: AttendanceService = Depends(get_attendance_service)):
    return jsonable_encoder(await svc.get_eligible_students())


@router.get("/calendar/{day}", response_model=HolidayCalendarResponse)
async def calendar_day(day: str, holidays: HolidayCalendar = Depends(get_holidays)):
    on = _day(day)
    return HolidayCalendarResponse(
        date=to_key(on),
        holiday_name=holidays.holiday_name(on),
        is_holiday=holidays.is_holiday(on),
        should_charge_fees=holidays.should_charge_fees(on),
        fee_year=fee_year_label(on),
    )


@router.get("/{day}")
async def get_day(day: str, svc: AttendanceService = Depends(get_attendance_service)):
    return jsonable_encoder(await svc.get_attendance_by_date(_day(day)))


@router.get("/{day}/summary")
async def get_day_summary(day: str, svc: AttendanceService = Depends(get_attendance_service)):
    return jsonable_encoder(await svc.get_attendance_summary(_day(day)))


@router.put("/{day}/{student_id}")
async def mark(
    day: str,
    student_id: str,
    payload: AttendanceMarkRequest,
    svc: AttendanceService = Depends(get_attendance_service),
):
    change = await svc.mark_attendance(_day(day), student_id, payload.status, payload.attributes)
    return jsonable_encoder(change)


@router.post("/{day}/bulk")
async def bulk_mark(day: str, payload: BulkAttendanceRequest, svc: AttendanceService = Depends(get_attendance_service)):
    result = await svc.bulk_mark_attendance(_day(day), payload.student_ids, payload.status, payload.attributes)
    return jsonable_encoder(result)


@router.post("/{day}/holiday")
async def mark_holiday(day: str, svc: AttendanceService = Depends(get_attendance_service)):
    return jsonable_encoder(await svc.mark_holiday(_day(day)))


@router.delete("/{day}/{student_id}")
async def remove(day: str, student_id: str, svc: AttendanceService = Depends(get_attendance_service)):
    return jsonable_encoder(await svc.remove_attendance(_day(day), student_id))
