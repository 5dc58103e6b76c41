from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder

from schoolledger.dependencies import get_reports
from schoolledger.reporting.application.report_service import ReportAggregator
from schoolledger.shared.utils.dates import fee_year_range

router = APIRouter(prefix="/reports", tags=["reports"])


def _range(start_date: Optional[str], end_date: Optional[str], fee_year: bool):
    # fee_year only fills in a missing range; explicit dates win
    if fee_year and not start_date and not end_date:
        return fee_year_range()
    return start_date, end_date


@router.get("/monthly")
async def monthly_report(month: str, svc: ReportAggregator = Depends(get_reports)):
    """Legacy monthly report; ``outstanding_balance`` is an informational delta."""
    return jsonable_encoder(await svc.generate_monthly_financial_report(month))


@router.get("/monthly/detailed")
async def detailed_monthly_report(month: str, svc: ReportAggregator = Depends(get_reports)):
    return jsonable_encoder(await svc.generate_detailed_monthly_financial_report(month))


@router.get("/cumulative")
async def cumulative_report(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    fee_year: bool = False,
    svc: ReportAggregator = Depends(get_reports),
):
    return jsonable_encoder(await svc.generate_cumulative_financial_report(*_range(start_date, end_date, fee_year)))


@router.get("/attendance")
async def attendance_report(month: str, svc: ReportAggregator = Depends(get_reports)):
    return jsonable_encoder(await svc.generate_monthly_attendance_report(month))


@router.get("/students/{student_id}/financial-details")
async def student_financial_details(student_id: str, svc: ReportAggregator = Depends(get_reports)):
    return jsonable_encoder(await svc.get_student_financial_details(student_id))


@router.get("/dashboard")
async def dashboard(svc: ReportAggregator = Depends(get_reports)):
    return jsonable_encoder(await svc.get_public_dashboard_data())


@router.get("/export")
async def export_report(
    month: str,
    fmt: str = Query(default="pdf", alias="format"),
    svc: ReportAggregator = Depends(get_reports),
):
    return jsonable_encoder(await svc.format_report_for_export(month, fmt))


@router.get("/visualization")
async def visualization(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    fee_year: bool = False,
    svc: ReportAggregator = Depends(get_reports),
):
    return jsonable_encoder(await svc.get_data_for_visualization(*_range(start_date, end_date, fee_year)))
