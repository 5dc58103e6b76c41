"""
Report Aggregator - monthly, cumulative and attendance reports plus the
per-student and dashboard views built on top of the balance engine.

Reports are read-only and assembled fresh on every call; a cumulative
report is a best-effort point-in-time view, not a snapshot.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

from schoolledger.attendance.domain.entities import AttendanceDay
from schoolledger.attendance.domain.fee_calculator import FeeCalculator
from schoolledger.attendance.domain.protocols import AttendanceStore
from schoolledger.finance.application.balance_engine import BalanceEngine
from schoolledger.finance.application.fee_reconciliation import FeeReconciliation
from schoolledger.payments.domain.entities import Payment
from schoolledger.payments.domain.protocols import PaymentStore
from schoolledger.reporting.application.export import format_for_export, normalize_format
from schoolledger.reporting.application.visualization import build_visualization
from schoolledger.reporting.domain.aggregation import (
    build_attendance_report,
    build_detailed_monthly_report,
    build_legacy_monthly_report,
)
from schoolledger.reporting.domain.reports import (
    AttendanceReport,
    CumulativeReport,
    DashboardEntry,
    DashboardFinancials,
    DateRange,
    DetailedMonthlyReport,
    ExportEnvelope,
    FeeTypeBreakdown,
    FinancialSummary,
    MonthlyFinancialReport,
    MonthlySummary,
    StudentFinancialDetails,
    StudentProfile,
    VisualizationData,
    YearToDate,
)
from schoolledger.shared.exceptions import NotFoundError, ValidationError, wrap_store_errors
from schoolledger.shared.logging import get_logger, time_block
from schoolledger.shared.utils.dates import (
    DateLike,
    calendar_year_range,
    day_bounds,
    iter_months,
    local_now,
    month_bounds,
    month_end,
    month_name,
    month_start,
    to_local_date,
)
from schoolledger.students.domain.entities import Student
from schoolledger.students.domain.protocols import StudentStore
from schoolledger.students.domain.value_objects import EnrollmentStatus

logger = get_logger(__name__)


def _parse_month(value: DateLike) -> date:
    try:
        return month_start(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid report date: {value!r}") from None


def _by_name(students: List[Student]) -> List[Student]:
    return sorted(students, key=lambda s: s.full_name.lower())


class ReportAggregator:
    def __init__(
        self,
        students: StudentStore,
        attendance: AttendanceStore,
        payments: PaymentStore,
        balance_engine: BalanceEngine,
        fee_reconciliation: FeeReconciliation,
        fee_calculator: FeeCalculator,
        include_inactive_students: bool = False,
        clock: Callable[[], Any] = local_now,
    ) -> None:
        self._students = students
        self._attendance = attendance
        self._payments = payments
        self._balances = balance_engine
        self._reconciliation = fee_reconciliation
        self._fees = fee_calculator
        self._include_inactive = include_inactive_students
        self._clock = clock

    # ---------- population ----------
    def _is_reportable(self, student: Student) -> bool:
        if self._include_inactive:
            return student.enrollment_status != EnrollmentStatus.REMOVED
        return student.is_active

    async def _reportable_students(self) -> Dict[str, Student]:
        students = await self._students.list_all()
        return {s.id: s for s in students if self._is_reportable(s)}

    async def _month_inputs(self, month: date) -> Tuple[List[AttendanceDay], List[Payment]]:
        days = await self._attendance.get_in_range(month_start(month), month_end(month))
        payments = await self._payments.list_by_date_range(*month_bounds(month))
        return days, payments

    async def _detailed_for(self, month: date, students: Dict[str, Student]) -> DetailedMonthlyReport:
        days, payments = await self._month_inputs(month)
        return build_detailed_monthly_report(month, days, payments, students, self._fees)

    # ---------- monthly ----------
    @wrap_store_errors("Failed to generate monthly financial report")
    async def generate_monthly_financial_report(self, month_date: DateLike) -> MonthlyFinancialReport:
        """Legacy shape; ``summary.outstanding_balance`` may go negative."""
        month = _parse_month(month_date)
        everyone = await self._students.list_all()
        students = {s.id: s for s in everyone if self._is_reportable(s)}
        days, payments = await self._month_inputs(month)
        return build_legacy_monthly_report(
            month, days, payments, students, self._fees,
            names={s.id: s.full_name for s in everyone},
        )

    @wrap_store_errors("Failed to generate detailed monthly financial report")
    async def generate_detailed_monthly_financial_report(self, month_date: DateLike) -> DetailedMonthlyReport:
        month = _parse_month(month_date)
        with time_block("report.monthly_detailed", labels={"month": month.isoformat()}):
            return await self._detailed_for(month, await self._reportable_students())

    # ---------- cumulative ----------
    @wrap_store_errors("Failed to generate cumulative financial report")
    async def generate_cumulative_financial_report(
        self,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
        *,
        today: Optional[date] = None,
    ) -> CumulativeReport:
        """
        One detailed report per month whose first day lies in the range
        (default: the current calendar year), summed field by field.
        """
        default_start, default_end = calendar_year_range(today or to_local_date(self._clock()))
        try:
            start = to_local_date(start_date) if start_date else default_start
            end = to_local_date(end_date) if end_date else default_end
        except (TypeError, ValueError):
            raise ValidationError("Invalid date range") from None
        if start > end:
            raise ValidationError("Invalid date range", details={"start_date": start, "end_date": end})

        months = list(iter_months(start, end))
        students = await self._reportable_students()
        with time_block("report.cumulative", labels={"months": str(len(months))}):
            monthly = [await self._detailed_for(m, students) for m in months]

        totals = MonthlySummary()
        fee_breakdown = FeeTypeBreakdown()
        for report in monthly:
            totals.add(report.summary)
            fee_breakdown.add(report.fee_breakdown.by_type)

        in_range = await self._payments.list_by_date_range(*day_bounds(start, end))
        collection_rate = totals.fees_collected / totals.total_fees_charged * 100 if totals.total_fees_charged else 0

        logger.info("cumulative_report_generated", start=start.isoformat(), end=end.isoformat(), months=len(monthly))
        return CumulativeReport(
            title=(
                f"Cumulative Financial Report: {month_name(start)} {start.year} - "
                f"{month_name(end)} {end.year}"
            ),
            date_range=DateRange(*day_bounds(start, end)),
            monthly_reports=monthly,
            totals=totals,
            fee_breakdown=fee_breakdown,
            year_to_date=YearToDate(
                year=start.year,
                total_fees_charged=totals.total_fees_charged,
                total_payments_received=sum(p.amount for p in in_range),
                collection_rate=collection_rate,
            ),
            summary=totals,
        )

    # ---------- attendance ----------
    @wrap_store_errors("Failed to generate attendance report")
    async def generate_monthly_attendance_report(self, month_date: DateLike) -> AttendanceReport:
        month = _parse_month(month_date)
        days = await self._attendance.get_in_range(month_start(month), month_end(month))
        students = await self._students.list_all()
        enrolled = {s.id: s for s in students if s.is_active}
        return build_attendance_report(month, days, enrolled)

    # ---------- per student ----------
    @wrap_store_errors("Failed to get student financial details")
    async def get_student_financial_details(self, student_id: str) -> StudentFinancialDetails:
        student = await self._students.get(student_id)
        if student is None:
            raise NotFoundError(f"Student not found: {student_id}", code="student_not_found")

        summary = await self._balances.calculate_student_balance(student_id)
        timeline = await self._reconciliation.fee_timeline(student_id)
        return StudentFinancialDetails(
            student=StudentProfile(id=student.id, name=student.full_name, email=student.email, balance=student.balance),
            financial_summary=FinancialSummary(
                total_fees_charged=summary.total_fees_charged,
                total_payments_made=summary.total_payments_made,
                calculated_balance=summary.calculated_balance,
                current_balance=student.balance,
            ),
            payment_history=timeline.payment_history,
            fee_history=timeline.fee_history,
        )

    @wrap_store_errors("Failed to get dashboard data")
    async def get_public_dashboard_data(self) -> List[DashboardEntry]:
        students = _by_name(list((await self._reportable_students()).values()))
        entries: List[DashboardEntry] = []
        for student in students:
            summary = await self._balances.calculate_student_balance(student.id)
            entries.append(
                DashboardEntry(
                    id=student.id,
                    name=student.full_name,
                    email=student.email,
                    enrollment_status=student.enrollment_status.value,
                    financial_summary=DashboardFinancials(
                        total_fees=summary.total_fees_charged,
                        total_payments=summary.total_payments_made,
                        calculated_balance=summary.calculated_balance,
                        current_balance=student.balance,
                    ),
                )
            )
        return entries

    # ---------- adapters ----------
    async def format_report_for_export(self, month_date: DateLike, fmt: str) -> ExportEnvelope:
        fmt = normalize_format(fmt)
        report = await self.generate_detailed_monthly_financial_report(month_date)
        return format_for_export(report, fmt)

    async def get_data_for_visualization(
        self,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
    ) -> VisualizationData:
        report = await self.generate_cumulative_financial_report(start_date, end_date)
        return build_visualization(report)
