"""
Report read models. Every report is rebuilt on demand; nothing here is persisted.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List

from schoolledger.finance.domain.reconciliation import FeeHistoryEntry
from schoolledger.payments.domain.entities import Payment


class StudentPaymentStatus(str, Enum):
    PAID = "paid"
    PARTIAL = "partial"
    PENDING = "pending"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class Period:
    month: int          # 1..12
    year: int
    display_name: str


@dataclass(slots=True)
class FeeTypeBreakdown:
    """Occurrence counts per fee type (not currency)."""
    absence: int = 0
    late: int = 0
    no_shoes: int = 0
    not_in_uniform: int = 0

    def add(self, other: "FeeTypeBreakdown") -> None:
        self.absence += other.absence
        self.late += other.late
        self.no_shoes += other.no_shoes
        self.not_in_uniform += other.not_in_uniform

    def as_list(self) -> List[int]:
        return [self.absence, self.late, self.no_shoes, self.not_in_uniform]


@dataclass(frozen=True, slots=True)
class FeeBreakdown:
    by_type: FeeTypeBreakdown


@dataclass(slots=True)
class MonthlySummary:
    total_fees_charged: float = 0
    total_payments_received: float = 0
    fees_collected: float = 0
    pending_fees: float = 0
    fees_in_payment_process: float = 0

    def add(self, other: "MonthlySummary") -> None:
        self.total_fees_charged += other.total_fees_charged
        self.total_payments_received += other.total_payments_received
        self.fees_collected += other.fees_collected
        self.pending_fees += other.pending_fees
        self.fees_in_payment_process += other.fees_in_payment_process


@dataclass(frozen=True, slots=True)
class StudentMonthDetail:
    id: str
    name: str
    email: str
    fees_charged: float
    payments_made: float
    balance: float          # fees_charged - payments_made, may be negative
    payment_status: StudentPaymentStatus
    fee_breakdown: FeeTypeBreakdown


@dataclass(frozen=True, slots=True)
class DetailedMonthlyReport:
    title: str
    period: Period
    summary: MonthlySummary
    fee_breakdown: FeeBreakdown
    student_details: List[StudentMonthDetail] = field(default_factory=list)


# ---------- legacy monthly report ----------
@dataclass(frozen=True, slots=True)
class LegacyMonthlySummary:
    total_fees_charged: float
    total_payments_received: float
    # informational delta; negative when payments outrun fees
    outstanding_balance: float


@dataclass(slots=True)
class StudentFeeBreakdown:
    student_name: str
    total: float = 0
    status_breakdown: Dict[str, float] = field(default_factory=dict)
    attribute_breakdown: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class FeesBreakdown:
    by_status: Dict[str, float]
    by_attribute: Dict[str, int]
    by_student: Dict[str, StudentFeeBreakdown]


@dataclass(slots=True)
class StudentPaymentTotal:
    student_name: str
    total: float = 0


@dataclass(frozen=True, slots=True)
class PaymentBreakdown:
    by_method: Dict[str, float]
    by_student: Dict[str, StudentPaymentTotal]


@dataclass(frozen=True, slots=True)
class MonthlyDetails:
    fees_breakdown: FeesBreakdown
    payment_breakdown: PaymentBreakdown


@dataclass(frozen=True, slots=True)
class MonthlyFinancialReport:
    title: str
    period: Period
    summary: LegacyMonthlySummary
    details: MonthlyDetails


# ---------- cumulative ----------
@dataclass(frozen=True, slots=True)
class DateRange:
    start_date: datetime
    end_date: datetime


@dataclass(frozen=True, slots=True)
class YearToDate:
    year: int
    total_fees_charged: float
    total_payments_received: float
    collection_rate: float


@dataclass(frozen=True, slots=True)
class CumulativeReport:
    title: str
    date_range: DateRange
    monthly_reports: List[DetailedMonthlyReport]
    totals: MonthlySummary
    fee_breakdown: FeeTypeBreakdown
    year_to_date: YearToDate
    summary: MonthlySummary     # same figures as totals


# ---------- attendance ----------
@dataclass(slots=True)
class StudentAttendanceStats:
    student_name: str
    enrollment_status: str
    present: int = 0
    absent: int = 0
    medical_absence: int = 0
    late: int = 0
    no_shoes: int = 0
    not_in_uniform: int = 0
    attendance_rate: float = 0


@dataclass(slots=True)
class AttendanceSummary:
    total_days: int
    school_days: List[date]
    holidays: List[date]
    enrolled_student_count: int
    present_count: int = 0
    absent_count: int = 0
    medical_absence_count: int = 0
    holiday_count: int = 0
    late_count: int = 0
    no_shoes_count: int = 0
    not_in_uniform_count: int = 0
    attendance_rate: float = 0
    by_student: Dict[str, StudentAttendanceStats] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class AttendanceReport:
    title: str
    period: Period
    summary: AttendanceSummary


# ---------- per-student views ----------
@dataclass(frozen=True, slots=True)
class StudentProfile:
    id: str
    name: str
    email: str
    balance: float


@dataclass(frozen=True, slots=True)
class FinancialSummary:
    total_fees_charged: float
    total_payments_made: float
    calculated_balance: float
    current_balance: float


@dataclass(frozen=True, slots=True)
class StudentFinancialDetails:
    student: StudentProfile
    financial_summary: FinancialSummary
    payment_history: List[Payment]
    fee_history: List[FeeHistoryEntry]


@dataclass(frozen=True, slots=True)
class DashboardFinancials:
    total_fees: float
    total_payments: float
    calculated_balance: float
    current_balance: float


@dataclass(frozen=True, slots=True)
class DashboardEntry:
    id: str
    name: str
    email: str
    enrollment_status: str
    financial_summary: DashboardFinancials


# ---------- adapters ----------
@dataclass(frozen=True, slots=True)
class ExportEnvelope:
    title: str
    format: str
    data: Dict[str, Any]


@dataclass(frozen=True, slots=True)
class ChartSeries:
    labels: List[str]
    data: List[float]


@dataclass(frozen=True, slots=True)
class TrendSeries:
    labels: List[str]
    fees_charged: List[float]
    payments_received: List[float]


@dataclass(frozen=True, slots=True)
class VisualizationData:
    trends: TrendSeries
    distribution: ChartSeries
    fee_breakdown: ChartSeries
    collection_rate: ChartSeries

