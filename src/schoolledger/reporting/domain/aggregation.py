"""
Pure report builders. The aggregator loads rows from the stores and hands
them here; nothing in this module touches I/O.
"""
from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set

from schoolledger.attendance.domain.entities import AttendanceDay
from schoolledger.attendance.domain.fee_calculator import FeeCalculator
from schoolledger.attendance.domain.value_objects import AttendanceStatus, AttributeKey
from schoolledger.payments.domain.entities import Payment
from schoolledger.payments.domain.value_objects import PaymentMethod
from schoolledger.reporting.domain.reports import (
    AttendanceReport,
    AttendanceSummary,
    DetailedMonthlyReport,
    FeeBreakdown,
    FeesBreakdown,
    FeeTypeBreakdown,
    LegacyMonthlySummary,
    MonthlyDetails,
    MonthlyFinancialReport,
    MonthlySummary,
    PaymentBreakdown,
    Period,
    StudentAttendanceStats,
    StudentFeeBreakdown,
    StudentMonthDetail,
    StudentPaymentStatus,
    StudentPaymentTotal,
)
from schoolledger.shared.utils.dates import month_display_name
from schoolledger.students.domain.entities import Student

UNKNOWN_STUDENT = "Unknown Student"

_ATTRIBUTE_BUCKETS = {
    AttributeKey.LATE: "late",
    AttributeKey.NO_SHOES: "no_shoes",
    AttributeKey.NOT_IN_UNIFORM: "not_in_uniform",
}


def period_of(month: date) -> Period:
    return Period(month=month.month, year=month.year, display_name=month_display_name(month))


def classify_payment(fees_charged: float, payments_made: float) -> StudentPaymentStatus:
    if fees_charged > 0 and payments_made >= fees_charged:
        return StudentPaymentStatus.PAID
    if fees_charged > 0 and payments_made > 0:
        return StudentPaymentStatus.PARTIAL
    if fees_charged > 0:
        return StudentPaymentStatus.PENDING
    return StudentPaymentStatus.NONE


def fee_type_counts(status: AttendanceStatus, attributes: Mapping[str, bool], calculator: FeeCalculator) -> FeeTypeBreakdown:
    """+1 for an absence and +1 per surcharge flag that applies."""
    counts = FeeTypeBreakdown(absence=1 if status == AttendanceStatus.ABSENT else 0)
    if status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE):
        for key, on in calculator.effective_flags(status, attributes).items():
            if on:
                bucket = _ATTRIBUTE_BUCKETS[key]
                setattr(counts, bucket, getattr(counts, bucket) + 1)
    return counts


def build_detailed_monthly_report(
    month: date,
    days: Iterable[AttendanceDay],
    payments: Sequence[Payment],
    students: Mapping[str, Student],
    calculator: FeeCalculator,
) -> DetailedMonthlyReport:
    """
    ``students`` is the reportable population; records and payments of anyone
    else contribute no fees and no per-student detail. ``payments`` is every
    payment dated inside the month and feeds ``total_payments_received`` raw.
    Only students with a record or a payment in the month get a detail row.
    """
    fees: Dict[str, float] = {sid: 0 for sid in students}
    breakdowns: Dict[str, FeeTypeBreakdown] = {sid: FeeTypeBreakdown() for sid in students}
    paid: Dict[str, float] = {sid: 0 for sid in students}
    active: Set[str] = set()

    summary = MonthlySummary()
    by_type = FeeTypeBreakdown()

    for day in days:
        for student_id, record in day.records.items():
            if student_id not in students:
                continue
            fee = calculator.fee_for(record)
            counts = fee_type_counts(record.status, record.attributes, calculator)
            summary.total_fees_charged += fee
            fees[student_id] += fee
            active.add(student_id)
            by_type.add(counts)
            breakdowns[student_id].add(counts)

    for payment in payments:
        summary.total_payments_received += payment.amount
        if payment.student_id in paid:
            paid[payment.student_id] += payment.amount
            active.add(payment.student_id)

    details: List[StudentMonthDetail] = []
    for student_id in active:
        student = students[student_id]
        charged, made = fees[student_id], paid[student_id]
        status = classify_payment(charged, made)
        if status == StudentPaymentStatus.PAID:
            summary.fees_collected += charged
        elif status == StudentPaymentStatus.PARTIAL:
            summary.fees_collected += made
            summary.fees_in_payment_process += charged - made
        elif status == StudentPaymentStatus.PENDING:
            summary.pending_fees += charged
        details.append(
            StudentMonthDetail(
                id=student_id,
                name=student.full_name,
                email=student.email,
                fees_charged=charged,
                payments_made=made,
                balance=charged - made,
                payment_status=status,
                fee_breakdown=breakdowns[student_id],
            )
        )
    details.sort(key=lambda d: d.name.lower())

    period = period_of(month)
    return DetailedMonthlyReport(
        title=f"Financial Report: {period.display_name}",
        period=period,
        summary=summary,
        fee_breakdown=FeeBreakdown(by_type=by_type),
        student_details=details,
    )


def build_legacy_monthly_report(
    month: date,
    days: Iterable[AttendanceDay],
    payments: Sequence[Payment],
    students: Mapping[str, Student],
    calculator: FeeCalculator,
    names: Optional[Mapping[str, str]] = None,
) -> MonthlyFinancialReport:
    """``names`` resolves payers outside the reportable population."""
    names = names or {}
    by_status: Dict[str, float] = {
        "absent": 0,
        "present": 0,
        "medical_absence": 0,
        "holiday": 0,
    }
    by_attribute: Dict[str, int] = {"late": 0, "no_shoes": 0, "not_in_uniform": 0}
    by_student: Dict[str, StudentFeeBreakdown] = {}
    total_fees: float = 0

    for day in days:
        for student_id, record in day.records.items():
            student = students.get(student_id)
            if student is None:
                continue
            fee = calculator.fee_for(record)
            total_fees += fee

            # the standalone late status is a present mark with late=True
            status_bucket = {
                AttendanceStatus.LATE: "present",
                AttendanceStatus.MEDICAL_ABSENCE: "medical_absence",
            }.get(record.status, record.status.value)
            by_status[status_bucket] += fee

            entry = by_student.setdefault(student_id, StudentFeeBreakdown(student_name=student.full_name))
            entry.total += fee
            entry.status_breakdown[status_bucket] = entry.status_breakdown.get(status_bucket, 0) + fee

            counts = fee_type_counts(record.status, record.attributes, calculator)
            for bucket in by_attribute:
                hits = getattr(counts, bucket)
                if hits:
                    by_attribute[bucket] += hits
                    entry.attribute_breakdown[bucket] = entry.attribute_breakdown.get(bucket, 0) + hits

    by_method: Dict[str, float] = {m.value: 0 for m in PaymentMethod}
    paid_by_student: Dict[str, StudentPaymentTotal] = {}
    total_payments: float = 0
    for payment in payments:
        total_payments += payment.amount
        method = payment.payment_method.value
        by_method[method] = by_method.get(method, 0) + payment.amount
        student = students.get(payment.student_id)
        name = student.full_name if student else names.get(payment.student_id, UNKNOWN_STUDENT)
        paid_by_student.setdefault(payment.student_id, StudentPaymentTotal(student_name=name)).total += payment.amount

    period = period_of(month)
    return MonthlyFinancialReport(
        title=f"Financial Report: {period.display_name}",
        period=period,
        summary=LegacyMonthlySummary(
            total_fees_charged=total_fees,
            total_payments_received=total_payments,
            outstanding_balance=total_fees - total_payments,
        ),
        details=MonthlyDetails(
            fees_breakdown=FeesBreakdown(by_status=by_status, by_attribute=by_attribute, by_student=by_student),
            payment_breakdown=PaymentBreakdown(by_method=by_method, by_student=paid_by_student),
        ),
    )


def build_attendance_report(
    month: date,
    days: Iterable[AttendanceDay],
    enrolled: Mapping[str, Student],
) -> AttendanceReport:
    """
    Holidays are days carrying any holiday record; only school days count.
    The late status counts as present and as late.
    """
    days = list(days)
    holidays = sorted(d.date for d in days if d.is_holiday)
    school = [d for d in days if not d.is_holiday]

    stats: Dict[str, StudentAttendanceStats] = {
        sid: StudentAttendanceStats(student_name=s.full_name, enrollment_status=s.enrollment_status.value)
        for sid, s in enrolled.items()
    }
    summary = AttendanceSummary(
        total_days=len(school),
        school_days=sorted(d.date for d in school),
        holidays=holidays,
        enrolled_student_count=len(enrolled),
        holiday_count=len(holidays),
    )

    for day in school:
        for student_id, record in day.records.items():
            row = stats.get(student_id)
            if row is None:
                continue
            if record.status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE):
                row.present += 1
                summary.present_count += 1
            elif record.status == AttendanceStatus.ABSENT:
                row.absent += 1
                summary.absent_count += 1
            elif record.status == AttendanceStatus.MEDICAL_ABSENCE:
                row.medical_absence += 1
                summary.medical_absence_count += 1

            if record.status == AttendanceStatus.LATE or record.flag(AttributeKey.LATE):
                row.late += 1
                summary.late_count += 1
            if record.flag(AttributeKey.NO_SHOES):
                row.no_shoes += 1
                summary.no_shoes_count += 1
            if record.flag(AttributeKey.NOT_IN_UNIFORM):
                row.not_in_uniform += 1
                summary.not_in_uniform_count += 1

    school_days = len(school)
    possible = school_days * len(enrolled)
    summary.attendance_rate = summary.present_count / possible * 100 if possible else 0
    for row in stats.values():
        row.attendance_rate = row.present / school_days * 100 if school_days else 0
    summary.by_student = stats

    period = period_of(month)
    return AttendanceReport(title=f"Attendance Report: {period.display_name}", period=period, summary=summary)

