"""
Export adapters for the detailed monthly report.
"""
from __future__ import annotations

from typing import Any, List

from schoolledger.reporting.domain.reports import DetailedMonthlyReport, ExportEnvelope
from schoolledger.shared.exceptions import UnsupportedFormatError

SUPPORTED_FORMATS = ("pdf", "csv", "excel")

TABULAR_HEADERS = [
    "Student Name",
    "Email",
    "Fees Charged",
    "Payments Made",
    "Balance",
    "Payment Status",
    "Absence Fees",
    "Late Fees",
    "No Shoes Fees",
    "Not In Uniform Fees",
]


def normalize_format(fmt: Any) -> str:
    value = str(fmt or "").strip().lower()
    if value not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(
            f"Unsupported export format: {fmt}",
            details={"supported": list(SUPPORTED_FORMATS)},
        )
    return value


def _tabular_rows(report: DetailedMonthlyReport) -> List[List[Any]]:
    rows: List[List[Any]] = [
        [
            d.name,
            d.email,
            d.fees_charged,
            d.payments_made,
            d.balance,
            d.payment_status.value,
            *d.fee_breakdown.as_list(),
        ]
        for d in report.student_details
    ]
    summary = report.summary
    rows.append(
        [
            "TOTAL",
            "",
            summary.total_fees_charged,
            summary.total_payments_received,
            summary.pending_fees + summary.fees_in_payment_process,
            "",
            *report.fee_breakdown.by_type.as_list(),
        ]
    )
    return rows


def format_for_export(report: DetailedMonthlyReport, fmt: str) -> ExportEnvelope:
    """``pdf`` keeps the structured report; ``csv``/``excel`` flatten it to rows plus a TOTAL row."""
    fmt = normalize_format(fmt)
    if fmt == "pdf":
        data = {
            "summary": report.summary,
            "fee_breakdown": report.fee_breakdown,
            "student_details": report.student_details,
        }
    else:
        data = {"headers": list(TABULAR_HEADERS), "rows": _tabular_rows(report)}
    return ExportEnvelope(title=report.title, format=fmt, data=data)
