from __future__ import annotations

import math

from schoolledger.reporting.domain.reports import ChartSeries, CumulativeReport, TrendSeries, VisualizationData

DISTRIBUTION_LABELS = ["Collected", "Pending", "In Process"]
FEE_TYPE_LABELS = ["Absence", "Late", "No Shoes", "Not in Uniform"]


def _percent(part: float, whole: float) -> int:
    if not whole:
        return 0
    # half-up, so 50.5 -> 51
    return int(math.floor(part / whole * 100 + 0.5))


def build_visualization(report: CumulativeReport) -> VisualizationData:
    """Chart series for a cumulative report; every array is index-aligned with its labels."""
    months = report.monthly_reports
    labels = [m.period.display_name for m in months]
    totals = report.totals
    return VisualizationData(
        trends=TrendSeries(
            labels=labels,
            fees_charged=[m.summary.total_fees_charged for m in months],
            payments_received=[m.summary.total_payments_received for m in months],
        ),
        distribution=ChartSeries(
            labels=list(DISTRIBUTION_LABELS),
            data=[totals.fees_collected, totals.pending_fees, totals.fees_in_payment_process],
        ),
        fee_breakdown=ChartSeries(labels=list(FEE_TYPE_LABELS), data=report.fee_breakdown.as_list()),
        collection_rate=ChartSeries(
            labels=list(labels),
            data=[_percent(m.summary.fees_collected, m.summary.total_fees_charged) for m in months],
        ),
    )
