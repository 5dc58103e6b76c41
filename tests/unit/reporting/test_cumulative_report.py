from datetime import date, datetime

import pytest

from schoolledger.shared.exceptions import ValidationError

SUMMED_FIELDS = (
    "total_fees_charged",
    "total_payments_received",
    "fees_collected",
    "pending_fees",
    "fees_in_payment_process",
)


async def seed_first_quarter(ledger):
    """Jan fees 10, Feb fees 15, Mar fees 12."""
    await ledger.add_student("A")
    await ledger.add_student("B")
    for day in ("2023-01-02", "2023-01-03", "2023-02-01", "2023-02-02", "2023-02-03", "2023-03-01", "2023-03-02"):
        await ledger.mark(day, "A", "absent")
    await ledger.mark("2023-03-01", "B", "present", {"late": True, "noShoes": True})
    await ledger.pay("A", 10, "2023-01-31")
    await ledger.pay("A", 4, "2023-03-15")


@pytest.mark.asyncio
async def test_cumulative_totals_are_sums_of_months(ledger):
    await seed_first_quarter(ledger)
    report = await ledger.reports.generate_cumulative_financial_report("2023-01-01", "2023-03-31")

    assert report.title == "Cumulative Financial Report: January 2023 - March 2023"
    assert [m.summary.total_fees_charged for m in report.monthly_reports] == [10, 15, 12]
    assert report.totals.total_fees_charged == 37
    for name in SUMMED_FIELDS:
        assert getattr(report.totals, name) == sum(getattr(m.summary, name) for m in report.monthly_reports)
    assert report.summary == report.totals

    assert report.totals.fees_collected == 14
    assert report.totals.pending_fees == 17
    assert report.totals.fees_in_payment_process == 6
    assert report.fee_breakdown.as_list() == [7, 1, 1, 0]

    ytd = report.year_to_date
    assert ytd.year == 2023
    assert ytd.total_fees_charged == 37
    assert ytd.total_payments_received == 14
    assert ytd.collection_rate == pytest.approx(14 / 37 * 100)

    assert report.date_range.start_date == datetime(2023, 1, 1, 0, 0)
    assert report.date_range.end_date.date() == date(2023, 3, 31)


@pytest.mark.asyncio
async def test_partial_months_at_either_end_are_included(ledger):
    await seed_first_quarter(ledger)
    report = await ledger.reports.generate_cumulative_financial_report("2023-01-15", "2023-03-10")
    assert [m.period.month for m in report.monthly_reports] == [1, 2, 3]
    # whole months are reported even though the range cuts them
    assert report.totals.total_fees_charged == 37
    assert report.year_to_date.total_payments_received == 10


@pytest.mark.asyncio
async def test_defaults_to_the_current_calendar_year(ledger):
    await seed_first_quarter(ledger)
    report = await ledger.reports.generate_cumulative_financial_report(today=date(2023, 6, 1))

    assert len(report.monthly_reports) == 12
    assert report.title == "Cumulative Financial Report: January 2023 - December 2023"
    assert report.totals.total_fees_charged == 37


@pytest.mark.asyncio
async def test_empty_range_has_zero_collection_rate(ledger):
    report = await ledger.reports.generate_cumulative_financial_report("2022-01-01", "2022-02-28")
    assert report.totals.total_fees_charged == 0
    assert report.year_to_date.collection_rate == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("start, end", [("2023-03-01", "2023-01-01"), ("garbage", "2023-01-01")])
async def test_invalid_range(ledger, start, end):
    with pytest.raises(ValidationError) as exc:
        await ledger.reports.generate_cumulative_financial_report(start, end)
    assert exc.value.message == "Invalid date range"
