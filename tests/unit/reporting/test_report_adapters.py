import pytest

from schoolledger.reporting.application.export import TABULAR_HEADERS, format_for_export
from schoolledger.reporting.application.visualization import FEE_TYPE_LABELS, build_visualization
from schoolledger.shared.exceptions import UnsupportedFormatError


async def _seed(ledger):
    await ledger.add_student("A", first_name="Ann")
    await ledger.add_student("B", first_name="Ben")
    await ledger.mark("2023-01-01", "A", "present", {"late": True})
    await ledger.mark("2023-01-01", "B", "absent")
    await ledger.pay("A", 100, "2023-01-10")
    await ledger.pay("B", 150, "2023-01-20")


@pytest.mark.asyncio
async def test_pdf_export_keeps_report_structure(ledger):
    await _seed(ledger)
    envelope = await ledger.reports.format_report_for_export("2023-01-01", "PDF")

    assert envelope.format == "pdf"
    assert envelope.title == "Financial Report: January 2023"
    assert set(envelope.data) == {"summary", "fee_breakdown", "student_details"}
    assert envelope.data["summary"].total_fees_charged == 6


@pytest.mark.asyncio
@pytest.mark.parametrize("fmt", ["csv", "excel"])
async def test_tabular_export_appends_total_row(ledger, fmt):
    await _seed(ledger)
    envelope = await ledger.reports.format_report_for_export("2023-01-01", fmt)

    assert envelope.format == fmt
    assert envelope.data["headers"] == TABULAR_HEADERS
    rows = envelope.data["rows"]
    assert rows[0] == ["Ann Test", "a@school.test", 1, 100, -99, "paid", 0, 1, 0, 0]
    assert rows[1] == ["Ben Test", "b@school.test", 5, 150, -145, "paid", 1, 0, 0, 0]
    assert rows[-1] == ["TOTAL", "", 6, 250, 0, "", 1, 1, 0, 0]
    assert all(len(r) == len(TABULAR_HEADERS) for r in rows)


@pytest.mark.asyncio
async def test_unsupported_format_fails_before_loading_data(ledger, monkeypatch):
    async def _explode(*args, **kwargs):
        raise AssertionError("stores should not be read")

    monkeypatch.setattr(ledger.attendance, "get_in_range", _explode)
    with pytest.raises(UnsupportedFormatError) as exc:
        await ledger.reports.format_report_for_export("2023-01-01", "docx")
    assert exc.value.details == {"supported": ["pdf", "csv", "excel"]}


@pytest.mark.asyncio
async def test_format_for_export_rejects_blank_format(ledger):
    report = await ledger.reports.generate_detailed_monthly_financial_report("2023-01-01")
    with pytest.raises(UnsupportedFormatError):
        format_for_export(report, "")


@pytest.mark.asyncio
async def test_visualization_series_align_with_months(ledger):
    await ledger.add_student("A")
    await ledger.add_student("B")
    await ledger.mark("2023-01-02", "A", "absent")
    await ledger.mark("2023-02-01", "A", "absent")
    await ledger.mark("2023-02-01", "B", "present", {"late": True, "noShoes": True, "notInUniform": True})
    await ledger.pay("A", 5, "2023-01-05")
    await ledger.pay("A", 5, "2023-02-05")
    await ledger.pay("B", 1, "2023-02-05")

    data = await ledger.reports.get_data_for_visualization("2023-01-01", "2023-03-31")

    assert data.trends.labels == ["January 2023", "February 2023", "March 2023"]
    assert data.trends.fees_charged == [5, 8, 0]
    assert data.trends.payments_received == [5, 6, 0]
    assert data.distribution.labels == ["Collected", "Pending", "In Process"]
    assert data.distribution.data == [11, 0, 2]
    assert data.fee_breakdown.labels == FEE_TYPE_LABELS
    assert data.fee_breakdown.data == [2, 1, 1, 1]
    # February: 6 of 8 collected -> 75
    assert data.collection_rate.labels == data.trends.labels
    assert data.collection_rate.data == [100, 75, 0]


@pytest.mark.asyncio
async def test_collection_rate_rounds_half_up(ledger):
    await ledger.add_student("A")
    for day in ("2023-04-03", "2023-04-04", "2023-04-05", "2023-04-06", "2023-04-07", "2023-04-10", "2023-04-11", "2023-04-12"):
        await ledger.mark(day, "A", "absent")
    await ledger.pay("A", 5, "2023-04-20")

    report = await ledger.reports.generate_cumulative_financial_report("2023-04-01", "2023-04-30")
    # 5 / 40 = 12.5%
    assert build_visualization(report).collection_rate.data == [13]
