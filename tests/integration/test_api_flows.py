import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from schoolledger.config import Settings
from schoolledger.dependencies import build_container
from schoolledger.main import create_app


@pytest.fixture
def app() -> FastAPI:
    return create_app(build_container(Settings(STORE_BACKEND="memory", ENVIRONMENT="test")))


@pytest.fixture
async def client(app: FastAPI):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def _enroll(client: AsyncClient, student_id: str, first_name: str) -> dict:
    resp = await client.post(
        "/api/students",
        json={"id": student_id, "first_name": first_name, "last_name": "Lee", "email": f"{student_id.lower()}@school.test"},
    )
    assert resp.status_code == 201
    return resp.json()


@pytest.mark.asyncio
async def test_attendance_payment_and_reports_flow(client: AsyncClient):
    created = await _enroll(client, "A", "Ann")
    assert created["enrollment_status"] == "Pending Payment"
    assert created["balance"] == 0

    resp = await client.put("/api/attendance/2023-01-02/A", json={"status": "absent"})
    assert resp.status_code == 200
    assert resp.json()["fee_difference"] == 5
    assert resp.json()["balance_adjusted"] is True

    resp = await client.get("/api/students/A/balance")
    assert resp.json()["calculated_balance"] == 5

    resp = await client.post("/api/payments", json={"student_id": "A", "amount": 5, "date": "2023-01-03"})
    assert resp.status_code == 201
    assert resp.json()["updated_student"]["balance"] == 0

    resp = await client.get("/api/reports/monthly/detailed", params={"month": "2023-01-01"})
    assert resp.status_code == 200
    report = resp.json()
    assert report["title"] == "Financial Report: January 2023"
    assert report["summary"]["fees_collected"] == 5
    assert report["student_details"][0]["payment_status"] == "paid"

    resp = await client.get("/api/reports/export", params={"month": "2023-01-01", "format": "csv"})
    assert resp.status_code == 200
    assert resp.json()["data"]["rows"][-1][0] == "TOTAL"

    resp = await client.get("/api/reports/students/A/financial-details")
    assert resp.json()["fee_history"][0]["payment_status"] == "paid"

    resp = await client.delete("/api/students/A")
    assert resp.status_code == 200
    assert resp.json()["enrollment_status"] == "Removed"


@pytest.mark.asyncio
async def test_student_listing_is_paginated(client: AsyncClient):
    for sid, name in (("A", "Ann"), ("B", "Ben"), ("C", "Cal")):
        await _enroll(client, sid, name)

    resp = await client.get("/api/students", params={"page": 2, "limit": 2})
    body = resp.json()
    assert (body["total"], body["page"], body["limit"]) == (3, 2, 2)
    assert len(body["items"]) == 1

    resp = await client.get("/api/students", params={"status": "Pending Payment"})
    assert resp.json()["total"] == 3

    resp = await client.get("/api/students", params={"page": 0})
    assert resp.status_code == 422
    assert resp.json()["code"] == "validation_error"


@pytest.mark.asyncio
async def test_holiday_marks_everyone_without_fees(client: AsyncClient):
    await _enroll(client, "A", "Ann")
    await _enroll(client, "B", "Ben")

    resp = await client.post("/api/attendance/2023-12-25/holiday")
    assert resp.status_code == 200
    body = resp.json()
    assert body["holiday_name"] == "Christmas Day"
    assert [c["fee_difference"] for c in body["result"]["changes"]] == [0, 0]

    resp = await client.get("/api/attendance/calendar/2023-12-25")
    assert resp.json()["is_holiday"] is True
    assert resp.json()["should_charge_fees"] is False


@pytest.mark.asyncio
async def test_expenses_round_trip(client: AsyncClient):
    resp = await client.post(
        "/api/expenses",
        json={"amount": 40, "category": "supplies", "description": "Chalk", "date": "2023-02-01", "admin_id": "admin-1"},
    )
    assert resp.status_code == 201
    expense_id = resp.json()["id"]

    resp = await client.get("/api/expenses/summary")
    assert resp.json() == {"total_amount": 40, "category_breakdown": {"supplies": 40}}

    assert (await client.delete(f"/api/expenses/{expense_id}")).status_code == 200
    assert (await client.get(f"/api/expenses/{expense_id}")).status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method, url, kwargs, status_code, code",
    [
        ("get", "/api/students/ghost", {}, 404, "student_not_found"),
        ("put", "/api/attendance/yesterday/A", {"json": {"status": "absent"}}, 422, "invalid_attendance"),
        ("post", "/api/payments", {"json": {"student_id": "A", "amount": 0, "date": "2023-01-01"}}, 422, "invalid_payment"),
        ("get", "/api/payments", {"params": {"start_date": "2023-01-01"}}, 422, "validation_error"),
        ("get", "/api/reports/export", {"params": {"month": "2023-01-01", "format": "docx"}}, 400, "unsupported_format"),
        ("get", "/api/reports/cumulative", {"params": {"start_date": "2023-03-01", "end_date": "2023-01-01"}}, 422, "validation_error"),
    ],
)
async def test_errors_map_to_problem_bodies(client: AsyncClient, method, url, kwargs, status_code, code):
    await _enroll(client, "A", "Ann")
    resp = await getattr(client, method)(url, **kwargs)
    assert resp.status_code == status_code
    assert resp.json()["code"] == code


@pytest.mark.asyncio
async def test_health_endpoints(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.json()["store_backend"] == "memory"
    assert resp.headers["X-Request-ID"]

    resp = await client.get("/_health/db")
    assert resp.json() == {"ok": True, "checks": {"db": "not configured"}}


@pytest.mark.asyncio
async def test_cumulative_report_can_default_to_the_fee_year(client: AsyncClient):
    resp = await client.get("/api/reports/cumulative", params={"fee_year": "true"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["title"].startswith("Cumulative Financial Report: August")
    assert len(body["monthly_reports"]) == 13

    resp = await client.get("/api/reports/visualization", params={"fee_year": "true"})
    assert len(resp.json()["trends"]["labels"]) == 13
