"""Integration tests for transaction API endpoints."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

NOW = datetime.now(timezone.utc)


async def _create(client: AsyncClient, **overrides) -> dict:
    payload = {
        "merchant": "Uber",
        "amount": "250.00",
        "category": "Transport",
        "payment_method": "Cash",
        "occurred_at": NOW.isoformat(),
    }
    payload.update(overrides)
    response = await client.post("/api/v1/transactions", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_transaction(client: AsyncClient):
    data = await _create(client)

    assert data["merchant"] == "Uber"
    assert data["amount"] == "250.00"
    assert data["status"] == "completed"
    assert data["type"] == "expense"
    assert data["id"].isdigit()


@pytest.mark.asyncio
async def test_create_rejects_bad_amount(client: AsyncClient):
    response = await client.post(
        "/api/v1/transactions",
        json={"merchant": "Uber", "amount": "-1", "category": "Transport"},
    )

    assert response.status_code == 400
    assert response.json()["error_code"] == "VAL_001"


@pytest.mark.asyncio
async def test_list_transactions_newest_first(client: AsyncClient):
    older = await _create(client, occurred_at=(NOW - timedelta(days=2)).isoformat())
    newer = await _create(client, merchant="Swiggy", category="Food & Dining")

    response = await client.get("/api/v1/transactions")

    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == [newer["id"], older["id"]]


@pytest.mark.asyncio
async def test_get_update_delete(client: AsyncClient):
    created = await _create(client)
    url = f"/api/v1/transactions/{created['id']}"

    response = await client.get(url)
    assert response.status_code == 200
    assert response.json()["merchant"] == "Uber"

    response = await client.patch(url, json={"amount": "99.90", "notes": "late night"})
    assert response.status_code == 200
    assert response.json()["amount"] == "99.90"
    assert response.json()["notes"] == "late night"

    response = await client.delete(url)
    assert response.status_code == 204

    response = await client.get(url)
    assert response.status_code == 404
    assert response.json()["error_code"] == "API_001"


@pytest.mark.asyncio
async def test_summary(client: AsyncClient):
    await _create(client, amount="100.00", category="Transport")
    await _create(client, merchant="Swiggy", amount="50.50", category="Food & Dining")
    await _create(client, merchant="Employer", amount="1000", category="Salary", type="income")

    response = await client.get("/api/v1/transactions/summary", params={"days": 3, "recent": 2})

    assert response.status_code == 200
    data = response.json()
    assert data["expense_total"] == "150.50"
    assert data["income_total"] == "1000.00"
    assert data["net"] == "849.50"
    assert data["by_category"][0] == {"category": "Transport", "total": "100.00"}
    assert len(data["daily"]) == 3
    assert len(data["recent"]) == 2
    assert data["count"] == 3


@pytest.mark.asyncio
async def test_summary_validates_days(client: AsyncClient):
    response = await client.get("/api/v1/transactions/summary", params={"days": 0})

    assert response.status_code == 400
