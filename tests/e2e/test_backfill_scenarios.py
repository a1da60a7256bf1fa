"""
E2E tests for item backfill states through the real Plaid gateway.

The gateway talks to the in-process mock Plaid server, so every request
crosses the full HTTP mapping in both directions.

Item states:
- ready: two years of history, full window expected
- backfilling: only the last 30 days pulled so far, incomplete window
- processing: initial pull not finished, 202 with retry hint
- empty: linked account with no transactions, complete and empty
- throttled: Plaid rate limit, relayed as 429
"""

import pytest
from datetime import timedelta
from fastapi.testclient import TestClient

from cashai_gateway.utils.date_utils import utc_today


@pytest.mark.integration
def test_full_link_flow(e2e_client: TestClient):
    """Link token -> public token exchange -> accounts -> transactions"""
    link = e2e_client.post("/api/create_link_token", json={"user_id": "user-42", "history_days": 730})
    assert link.status_code == 200
    assert link.json()["link_token"].startswith("link-sandbox-")

    exchange = e2e_client.post("/api/set_access_token", json={"public_token": "public-sandbox-ready"})
    assert exchange.status_code == 200
    access_token = exchange.json()["access_token"]

    accounts = e2e_client.get("/api/accounts", params={"access_token": access_token})
    assert accounts.status_code == 200
    assert accounts.json()["item"]["item_id"] == "item-ready"

    transactions = e2e_client.get("/api/transactions", params={"access_token": access_token})
    assert transactions.status_code == 200


@pytest.mark.integration
def test_ready_item_covers_default_window(e2e_client: TestClient):
    response = e2e_client.get("/api/transactions", params={"access_token": "access-sandbox-ready"})

    assert response.status_code == 200
    data = response.json()
    assert data["coverage"]["is_complete"] is True
    assert data["coverage"]["coverage_gap_days"] <= 3
    assert data["suggested_action"] == "none"
    assert len(data["transactions"]) == data["total_transactions"]
    assert data["has_more"] is False


@pytest.mark.integration
def test_backfilling_item_is_incomplete(e2e_client: TestClient):
    response = e2e_client.get("/api/transactions", params={"access_token": "access-sandbox-backfilling"})

    assert response.status_code == 200
    data = response.json()
    assert len(data["transactions"]) > 0
    assert data["coverage"]["is_complete"] is False
    assert data["coverage"]["coverage_gap_days"] > 30
    assert data["suggested_action"] == "retry_later"


@pytest.mark.integration
def test_processing_item_returns_retry_hint(e2e_client: TestClient):
    response = e2e_client.get("/api/transactions", params={"access_token": "access-sandbox-processing"})

    assert response.status_code == 202
    assert response.headers["Retry-After"] == "30"
    assert response.json()["error_code"] == "PRODUCT_NOT_READY"


@pytest.mark.integration
def test_empty_item_is_complete(e2e_client: TestClient):
    response = e2e_client.get("/api/transactions", params={"access_token": "access-sandbox-empty"})

    assert response.status_code == 200
    data = response.json()
    assert data["transactions"] == []
    assert data["total_transactions"] == 0
    assert data["coverage"]["is_complete"] is True


@pytest.mark.integration
def test_throttled_item_relays_429(e2e_client: TestClient):
    response = e2e_client.get("/api/transactions", params={"access_token": "access-sandbox-throttled"})

    assert response.status_code == 429
    assert response.json()["error_kind"] == "rate_limited"


@pytest.mark.integration
def test_unknown_token_requires_relink(e2e_client: TestClient):
    response = e2e_client.get("/api/transactions", params={"access_token": "access-sandbox-revoked"})

    assert response.status_code == 400
    data = response.json()
    assert data["error_kind"] == "invalid_credential"
    assert data["error_code"] == "INVALID_ACCESS_TOKEN"
    assert data["suggested_action"] == "relink"


@pytest.mark.integration
def test_paging_through_ready_item(e2e_client: TestClient):
    first = e2e_client.get(
        "/api/transactions",
        params={"access_token": "access-sandbox-ready", "count": 10, "offset": 0},
    ).json()
    second = e2e_client.get(
        "/api/transactions",
        params={"access_token": "access-sandbox-ready", "count": 10, "offset": 10},
    ).json()

    assert len(first["transactions"]) == 10
    assert first["has_more"] is True
    assert first["suggested_action"] == "next_page"
    first_ids = {t["transaction_id"] for t in first["transactions"]}
    second_ids = {t["transaction_id"] for t in second["transactions"]}
    assert first_ids.isdisjoint(second_ids)

    total = first["total_transactions"]
    last = e2e_client.get(
        "/api/transactions",
        params={"access_token": "access-sandbox-ready", "count": 10, "offset": total - 5},
    ).json()
    assert last["has_more"] is False
    assert last["coverage"]["is_complete"] is True
    assert last["suggested_action"] == "none"


@pytest.mark.integration
def test_explicit_window_limits_results(e2e_client: TestClient):
    end = utc_today() - timedelta(days=1)
    start = end - timedelta(days=8)

    response = e2e_client.get(
        "/api/transactions",
        params={"access_token": "access-sandbox-ready", "start_date": start.isoformat(), "end_date": end.isoformat()},
    )

    data = response.json()
    assert data["coverage"]["requested_window"] == {"start_date": start.isoformat(), "end_date": end.isoformat()}
    assert all(start.isoformat() <= t["date"] <= end.isoformat() for t in data["transactions"])
    assert data["total_transactions"] == 3
