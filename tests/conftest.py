"""Pytest fixtures for testing"""

import pytest
import httpx
from datetime import date
from typing import Callable, List, Optional
from fastapi.testclient import TestClient

from cashai_gateway.api.dependencies import get_plaid_gateway
from cashai_gateway.api.main import create_app
from cashai_gateway.config import Settings
from cashai_gateway.domain.exceptions import InvalidArgumentError, UpstreamError
from cashai_gateway.domain.models import (
    AccountsSnapshot,
    DateWindow,
    LinkSession,
    Pagination,
    TokenExchange,
    TransactionPage,
    TransactionRecord,
)
from cashai_gateway.infrastructure.clients.plaid import PlaidConfig
from mock_servers.plaid_server.main import app as mock_plaid_app

MOCK_PLAID_URL = "http://mock-plaid.test"


class FakePlaidGateway:
    """In-memory stand-in for PlaidGateway that records every call"""

    def __init__(self):
        self.page = TransactionPage(records=[], total=0)
        self.accounts = AccountsSnapshot(accounts=[{"account_id": "acc-1", "name": "Checking"}], item={"item_id": "item-1"})
        self.error: Optional[UpstreamError] = None
        self.calls: List[tuple] = []

    async def create_link_session(self, user_id: str, history_days: int) -> LinkSession:
        self.calls.append(("create_link_session", user_id, history_days))
        if self.error:
            raise self.error
        return LinkSession(link_token="link-sandbox-123", expiration="2024-03-20T04:00:00Z")

    async def exchange_public_token(self, public_token: str) -> TokenExchange:
        if not public_token:
            raise InvalidArgumentError("public_token is required")
        self.calls.append(("exchange_public_token", public_token))
        if self.error:
            raise self.error
        return TokenExchange(access_token="access-sandbox-ready", item_id="item-ready")

    async def list_accounts(self, access_token: str) -> AccountsSnapshot:
        if not access_token:
            raise InvalidArgumentError("access_token is required")
        self.calls.append(("list_accounts", access_token))
        if self.error:
            raise self.error
        return self.accounts

    async def list_transactions(
        self,
        access_token: str,
        window: DateWindow,
        pagination: Pagination,
        account_id: Optional[str] = None,
    ) -> TransactionPage:
        self.calls.append(("list_transactions", access_token, window, pagination, account_id))
        if self.error:
            raise self.error
        return self.page


@pytest.fixture
def make_record() -> Callable[..., TransactionRecord]:
    """Factory for provider transaction records"""

    def _make(transaction_id: str, day: date, amount: float = 12.5, account_id: str = "acc-1") -> TransactionRecord:
        raw = {
            "transaction_id": transaction_id,
            "account_id": account_id,
            "amount": amount,
            "date": day.isoformat(),
            "name": "Coffee Shop",
            "category": ["Food and Drink"],
        }
        return TransactionRecord(
            transaction_id=transaction_id,
            date=day,
            amount=amount,
            account_id=account_id,
            name="Coffee Shop",
            category=("Food and Drink",),
            raw=raw,
        )

    return _make


@pytest.fixture
def fake_gateway() -> FakePlaidGateway:
    return FakePlaidGateway()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, plaid_client_id="test-client-id", plaid_secret="test-secret")


@pytest.fixture
def client(settings: Settings, fake_gateway: FakePlaidGateway) -> TestClient:
    """Create FastAPI test client backed by the fake gateway"""
    app = create_app(settings)
    app.dependency_overrides[get_plaid_gateway] = lambda: fake_gateway
    return TestClient(app)


@pytest.fixture
def mock_plaid_transport() -> httpx.ASGITransport:
    """Route gateway traffic to the in-process mock Plaid server"""
    return httpx.ASGITransport(app=mock_plaid_app)


@pytest.fixture
def plaid_config() -> PlaidConfig:
    return PlaidConfig(
        environment="sandbox",
        client_id="test-client-id",
        secret="test-secret",
        base_url_override=MOCK_PLAID_URL,
    )


@pytest.fixture
def e2e_client(mock_plaid_transport: httpx.ASGITransport) -> TestClient:
    """Full app wired to the real PlaidGateway talking to the mock Plaid server"""
    settings = Settings(
        _env_file=None,
        plaid_client_id="test-client-id",
        plaid_secret="test-secret",
        plaid_base_url=MOCK_PLAID_URL,
    )
    return TestClient(create_app(settings, plaid_transport=mock_plaid_transport))
