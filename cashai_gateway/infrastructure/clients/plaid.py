"""Plaid API HTTP client for link tokens, token exchange, accounts and transactions"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional, Tuple

import httpx

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
from cashai_gateway.infrastructure.observability.metrics import provider_latency_histogram, record_provider_failure

logger = logging.getLogger(__name__)

PLAID_ENVIRONMENTS = {
    "sandbox": "https://sandbox.plaid.com",
    "development": "https://development.plaid.com",
    "production": "https://production.plaid.com",
}


@dataclass(frozen=True)
class PlaidConfig:
    """Environment and credentials, fixed for the life of the process"""

    environment: str
    client_id: str
    secret: str
    client_name: str = "CashAI"
    products: Tuple[str, ...] = ("transactions",)
    country_codes: Tuple[str, ...] = ("US",)
    language: str = "en"
    timeout: float = 10.0
    base_url_override: Optional[str] = None

    @property
    def base_url(self) -> str:
        if self.base_url_override:
            return self.base_url_override.rstrip("/")
        return PLAID_ENVIRONMENTS[self.environment]

    @classmethod
    def from_settings(cls, settings: Settings) -> "PlaidConfig":
        return cls(
            environment=settings.plaid_env,
            client_id=settings.plaid_client_id,
            secret=settings.plaid_secret,
            client_name=settings.plaid_client_name,
            products=tuple(settings.plaid_products),
            country_codes=tuple(settings.plaid_country_codes),
            language=settings.plaid_language,
            timeout=settings.http_timeout_seconds,
            base_url_override=settings.plaid_base_url,
        )


class PlaidGateway:
    """
    Client for the four Plaid operations this service relays.

    No retries happen here; every failure surfaces as an UpstreamError
    carrying Plaid's status and error fields verbatim.
    """

    def __init__(self, config: PlaidConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport

    async def create_link_session(self, user_id: str, history_days: int) -> LinkSession:
        """
        Create a Link token asking Plaid to backfill ``history_days`` of transactions.

        Backfill itself runs asynchronously once the user finishes linking.
        """
        data = await self._post(
            "link_token_create",
            "/link/token/create",
            {
                "user": {"client_user_id": user_id},
                "client_name": self.config.client_name,
                "products": list(self.config.products),
                "country_codes": list(self.config.country_codes),
                "language": self.config.language,
                "transactions": {"days_requested": history_days},
            },
        )
        try:
            return LinkSession(link_token=data["link_token"], expiration=data.get("expiration"))
        except KeyError as e:
            raise UpstreamError("link_token_create", f"Invalid response from Plaid: missing {e}") from e

    async def exchange_public_token(self, public_token: str) -> TokenExchange:
        """Exchange a one-time public token for a durable access token"""
        if not public_token:
            raise InvalidArgumentError("public_token is required")

        data = await self._post(
            "item_public_token_exchange",
            "/item/public_token/exchange",
            {"public_token": public_token},
        )
        try:
            return TokenExchange(access_token=data["access_token"], item_id=data["item_id"])
        except KeyError as e:
            raise UpstreamError("item_public_token_exchange", f"Invalid response from Plaid: missing {e}") from e

    async def list_accounts(self, access_token: str) -> AccountsSnapshot:
        if not access_token:
            raise InvalidArgumentError("access_token is required")

        data = await self._post("accounts_get", "/accounts/get", {"access_token": access_token})
        return AccountsSnapshot(accounts=data.get("accounts", []), item=data.get("item", {}))

    async def list_transactions(
        self,
        access_token: str,
        window: DateWindow,
        pagination: Pagination,
        account_id: Optional[str] = None,
    ) -> TransactionPage:
        """
        Fetch one page of transactions for the window.

        Raises:
            InvalidArgumentError: If access_token is empty
            UpstreamError: On any Plaid or transport failure, including PRODUCT_NOT_READY
        """
        if not access_token:
            raise InvalidArgumentError("access_token is required")

        options: Dict[str, Any] = {"count": pagination.limit, "offset": pagination.offset}
        if account_id:
            options["account_ids"] = [account_id]

        data = await self._post(
            "transactions_get",
            "/transactions/get",
            {
                "access_token": access_token,
                "start_date": window.start.isoformat(),
                "end_date": window.end.isoformat(),
                "options": options,
            },
        )

        try:
            records = [parse_transaction(txn) for txn in data.get("transactions", [])]
            total = int(data.get("total_transactions", 0))
        except (KeyError, ValueError, TypeError) as e:
            raise UpstreamError("transactions_get", f"Invalid transaction data from Plaid: {e}") from e

        return TransactionPage(
            records=records,
            total=total,
            accounts=data.get("accounts", []),
            item=data.get("item", {}),
        )

    async def _post(self, operation: str, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        payload = {"client_id": self.config.client_id, "secret": self.config.secret, **body}

        async with httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            transport=self._transport,
        ) as client:
            try:
                with provider_latency_histogram.labels(operation=operation).time():
                    response = await client.post(path, json=payload)
            except httpx.TimeoutException as e:
                record_provider_failure(operation, None)
                raise UpstreamError(operation, f"Plaid API timeout after {self.config.timeout}s") from e
            except httpx.RequestError as e:
                record_provider_failure(operation, None)
                raise UpstreamError(operation, f"Plaid API unreachable: {e}") from e

        if response.is_error:
            error = _error_from_response(operation, response)
            record_provider_failure(operation, error.error_code)
            logger.warning(
                f"Plaid {operation} returned {response.status_code}",
                extra={"error_code": error.error_code, "plaid_request_id": error.request_id},
            )
            raise error

        try:
            return response.json()
        except ValueError as e:
            record_provider_failure(operation, None)
            raise UpstreamError(operation, f"Plaid returned a non-JSON {response.status_code} response") from e


def parse_transaction(txn: Dict[str, Any]) -> TransactionRecord:
    return TransactionRecord(
        transaction_id=txn["transaction_id"],
        date=date.fromisoformat(txn["date"]),
        amount=float(txn["amount"]),
        account_id=txn["account_id"],
        name=txn.get("name") or txn.get("merchant_name") or "",
        category=tuple(txn.get("category") or ()),
        raw=txn,
    )


def _error_from_response(operation: str, response: httpx.Response) -> UpstreamError:
    """Build an UpstreamError from a Plaid error body, tolerating non-JSON bodies"""
    try:
        body = response.json()
    except ValueError:
        body = None

    if not isinstance(body, dict):
        return UpstreamError(
            operation,
            f"Plaid API error: {response.status_code}",
            status_code=response.status_code,
        )

    return UpstreamError(
        operation,
        body.get("error_message") or body.get("display_message") or f"Plaid API error: {response.status_code}",
        status_code=response.status_code,
        error_type=body.get("error_type"),
        error_code=body.get("error_code"),
        request_id=body.get("request_id"),
    )
