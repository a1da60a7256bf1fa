"""Transaction window reconciler - core business logic for backfill-aware retrieval"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Protocol

from cashai_gateway.domain.classification import classify_error, relay_status
from cashai_gateway.domain.coverage import compute_coverage
from cashai_gateway.domain.exceptions import InvalidArgumentError, UpstreamError
from cashai_gateway.domain.models import (
    DateWindow,
    ErrorKind,
    Failure,
    NotReady,
    Pagination,
    RetrievalOutcome,
    Success,
    TransactionPage,
)
from cashai_gateway.domain.windows import resolve_pagination, resolve_window
from cashai_gateway.utils.date_utils import utc_today

logger = logging.getLogger(__name__)


class TransactionSource(Protocol):
    """The slice of the Plaid gateway the reconciler depends on"""

    async def list_transactions(
        self,
        access_token: str,
        window: DateWindow,
        pagination: Pagination,
        account_id: Optional[str] = None,
    ) -> TransactionPage: ...


@dataclass(frozen=True)
class ReconcilerPolicy:
    """Tunable retrieval policy"""

    default_window_months: int = 6
    default_page_size: int = 500
    max_page_size: int = 500
    coverage_tolerance_days: int = 30
    not_ready_retry_after_seconds: int = 30


class TransactionWindowReconciler:
    """
    Fetch a window of transactions and report whether Plaid has backfilled it.

    Each call is one round trip to the gateway; retrying on NotReady or an
    incomplete window is left to the client.
    """

    def __init__(
        self,
        gateway: TransactionSource,
        policy: ReconcilerPolicy | None = None,
        today: Callable[[], date] = utc_today,
    ):
        self.gateway = gateway
        self.policy = policy or ReconcilerPolicy()
        self.today = today

    async def fetch_transactions(
        self,
        access_token: Optional[str],
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        account_id: Optional[str] = None,
    ) -> RetrievalOutcome:
        """
        Retrieve transactions for ``[start, end]`` and classify the result.

        Flow:
        1. Validate access token and pagination, resolve the date window
        2. Fetch one page from Plaid
        3. PRODUCT_NOT_READY -> NotReady; other provider errors -> Failure
        4. Otherwise compute coverage of the requested window -> Success
        """
        if not access_token:
            return Failure(ErrorKind.INVALID_ARGUMENT, "access_token is required", status_code=400)

        try:
            window = resolve_window(start, end, self.today(), self.policy.default_window_months)
            pagination = resolve_pagination(limit, offset, self.policy.default_page_size, self.policy.max_page_size)
        except InvalidArgumentError as e:
            return Failure(ErrorKind.INVALID_ARGUMENT, str(e), status_code=400)

        defaulted = start is None or end is None
        logger.info(
            f"Fetching transactions {window.start.isoformat()} to {window.end.isoformat()}",
            extra={
                "window_source": "default" if defaulted else "request",
                "count": pagination.limit,
                "offset": pagination.offset,
            },
        )

        try:
            page = await self.gateway.list_transactions(access_token, window, pagination, account_id)
        except UpstreamError as e:
            return self._classify_failure(e)

        coverage = compute_coverage(window, page.records, page.total, self.policy.coverage_tolerance_days)

        if coverage.actual_window is not None:
            logger.info(
                f"Plaid returned {len(page.records)} transactions (total: {page.total}), "
                f"dated {coverage.actual_window.start.isoformat()} to {coverage.actual_window.end.isoformat()}",
                extra={"coverage_gap_days": coverage.coverage_gap_days, "is_complete": coverage.is_complete},
            )
        else:
            logger.info(f"Plaid returned no transactions (total: {page.total})")

        return Success(
            records=page.records,
            total=page.total,
            coverage=coverage,
            pagination=pagination,
            accounts=page.accounts,
            item=page.item,
        )

    def _classify_failure(self, error: UpstreamError) -> RetrievalOutcome:
        kind = classify_error(error)

        if kind is ErrorKind.NOT_READY:
            logger.info("Plaid data not ready yet (PRODUCT_NOT_READY)")
            return NotReady(retry_after_seconds=self.policy.not_ready_retry_after_seconds)

        logger.warning(
            f"Transaction fetch failed: {error}",
            extra={"error_kind": kind.value, "error_code": error.error_code},
        )
        return Failure(
            classification=kind,
            message=error.message,
            status_code=relay_status(error),
            error_code=error.error_code,
        )
