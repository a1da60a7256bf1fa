"""GET /api/transactions - Backfill-aware transaction retrieval"""

import time
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from cashai_gateway.api.v1.schemas import NotReadyResponse, TransactionsResponse
from cashai_gateway.api.dependencies import get_reconciler, get_request_id
from cashai_gateway.api.errors import failure_response
from cashai_gateway.domain.models import NotReady, RetrievalOutcome, Success
from cashai_gateway.domain.reconciler import TransactionWindowReconciler
from cashai_gateway.infrastructure.observability.logging import log_retrieval
from cashai_gateway.infrastructure.observability.metrics import record_outcome

router = APIRouter()


@router.get(
    "/transactions",
    response_model=TransactionsResponse,
    responses={202: {"model": NotReadyResponse}},
)
async def get_transactions(
    request: Request,
    access_token: Optional[str] = Query(None, description="Plaid access token"),
    start_date: Optional[date] = Query(None, description="Window start (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="Window end (YYYY-MM-DD)"),
    limit: Optional[int] = Query(None, description="Page size, at most 500"),
    count: Optional[int] = Query(None, description="Alias of limit"),
    offset: Optional[int] = Query(None, description="Page offset"),
    account_id: Optional[str] = Query(None, description="Restrict to one account"),
    reconciler: TransactionWindowReconciler = Depends(get_reconciler),
):
    """
    Fetch transactions for a date window and report backfill coverage.

    Returns:
        200 with transactions and coverage when Plaid answered
        202 with a retry hint while Plaid is still processing the item
        4xx/5xx mirroring Plaid's status with a classified error otherwise
    """
    start_time = time.time()
    request_id = get_request_id(request)

    outcome = await reconciler.fetch_transactions(
        access_token,
        start=start_date,
        end=end_date,
        limit=limit if limit is not None else count,
        offset=offset,
        account_id=account_id,
    )

    duration_ms = (time.time() - start_time) * 1000
    record_outcome(outcome)
    _log_outcome(request_id, access_token or "", outcome, duration_ms)

    return render_outcome(outcome)


def render_outcome(outcome: RetrievalOutcome) -> JSONResponse:
    """Map a retrieval outcome onto status code and body"""
    if isinstance(outcome, Success):
        return JSONResponse(
            status_code=200,
            content=TransactionsResponse.from_outcome(outcome).model_dump(mode="json"),
        )

    if isinstance(outcome, NotReady):
        return JSONResponse(
            status_code=202,
            content=NotReadyResponse.from_outcome(outcome).model_dump(),
            headers={"Retry-After": str(outcome.retry_after_seconds)},
        )

    return failure_response(outcome)


def _log_outcome(request_id: str, access_token: str, outcome: RetrievalOutcome, duration_ms: float) -> None:
    if isinstance(outcome, Success):
        log_retrieval(
            request_id,
            access_token,
            "complete" if outcome.coverage.is_complete else "incomplete",
            len(outcome.records),
            outcome.total,
            outcome.coverage.coverage_gap_days,
            duration_ms,
        )
    elif isinstance(outcome, NotReady):
        log_retrieval(request_id, access_token, "not_ready", 0, 0, None, duration_ms)
    else:
        log_retrieval(request_id, access_token, outcome.classification.value, 0, 0, None, duration_ms)
