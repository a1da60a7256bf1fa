"""Pydantic schemas for API request/response validation"""

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from cashai_gateway.domain.models import CoverageReport, Failure, NotReady, Success


class LinkTokenRequest(BaseModel):
    """Request body for POST /api/create_link_token"""

    user_id: Optional[str] = Field(None, description="Client user identifier")
    history_days: Optional[int] = Field(None, ge=1, le=730, description="Days of transaction history to backfill")


class LinkTokenResponse(BaseModel):
    """Response for POST /api/create_link_token"""

    link_token: str
    expiration: Optional[str] = None


class PublicTokenRequest(BaseModel):
    """Request body for POST /api/set_access_token"""

    public_token: Optional[str] = None


class AccessTokenResponse(BaseModel):
    """Response for POST /api/set_access_token"""

    access_token: str
    item_id: str


class AccountsResponse(BaseModel):
    """Response for GET /api/accounts"""

    accounts: List[Dict[str, Any]]
    item: Dict[str, Any]


class WindowSchema(BaseModel):
    start_date: date
    end_date: date


class CoverageSchema(BaseModel):
    """Backfill coverage of the requested window"""

    requested_window: WindowSchema
    actual_window: Optional[WindowSchema] = None
    coverage_gap_days: int
    is_complete: bool

    @classmethod
    def from_report(cls, report: CoverageReport) -> "CoverageSchema":
        actual = report.actual_window
        return cls(
            requested_window=WindowSchema(
                start_date=report.requested_window.start,
                end_date=report.requested_window.end,
            ),
            actual_window=WindowSchema(start_date=actual.start, end_date=actual.end) if actual else None,
            coverage_gap_days=report.coverage_gap_days,
            is_complete=report.is_complete,
        )


class TransactionsResponse(BaseModel):
    """200 response for GET /api/transactions"""

    transactions: List[Dict[str, Any]]
    total_transactions: int
    accounts: List[Dict[str, Any]]
    item: Dict[str, Any]
    coverage: CoverageSchema
    has_more: bool
    suggested_action: str

    @classmethod
    def from_outcome(cls, outcome: Success) -> "TransactionsResponse":
        return cls(
            transactions=[dict(r.raw) for r in outcome.records],
            total_transactions=outcome.total,
            accounts=outcome.accounts,
            item=outcome.item,
            coverage=CoverageSchema.from_report(outcome.coverage),
            has_more=outcome.has_more,
            suggested_action=outcome.suggested_action.value,
        )


class NotReadyResponse(BaseModel):
    """202 response while Plaid is still processing the item"""

    error_kind: str = "not_ready"
    error_code: str
    message: str
    retry_after_seconds: int
    suggested_action: str

    @classmethod
    def from_outcome(cls, outcome: NotReady) -> "NotReadyResponse":
        return cls(
            error_code=outcome.error_code,
            message=outcome.message,
            retry_after_seconds=outcome.retry_after_seconds,
            suggested_action=outcome.suggested_action.value,
        )


class ErrorResponse(BaseModel):
    """Body for every 4xx/5xx response"""

    error_kind: str
    message: str
    error_code: Optional[str] = None
    suggested_action: Optional[str] = None

    @classmethod
    def from_outcome(cls, outcome: Failure) -> "ErrorResponse":
        return cls(
            error_kind=outcome.classification.value,
            message=outcome.message,
            error_code=outcome.error_code,
            suggested_action=outcome.suggested_action.value,
        )
