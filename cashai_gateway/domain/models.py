"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class DateWindow:
    """Inclusive calendar-date range"""

    start: date
    end: date

    @property
    def days(self) -> int:
        return (self.end - self.start).days


@dataclass(frozen=True)
class Pagination:
    """Page request for the transactions endpoint"""

    limit: int = 500
    offset: int = 0


@dataclass(frozen=True)
class TransactionRecord:
    """Transaction as returned by Plaid.

    Only ``date`` feeds coverage calculations; ``raw`` is the untouched
    provider payload and is what gets relayed to the client.
    """

    transaction_id: str
    date: date
    amount: float
    account_id: str
    name: str
    category: Tuple[str, ...]
    raw: Mapping[str, Any] = field(repr=False, compare=False)


@dataclass(frozen=True)
class LinkSession:
    """Short-lived token the client uses to open Plaid Link"""

    link_token: str
    expiration: Optional[str] = None


@dataclass(frozen=True)
class TokenExchange:
    """Durable credential obtained from a public token"""

    access_token: str
    item_id: str


@dataclass
class AccountsSnapshot:
    """Accounts and item metadata for a linked item"""

    accounts: List[Dict[str, Any]]
    item: Dict[str, Any]


@dataclass
class TransactionPage:
    """One page of the provider's transaction list"""

    records: List[TransactionRecord]
    total: int
    accounts: List[Dict[str, Any]] = field(default_factory=list)
    item: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CoverageReport:
    """How much of the requested window the provider actually returned"""

    requested_window: DateWindow
    actual_window: Optional[DateWindow]  # None when no records came back
    coverage_gap_days: int
    is_complete: bool


class ErrorKind(str, Enum):
    """Failure taxonomy surfaced to clients"""

    INVALID_ARGUMENT = "invalid_argument"
    NOT_READY = "not_ready"
    RATE_LIMITED = "rate_limited"
    INVALID_CREDENTIAL = "invalid_credential"
    UPSTREAM_ERROR = "upstream_error"

    @property
    def is_transient(self) -> bool:
        return self in (ErrorKind.NOT_READY, ErrorKind.RATE_LIMITED, ErrorKind.UPSTREAM_ERROR)


class ClientAction(str, Enum):
    """What the client should do next with a retrieval result"""

    NONE = "none"
    NEXT_PAGE = "next_page"
    RETRY_LATER = "retry_later"
    BACK_OFF = "back_off"
    RELINK = "relink"
    FIX_REQUEST = "fix_request"
    RETRY = "retry"


@dataclass
class Success:
    """Provider returned data; ``coverage`` says whether it is the full window"""

    records: List[TransactionRecord]
    total: int
    coverage: CoverageReport
    pagination: Pagination
    accounts: List[Dict[str, Any]] = field(default_factory=list)
    item: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_more(self) -> bool:
        return self.pagination.offset + len(self.records) < self.total

    @property
    def suggested_action(self) -> ClientAction:
        # Coverage is per page, so a gap is only meaningful once no pages remain
        if self.has_more:
            return ClientAction.NEXT_PAGE
        return ClientAction.NONE if self.coverage.is_complete else ClientAction.RETRY_LATER


@dataclass
class NotReady:
    """Provider is still processing the item; retry after the hint"""

    retry_after_seconds: int
    error_code: str = "PRODUCT_NOT_READY"
    message: str = "Transaction data is still being processed. Please try again in a few moments."

    @property
    def suggested_action(self) -> ClientAction:
        return ClientAction.RETRY_LATER


@dataclass
class Failure:
    """Classified failure, carrying the provider's status for relay"""

    classification: ErrorKind
    message: str
    status_code: int
    error_code: Optional[str] = None

    @property
    def suggested_action(self) -> ClientAction:
        return {
            ErrorKind.INVALID_ARGUMENT: ClientAction.FIX_REQUEST,
            ErrorKind.NOT_READY: ClientAction.RETRY_LATER,
            ErrorKind.RATE_LIMITED: ClientAction.BACK_OFF,
            ErrorKind.INVALID_CREDENTIAL: ClientAction.RELINK,
            ErrorKind.UPSTREAM_ERROR: ClientAction.RETRY,
        }[self.classification]


RetrievalOutcome = Union[Success, NotReady, Failure]
