"""Map Plaid error codes onto the client-facing failure taxonomy"""

from cashai_gateway.domain.exceptions import UpstreamError
from cashai_gateway.domain.models import ErrorKind

NOT_READY_CODES = frozenset({"PRODUCT_NOT_READY"})

RATE_LIMIT_TYPES = frozenset({"RATE_LIMIT_EXCEEDED"})

INVALID_CREDENTIAL_CODES = frozenset(
    {
        "INVALID_ACCESS_TOKEN",
        "INVALID_PUBLIC_TOKEN",
        "ITEM_LOGIN_REQUIRED",
        "ITEM_NOT_FOUND",
        "ITEM_LOCKED",
        "INVALID_CREDENTIALS",
        "ACCESS_NOT_GRANTED",
        "USER_PERMISSION_REVOKED",
    }
)


def classify_error(error: UpstreamError) -> ErrorKind:
    """
    Classify a provider failure.

    Order matters: "not ready" wins over everything else so that a
    processing item is never reported as a hard failure, whatever HTTP
    status Plaid used to signal it.
    """
    code = (error.error_code or "").upper()
    error_type = (error.error_type or "").upper()

    if code in NOT_READY_CODES:
        return ErrorKind.NOT_READY

    if error_type in RATE_LIMIT_TYPES or code == "RATE_LIMIT" or code.endswith("_LIMIT") or error.status_code == 429:
        return ErrorKind.RATE_LIMITED

    if code in INVALID_CREDENTIAL_CODES:
        return ErrorKind.INVALID_CREDENTIAL

    return ErrorKind.UPSTREAM_ERROR


def relay_status(error: UpstreamError) -> int:
    """HTTP status to relay to the client: the provider's own error status, otherwise 502"""
    if error.status_code is None or error.status_code < 400:
        return 502
    return error.status_code
