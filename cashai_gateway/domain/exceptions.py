"""Domain-specific exceptions"""

from typing import Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidArgumentError(DomainException):
    """Caller supplied a missing or malformed input"""

    pass


class UpstreamError(DomainException):
    """Plaid returned an error or could not be reached.

    The provider's status and error fields are kept verbatim so callers can
    classify the failure. ``status_code`` is None for transport failures
    (timeouts, connection errors) where no response was received.
    """

    def __init__(
        self,
        operation: str,
        message: str,
        status_code: Optional[int] = None,
        error_type: Optional[str] = None,
        error_code: Optional[str] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.error_code = error_code
        self.request_id = request_id

    def __str__(self) -> str:
        code = self.error_code or "NO_CODE"
        return f"{self.operation} failed [{self.status_code} {code}]: {self.message}"
