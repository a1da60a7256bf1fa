"""Unit tests for Plaid error classification"""

import pytest

from cashai_gateway.domain.classification import classify_error, relay_status
from cashai_gateway.domain.exceptions import UpstreamError
from cashai_gateway.domain.models import ErrorKind


def plaid_error(status, error_type=None, error_code=None):
    return UpstreamError(
        "transactions_get",
        "plaid said no",
        status_code=status,
        error_type=error_type,
        error_code=error_code,
    )


@pytest.mark.parametrize("status", [200, 400, 409, 500, None])
def test_product_not_ready_always_not_ready(status):
    """Processing items are never a hard failure, whatever status carried the code"""
    error = plaid_error(status, "ITEM_ERROR", "PRODUCT_NOT_READY")
    assert classify_error(error) is ErrorKind.NOT_READY


@pytest.mark.parametrize(
    "status, error_type, error_code",
    [
        (429, "RATE_LIMIT_EXCEEDED", "TRANSACTIONS_LIMIT"),
        (429, "RATE_LIMIT_EXCEEDED", "RATE_LIMIT"),
        (400, None, "ACCOUNTS_LIMIT"),
        (429, None, None),
    ],
)
def test_rate_limited(status, error_type, error_code):
    assert classify_error(plaid_error(status, error_type, error_code)) is ErrorKind.RATE_LIMITED


@pytest.mark.parametrize(
    "error_code",
    ["INVALID_ACCESS_TOKEN", "ITEM_LOGIN_REQUIRED", "ITEM_NOT_FOUND", "INVALID_PUBLIC_TOKEN", "ACCESS_NOT_GRANTED"],
)
def test_invalid_credential(error_code):
    assert classify_error(plaid_error(400, "INVALID_INPUT", error_code)) is ErrorKind.INVALID_CREDENTIAL


@pytest.mark.parametrize(
    "status, error_type, error_code",
    [
        (500, "API_ERROR", "INTERNAL_SERVER_ERROR"),
        (400, "INVALID_INPUT", "INVALID_API_KEYS"),
        (None, None, None),
    ],
)
def test_everything_else_is_upstream_error(status, error_type, error_code):
    assert classify_error(plaid_error(status, error_type, error_code)) is ErrorKind.UPSTREAM_ERROR


def test_codes_are_case_insensitive():
    assert classify_error(plaid_error(400, "item_error", "product_not_ready")) is ErrorKind.NOT_READY


def test_relay_status_preserves_provider_status():
    assert relay_status(plaid_error(429)) == 429
    assert relay_status(plaid_error(400)) == 400


def test_relay_status_without_response_is_bad_gateway():
    assert relay_status(plaid_error(None)) == 502


def test_transient_kinds():
    assert ErrorKind.NOT_READY.is_transient
    assert ErrorKind.RATE_LIMITED.is_transient
    assert ErrorKind.UPSTREAM_ERROR.is_transient
    assert not ErrorKind.INVALID_CREDENTIAL.is_transient
    assert not ErrorKind.INVALID_ARGUMENT.is_transient


@pytest.mark.parametrize("status", [200, 204, 302])
def test_relay_status_never_relays_success(status):
    """A failure built from a non-error response still renders as a gateway error"""
    assert relay_status(plaid_error(status)) == 502
