"""Mock Plaid API for local development and end-to-end tests.

Item behaviour is keyed by the token suffix, e.g. ``access-sandbox-ready``:

- ready: full history back to the requested backfill depth
- backfilling: only the most recent 30 days have been pulled so far
- processing: initial pull not finished, PRODUCT_NOT_READY
- empty: linked account with no transactions
- throttled: RATE_LIMIT_EXCEEDED
- anything else: INVALID_ACCESS_TOKEN

Run with ``uvicorn mock_servers.plaid_server.main:app --port 8001`` and set
``PLAID_BASE_URL=http://localhost:8001``.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
import uuid

from fastapi import Body, FastAPI
from fastapi.responses import JSONResponse

app = FastAPI(title="Mock Plaid Server", version="1.0.0")

ITEM_STATES = {"ready", "backfilling", "processing", "empty", "throttled"}
HISTORY_DAYS = {"ready": 730, "backfilling": 30, "empty": 0}
TRANSACTION_SPACING_DAYS = 3
ACCOUNT_ID = "acc-checking-0001"


def plaid_error(status: int, error_type: str, error_code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={
            "error_type": error_type,
            "error_code": error_code,
            "error_message": message,
            "display_message": None,
            "request_id": uuid.uuid4().hex[:12],
        },
    )


def _state(token: str) -> Optional[str]:
    state = token.rsplit("-", 1)[-1]
    return state if state in ITEM_STATES else None


def _check_keys(body: Dict[str, Any]) -> Optional[JSONResponse]:
    if not body.get("client_id") or not body.get("secret"):
        return plaid_error(400, "INVALID_INPUT", "INVALID_API_KEYS", "invalid client_id or secret provided")
    return None


def _accounts() -> List[Dict[str, Any]]:
    return [
        {
            "account_id": ACCOUNT_ID,
            "name": "Plaid Checking",
            "type": "depository",
            "subtype": "checking",
            "balances": {"available": 100.0, "current": 110.0, "iso_currency_code": "USD"},
        }
    ]


def _item(state: str) -> Dict[str, Any]:
    return {"item_id": f"item-{state}", "institution_id": "ins_109508", "products": ["transactions"]}


def _history(state: str, today: date) -> List[Dict[str, Any]]:
    """Synthetic transactions every few days, newest first, back to the item's backfill depth"""
    depth = HISTORY_DAYS.get(state, 0)
    newest = today - timedelta(days=1)
    return [
        {
            "transaction_id": f"txn-{state}-{offset:04d}",
            "account_id": ACCOUNT_ID,
            "amount": round(12.5 + (offset % 7) * 3.25, 2),
            "iso_currency_code": "USD",
            "date": (newest - timedelta(days=offset)).isoformat(),
            "name": "Coffee Shop" if offset % 2 else "Grocery Store",
            "category": ["Food and Drink"],
            "pending": False,
        }
        for offset in range(0, depth, TRANSACTION_SPACING_DAYS)
    ]


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/link/token/create")
def link_token_create(body: Dict[str, Any] = Body(...)):
    if error := _check_keys(body):
        return error
    if not body.get("user", {}).get("client_user_id"):
        return plaid_error(400, "INVALID_REQUEST", "MISSING_FIELDS", "user.client_user_id is required")

    expiration = datetime.now(timezone.utc) + timedelta(hours=4)
    return {
        "link_token": f"link-sandbox-{uuid.uuid4()}",
        "expiration": expiration.isoformat(),
        "request_id": uuid.uuid4().hex[:12],
    }


@app.post("/item/public_token/exchange")
def item_public_token_exchange(body: Dict[str, Any] = Body(...)):
    if error := _check_keys(body):
        return error
    public_token = body.get("public_token", "")
    state = _state(public_token)
    if not public_token.startswith("public-") or state is None:
        return plaid_error(400, "INVALID_INPUT", "INVALID_PUBLIC_TOKEN", "provided public token is in an invalid format")

    return {"access_token": f"access-sandbox-{state}", "item_id": f"item-{state}", "request_id": uuid.uuid4().hex[:12]}


@app.post("/accounts/get")
def accounts_get(body: Dict[str, Any] = Body(...)):
    if error := _check_keys(body):
        return error
    state = _state(body.get("access_token", ""))
    if state is None:
        return plaid_error(400, "INVALID_INPUT", "INVALID_ACCESS_TOKEN", "provided access token is in an invalid format")

    return {"accounts": _accounts(), "item": _item(state), "request_id": uuid.uuid4().hex[:12]}


@app.post("/transactions/get")
def transactions_get(body: Dict[str, Any] = Body(...)):
    if error := _check_keys(body):
        return error
    state = _state(body.get("access_token", ""))
    if state is None:
        return plaid_error(400, "INVALID_INPUT", "INVALID_ACCESS_TOKEN", "provided access token is in an invalid format")
    if state == "processing":
        return plaid_error(
            400,
            "ITEM_ERROR",
            "PRODUCT_NOT_READY",
            "the requested product is not yet ready. please provide a webhook or try the request again later",
        )
    if state == "throttled":
        return plaid_error(429, "RATE_LIMIT_EXCEEDED", "TRANSACTIONS_LIMIT", "rate limit exceeded for transactions")

    start = date.fromisoformat(body["start_date"])
    end = date.fromisoformat(body["end_date"])
    options = body.get("options") or {}
    count = options.get("count", 100)
    offset = options.get("offset", 0)
    account_ids = options.get("account_ids")

    matching = [
        txn
        for txn in _history(state, datetime.now(timezone.utc).date())
        if start <= date.fromisoformat(txn["date"]) <= end
        and (not account_ids or txn["account_id"] in account_ids)
    ]

    return {
        "accounts": _accounts(),
        "item": _item(state),
        "transactions": matching[offset : offset + count],
        "total_transactions": len(matching),
        "request_id": uuid.uuid4().hex[:12],
    }
