"""GET /api/accounts - Accounts for a linked item"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from cashai_gateway.api.v1.schemas import AccountsResponse
from cashai_gateway.api.dependencies import get_plaid_gateway, get_request_id
from cashai_gateway.api.errors import invalid_argument_response, upstream_failure_response
from cashai_gateway.domain.exceptions import InvalidArgumentError, UpstreamError
from cashai_gateway.infrastructure.clients.plaid import PlaidGateway

router = APIRouter()


@router.get("/accounts", response_model=AccountsResponse)
async def get_accounts(
    request: Request,
    access_token: Optional[str] = Query(None, description="Plaid access token"),
    gateway: PlaidGateway = Depends(get_plaid_gateway),
):
    request_id = get_request_id(request)

    try:
        snapshot = await gateway.list_accounts(access_token or "")
    except InvalidArgumentError as e:
        return invalid_argument_response(str(e))
    except UpstreamError as e:
        logging.error(f"Plaid error fetching accounts: {e}", extra={"request_id": request_id})
        return upstream_failure_response(e)

    return AccountsResponse(accounts=snapshot.accounts, item=snapshot.item)
