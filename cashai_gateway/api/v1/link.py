"""POST /api/create_link_token and /api/set_access_token - Plaid Link flow"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request

from cashai_gateway.api.v1.schemas import (
    AccessTokenResponse,
    LinkTokenRequest,
    LinkTokenResponse,
    PublicTokenRequest,
)
from cashai_gateway.api.dependencies import get_plaid_gateway, get_request_id, get_settings
from cashai_gateway.api.errors import invalid_argument_response, upstream_failure_response
from cashai_gateway.config import Settings
from cashai_gateway.domain.exceptions import InvalidArgumentError, UpstreamError
from cashai_gateway.infrastructure.clients.plaid import PlaidGateway

router = APIRouter()

DEFAULT_USER_ID = "default_user"


@router.post("/create_link_token", response_model=LinkTokenResponse)
async def create_link_token(
    request: Request,
    request_body: Optional[LinkTokenRequest] = None,
    gateway: PlaidGateway = Depends(get_plaid_gateway),
    settings: Settings = Depends(get_settings),
):
    """
    Create a Link token for the mobile client.

    Plaid is asked to backfill ``history_days`` (default from settings) of
    transactions once the user finishes linking.
    """
    request_id = get_request_id(request)
    request_body = request_body or LinkTokenRequest()
    user_id = request_body.user_id or DEFAULT_USER_ID
    history_days = request_body.history_days or settings.link_history_days

    logging.info(
        f"Creating link token for user {user_id}",
        extra={"request_id": request_id, "history_days": history_days},
    )

    try:
        session = await gateway.create_link_session(user_id, history_days)
    except UpstreamError as e:
        logging.error(f"Plaid error creating link token: {e}", extra={"request_id": request_id})
        return upstream_failure_response(e)

    return LinkTokenResponse(link_token=session.link_token, expiration=session.expiration)


@router.post("/set_access_token", response_model=AccessTokenResponse)
async def set_access_token(
    request: Request,
    request_body: Optional[PublicTokenRequest] = None,
    gateway: PlaidGateway = Depends(get_plaid_gateway),
):
    """Exchange a public token from a completed Link flow for an access token"""
    request_id = get_request_id(request)
    public_token = request_body.public_token if request_body else None

    try:
        exchange = await gateway.exchange_public_token(public_token or "")
    except InvalidArgumentError as e:
        return invalid_argument_response(str(e))
    except UpstreamError as e:
        logging.error(f"Plaid error exchanging public token: {e}", extra={"request_id": request_id})
        return upstream_failure_response(e)

    logging.info(f"Public token exchanged. Item ID: {exchange.item_id}", extra={"request_id": request_id})

    return AccessTokenResponse(access_token=exchange.access_token, item_id=exchange.item_id)
