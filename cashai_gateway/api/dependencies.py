"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request

from cashai_gateway.config import Settings
from cashai_gateway.domain.reconciler import TransactionWindowReconciler
from cashai_gateway.infrastructure.clients.plaid import PlaidGateway


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_plaid_gateway(request: Request) -> PlaidGateway:
    """Provide the process-wide Plaid gateway built at startup"""
    return request.app.state.plaid_gateway


def get_reconciler(
    request: Request,
    gateway: PlaidGateway = Depends(get_plaid_gateway),
) -> TransactionWindowReconciler:
    """Provide a transaction reconciler bound to the Plaid gateway"""
    return TransactionWindowReconciler(gateway, request.app.state.reconciler_policy)
