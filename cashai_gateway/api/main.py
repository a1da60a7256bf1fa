"""FastAPI application factory"""

import logging
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from cashai_gateway.api.errors import validation_exception_handler
from cashai_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from cashai_gateway.api.v1 import accounts, link, transactions
from cashai_gateway.config import Settings, settings as default_settings
from cashai_gateway.domain.reconciler import ReconcilerPolicy
from cashai_gateway.infrastructure.clients.plaid import PlaidConfig, PlaidGateway
from cashai_gateway.infrastructure.observability.logging import setup_logging

# Setup structured logging
setup_logging(default_settings.log_level, default_settings.service_name)


def create_app(
    settings: Optional[Settings] = None,
    plaid_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Plaid configuration and retrieval policy are read from settings once here
    and held on ``app.state``; request handlers never read settings directly.
    ``plaid_transport`` lets tests point the gateway at an in-process mock.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="CashAI Gateway",
        description="Plaid link, account and transaction relay for the CashAI mobile app",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.plaid_gateway = PlaidGateway(PlaidConfig.from_settings(settings), transport=plaid_transport)
    app.state.reconciler_policy = ReconcilerPolicy(
        default_window_months=settings.default_window_months,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
        coverage_tolerance_days=settings.coverage_tolerance_days,
        not_ready_retry_after_seconds=settings.not_ready_retry_after_seconds,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Health check endpoints
    @app.get("/")
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name, "environment": settings.plaid_env}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(link.router, prefix="/api", tags=["link"])
    app.include_router(accounts.router, prefix="/api", tags=["accounts"])
    app.include_router(transactions.router, prefix="/api", tags=["transactions"])

    logging.info(
        f"{settings.service_name} configured for Plaid {settings.plaid_env}",
        extra={"plaid_base_url": app.state.plaid_gateway.config.base_url},
    )

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn"""
    import uvicorn

    uvicorn.run(app, host=default_settings.host, port=default_settings.port, log_config=None)
