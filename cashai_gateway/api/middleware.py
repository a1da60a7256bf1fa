"""FastAPI middleware for request tracing and metrics"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from cashai_gateway.infrastructure.observability.metrics import request_duration_histogram

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propagate the mobile client's request ID, or mint one, for tracing"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def endpoint_label(request: Request) -> str:
    """Full route template for a request, including any router prefix"""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    if not path:
        return request.url.path
    # Mounted routers keep their prefix in root_path, not on the route
    root_path = request.scope.get("root_path", "")
    if root_path and not path.startswith(root_path):
        return root_path + path
    return path


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record HTTP request metrics and an access log line"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        duration = time.time() - start_time
        # Label by route template so query strings (access tokens) never reach metrics
        endpoint = endpoint_label(request)
        request_duration_histogram.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code,
        ).observe(duration)

        logging.info(
            f"{request.method} {endpoint} {response.status_code}",
            extra={
                "request_id": getattr(request.state, "request_id", "unknown"),
                "duration_ms": duration * 1000,
            },
        )
        return response
