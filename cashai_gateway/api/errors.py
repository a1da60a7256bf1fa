"""Structured JSON error responses"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cashai_gateway.api.v1.schemas import ErrorResponse
from cashai_gateway.domain.classification import classify_error, relay_status
from cashai_gateway.domain.exceptions import UpstreamError
from cashai_gateway.domain.models import ErrorKind, Failure


def failure_response(failure: Failure) -> JSONResponse:
    return JSONResponse(
        status_code=failure.status_code,
        content=ErrorResponse.from_outcome(failure).model_dump(),
    )


def invalid_argument_response(message: str) -> JSONResponse:
    return failure_response(Failure(ErrorKind.INVALID_ARGUMENT, message, status_code=400))


def upstream_failure_response(error: UpstreamError) -> JSONResponse:
    """Render a Plaid failure with its classification and the provider's own status"""
    failure = Failure(
        classification=classify_error(error),
        message=error.message,
        status_code=relay_status(error),
        error_code=error.error_code,
    )
    return failure_response(failure)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed query/body values as invalid_argument instead of FastAPI's default 422"""
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ())[1:]) or 'request'}: {err.get('msg')}" for err in exc.errors()
    )
    logging.warning(f"Rejected request: {problems}", extra={"path": request.url.path})
    return invalid_argument_response(problems)
