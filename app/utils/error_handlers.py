"""
Global exception handlers for FastAPI application.

Every error leaves the API as {message, error_code, details, type}.
"""

import logging
from typing import Any, Dict, Optional, Union
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.utils.exceptions import (
    EventSubRelayException,
    ExternalServiceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR_CODE = {
    "VALIDATION_ERROR": 422,
    "CONFIGURATION_ERROR": 503,
    "EXTERNAL_SERVICE_ERROR": 502,
}


def _request_context(request: Request) -> Dict[str, Any]:
    return {
        "path": request.url.path,
        "method": request.method,
        "request_id": getattr(request.state, "request_id", None),
    }


def _error_response(
    status_code: int,
    message: str,
    error_code: Optional[str],
    details: Dict[str, Any],
    error_type: str,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "message": message,
            "error_code": error_code,
            "details": details,
            "type": error_type,
        }
    )


async def relay_exception_handler(
    request: Request, exc: EventSubRelayException
) -> JSONResponse:
    """
    Handle relay exceptions.

    Upstream failures report which service failed and, for Twitch, the
    status code Twitch answered with. Validation failures name the field.
    """
    details = dict(exc.details)
    if isinstance(exc, ExternalServiceError):
        details["service_name"] = exc.service_name
        error_type = "upstream_error"
    elif isinstance(exc, ValidationError):
        details["field"] = exc.field
        error_type = "validation_error"
    else:
        error_type = "relay_error"

    status_code = _STATUS_BY_ERROR_CODE.get(exc.error_code, 500)
    log = logger.warning if status_code < 500 else logger.error
    log(
        f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}",
        extra={**_request_context(request), "error_code": exc.error_code, "details": details}
    )

    return _error_response(status_code, exc.message, exc.error_code, details, error_type)


async def http_exception_handler(
    request: Request, exc: Union[HTTPException, StarletteHTTPException]
) -> JSONResponse:
    """Handle HTTP exceptions raised by routing and by the endpoints."""
    logger.warning(
        f"HTTP {exc.status_code} on {request.method} {request.url.path}: {exc.detail}",
        extra=_request_context(request)
    )

    return _error_response(
        exc.status_code, str(exc.detail), f"HTTP_{exc.status_code}", {}, "http_error"
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation exceptions, such as an unsupported subscription type."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(
        f"Rejected {request.method} {request.url.path}: {len(errors)} validation error(s)",
        extra={**_request_context(request), "errors": errors}
    )

    return _error_response(
        422, "Validation failed", "VALIDATION_ERROR", {"errors": errors}, "validation_error"
    )


async def general_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions, including failures raised by event handlers."""
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
        extra=_request_context(request),
        exc_info=True
    )

    return _error_response(
        500,
        "Internal server error",
        "INTERNAL_SERVER_ERROR",
        {"debug_message": str(exc) if request.app.debug else None},
        "internal_error",
    )
