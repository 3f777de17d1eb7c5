"""
Exception handlers.

The only place where failures become HTTP status codes. Everything raised
below the route handlers is a ParcInfoError subclass; this module picks the
status, logs, and renders the `{message, code, details?}` body.
"""
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from parcinfo.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InternalFault,
    ParcInfoError,
    ResourceNotFoundError,
    ValidationError,
    error_response,
)
from parcinfo.core.logging_config import logger
from parcinfo.core.rate_limiter import rate_limit_exceeded_handler

INTERNAL_ERROR_MESSAGE = "Internal server error"

# Most specific first
STATUS_BY_ERROR = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (ResourceNotFoundError, status.HTTP_404_NOT_FOUND),
    (InternalFault, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_for(error: ParcInfoError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _validation_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        errors.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return errors


async def parcinfo_error_handler(request: Request, exc: ParcInfoError) -> JSONResponse:
    status_code = status_for(exc)

    if status_code >= 500:
        logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
        return JSONResponse(
            status_code=status_code,
            content={"message": INTERNAL_ERROR_MESSAGE, "code": exc.code},
        )

    logger.warning(
        f"{request.method} {request.url.path} -> {status_code} {exc.code}: {exc.message}",
        extra={"event_type": "domain_error", "error_code": exc.code, "http_status": status_code},
    )
    return JSONResponse(status_code=status_code, content=error_response(exc))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = _validation_errors(exc)
    message = "; ".join(f"{e['field']}: {e['message']}" if e["field"] else e["message"] for e in errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "message": message or "Invalid request",
            "code": "VALIDATION_ERROR",
            "details": {"errors": errors},
        },
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": INTERNAL_ERROR_MESSAGE},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ParcInfoError, parcinfo_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
