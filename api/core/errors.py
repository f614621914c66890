"""
Service error kinds and their HTTP mapping.

Feature code raises these; `register_exception_handlers` is the only place
that turns an error kind into a status code. Every error response body is
`{"error": "<message>"}`.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ServiceError(RuntimeError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ConfigError(ServiceError):
    """Required configuration is missing. Fatal at startup."""


class DatabaseConnectionError(ServiceError):
    """The store could not be reached, authenticated or prepared. Fatal at startup."""


class InputValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class QueryError(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."

    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "path", "query")]
    msg = str(first.get("msg") or "Invalid value")
    if loc:
        return f"{'.'.join(loc)}: {msg}"
    return msg


async def _service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    message = str(exc) or exc.__class__.__name__
    if exc.status_code >= 500:
        logger.error(
            "request_failed method=%s path=%s kind=%s error=%s",
            request.method,
            request.url.path,
            exc.__class__.__name__,
            message,
        )
    else:
        logger.warning(
            "request_rejected method=%s path=%s kind=%s error=%s",
            request.method,
            request.url.path,
            exc.__class__.__name__,
            message,
        )
    return error_response(exc.status_code, message)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _describe_validation_error(exc)
    logger.warning(
        "request_rejected method=%s path=%s kind=RequestValidationError error=%s",
        request.method,
        request.url.path,
        message,
    )
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "request_failed method=%s path=%s kind=%s",
        request.method,
        request.url.path,
        exc.__class__.__name__,
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error.")


async def _http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, _service_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
