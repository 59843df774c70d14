"""
orderdesk.api.errors

Error envelope for HTTP responses.

Responsibilities:
- Render every failure as `{"error": "<message>"}` with the matching status.
- Log internal failures with their operator-facing message; clients only get
  the generic text.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

from orderdesk.errors import InternalError, ServiceError
from orderdesk.observability.logging import get_logger

log = get_logger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _service_error(_: Request, exc: ServiceError) -> JSONResponse:
    if isinstance(exc, InternalError):
        log.error("internal_error", error_type=type(exc).__name__, err=exc.message)
        return error_response(exc.status_code, exc.public_message)
    return error_response(exc.status_code, exc.message)


async def _request_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed JSON or wrong field types; the payload itself is not echoed back.
    log.info("bad_request", errors=len(exc.errors()))
    return error_response(HTTP_400_BAD_REQUEST, "bad request")


async def _http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


async def _unhandled_error(_: Request, exc: Exception) -> JSONResponse:
    log.error("unhandled_exception", error_type=type(exc).__name__, exc_info=exc)
    return error_response(HTTP_500_INTERNAL_SERVER_ERROR, "internal server error")


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, _service_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error)
