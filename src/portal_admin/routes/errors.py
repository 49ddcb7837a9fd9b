"""Exception handlers mapping errors to ``{success: false, error}`` responses."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from portal_admin.errors import (
    ConfigurationError,
    EditorError,
    NetworkError,
    PayloadTooLargeError,
    RecordNotFoundError,
    RemoteStoreError,
)

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)


def error_response(status_code: int, error: str, **extra: object) -> JSONResponse:
    return JSONResponse({"success": False, "error": error, **extra}, status_code=status_code)


def _first_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, _first_error(exc))


async def _value_error(request: Request, exc: ValueError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc))


async def _editor_error(request: Request, exc: EditorError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc))


async def _not_found(request: Request, exc: RecordNotFoundError) -> JSONResponse:
    return error_response(status.HTTP_404_NOT_FOUND, str(exc))


async def _too_large(request: Request, exc: PayloadTooLargeError) -> JSONResponse:
    return error_response(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, str(exc))


async def _configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Configuration error — path=%s error=%s", request.url.path, exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


async def _store_error(request: Request, exc: RemoteStoreError | NetworkError) -> JSONResponse:
    logger.error("Store request failed — path=%s error=%s", request.url.path, exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Storage error: {exc}")


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(ValueError, _value_error)
    app.add_exception_handler(EditorError, _editor_error)
    app.add_exception_handler(RecordNotFoundError, _not_found)
    app.add_exception_handler(PayloadTooLargeError, _too_large)
    app.add_exception_handler(ConfigurationError, _configuration_error)
    app.add_exception_handler(RemoteStoreError, _store_error)
    app.add_exception_handler(NetworkError, _store_error)
