# admin_panel/exception_handlers.py
import logging
import sqlite3
from typing import Any, Optional, Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import StoreUnavailableError
from .http_client import HttpClientError
from .responses import utc_timestamp

logger = logging.getLogger(__name__)


def error_response(
    request: Request,
    status_code: int,
    message: Any,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Every error leaves the API in this one shape."""
    return JSONResponse(
        status_code=status_code,
        content={
            "statusCode": status_code,
            "timestamp": utc_timestamp(),
            "path": request.url.path,
            "message": message,
        },
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return error_response(request, exc.status_code, exc.detail, getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} rejected: {exc.errors()}")
    return error_response(request, status.HTTP_400_BAD_REQUEST, "Invalid data provided")


async def http_client_exception_handler(request: Request, exc: HttpClientError) -> JSONResponse:
    logger.error(f"Upstream call failed while serving {request.url.path}: {exc}")
    return error_response(request, status.HTTP_502_BAD_GATEWAY, str(exc))


async def store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    logger.error(f"Session store unavailable while serving {request.url.path}: {exc}")
    return error_response(request, status.HTTP_503_SERVICE_UNAVAILABLE, "Session store unavailable")


async def sqlite_exception_handler(request: Request, exc: sqlite3.Error) -> JSONResponse:
    logger.error(f"Database error while serving {request.url.path}: {exc}", exc_info=exc)
    return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error while serving {request.method} {request.url.path}: {exc}", exc_info=exc)
    return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HttpClientError, http_client_exception_handler)
    app.add_exception_handler(StoreUnavailableError, store_unavailable_handler)
    app.add_exception_handler(sqlite3.Error, sqlite_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
