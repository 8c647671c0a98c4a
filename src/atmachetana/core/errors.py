"""
Error taxonomy and the handlers that turn it into response envelopes.

Services raise ``AppError`` subclasses; every failure leaves the API as
``{"success": false, "message": ...}`` with the matching status code.
"""

from __future__ import annotations

import logging
import traceback
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, NoResultFound
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized to access this route"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "User role is not authorized to access this route"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Requested resource not found"


class InvalidInput(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class Conflict(AppError):
    """Uniqueness violation. Reported as 400 for client compatibility."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Duplicate value"


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server Error"


def error_body(
    message: str, exc: BaseException | None = None, *, debug: bool = False
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "message": message}
    if debug and exc is not None:
        body["stack"] = "".join(traceback.format_exception(exc))
    return body


def register_exception_handlers(app: FastAPI, *, debug: bool = False) -> None:
    """Install handlers mapping every failure onto the response envelope."""

    @app.exception_handler(AppError)
    async def handle_app_error(_request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__}: {exc.message}", exc_info=exc)
        return JSONResponse(
            status_code=exc.status_code, content=error_body(exc.message, exc, debug=debug)
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        _request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        message = "Route not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
        else:
            message = InvalidInput.default_message
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body(message))

    @app.exception_handler(IntegrityError)
    async def handle_integrity_error(_request: Request, exc: IntegrityError) -> JSONResponse:
        logger.warning(f"Integrity error: {exc.orig}")
        return JSONResponse(
            status_code=Conflict.status_code,
            content=error_body("Duplicate value or invalid relation", exc, debug=debug),
        )

    @app.exception_handler(NoResultFound)
    async def handle_no_result(_request: Request, exc: NoResultFound) -> JSONResponse:
        return JSONResponse(
            status_code=NotFound.status_code,
            content=error_body(NotFound.default_message, exc, debug=debug),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled error: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(InternalError.default_message, exc, debug=debug),
        )
