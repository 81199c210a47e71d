"""Typed application failures and their JSON rendering."""
from __future__ import annotations

import logging

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for failures that map onto an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request payload"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ParentNotFound(AppError):
    """A referenced parent entity does not exist."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Parent category does not exist"


class InvalidParent(AppError):
    """The proposed parent would make the category its own ancestor."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid parent category"


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Please log in"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Administrator privileges required"


class StorageError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Could not save changes"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an :class:`AppError` as ``{"message": ...}``."""

    if exc.status_code >= 500:
        logger.error("HTTP %s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse({"message": exc.message}, status_code=exc.status_code, headers=headers)


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        {"message": str(exc.detail)},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected payload for %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(
        {"message": ValidationError.default_message},
        status_code=status.HTTP_400_BAD_REQUEST,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
