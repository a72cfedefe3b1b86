"""Exception handling and custom exceptions."""

from typing import Union

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

logger = structlog.get_logger()


class BaseCustomException(Exception):
    """Base class for custom exceptions."""

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(BaseCustomException):
    """Exception raised when a resource is not found."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class ValidationException(BaseCustomException):
    """Exception raised when validation fails."""

    def __init__(self, message: str = "Validation error"):
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY)


class ConflictException(BaseCustomException):
    """Exception raised when a record with the same key already exists."""

    def __init__(self, message: str = "Resource already exists"):
        super().__init__(message, status.HTTP_409_CONFLICT)


class StorageException(BaseCustomException):
    """Exception raised when the storage backend fails."""

    def __init__(self, message: str = "Storage error"):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)


class StorageUnavailableException(BaseCustomException):
    """Exception raised when no storage backend is configured."""

    def __init__(self, message: str = "Database connection not available"):
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)


def error_response(request: Request, status_code: int, error_type: str, message: str, **extra) -> JSONResponse:
    """Typed error payload shared by all handlers."""
    error = {
        "type": error_type,
        "message": message,
        "request_id": getattr(request.state, "request_id", "unknown"),
    }
    error.update(extra)
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


async def custom_exception_handler(request: Request, exc: BaseCustomException) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log("Request rejected", exception_type=type(exc).__name__, message=exc.message, status_code=exc.status_code)
    return error_response(request, exc.status_code, type(exc).__name__, exc.message)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    logger.warning("HTTP exception occurred", status_code=exc.status_code, detail=exc.detail)
    return error_response(request, exc.status_code, "HTTPException", str(exc.detail))


async def validation_exception_handler(
    request: Request, exc: Union[ValidationError, RequestValidationError]
) -> JSONResponse:
    """Report field errors with their camelCase locations."""
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
        for e in exc.errors()
    ]
    logger.warning("Validation failed", errors=errors)
    return error_response(
        request, status.HTTP_422_UNPROCESSABLE_ENTITY, "ValidationError", "Validation failed", details=errors
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database exception occurred", error=str(exc))
    return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "DatabaseError", "Internal server error")


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception occurred", exception_type=type(exc).__name__, error=str(exc))
    return error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "InternalServerError", "Internal server error"
    )


def add_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BaseCustomException, custom_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
