"""
Application error taxonomy and the handlers that render it as `{"message": ...}`.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException

from crudsuite.core.config import settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AppError):
    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class ConflictError(AppError):
    """Duplicate email, double application and similar."""
    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Access token required"):
        super().__init__(message, status_code=401)


class ForbiddenError(AppError):
    def __init__(self, message: str = "Access denied"):
        super().__init__(message, status_code=403)


class NotFoundError(AppError):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class DatabaseError(AppError):
    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message, status_code=500)


def first_error_message(exc: RequestValidationError) -> str:
    """Name the first violated field, e.g. ``price: Input should be ...``."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    err = errors[0]
    loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
    msg = err.get("msg", "Invalid value")
    if loc:
        return f"{'.'.join(loc)}: {msg}"
    return msg


async def _app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def _http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"message": first_error_message(exc)})


async def _database_error_handler(request: Request, exc: PyMongoError):
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    err = DatabaseError()
    if settings.DEBUG:
        err = DatabaseError(f"{err.message}: {exc}")
    return JSONResponse(status_code=err.status_code, content={"message": err.message})


async def _unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    message = "Internal server error"
    if settings.DEBUG:
        message = f"{message}: {exc!r}"
    return JSONResponse(status_code=500, content={"message": message})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(HTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(PyMongoError, _database_error_handler)
    # anything else still answers with the JSON error body
    app.add_exception_handler(Exception, _unhandled_error_handler)
