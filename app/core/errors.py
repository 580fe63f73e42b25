import logging
import traceback
from enum import Enum

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    authentication = "authentication"
    authorization = "authorization"
    not_found = "not_found"
    conflict = "conflict"
    validation = "validation"
    unexpected = "unexpected"


class AppError(HTTPException):
    status_code = 500
    kind = ErrorKind.unexpected

    def __init__(self, message: str):
        super().__init__(status_code=self.status_code, detail=message)
        self.message = message


class AuthenticationError(AppError):
    status_code = 401
    kind = ErrorKind.authentication

    def __init__(self, message: str):
        super().__init__(message)
        self.headers = {"WWW-Authenticate": "Bearer"}


class AuthorizationError(AppError):
    status_code = 403
    kind = ErrorKind.authorization


class NotFoundError(AppError):
    status_code = 404
    kind = ErrorKind.not_found


class DomainConflictError(AppError):
    status_code = 400
    kind = ErrorKind.conflict


class ValidationFailedError(AppError):
    status_code = 400
    kind = ErrorKind.validation


_KIND_BY_STATUS = {
    400: ErrorKind.validation,
    401: ErrorKind.authentication,
    403: ErrorKind.authorization,
    404: ErrorKind.not_found,
    422: ErrorKind.validation,
}


def error_body(message: str, kind: ErrorKind) -> dict:
    return {"message": message, "kind": kind.value}


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.kind),
        headers=getattr(exc, "headers", None),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc, AppError):
        return await app_error_handler(request, exc)

    if exc.status_code == 404 and exc.detail == "Not Found":
        message = "Route not found"
    else:
        message = str(exc.detail)

    kind = _KIND_BY_STATUS.get(exc.status_code, ErrorKind.unexpected)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message, kind),
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"

    return JSONResponse(status_code=400, content=error_body(message, ErrorKind.validation))


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    content = error_body("Server error", ErrorKind.unexpected)
    if settings.ENVIRONMENT != "production":
        content["error"] = str(exc)
        content["trace"] = traceback.format_exception(type(exc), exc, exc.__traceback__)
    return JSONResponse(status_code=500, content=content)


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
