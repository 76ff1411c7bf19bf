from typing import Any, Dict, List, Union

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from codenotes.config import logger

error_logger = logger.getChild("errors")
consistency_logger = logger.getChild("consistency")

Detail = Union[str, Dict[str, Any], List[Dict[str, Any]]]


class AppException(Exception):
    """An error with a fixed HTTP status; `detail` is sent to the caller as is."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: Detail = "Internal error"

    def __init__(self, detail: Detail = None, status_code: int = None):
        self.detail = self.default_detail if detail is None else detail
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.detail)


class DatabaseException(AppException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Database error occurred"


class AuthenticationException(AppException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication failed"


class ResourceNotFoundException(AppException):
    """
    Record absent or owned by someone else. The two cases are
    indistinguishable to the caller.
    """

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class DuplicateKeyException(AppException):
    """Identity collision on create."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Resource already exists"


class ValidationException(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Validation error"


class Inconsistency:
    """
    A projection write (topic entry or membership list) that failed after its
    canonical write succeeded. Logged, never raised; the next reconcile pass
    or full client re-fetch heals it.
    """

    def __init__(self, operation: str, owner_id: str, target: str, reason: str):
        self.operation = operation
        self.owner_id = owner_id
        self.target = target
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.operation} left drift on {self.target} (owner {self.owner_id}): {self.reason}"


def report_inconsistency(
    operation: str, owner_id: str, target: str, reason: Union[str, Exception]
) -> Inconsistency:
    inconsistency = Inconsistency(operation, owner_id, target, str(reason))
    consistency_logger.warning(f"Inconsistency: {inconsistency}")
    return inconsistency


def _error_response(status_code: int, detail: Detail) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail})


def _format_errors(errors) -> List[Dict[str, Any]]:
    return [
        {"type": error["type"], "loc": list(error["loc"]), "msg": error["msg"]}
        for error in errors
    ]


async def app_exception_handler(request: Request, exc: AppException):
    log = error_logger.error if exc.status_code >= 500 else error_logger.warning
    log(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return _error_response(exc.status_code, exc.detail)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = _format_errors(exc.errors())
    error_logger.warning(f"{request.method} {request.url.path} rejected: {errors}")
    return _error_response(status.HTTP_400_BAD_REQUEST, errors)


async def model_validation_handler(request: Request, exc: ValidationError):
    errors = _format_errors(exc.errors(include_input=False, include_url=False))
    error_logger.warning(f"{request.method} {request.url.path} produced invalid data: {errors}")
    return _error_response(status.HTTP_400_BAD_REQUEST, errors)


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    error_logger.error(f"Database error on {request.url.path}: {str(exc)}")
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Database error occurred. Please try again later.",
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    error_logger.error(f"Unexpected error on {request.url.path}: {str(exc)}", exc_info=True)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred. Please try again later.",
    )


def register_exception_handlers(app: FastAPI):
    handlers = {
        AppException: app_exception_handler,
        RequestValidationError: request_validation_handler,
        ValidationError: model_validation_handler,
        SQLAlchemyError: sqlalchemy_exception_handler,
        Exception: unhandled_exception_handler,
    }
    for exc_class, handler in handlers.items():
        app.add_exception_handler(exc_class, handler)
    error_logger.info(f"Registered {len(handlers)} exception handlers")
