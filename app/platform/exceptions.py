import traceback
from typing import Any, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.platform.config import Settings, settings as default_settings
from app.platform.logger import get_logger
from app.platform.response import error_response

logger = get_logger(__name__)


class AuditError(Exception):
    """Base class for every error the service maps to a JSON response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidInputError(AuditError):
    status_code = status.HTTP_400_BAD_REQUEST


class ServiceUnavailableError(AuditError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class TranslationError(AuditError):
    """Raised at startup when a locale table is missing or malformed."""


class DriverFailure(AuditError):
    """An audit driver could not produce a report."""


class InvalidURLError(DriverFailure):
    pass


class LaunchFailure(DriverFailure):
    pass


class ImportFailure(DriverFailure):
    pass


class AuditFailure(DriverFailure):
    pass


class NavigationTimeout(DriverFailure):
    pass


def _settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", default_settings)


def _format_stack(exc: BaseException) -> str:
    origin = exc.__cause__ or exc
    return "".join(traceback.format_exception(type(origin), origin, origin.__traceback__))


def add_exception_handlers(app):
    @app.exception_handler(AuditError)
    async def audit_error_handler(request: Request, exc: AuditError):
        stack = None
        if isinstance(exc, DriverFailure) and not _settings(request).is_production:
            stack = _format_stack(exc)
        return error_response(
            error=exc.message,
            status_code=exc.status_code,
            details=exc.details,
            stack=stack,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(error=str(exc.detail) or "Error", status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(
            error="Validation failed",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=exc.errors(),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.url.path}: {exc}")
        return error_response(
            error="Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=str(exc),
            stack=None if _settings(request).is_production else _format_stack(exc),
        )
