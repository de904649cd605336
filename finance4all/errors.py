from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from finance4all.logging_config import get_logger


GENERIC_ERROR_MESSAGE = "An error occurred processing your request"


# ===== ERROR TYPES =====

class ApiError(Exception):
    """Base error carrying a machine readable code and an HTTP status"""
    code = "INTERNAL_SERVER_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def extensions(self) -> Dict[str, Any]:
        return {"code": self.code}


class UnauthenticatedError(ApiError):
    code = "UNAUTHENTICATED"
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class ForbiddenError(ApiError):
    code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class NotFoundError(ApiError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class UserAlreadyExistsError(ApiError):
    code = "USER_ALREADY_EXISTS"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "User already exists"):
        super().__init__(message)


class ConflictError(ApiError):
    code = "CONFLICT"
    status_code = status.HTTP_409_CONFLICT


class InputValidationError(ApiError):
    code = "BAD_USER_INPUT"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, field_errors: List[Dict[str, str]], message: Optional[str] = None):
        self.field_errors = field_errors
        if message is None:
            joined = ", ".join(f"{e['field']}: {e['message']}" for e in field_errors)
            message = f"Validation error: {joined}"
        super().__init__(message)

    def extensions(self) -> Dict[str, Any]:
        return {"code": self.code, "field_errors": self.field_errors}


def format_field_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Flatten pydantic error dicts into [{"field", "message"}] entries"""
    formatted = []
    for error in errors:
        # Drop the "body"/"query" prefix FastAPI adds to request locations
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        formatted.append({
            "field": ".".join(loc) or "__root__",
            "message": error.get("msg", "Invalid value"),
        })
    return formatted


# ===== REPORTING =====

class ErrorReporter:
    """
    Forwards errors to the error tracking sink. The default sink is the
    ``finance4all.errors`` logger; deployments can subclass and override
    ``report`` to ship errors elsewhere.
    """

    def __init__(self):
        self.logger = get_logger("finance4all.errors")

    def report(self, error: Exception, request: Optional[Request] = None) -> None:
        where = f"{request.method} {request.url.path}" if request is not None else "-"
        code = getattr(error, "code", "INTERNAL_SERVER_ERROR")
        self.logger.error("[%s] %s: %s", code, where, error, exc_info=error)


# ===== HANDLERS =====

def _error_body(message: str, extensions: Dict[str, Any]) -> Dict[str, Any]:
    return {"errors": [{"message": message, "extensions": extensions}]}


def _render(request: Request, error: Exception, status_code: int,
            message: str, extensions: Dict[str, Any]) -> JSONResponse:
    settings = request.app.state.settings
    if settings.is_production:
        request.app.state.error_reporter.report(error, request)
        message = GENERIC_ERROR_MESSAGE
    return JSONResponse(status_code=status_code, content=_error_body(message, extensions))


def register_exception_handlers(app: FastAPI) -> None:
    logger = get_logger(__name__)

    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError):
        return _render(request, exc, exc.status_code, exc.message, exc.extensions())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        error = InputValidationError(format_field_errors(exc.errors()))
        return _render(request, error, error.status_code, error.message, error.extensions())

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        code = "NOT_FOUND" if exc.status_code == status.HTTP_404_NOT_FOUND else "HTTP_ERROR"
        return _render(request, exc, exc.status_code, str(exc.detail), {"code": code})

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _render(
            request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR,
            str(exc) or exc.__class__.__name__, {"code": "INTERNAL_SERVER_ERROR"}
        )
