"""
JobTracker - Error taxonomy and exception handlers.

Handlers raise these exceptions; register_error_handlers() translates them
(and framework/database errors) into JSON responses of the form:

    {"error": "<category>", "message": "<human readable>", ...}
"""
import logging
import traceback
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings

logger = logging.getLogger("jobtracker.errors")


class JobTrackerError(Exception):
    """Base class for errors that map onto an HTTP status."""
    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str, headers: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.headers = headers

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message}


class ValidationError(JobTrackerError):
    """One or more request fields are missing or malformed."""
    status_code = 400
    error = "Validation error"

    def __init__(self, messages: List[str]):
        super().__init__("; ".join(messages))
        self.messages = list(messages)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["messages"] = self.messages
        return data


class AuthenticationError(JobTrackerError):
    status_code = 401
    error = "Authentication required"


class PermissionDeniedError(JobTrackerError):
    status_code = 403
    error = "Forbidden"


class NotFoundError(JobTrackerError):
    status_code = 404
    error = "Not found"


class UpstreamError(JobTrackerError):
    """A third-party provider rejected the call; its status is passed through."""

    def __init__(self, status_code: int, error: str, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.error = error


def _pydantic_messages(exc: RequestValidationError) -> List[str]:
    """Flatten pydantic errors into "field: message" strings."""
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path"))
        msg = err.get("msg", "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        messages.append(f"{field}: {msg}" if field else msg)
    return messages


def register_error_handlers(app: FastAPI, settings: Settings) -> None:
    """Install the shared exception handlers on the application."""

    @app.exception_handler(JobTrackerError)
    async def jobtracker_error_handler(request: Request, exc: JobTrackerError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=ValidationError(_pydantic_messages(exc)).to_dict(),
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.warning("Database error on %s %s: %s", request.method, request.url.path, exc)
        content = {"error": "Database error", "message": "The request could not be stored"}
        if settings.is_development:
            content["details"] = str(exc)
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "HTTP error", "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        content = {"error": "Internal server error", "message": "Something went wrong"}
        if settings.is_development:
            content["message"] = str(exc)
            content["stack"] = traceback.format_exception(type(exc), exc, exc.__traceback__)
        return JSONResponse(status_code=500, content=content)
