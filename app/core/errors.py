"""
Domain error taxonomy and the FastAPI handlers that render it.

Every error carries the HTTP status it maps to, so routes can simply let
them propagate and the handler emits the standard `{"status": false, ...}`
envelope used across the service.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from app.core.logger import get_logger

logger = get_logger("Errors")


class ChatServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(ChatServiceError):
    """A required provider credential is not configured."""
    status_code = 503


class UnsupportedModelError(ChatServiceError):
    status_code = 400

    def __init__(self, model_id: str):
        super().__init__(f"Unsupported model: {model_id}")
        self.model_id = model_id


class ValidationError(ChatServiceError):
    status_code = 400


class UpstreamError(ChatServiceError):
    """Any vendor or transport failure, carrying the vendor message when known."""
    status_code = 500


class PersistenceError(ChatServiceError):
    """Storage failure on the audit/log path. Never surfaced to end users."""
    status_code = 500


class NotFoundError(ChatServiceError):
    status_code = 404


async def chat_service_error_handler(request: Request, exc: ChatServiceError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "status": False,
            "message": exc.message
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """Convert HTTPException to standardized error format"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "status": False,
            "message": exc.detail
        },
        headers=exc.headers
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ChatServiceError, chat_service_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
