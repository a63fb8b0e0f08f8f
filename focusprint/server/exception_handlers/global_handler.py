"""
Exception Handlers for the FastAPI Application.

Every error leaves the API as ``{"error": message, "details": ...}``:

- ``AppError`` subclasses carry their own status, type and code.
- Request validation failures become 400 ``Validation failed``.
- ``HTTPException`` keeps its status and reports its detail as the error.
- Database integrity errors are translated by ``from_database_error``.
- Anything else is logged with an error ID and its status is derived from
  the message text.
"""

import traceback
import uuid

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException

from focusprint.core.errors import AppError, from_database_error, status_for_message
from focusprint.core.logging_config import get_logger
from focusprint.core.monitoring import log_error
from focusprint.server.core.config import settings

logger = get_logger(__name__)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc!r} in {request.method} {request.url.path}")
        log_error(exc.error_type.value, exc.message, {"path": request.url.path})
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(exc.to_dict(include_context=settings.is_development)),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg"),
            "type": error.get("type"),
        }
        for error in exc.errors()
    ]
    logger.info(f"Validation failed for {request.method} {request.url.path}: {len(details)} error(s)")
    return JSONResponse(status_code=400, content={"error": "Validation failed", "details": details})


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    error = from_database_error(exc)
    logger.warning(f"Database integrity error in {request.method} {request.url.path}: {exc.orig}")
    return await app_error_handler(request, error)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler to log detailed error information.

    This handler is called for any unhandled exception in the application.
    It logs the full error context and returns a JSON response with an error ID
    that clients can use to reference the error when reporting issues.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    # Generate unique error ID for tracking
    error_id = str(uuid.uuid4())
    message = str(exc) or "Internal server error"
    status_code = status_for_message(message)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {message}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
        },
    )
    log_error(type(exc).__name__, message, {"error_id": error_id, "path": request.url.path})

    return JSONResponse(
        status_code=status_code,
        content={
            "error": message if status_code < 500 else "Internal server error",
            "details": {"type": type(exc).__name__},
            "error_id": error_id,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    This function should be called during application initialization to set up
    all custom exception handlers.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
