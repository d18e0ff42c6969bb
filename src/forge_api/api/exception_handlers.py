"""Exception handlers translating service errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from forge_api.services.errors import AuthenticationError, ForgeError

logger = logging.getLogger(__name__)


async def forge_error_handler(request: Request, exc: ForgeError) -> JSONResponse:
    """Render a :class:`ForgeError` with its status code and message."""
    logger.info(
        "%s %s rejected with %d: %s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.detail,
    )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unhandled exception and return a reference clients can quote."""
    error_id = id(exc)
    logger.error(
        "Unhandled exception [%s] in %s %s: %s",
        error_id,
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
        extra={
            "error_id": error_id,
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
        },
    )
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the application's exception handlers."""
    app.add_exception_handler(ForgeError, forge_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered")
