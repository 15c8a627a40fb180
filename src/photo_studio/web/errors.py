"""Exception handlers mapping domain errors to JSON responses."""

import traceback
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.exceptions import StudioError
from ..core.logger import get_logger

logger = get_logger(__name__)


async def studio_error_handler(request: Request, exc: StudioError) -> JSONResponse:
    """Return ``{"error", "detail"}`` with the status the error class carries."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}")
    else:
        logger.debug(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={'error': exc.message, 'detail': exc.detail},
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unhandled exception under an error id the client can report."""
    error_id = uuid.uuid4().hex[:12]

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {exc}",
        exc_info=True,
        extra={
            'error_id': error_id,
            'method': request.method,
            'path': request.url.path,
            'query_params': dict(request.query_params),
            'client': request.client.host if request.client else 'unknown',
            'error_type': type(exc).__name__,
            'traceback': traceback.format_exc(),
        }
    )

    return JSONResponse(
        status_code=500,
        content={
            'error': 'Internal server error',
            'detail': None,
            'error_id': error_id,
        }
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the FastAPI application."""
    app.add_exception_handler(StudioError, studio_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered")
