"""
Middleware and helpers for API error handling.
"""
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import logging
import time

from ..zfs_operations.core.exceptions.zfs_exceptions import ZFSException
from .models import APIError


logger = logging.getLogger(__name__)

_STATUS_BY_ERROR_CODE = {
    "SNAPSHOT_NOT_FOUND": 404,
    "COMMAND_INVOCATION_ERROR": 503,
    "PROPERTY_VERIFICATION_FAILED": 409,
    "STREAMING_ERROR": 502,
    "REPLICATION_FAILED": 502,
}


def create_error_response(error: Exception, status_code: int = 500) -> JSONResponse:
    """Create a standardized error response."""
    if isinstance(error, ZFSException):
        return JSONResponse(
            status_code=_STATUS_BY_ERROR_CODE.get(error.error_code, 400),
            content=APIError(
                error=error.error_code or "ZFS_ERROR",
                message=str(error),
                details=error.details
            ).model_dump()
        )
    return JSONResponse(
        status_code=status_code,
        content=APIError(
            error="INTERNAL_SERVER_ERROR",
            message=str(error)
        ).model_dump()
    )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turns ZFS exceptions that escape a route into JSON errors."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except ZFSException as e:
            logger.error(f"ZFS error in {request.url.path}: {e}")
            return create_error_response(e)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging API requests."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        logger.info(f"API Request: {request.method} {request.url.path}")
        response = await call_next(request)
        process_time = time.time() - start_time
        logger.info(f"API Response: {response.status_code} - {process_time:.4f}s")
        return response
