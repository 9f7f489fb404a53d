"""
Request logging and error rendering for the Dynamic Recipes API.

Every error leaves the API in the same envelope:
``{"success": false, "error": {"code", "message", "details"?}, "timestamp"}``.
"""

import time
import logging
from datetime import datetime, timezone
from typing import Any, Dict
from uuid import uuid4

from bson import ObjectId
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from app.exceptions import AppError

logger = logging.getLogger("dynamicrecipes.middleware")

REQUEST_ID_HEADER = "X-Request-ID"


# ============================================================================
# Helpers
# ============================================================================


def to_jsonable(value: Any) -> Any:
    """Make error details safe for JSONResponse (ObjectIds, exceptions, tuples)"""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, BaseException):
        return str(value)
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_jsonable(item) for item in value]
    return value


def error_response(status_code: int, error: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": to_jsonable(error),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


def _request_context(request: Request) -> Dict[str, Any]:
    return {
        "request_id": getattr(request.state, "request_id", None),
        "method": request.method,
        "path": request.url.path,
    }


# ============================================================================
# Request Logging Middleware
# ============================================================================


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each HTTP request with its id, status and duration.

    A client-supplied X-Request-ID is kept, otherwise one is generated; it is
    echoed on the response. WebSocket traffic bypasses BaseHTTPMiddleware, so
    the realtime channel logs on its own.
    """

    async def dispatch(self, request: Request, call_next):
        request.state.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        context = _request_context(request)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                "%s %s failed after %.1fms",
                request.method,
                request.url.path,
                (time.perf_counter() - started) * 1000,
                extra=context,
                exc_info=True,
            )
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s -> %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            extra={**context, "status_code": response.status_code},
        )
        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        response.headers["X-Process-Time"] = f"{elapsed_ms / 1000:.4f}"
        return response


# ============================================================================
# Error Handlers
# ============================================================================


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Request body or query failed schema validation"""
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.errors())

    return error_response(
        422,
        {
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": exc.errors(),
        },
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Routing errors (unknown path, wrong method)"""
    logger.info("HTTP %d on %s %s", exc.status_code, request.method, request.url.path)

    return error_response(
        exc.status_code, {"code": f"HTTP_{exc.status_code}", "message": exc.detail}
    )


async def app_exception_handler(request: Request, exc: AppError):
    """Service errors carry their own status and code"""
    if exc.http_status >= 500:
        logger.error(
            "%s on %s: %s", type(exc).__name__, request.url.path, exc,
            extra=_request_context(request), exc_info=exc,
        )
    else:
        logger.warning("%s on %s: %s", type(exc).__name__, request.url.path, exc)

    return error_response(exc.http_status, exc.to_dict())


async def store_exception_handler(request: Request, exc: PyMongoError):
    """MongoDB I/O failures; the driver message stays in the logs"""
    logger.error(
        "Store error on %s: %s", request.url.path, exc,
        extra=_request_context(request), exc_info=exc,
    )

    return error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        {"code": "STORE_ERROR", "message": "The document store is unavailable"},
    )


async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)

    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        {"code": "INTERNAL_SERVER_ERROR", "message": "An unexpected error occurred"},
    )
