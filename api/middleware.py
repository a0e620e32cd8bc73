"""
Request middleware for ICEROUTE API.

Provides:
- Request ID tracking for correlating logs
- Structured request logs tagged with the forecast day and route context
- Error handling and sanitization
"""
import time
import uuid
import logging
import json
import re
from typing import Any, Callable, Dict, Optional
from contextvars import ContextVar
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse
from fastapi import FastAPI

# Context variable for request ID (thread-safe)
request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# /api/ice/{day}/...
_ICE_DAY_PATH = re.compile(r"^/api/ice/(\d+)(?:/|$)")

# First rasterization of a full-size grid is the slow path
SLOW_REQUEST_MS = 1000.0


def get_request_id() -> Optional[str]:
    """Get the current request ID from context."""
    return request_id_ctx.get()


def request_context(path: str, query: Dict[str, str]) -> Dict[str, Any]:
    """
    Domain fields for a request log line.

    area is "ice", "route" or "system". day comes from the ice path or the
    ``day`` query parameter, whichever is present.
    """
    if path == "/api/health" or not path.startswith("/api/"):
        area = "system"
    elif path.startswith("/api/route"):
        area = "route"
    else:
        area = "ice"

    day = None
    match = _ICE_DAY_PATH.match(path)
    if match:
        day = int(match.group(1))
    elif query.get("day", "").isdigit():
        day = int(query["day"])

    return {"area": area, "day": day}


class StructuredLogger:
    """
    One JSON object per line, stamped with the request ID.

    Fields set to None are dropped so a line carries only what applies
    to that request (no day on route-state calls, no size on GETs).
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def log(self, level: int, message: str, **fields):
        if not self.logger.isEnabledFor(level):
            return
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": logging.getLevelName(level),
            "message": message,
            "service": "iceroute-api",
            "request_id": get_request_id(),
            **fields,
        }
        entry = {k: v for k, v in entry.items() if v is not None}
        self.logger.log(level, json.dumps(entry))

    def info(self, message: str, **fields):
        self.log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields):
        self.log(logging.WARNING, message, **fields)

    def error(self, message: str, **fields):
        self.log(logging.ERROR, message, **fields)


structured_logger = StructuredLogger("iceroute.api.requests")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Adds a request ID to each request.

    Taken from the X-Request-ID header when the client sends one,
    otherwise a new UUID4. Echoed back on the response.
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid.uuid4())
        token = request_id_ctx.set(request_id)

        try:
            response = await call_next(request)
            response.headers[self.HEADER_NAME] = request_id
            return response
        finally:
            request_id_ctx.reset(token)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request with timing, status and its ice/route context.

    Status drives the level: rejected route edits (409/422) and unknown
    days (404) are warnings, 5xx are errors. Health checks are not logged.
    Every response gets an X-Response-Time header in milliseconds.
    """

    EXCLUDED_PATHS = {"/api/health"}
    TIMING_HEADER = "X-Response-Time"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        context = request_context(request.url.path, dict(request.query_params))
        upload_bytes = request.headers.get("content-length") if request.method == "POST" else None

        try:
            response = await call_next(request)
        except Exception as e:
            structured_logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                **context,
            )
            raise

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        response.headers[self.TIMING_HEADER] = f"{duration_ms:.2f}"

        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400 or duration_ms > SLOW_REQUEST_MS:
            level = logging.WARNING
        else:
            level = logging.INFO

        structured_logger.log(
            level,
            "Slow request" if duration_ms > SLOW_REQUEST_MS else "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=duration_ms,
            upload_bytes=int(upload_bytes) if upload_bytes and upload_bytes.isdigit() else None,
            **context,
        )
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Turns unhandled exceptions into a 500 carrying the request ID.

    Domain errors never reach this point; api.main maps them to 4xx.
    The exception text is only returned when debug is on.
    """

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            request_id = get_request_id()
            structured_logger.error(
                "Unhandled exception",
                error=str(e),
                error_type=type(e).__name__,
                path=request.url.path,
                method=request.method,
            )

            detail = str(e) if self.debug else "An internal error occurred. Please report the request ID."
            return JSONResponse(
                status_code=500,
                content={"error": "Internal Server Error", "detail": detail, "request_id": request_id},
                headers={"X-Request-ID": request_id} if request_id else {},
            )


def setup_middleware(app: FastAPI, debug: bool = False):
    """
    Install request ID, logging and error middleware.

    Starlette runs middleware in reverse order of addition: the request ID
    is set outermost so both the error handler and the request log see it.
    """
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ErrorHandlingMiddleware, debug=debug)
    app.add_middleware(RequestIdMiddleware)
