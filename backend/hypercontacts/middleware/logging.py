"""
Hypercontacts — Request Logging Middleware
===========================================

What:  One access-log line per request with status and duration.
Why:   Uvicorn's access log has no request id and no timing.

Log line:
    GET /contacts 200 4.2ms [a1b2c3d4] from 127.0.0.1

Level by status: 5xx → ERROR, 4xx → WARNING, everything else → INFO.
Request bodies are never logged; contact forms carry personal data.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from hypercontacts.middleware.request_id import request_id_var

logger = logging.getLogger("hypercontacts.access")

# Probed every few seconds by orchestrators; too noisy to log
QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status, duration, request id, and client address."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")
        trigger = request.headers.get("HX-Trigger", "")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "hx_trigger": trigger,
            },
        )

        return response
