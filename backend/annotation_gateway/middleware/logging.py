"""
Annotation Gateway - Request Logging Middleware
=================================================

What:  One access-log line per HTTP request: method, path, status, duration,
       response size, request ID and client address.
Who:   Applied to every request; runs inside RequestIDMiddleware so the
       request ID is already set.

Request bodies are never logged (annotation payloads can be large).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from annotation_gateway.middleware.request_id import request_id_var

logger = logging.getLogger("annotation_gateway.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request at a level chosen by status code:
        5xx → ERROR, 4xx → WARNING, everything else → INFO

    /health is skipped (probed every few seconds by the container runtime).
    """

    SKIP_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.SKIP_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        size = response.headers.get("content-length", "-")

        logger.log(
            log_level,
            "%s %s %d %s bytes %.1fms [%s] from %s",
            method,
            path,
            status,
            size,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "response_bytes": size,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
