"""
Annotation Gateway - Request ID Middleware
============================================

What:  Assigns a short correlation ID to each incoming request and returns it
       in the X-Request-ID response header.
How:   Reuses a client-supplied X-Request-ID when it is a plain token (letters,
       digits, "-", "_", ".", at most 64 chars), otherwise generates one;
       stores it in a ContextVar (for loggers and exception handlers) and in
       request.state (for route handlers).

Client-supplied IDs end up in log lines and response headers, so anything
with spaces, control characters or unbounded length is replaced.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_REQUEST_ID_LENGTH = 64
_REQUEST_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,%d}" % MAX_REQUEST_ID_LENGTH)


def new_request_id() -> str:
    return str(uuid.uuid4())[:8]


def accept_request_id(candidate: Optional[str]) -> Optional[str]:
    """Return the client's ID if it is safe to log and echo, else None."""
    if candidate and _REQUEST_ID_PATTERN.fullmatch(candidate):
        return candidate
    return None


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Take X-Request-ID from the request if the front-end sent a valid one
        2. Otherwise generate an 8-character UUID prefix
        3. Store it in request_id_var and request.state.request_id
        4. Echo it in the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = accept_request_id(request.headers.get("X-Request-ID")) or new_request_id()

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
