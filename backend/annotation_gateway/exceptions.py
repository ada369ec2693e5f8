"""
Annotation Gateway - Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the gateway's error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the right HTTP status.
Who:   Raised by the GitHub client and the gateway service; caught by the
       global handlers or, where a miss is expected, by the gateway itself.

Exception Hierarchy:
    AnnotationGatewayError (base)     → 500 Internal Server Error
    ├── ValidationError               → 400 Bad Request (client can fix)
    ├── NotFoundError                 → 404 Not Found
    ├── RemoteAPIError                → 500 (remote API rejected or unreachable)
    │   └── ConfigurationError        → 500 (credentials / repository missing)
    └── UnexpectedResponseError       → 500 (success-shaped body lacking markers)

NotFoundError is a sibling of RemoteAPIError, not a child. Code that treats a
missing object as a normal state (list_annotated, the sha lookup before a
write) catches NotFoundError by type and never inspects message text.
"""

from typing import Any, Dict, Optional


class AnnotationGatewayError(Exception):
    """
    Base exception for all gateway errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; only selected keys are returned)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(AnnotationGatewayError):
    """
    Raised when client input fails validation.

    When:    Missing filename or data on save, unsafe filename, malformed body.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Missing filename or data",
            "details": {"field": "data"}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(AnnotationGatewayError):
    """
    Raised when a requested object does not exist in the repository.

    When:    GitHub answers 404 for a contents path, or the object has no
             retrievable content (a directory, an oversized blob).
    HTTP:    404 Not Found

    The message always names the resource; `reason` (when given) is appended
    so the caller sees the underlying failure, e.g.
    "OCR file 'page_1.json' was not found: Not Found".
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        if reason:
            message = f"{message}: {reason}"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        if reason:
            ctx["reason"] = reason
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id
        self.reason = reason


class RemoteAPIError(AnnotationGatewayError):
    """
    Raised when the content-hosting API call fails.

    What:    Non-2xx response (other than 404), or a transport failure
             (connection refused, DNS, timeout) where status_code is None.
    HTTP:    500 Internal Server Error

    The remote-supplied `message` field (GitHub puts one in every error
    body) is kept in `remote_message` and folded into `message` so the
    annotation UI can show why a save was rejected, e.g. a stale sha.
    """

    def __init__(
        self,
        message: str = "The repository API request failed",
        status_code: Optional[int] = None,
        remote_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        if remote_message:
            ctx["remote_message"] = remote_message
            message = f"{message}: {remote_message}"
        super().__init__(message=message, context=ctx)
        self.status_code = status_code
        self.remote_message = remote_message


class ConfigurationError(RemoteAPIError):
    """
    Raised instead of issuing a request when GITHUB_TOKEN or GITHUB_REPO is
    missing or malformed. Only reachable when the server was started in
    degraded mode (STRICT_CONFIG=false).
    """

    def __init__(
        self,
        message: str = "Repository access is not configured (set GITHUB_TOKEN and GITHUB_REPO)",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnexpectedResponseError(AnnotationGatewayError):
    """
    Raised when a call succeeded at the HTTP level but the body does not have
    the expected shape: a listing that is not an array, a file fetch that
    returned a directory, a write result with neither `content` nor `commit`,
    or a body that is not JSON at all.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Unexpected response from the repository API",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
