"""
Annotation Gateway - Pydantic Schemas
=======================================

What:  Pydantic models for both sides of the gateway:
       - Remote models: the subset of GitHub's contents API we read
       - API models: request/response bodies of our own HTTP surface
How:   Remote models ignore unknown keys (GitHub returns many more fields:
       url, git_url, html_url, _links, ...). API models feed FastAPI's
       validation and the OpenAPI docs.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Remote Models — What the content-hosting API returns
# ══════════════════════════════════════════════════════════════════════════


class RemoteEntry(BaseModel):
    """
    One element of a directory listing (GET /contents/<dir>).

    Only `name` is required; the gateway filters on it and nothing else.
    """
    name: str
    path: Optional[str] = None
    sha: Optional[str] = None
    type: Optional[str] = Field(default=None, description="file, dir, symlink or submodule")
    size: Optional[int] = None

    model_config = {"extra": "ignore"}


class RemoteFile(BaseModel):
    """
    A single file fetched individually (GET /contents/<file>).

    `content` is base64 text, wrapped at 60 columns by GitHub. It is empty and
    `encoding` is "none" for blobs larger than the contents API will inline.
    `sha` identifies the current version and must accompany any update.
    """
    name: str
    path: str
    sha: Optional[str] = None
    content: Optional[str] = None
    encoding: Optional[str] = None
    type: Optional[str] = None
    size: Optional[int] = None

    model_config = {"extra": "ignore"}

    @property
    def has_content(self) -> bool:
        return bool(self.content) and (self.encoding in (None, "base64"))


# ══════════════════════════════════════════════════════════════════════════
# API Models — Our own HTTP surface
# ══════════════════════════════════════════════════════════════════════════


class SaveAnnotationRequest(BaseModel):
    """
    Body of POST /api/save-json.

    Both fields are optional at the schema level: a missing field is a
    business-rule ValidationError (400) raised by the gateway before any
    remote call, not a schema-level rejection.
    """
    filename: Optional[str] = Field(
        default=None,
        description="Target file under New_ocr/, by convention <base>_annotated.json",
    )
    data: Any = Field(
        default=None,
        description="Annotation document; stored as 2-space indented JSON, never inspected",
    )


class SaveAnnotationResponse(BaseModel):
    success: bool = Field(default=True)


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "validation_error", "not_found")
        message: Human-readable description for display to users
        details: Optional extra context (e.g., which field failed validation)
        request_id: Correlation ID for tracing this error in server logs
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and repository status."""
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    repository: str = Field(description="Configured repository (owner/repo) or 'unconfigured'")
    remote: str = Field(description="GitHub API status: available, unavailable, unconfigured")
    uptime_seconds: float = Field(description="Seconds since service started")
