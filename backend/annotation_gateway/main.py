"""
Annotation Gateway - FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn annotation_gateway.main:app) or run().
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────┐ ┌──────┐ ┌─────────┐  │
    │  │ Req ID   │→│  Logging    │→│ GZip │→│  CORS   │  │
    │  └──────────┘ └─────────────┘ └──────┘ └─────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────────┐ ┌──────────────────┐  │
    │  │ /api/images, /annotated, │ │ GET /health      │  │
    │  │ /old_ocr/*, /save-json   │ │                  │  │
    │  └──────────────────────────┘ └──────────────────┘  │
    │  Mount "/" → static front-end assets                │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ NotFound→404 │ Remote→500   │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (log and continue, or fail if STRICT_CONFIG)
    3. Build GitHubContentClient + ContentGateway (unless one was injected)

    Shutdown:
    1. Close the GitHub client's connection pool
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from annotation_gateway import __version__
from annotation_gateway.config import Settings, settings as default_settings
from annotation_gateway.exceptions import (
    AnnotationGatewayError,
    NotFoundError,
    RemoteAPIError,
    UnexpectedResponseError,
    ValidationError,
)
from annotation_gateway.middleware.logging import RequestLoggingMiddleware
from annotation_gateway.middleware.request_id import RequestIDMiddleware, request_id_var
from annotation_gateway.routes import annotations, health
from annotation_gateway.services.content_base import ContentClient
from annotation_gateway.services.gateway import ContentGateway
from annotation_gateway.services.github_client import GitHubContentClient
from annotation_gateway.static_files import FrontendStaticFiles

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Per-request noise from the server and HTTP client libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, configuration check, remote client construction.
    Shutdown: close the remote client.

    A client injected through create_app(content_client=...) is left alone
    on shutdown; its owner closes it.
    """
    config: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("Annotation Gateway %s starting up...", __version__)

    try:
        config.validate_required()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        if config.strict_config:
            logger.error("STRICT_CONFIG is set; refusing to start.")
            raise
        logger.error(
            "Continuing in degraded mode: repository calls will fail until "
            "the configuration is fixed and the server restarted."
        )

    owned_client: Optional[ContentClient] = None
    if getattr(app.state, "gateway", None) is None:
        owned_client = GitHubContentClient(config)
        app.state.gateway = ContentGateway(owned_client)

    logger.info("Repository: %s", config.github_repo or "<unset>")
    logger.info("Server ready at http://%s:%d", config.host, config.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Annotation Gateway shutting down...")
    if owned_client is not None:
        await owned_client.aclose()
        app.state.gateway = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details: Optional[dict] = None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the ErrorResponse format.

    Handler hierarchy:
        ValidationError          → 400 Bad Request
        RequestValidationError   → 400 Bad Request (malformed JSON body)
        NotFoundError            → 404 Not Found
        RemoteAPIError           → 500 (includes ConfigurationError)
        UnexpectedResponseError  → 500
        AnnotationGatewayError   → 500 (catch-all for custom)
        Exception (fallback)     → 500 (generic message, traceback logged)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        logger.warning("[%s] Malformed request: %s", request_id_var.get(""), errors)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", "Malformed request body", {"errors": errors}),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        details = {"resource": exc.resource}
        if exc.resource_id:
            details["filename"] = exc.resource_id
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message, details),
        )

    @app.exception_handler(RemoteAPIError)
    async def handle_remote_error(request: Request, exc: RemoteAPIError):
        logger.error(
            "[%s] Repository API error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        details = {}
        if exc.status_code is not None:
            details["status_code"] = exc.status_code
        if exc.remote_message:
            details["remote_message"] = exc.remote_message
        return JSONResponse(
            status_code=500,
            content=_error_body("remote_api_error", exc.message, details),
        )

    @app.exception_handler(UnexpectedResponseError)
    async def handle_unexpected_response(request: Request, exc: UnexpectedResponseError):
        logger.error(
            "[%s] Unexpected repository response: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("unexpected_response", exc.message),
        )

    @app.exception_handler(AnnotationGatewayError)
    async def handle_gateway_error(request: Request, exc: AnnotationGatewayError):
        logger.error("[%s] Gateway error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again.",
            ),
            # Runs outside RequestIDMiddleware, so the header is not added for us
            headers={"X-Request-ID": rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    content_client: Optional[ContentClient] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings:       Configuration; defaults to the environment-loaded instance.
        content_client: Remote capability to use instead of building a
                        GitHubContentClient at startup (tests pass a fake).
    """
    config = settings or default_settings

    app = FastAPI(
        title="OCR Annotation Gateway",
        description=(
            "Lists images and OCR results stored in a GitHub repository and "
            "commits reviewed annotations back to it."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.gateway = ContentGateway(content_client) if content_client is not None else None

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(annotations.router)
    app.include_router(health.router)

    # ── Static front-end (must be last: "/" matches every path) ───────────
    # Hidden files (.env, .git) are never served
    static_dir = Path(config.static_dir)
    if static_dir.is_dir():
        app.mount("/", FrontendStaticFiles(directory=str(static_dir), html=True), name="static")
    else:
        logger.warning("Static directory %s does not exist; front-end not served", static_dir)

    return app


def run() -> None:
    """Console entry point: serve the module-level app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "annotation_gateway.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )


# uvicorn expects `annotation_gateway.main:app` to be importable
app = create_app()
