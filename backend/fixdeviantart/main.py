"""
FixDeviantArt FastAPI Application Entry Point

This module wires the embed proxy together:

- Lifespan: logging setup, shared HTTP client, embed pipeline construction
- Request logging middleware with request ID and timing headers
- Router registration (static responders, oEmbed discovery, embed catch-all)
- Exception handlers mapping the error taxonomy to generic text responses

Usage:
    # Run with uvicorn directly
    uvicorn fixdeviantart.main:app --host 0.0.0.0 --port 8000

    # Run as a module (honors HOST, PORT, SSL_CERTFILE, SSL_KEYFILE)
    python -m fixdeviantart.main
"""

import logging
import time

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse

from fixdeviantart import __version__
from fixdeviantart.api import api_router
from fixdeviantart.config import get_settings
from fixdeviantart.core.errors import ProxyError, RenderError
from fixdeviantart.core.http_client import close_http_client, init_http_client
from fixdeviantart.services.embed_service import build_embed_service
from fixdeviantart.utils.logger import add_log_context, setup_logging


# =============================================================================
# Logging Configuration
# =============================================================================

logger = logging.getLogger(__name__)

# HTTP status code constants
HTTP_ERROR_THRESHOLD = 400  # Status codes >= 400 indicate errors


# =============================================================================
# Application Lifespan Management
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Manage application lifecycle events for startup and shutdown.

    - Startup: configure logging, open the shared HTTP client, build the
      embed pipeline and compile its template
    - Shutdown: close the HTTP client
    """
    settings = get_settings()
    setup_logging(log_level=settings.log_level, json_logs=settings.json_logs)

    logger.info(f"{settings.app_name} {__version__} starting")
    logger.info(f"Environment: {settings.app_env}")
    logger.info(f"Upstream: {settings.oembed_endpoint}")
    logger.info(f"Request deadline: {settings.request_timeout_seconds}s")

    client = await init_http_client(settings)
    app.state.embed_service = build_embed_service(client, settings)

    # A broken template is reported now; requests then fail with 500
    try:
        app.state.embed_service.renderer.load_template()
    except RenderError:
        logger.exception("Embed template failed to compile at startup")

    logger.info(f"Ready on {settings.host}:{settings.port} (tls={settings.tls_enabled})")

    yield

    await close_http_client()
    logger.info(f"{settings.app_name} shutdown complete")


# =============================================================================
# FastAPI Application Instance
# =============================================================================

_settings = get_settings()

app = FastAPI(
    title="FixDeviantArt",
    description="Rewrites DeviantArt links into rich link previews for chat clients",
    version=__version__,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
    lifespan=lifespan,
    debug=_settings.debug,
)


# =============================================================================
# Middleware Configuration
# =============================================================================


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next) -> Response:
    """
    Middleware for request logging and timing.

    Adds X-Request-ID and X-Process-Time headers to every response.
    """
    request_id = f"{time.time_ns()}"
    request.state.request_id = request_id
    ctx_logger = add_log_context(logger, request_id=request_id)

    start_time = time.perf_counter()
    ctx_logger.debug(f"Request started: {request.method} {request.url.path}")

    try:
        response = await call_next(request)
    except Exception:
        ctx_logger.exception(f"Request failed: {request.method} {request.url.path}")
        raise

    process_time_ms = round((time.perf_counter() - start_time) * 1000, 2)
    response.headers["X-Process-Time"] = f"{process_time_ms}ms"
    response.headers["X-Request-ID"] = request_id

    log_level = logging.DEBUG if response.status_code < HTTP_ERROR_THRESHOLD else logging.WARNING
    ctx_logger.log(
        log_level,
        f"Request completed: {request.method} {request.url.path} "
        f"[Status: {response.status_code}] [Time: {process_time_ms}ms]",
    )

    return response


# =============================================================================
# API Router Registration
# =============================================================================

app.include_router(api_router)


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(ProxyError)
async def proxy_error_handler(request: Request, exc: ProxyError) -> PlainTextResponse:
    """
    Map request-terminating proxy errors to generic text responses.

    The client sees only the public message; detail goes to the log.
    """
    logger.error(
        f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.detail}",
        exc_info=exc if exc.__cause__ is not None else None,
    )
    return PlainTextResponse(exc.public_message, status_code=exc.status_code)


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """Generic 500 handler that avoids exposing internal details to clients."""
    logger.error(
        f"Internal server error on {request.method} {request.url.path}: {exc!s}",
        exc_info=True,
    )
    return PlainTextResponse("internal server error", status_code=500)


# =============================================================================
# Main Execution Block
# =============================================================================

if __name__ == "__main__":
    settings = get_settings()

    uvicorn.run(
        "fixdeviantart.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level,
        ssl_certfile=settings.ssl_certfile if settings.tls_enabled else None,
        ssl_keyfile=settings.ssl_keyfile if settings.tls_enabled else None,
        timeout_keep_alive=int(settings.request_timeout_seconds),
    )
