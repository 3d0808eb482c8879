"""
Shared outbound HTTP client for the embed proxy.

A single httpx.AsyncClient is opened during application startup and reused by
every request for both the oEmbed call and the film player fetch. The client
holds no per-request state; deadlines are applied by the caller around each
pipeline run, so cancelling the pipeline task cancels the in-flight request.
"""

import logging

import httpx

from fixdeviantart.config import Settings, get_settings


logger = logging.getLogger(__name__)


class _HTTPClientContainer:
    """Container for the HTTP client singleton to avoid global statements."""

    client: httpx.AsyncClient | None = None


_container = _HTTPClientContainer()


def create_http_client(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Build an AsyncClient configured from settings.

    Args:
        settings: Optional Settings instance (defaults to get_settings()).
        transport: Optional transport override, used by tests to plug in
            httpx.MockTransport.

    Returns:
        httpx.AsyncClient: A client that follows redirects and sends the
        configured User-Agent. Per-call timeouts are left to the deadline.
    """
    settings = settings or get_settings()
    return httpx.AsyncClient(
        headers={"User-Agent": settings.user_agent},
        follow_redirects=True,
        timeout=httpx.Timeout(settings.request_timeout_seconds),
        transport=transport,
    )


async def init_http_client(settings: Settings | None = None) -> httpx.AsyncClient:
    """
    Initialize the global HTTP client singleton.

    This function should be called once during application startup
    (in the FastAPI lifespan). Calling it again returns the existing client.
    """
    if _container.client is not None:
        logger.warning("HTTP client already initialized")
        return _container.client

    _container.client = create_http_client(settings)
    logger.info("HTTP client initialized")
    return _container.client


async def close_http_client() -> None:
    """
    Close the global HTTP client.

    Safe to call multiple times - subsequent calls have no effect.
    """
    if _container.client is not None:
        await _container.client.aclose()
        _container.client = None
        logger.info("HTTP client closed")
    else:
        logger.debug("HTTP client already closed or not initialized")

