"""
Embed API Router Module.

Endpoints:
    - GET|HEAD /: Redirect to the project page
    - GET|HEAD /{content_path}: Embed document for a DeviantArt content path

The content route accepts ``staypls=1`` to force the direct document for any
client. It is registered last so that the fixed routes (/ohembed,
/robots.txt, /favicon.ico, /health) take precedence.

The pipeline runs as its own task; if the client disconnects before it
finishes, the task is cancelled, which cancels any in-flight upstream call.
"""

import asyncio
import logging

from collections.abc import Awaitable
from typing import TypeVar

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from fixdeviantart.config import Settings, get_settings
from fixdeviantart.services.embed_service import EmbedRequest, EmbedService


logger = logging.getLogger(__name__)

router = APIRouter(tags=["embed"])

T = TypeVar("T")

# Seconds between client disconnect checks while the pipeline runs
DISCONNECT_POLL_INTERVAL: float = 0.5

# Methods answered by the page routes
PAGE_METHODS: list[str] = ["GET", "HEAD"]

# nginx convention for "client closed request"; never reaches the client
CLIENT_CLOSED_REQUEST: int = 499


class ClientDisconnected(Exception):
    """Raised when the client goes away before the response is ready."""


def get_embed_service(request: Request) -> EmbedService:
    """
    Dependency injection for EmbedService.

    Returns the pipeline built during application startup.
    """
    return request.app.state.embed_service


async def run_until_disconnected(
    request: Request,
    work: Awaitable[T],
    poll_interval: float = DISCONNECT_POLL_INTERVAL,
) -> T:
    """
    Await ``work`` while watching for a client disconnect.

    Raises:
        ClientDisconnected: The client disconnected; ``work`` was cancelled.
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                raise ClientDisconnected(request.url.path)
    finally:
        if not task.done():
            task.cancel()


@router.api_route("/", methods=PAGE_METHODS, include_in_schema=False)
async def project_redirect(settings: Settings = Depends(get_settings)) -> RedirectResponse:
    """Redirect the bare root to the project information page."""
    return RedirectResponse(settings.project_url, status_code=status.HTTP_302_FOUND)


@router.api_route("/{content_path:path}", methods=PAGE_METHODS, response_class=HTMLResponse)
async def embed(
    request: Request,
    content_path: str,
    staypls: str | None = Query(default=None),
    embed_service: EmbedService = Depends(get_embed_service),
) -> Response:
    """
    Render the link-preview document for a DeviantArt content path.

    Query Parameters:
        staypls: ``1`` renders the direct document instead of redirecting

    Returns:
        HTMLResponse: The buffered embed document.
    """
    # Decoded path, including any %3F or %23 the client sent
    embed_request = EmbedRequest(
        content_path="/" + content_path,
        user_agent=request.headers.get("user-agent", ""),
        override_redirect=staypls == "1",
    )

    try:
        body = await run_until_disconnected(request, embed_service.build_embed(embed_request))
    except ClientDisconnected:
        logger.info(f"Client disconnected, cancelled embed for {embed_request.content_path}")
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    return HTMLResponse(content=body)
