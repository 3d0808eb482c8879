"""
Static responders: robots policy, favicon, health check.
"""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse

from fixdeviantart import __version__
from fixdeviantart.config import Settings, get_settings


router = APIRouter()

ROBOTS_TXT: str = """
User-Agent: *
Disallow: /
"""

ALL_METHODS: list[str] = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route("/robots.txt", methods=ALL_METHODS, include_in_schema=False)
async def robots() -> PlainTextResponse:
    """Disallow all crawling; previews are served to link unfurlers only."""
    return PlainTextResponse(ROBOTS_TXT)


@router.api_route("/favicon.ico", methods=ALL_METHODS, include_in_schema=False)
async def favicon() -> PlainTextResponse:
    return PlainTextResponse("404 page not found", status_code=status.HTTP_404_NOT_FOUND)


@router.get("/health", tags=["health"])
async def health_check(settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    """
    Health check endpoint for monitoring and load balancer integration.

    Returns immediately without contacting DeviantArt.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "version": __version__,
        "service": settings.app_name,
    }
