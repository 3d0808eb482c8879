"""
oEmbed discovery endpoint.

The embed document advertises ``/ohembed?displayText=...&author=...`` through
an ``application/json+oembed`` link. Chat clients fetch it and show the
statistics line as the author name, linked to the artist's profile.
"""

from fastapi import APIRouter, Depends, Query

from fixdeviantart.config import Settings, get_settings
from fixdeviantart.models.oembed import OEmbedDiscovery


router = APIRouter(tags=["oembed"])


@router.api_route("/ohembed", methods=["GET", "HEAD"], response_model=OEmbedDiscovery)
async def ohembed(
    display_text: str | None = Query(default=None, alias="displayText"),
    author: str | None = Query(default=None),
    settings: Settings = Depends(get_settings),
) -> OEmbedDiscovery:
    """Return the oEmbed link document echoing the display text and author."""
    return OEmbedDiscovery.build(
        provider_url=settings.project_url,
        display_text=display_text,
        author=author,
    )
