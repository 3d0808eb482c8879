"""
Video Source Resolver for film deviations.

The oEmbed API does not expose a playable file for films; it only returns an
``html`` snippet embedding DeviantArt's player. The direct MP4 sources live in
the player page as an HTML-escaped JSON attribute::

    <div ... gmon-sources="{&quot;720p&quot;:{&quot;src&quot;:&quot;https:\\/\\/...mp4&quot;,...}}">

Resolution is two hops:
1. Find the first ``https://backend.deviantart.com/embed/film...`` URL in the
   oEmbed HTML and fetch that page.
2. Pull the ``gmon-sources`` attribute out of the page, unescape it, parse it,
   and take the first tier present in the allow-list 1080p > 720p > 360p.

This depends on undocumented player markup, so every failure is contained
here: try_resolve() logs and returns False, and the caller renders the
deviation as an image instead.
"""

import json
import logging
import re

from typing import Any

import httpx

from pydantic import ValidationError

from fixdeviantart.config import Settings, get_settings
from fixdeviantart.core.errors import ResolutionFailure
from fixdeviantart.models.content import ContentRecord, VideoSource


logger = logging.getLogger(__name__)


# Only these tiers are ever used, in this order; anything else is ignored
IDEAL_RESOLUTIONS: tuple[str, ...] = ("1080p", "720p", "360p")

SOURCES_PATTERN = re.compile(r'gmon-sources="([^"]*)')


def compile_embed_link_pattern(player_embed_prefix: str) -> re.Pattern[str]:
    """Match a player URL starting with ``player_embed_prefix`` up to the next quote."""
    return re.compile(re.escape(player_embed_prefix) + r'[^"]*')


def unescape_sources(raw: str) -> str:
    """Undo the HTML-entity quotes and escaped slashes of the gmon-sources attribute."""
    return raw.replace("&quot;", '"').replace("\\/", "/")


def select_source(manifest: dict[str, Any]) -> VideoSource:
    """
    Pick the preferred tier from a decoded source manifest.

    Raises:
        ResolutionFailure: No allowed tier is present, or the chosen tier is
            not a ``{src, width, height}`` object.
    """
    for tier in IDEAL_RESOLUTIONS:
        if tier not in manifest:
            continue
        try:
            return VideoSource.model_validate(manifest[tier])
        except ValidationError as e:
            raise ResolutionFailure(f"malformed {tier} source entry: {e}") from e

    raise ResolutionFailure(
        f"no supported resolution in manifest (available: {sorted(manifest)})"
    )


class VideoResolver:
    """
    Resolves the direct video source of a film deviation.

    The embed-link pattern is compiled once from settings when the resolver is
    built at startup and shared read-only by all requests.
    """

    def __init__(self, client: httpx.AsyncClient, settings: Settings | None = None) -> None:
        self.client = client
        self.settings = settings or get_settings()
        self.embed_link_pattern = compile_embed_link_pattern(self.settings.player_embed_prefix)

    def extract_player_url(self, embed_html: str) -> str:
        """Return the first embedded film player URL in the oEmbed HTML."""
        match = self.embed_link_pattern.search(embed_html)
        if match is None:
            raise ResolutionFailure("no film player link in oEmbed html")
        return match.group(0)

    def extract_manifest(self, page: str) -> dict[str, Any]:
        """Decode the gmon-sources manifest of a player page."""
        match = SOURCES_PATTERN.search(page)
        if match is None:
            raise ResolutionFailure("no gmon-sources attribute in player page")

        try:
            manifest = json.loads(unescape_sources(match.group(1)))
        except (ValueError, RecursionError) as e:
            raise ResolutionFailure(f"gmon-sources is not valid JSON: {e}") from e

        if not isinstance(manifest, dict):
            raise ResolutionFailure(
                f"gmon-sources is a {type(manifest).__name__}, expected an object"
            )
        return manifest

    async def fetch_player_page(self, player_url: str) -> str:
        try:
            response = await self.client.get(player_url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ResolutionFailure(f"player page request failed: {e!r}") from e

        if not response.is_success:
            raise ResolutionFailure(f"player page returned HTTP {response.status_code}")
        return response.text

    async def resolve(self, embed_html: str) -> VideoSource:
        """
        Run both hops and return the selected source.

        Raises:
            ResolutionFailure: Any stage failed.
        """
        player_url = self.extract_player_url(embed_html)
        logger.debug(f"Fetching film player page: {player_url}")
        page = await self.fetch_player_page(player_url)
        return select_source(self.extract_manifest(page))

    async def try_resolve(self, record: ContentRecord) -> bool:
        """
        Upgrade ``record`` to its direct video source.

        Returns:
            bool: True if the record's asset URL and dimensions were replaced,
            False if no playable source could be found. Never raises for
            scrape failures; cancellation still propagates.
        """
        try:
            source = await self.resolve(record.embed_html)
        except ResolutionFailure as e:
            logger.info(f"Video source not resolved, falling back to image: {e}")
            return False

        record.apply_video_source(source)
        return True
