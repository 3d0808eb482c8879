"""
Embed pipeline: metadata fetch, optional video resolution, rendering.

One EmbedService is built at startup and shared by all requests. It holds no
per-request state; each call creates its own ContentRecord. The two outbound
calls run sequentially under a single deadline, and when the deadline expires
the in-flight call is cancelled and the request fails with an
UpstreamRequestError.
"""

import asyncio
import logging

from dataclasses import dataclass

import httpx

from fixdeviantart.config import Settings, get_settings
from fixdeviantart.core.errors import UpstreamRequestError
from fixdeviantart.models.content import ContentRecord
from fixdeviantart.services.metadata_service import MetadataService
from fixdeviantart.services.render_service import RenderService
from fixdeviantart.services.video_resolver import VideoResolver


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmbedRequest:
    """Inputs taken from the inbound HTTP request."""

    content_path: str
    user_agent: str = ""
    override_redirect: bool = False


class EmbedService:
    """
    Composes the metadata service, video resolver and renderer.

    Attributes:
        metadata: Fetches the oEmbed record
        resolver: Upgrades film records to a direct video source
        renderer: Produces the final document
        timeout_seconds: Deadline covering all outbound calls of one request
    """

    def __init__(
        self,
        metadata: MetadataService,
        resolver: VideoResolver,
        renderer: RenderService,
        timeout_seconds: float,
    ) -> None:
        self.metadata = metadata
        self.resolver = resolver
        self.renderer = renderer
        self.timeout_seconds = timeout_seconds

    async def load_record(self, content_path: str) -> ContentRecord:
        """
        Fetch the record and resolve its video source within the deadline.

        A film whose source cannot be resolved is downgraded to an image.

        Raises:
            UpstreamRequestError: The oEmbed call failed or the deadline expired.
            UpstreamDecodeError: The oEmbed body could not be decoded.
        """
        try:
            async with asyncio.timeout(self.timeout_seconds):
                record = await self.metadata.fetch_content(content_path)
                if record.is_video and not await self.resolver.try_resolve(record):
                    record.downgrade_to_image()
        except TimeoutError as e:
            logger.error(
                f"Deadline of {self.timeout_seconds}s exceeded while loading {content_path}"
            )
            raise UpstreamRequestError(
                f"deadline of {self.timeout_seconds}s exceeded for {content_path}"
            ) from e
        return record

    async def build_embed(self, request: EmbedRequest) -> bytes:
        """
        Produce the complete embed document for a request.

        Returns:
            bytes: UTF-8 HTML document.

        Raises:
            ProxyError: Any request-terminating failure (upstream, decode, render).
        """
        record = await self.load_record(request.content_path)
        return self.renderer.render(
            record,
            base_url=self.metadata.canonical_url(request.content_path),
            user_agent=request.user_agent,
            override_redirect=request.override_redirect,
        )


def build_embed_service(client: httpx.AsyncClient, settings: Settings | None = None) -> EmbedService:
    """Wire the pipeline around a shared HTTP client."""
    settings = settings or get_settings()
    return EmbedService(
        metadata=MetadataService(client, settings),
        resolver=VideoResolver(client, settings),
        renderer=RenderService(settings),
        timeout_seconds=settings.request_timeout_seconds,
    )
