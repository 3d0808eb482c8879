"""
Metadata Service Module for the FixDeviantArt embed proxy

This service fetches deviation metadata from the DeviantArt oEmbed API and
decodes it into a ContentRecord. It is the first hop of every embed request:

    GET https://backend.deviantart.com/oembed?url=https://deviantart.com/<path>

Each way the call can go wrong is reported as its own failure so the logs say
exactly what broke; all of them end the request:
- request construction failure  -> UpstreamRequestError
- transport failure or non-2xx  -> UpstreamRequestError
- body is not JSON              -> UpstreamDecodeError
- JSON does not match schema    -> UpstreamDecodeError

There are no retries. The caller owns the deadline: this service never sets
its own timeout beyond the client default, so cancelling the calling task
cancels the in-flight request.
"""

import json
import logging

import httpx

from pydantic import ValidationError

from fixdeviantart.config import Settings, get_settings
from fixdeviantart.core.errors import UpstreamDecodeError, UpstreamRequestError
from fixdeviantart.models.content import ContentRecord, OEmbedPayload


class MetadataService:
    """
    Fetches and decodes oEmbed metadata for a DeviantArt content path.

    Attributes:
        client: Shared httpx.AsyncClient used for the upstream call
        settings: Application settings (hosts, user agent)
        logger: Logger instance for operation tracking

    Example:
        >>> service = MetadataService(client)
        >>> record = await service.fetch_content("/someartist/art/Fox-123")
        >>> record.display_title
        'Fox by someartist'
    """

    def __init__(self, client: httpx.AsyncClient, settings: Settings | None = None) -> None:
        self.logger = logging.getLogger(__name__)
        self.client = client
        self.settings = settings or get_settings()

    def canonical_url(self, content_path: str) -> str:
        """Build the DeviantArt page URL for a request path."""
        return self.settings.source_base_url + content_path

    async def fetch_payload(self, content_path: str) -> OEmbedPayload:
        """
        Call the oEmbed endpoint and decode the raw payload.

        Args:
            content_path: Request path, starting with ``/``.

        Returns:
            OEmbedPayload: The decoded upstream document.

        Raises:
            UpstreamRequestError: Request could not be built or sent, or the
                response status was not 2xx.
            UpstreamDecodeError: Body was not JSON or did not match the schema.
        """
        source_url = self.canonical_url(content_path)

        try:
            request = self.client.build_request(
                "GET",
                self.settings.oembed_endpoint,
                params={"url": source_url},
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError) as e:
            self.logger.error(f"Failed to build oEmbed request for {source_url}: {e}")
            raise UpstreamRequestError(
                f"failed to build oEmbed request: {e}",
                public_message="failed to create request to deviantart",
            ) from e

        try:
            response = await self.client.send(request)
        except httpx.HTTPError as e:
            self.logger.error(f"oEmbed request failed for {source_url}: {e!r}")
            raise UpstreamRequestError(f"oEmbed request failed: {e!r}") from e

        if not response.is_success:
            self.logger.warning(
                f"oEmbed endpoint returned HTTP {response.status_code} for {source_url}"
            )
            raise UpstreamRequestError(f"oEmbed endpoint returned HTTP {response.status_code}")

        try:
            data = json.loads(response.content)
        except ValueError as e:
            self.logger.warning(f"Malformed oEmbed body for {source_url}: {e}")
            raise UpstreamDecodeError(f"malformed oEmbed body: {e}") from e

        try:
            payload = OEmbedPayload.model_validate(data)
        except ValidationError as e:
            self.logger.warning(
                f"oEmbed schema mismatch for {source_url}: {e.error_count()} error(s)"
            )
            raise UpstreamDecodeError(f"oEmbed schema mismatch: {e}") from e

        self.logger.debug(f"Fetched oEmbed metadata: type={payload.content_type!r}")
        return payload

    async def fetch_content(self, content_path: str) -> ContentRecord:
        """Fetch the oEmbed payload for ``content_path`` as a ContentRecord."""
        payload = await self.fetch_payload(content_path)
        return ContentRecord.from_oembed(payload)
