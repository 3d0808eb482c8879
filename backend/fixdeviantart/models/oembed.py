"""
oEmbed discovery document served by ``GET /ohembed``.

Chat clients that follow the ``application/json+oembed`` link in the embed
document get this fixed-shape response. Only the author fields vary; they
carry the formatted statistics line and the author's profile URL.
"""

from pydantic import BaseModel, Field


DEFAULT_DISPLAY_TEXT: str = "DeviantArt"
AUTHOR_BASE_URL: str = "https://deviantart.com/"
PROVIDER_NAME: str = "DxviantArt"


class OEmbedDiscovery(BaseModel):
    """oEmbed 1.0 ``link`` response."""

    author_name: str = Field(default=DEFAULT_DISPLAY_TEXT)
    author_url: str = Field(default=AUTHOR_BASE_URL)
    provider_name: str = Field(default=PROVIDER_NAME)
    provider_url: str
    title: str = Field(default="DeviantArt")
    type: str = Field(default="link")
    version: str = Field(default="1.0")

    @classmethod
    def build(
        cls,
        provider_url: str,
        display_text: str | None = None,
        author: str | None = None,
    ) -> "OEmbedDiscovery":
        """
        Build the discovery document from optional query parameters.

        A parameter that is present but empty is kept as-is, matching the
        behavior of the link generated by the embed document.
        """
        return cls(
            author_name=DEFAULT_DISPLAY_TEXT if display_text is None else display_text,
            author_url=AUTHOR_BASE_URL + (author or ""),
            provider_url=provider_url,
        )
