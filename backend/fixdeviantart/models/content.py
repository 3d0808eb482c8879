"""
Content models for the FixDeviantArt embed proxy.

This module defines the upstream oEmbed payload as DeviantArt returns it and
the transient ContentRecord the pipeline works on. A record lives for exactly
one request: it is built from the payload, possibly upgraded in place with a
resolved video source, rendered, and discarded.

The oEmbed ``width``/``height`` fields are not consistently typed upstream
(plain integers, numeric strings, and nested objects have all been observed).
They are narrowed at decode time to ``int | str | None`` and turned into
display strings before they reach the renderer.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Counters are signed 64-bit upstream; larger values are a schema mismatch
MAX_COUNTER: int = 2**63 - 1


# =============================================================================
# ENUMS
# =============================================================================


class ContentKind(str, Enum):
    """Kind of deviation being previewed."""

    IMAGE = "image"
    VIDEO = "video"


# =============================================================================
# HELPERS
# =============================================================================


def narrow_dimension(value: Any) -> int | str | None:
    """
    Narrow a loosely typed upstream dimension.

    Integers (and integral floats or numeric strings) become ``int``, other
    non-empty strings are kept verbatim, and every other shape (objects,
    lists, booleans, null) becomes ``None``.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else str(value)
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.isdigit():
            return int(stripped)
        return stripped or None
    return None


def dimension_to_display(value: int | str | None) -> str:
    """Convert a narrowed dimension into the string placed in HTML attributes."""
    if value is None:
        return ""
    return str(value)


# =============================================================================
# UPSTREAM PAYLOAD
# =============================================================================


class StatisticAttributes(BaseModel):
    """Deviation counters nested under community.statistics._attributes."""

    model_config = ConfigDict(extra="ignore")

    views: int = Field(default=0, le=MAX_COUNTER)
    favorites: int = Field(default=0, le=MAX_COUNTER)
    comments: int = Field(default=0, le=MAX_COUNTER)
    downloads: int = Field(default=0, le=MAX_COUNTER)

    @field_validator("views", "favorites", "comments", "downloads", mode="before")
    @classmethod
    def default_missing_counter(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("views", "favorites", "comments", "downloads")
    @classmethod
    def clamp_counter(cls, v: int) -> int:
        return max(v, 0)


class CommunityStatistics(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    attributes: StatisticAttributes = Field(
        default_factory=StatisticAttributes, alias="_attributes"
    )


class Community(BaseModel):
    model_config = ConfigDict(extra="ignore")

    statistics: CommunityStatistics = Field(default_factory=CommunityStatistics)


class OEmbedPayload(BaseModel):
    """
    Decoded response of ``GET https://backend.deviantart.com/oembed``.

    Only the fields the proxy renders are modelled; everything else in the
    upstream document is ignored. Missing strings decode as ``""`` and missing
    counters as ``0``; a field with the wrong scalar type (for example a list
    where the title should be) is a schema mismatch and raises
    pydantic.ValidationError.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    content_type: str = Field(default="", alias="type")
    title: str = ""
    url: str = ""
    author_name: str = ""
    thumbnail_url: str = ""
    html: str = ""
    width: int | str | None = None
    height: int | str | None = None
    community: Community = Field(default_factory=Community)

    @field_validator(
        "content_type", "title", "url", "author_name", "thumbnail_url", "html", mode="before"
    )
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("width", "height", mode="before")
    @classmethod
    def narrow(cls, v: Any) -> int | str | None:
        return narrow_dimension(v)

    @field_validator("community", mode="before")
    @classmethod
    def null_community(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def statistics(self) -> StatisticAttributes:
        return self.community.statistics.attributes


# =============================================================================
# VIDEO SOURCES
# =============================================================================


class VideoSource(BaseModel):
    """One resolution tier of the film player's ``gmon-sources`` manifest."""

    model_config = ConfigDict(extra="ignore")

    src: str
    width: int = 0
    height: int = 0


# =============================================================================
# CONTENT RECORD
# =============================================================================


class ContentStatistics(BaseModel):
    """The four counters shown in the discovery link text."""

    views: int = Field(default=0, le=MAX_COUNTER)
    favorites: int = Field(default=0, le=MAX_COUNTER)
    comments: int = Field(default=0, le=MAX_COUNTER)
    downloads: int = Field(default=0, le=MAX_COUNTER)


class ContentRecord(BaseModel):
    """
    Per-request view of a deviation, ready for rendering.

    ``asset_url`` starts as the oEmbed ``url`` (the full-size image, or empty
    for films) and is overwritten when a video source is resolved. An empty
    ``asset_url`` renders as empty ``src`` attributes rather than failing.

    Example:
        >>> payload = OEmbedPayload.model_validate({"type": "photo", "title": "Fox"})
        >>> record = ContentRecord.from_oembed(payload)
        >>> record.kind
        <ContentKind.IMAGE: 'image'>
    """

    kind: ContentKind = ContentKind.IMAGE
    title: str = ""
    author_name: str = ""
    asset_url: str = ""
    thumbnail_url: str = ""
    embed_html: str = ""
    width: str = ""
    height: str = ""
    stats: ContentStatistics = Field(default_factory=ContentStatistics)

    @classmethod
    def from_oembed(cls, payload: OEmbedPayload) -> "ContentRecord":
        counters = payload.statistics
        return cls(
            kind=ContentKind.VIDEO if payload.content_type == "video" else ContentKind.IMAGE,
            title=payload.title,
            author_name=payload.author_name,
            asset_url=payload.url,
            thumbnail_url=payload.thumbnail_url,
            embed_html=payload.html,
            width=dimension_to_display(payload.width),
            height=dimension_to_display(payload.height),
            stats=ContentStatistics(
                views=counters.views,
                favorites=counters.favorites,
                comments=counters.comments,
                downloads=counters.downloads,
            ),
        )

    @property
    def is_video(self) -> bool:
        return self.kind is ContentKind.VIDEO

    @property
    def display_title(self) -> str:
        """Title shown in og:title, og:description and twitter:title."""
        return f"{self.title} by {self.author_name}"

    def apply_video_source(self, source: VideoSource) -> None:
        """Point the record at a resolved MP4 source."""
        self.asset_url = source.src
        self.width = str(source.width)
        self.height = str(source.height)

    def downgrade_to_image(self) -> None:
        """Render as an image because no playable source was found."""
        self.kind = ContentKind.IMAGE
