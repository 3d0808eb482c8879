"""
Pydantic models for the FixDeviantArt embed proxy.

- content: upstream oEmbed payload, video source tiers, per-request ContentRecord
- oembed: the oEmbed discovery document returned by /ohembed
"""

from fixdeviantart.models.content import (
    ContentKind,
    ContentRecord,
    ContentStatistics,
    OEmbedPayload,
    VideoSource,
)
from fixdeviantart.models.oembed import OEmbedDiscovery


__all__ = [
    "ContentKind",
    "ContentRecord",
    "ContentStatistics",
    "OEmbedDiscovery",
    "OEmbedPayload",
    "VideoSource",
]
