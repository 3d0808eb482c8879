"""
FixDeviantArt Embed Proxy Application Package

This package contains the FastAPI application that rewrites DeviantArt links
into link-preview friendly HTML. For every content path it:

- Fetches the deviation metadata from the DeviantArt oEmbed endpoint
- Resolves a direct MP4 source for film deviations by scraping the embedded player
- Renders Open Graph / Twitter Card markup (redirect or direct document)

Package Structure:
- api/: HTTP routes (embed catch-all, oEmbed discovery, static responders)
- core/: Error taxonomy and the shared outbound HTTP client
- models/: Pydantic models for upstream payloads and content records
- services/: Metadata fetcher, video source resolver, renderer, pipeline
- templates/: Jinja2 template for the embed document
- utils/: Number formatting and logging helpers
"""

__version__ = "1.0.0"
