"""
FixDeviantArt API Router Aggregator.

Combines the endpoint routers into a single APIRouter. Order matters: the
embed router ends with a catch-all path route and must be included last.

Router Structure:
    - static: /robots.txt, /favicon.ico, /health
    - oembed: /ohembed
    - embed: / and /{content_path}
"""

from fastapi import APIRouter

from fixdeviantart.api.embed import router as embed_router
from fixdeviantart.api.oembed import router as oembed_router
from fixdeviantart.api.static import router as static_router


api_router = APIRouter()

api_router.include_router(static_router)
api_router.include_router(oembed_router)
api_router.include_router(embed_router)


__all__ = ["api_router"]
