"""
Pytest Configuration and Test Fixtures for the FixDeviantArt embed proxy

This module provides:
- Test Settings with deterministic hosts and a short request deadline
- Sample oEmbed payloads for image and film deviations
- A fake DeviantArt backend served through httpx.MockTransport
- Pipeline and FastAPI TestClient fixtures wired to the fake backend
"""

import json
import logging
from collections.abc import Generator
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from fixdeviantart.api.embed import get_embed_service
from fixdeviantart.config import Settings, get_settings
from fixdeviantart.core.http_client import create_http_client
from fixdeviantart.main import app
from fixdeviantart.services.embed_service import EmbedService, build_embed_service


PLAYER_URL = "https://backend.deviantart.com/embed/film/serve/1234/5678abcd"

TELEGRAM_UA = "TelegramBot (like TwitterBot)"
BROWSER_UA = "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0"


# ==============================================================================
# Pytest Configuration
# ==============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """
    Configure pytest with custom markers for test categorization.

    Markers defined:
    - unit: isolated tests of a single function or class
    - integration: tests exercising the HTTP surface through TestClient
    """
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")


# ==============================================================================
# Helpers
# ==============================================================================


def build_player_page(sources: Any) -> str:
    """Render a film player page carrying ``sources`` the way DeviantArt escapes it."""
    raw = json.dumps(sources).replace("/", "\\/").replace('"', "&quot;")
    return (
        "<!DOCTYPE html><html><body>"
        f'<div class="dev-film" gmon-sources="{raw}" gmon-poster="https:\\/\\/x\\/p.jpg"></div>'
        "</body></html>"
    )


class FakeDeviantArt:
    """
    Minimal stand-in for backend.deviantart.com.

    Serves /oembed and /embed/film/... from configurable state and records
    every request it receives.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.oembed_status: int = 200
        self.oembed_body: bytes = b"{}"
        self.oembed_error: Exception | None = None
        self.player_status: int = 200
        self.player_page: str = ""
        self.player_error: Exception | None = None

    def set_oembed(self, payload: Any, status_code: int = 200) -> None:
        self.oembed_body = json.dumps(payload).encode()
        self.oembed_status = status_code

    def set_player_sources(self, sources: Any) -> None:
        self.player_page = build_player_page(sources)

    @property
    def player_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.startswith("/embed/film")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.path == "/oembed":
            if self.oembed_error is not None:
                raise self.oembed_error
            return httpx.Response(
                self.oembed_status,
                content=self.oembed_body,
                headers={"Content-Type": "application/json"},
            )

        if request.url.path.startswith("/embed/film"):
            if self.player_error is not None:
                raise self.player_error
            return httpx.Response(
                self.player_status,
                text=self.player_page,
                headers={"Content-Type": "text/html; charset=utf-8"},
            )

        return httpx.Response(404, text="not found")


# ==============================================================================
# Settings Fixtures
# ==============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings with the production hosts and a short request deadline."""
    return Settings(
        app_env="testing",
        json_logs=False,
        log_level="debug",
        request_timeout_seconds=5.0,
    )


# ==============================================================================
# Payload Fixtures
# ==============================================================================


@pytest.fixture
def image_payload() -> dict[str, Any]:
    """oEmbed document for a regular image deviation."""
    return {
        "version": "1.0",
        "type": "photo",
        "title": "Arctic Fox",
        "url": "https://images-wixmp.example.com/f/fox-full.jpg",
        "author_name": "snowpainter",
        "author_url": "https://www.deviantart.com/snowpainter",
        "provider_name": "DeviantArt",
        "provider_url": "https://www.deviantart.com",
        "thumbnail_url": "https://images-wixmp.example.com/f/fox-thumb.jpg",
        "width": "1024",
        "height": 768,
        "community": {
            "statistics": {
                "_attributes": {
                    "views": 15321,
                    "favorites": 1204,
                    "comments": 87,
                    "downloads": 3,
                }
            }
        },
    }


@pytest.fixture
def video_payload() -> dict[str, Any]:
    """oEmbed document for a film deviation with structured dimensions."""
    return {
        "version": "1.0",
        "type": "video",
        "title": "Northern Lights Timelapse",
        "author_name": "skyfilms",
        "thumbnail_url": "https://images-wixmp.example.com/f/lights-thumb.jpg",
        "html": (
            f'<iframe class="deviantart-embed" src="{PLAYER_URL}" '
            'width="640" height="360" allowfullscreen></iframe>'
        ),
        "width": {"value": 640},
        "height": {"value": 360},
        "community": {
            "statistics": {
                "_attributes": {
                    "views": 2500000,
                    "favorites": 48000,
                    "comments": 999,
                    "downloads": 1000,
                }
            }
        },
    }


@pytest.fixture
def film_sources() -> dict[str, Any]:
    """Player manifest listing 360p before 720p."""
    return {
        "360p": {"src": "https://wixmp.example.com/v/lights-360.mp4", "width": 640, "height": 360},
        "720p": {"src": "https://wixmp.example.com/v/lights-720.mp4", "width": 1280, "height": 720},
    }


# ==============================================================================
# Upstream Fixtures
# ==============================================================================


@pytest.fixture
def fake_deviantart() -> FakeDeviantArt:
    return FakeDeviantArt()


@pytest.fixture
def http_client(test_settings: Settings, fake_deviantart: FakeDeviantArt) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by the fake backend."""
    return create_http_client(test_settings, transport=httpx.MockTransport(fake_deviantart.handler))


@pytest.fixture
def embed_service(http_client: httpx.AsyncClient, test_settings: Settings) -> EmbedService:
    return build_embed_service(http_client, test_settings)


# ==============================================================================
# Logging Fixtures
# ==============================================================================


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """Put the root, uvicorn and httpx loggers back after setup_logging() ran."""
    names = ["", "uvicorn", "uvicorn.access", "uvicorn.error", "httpx", "httpcore"]
    saved = {}
    for name in names:
        target = logging.getLogger(name)
        saved[name] = (target.level, list(target.handlers), target.propagate)

    yield

    for name, (level, handlers, propagate) in saved.items():
        target = logging.getLogger(name)
        target.setLevel(level)
        target.handlers[:] = handlers
        target.propagate = propagate


# ==============================================================================
# FastAPI Client Fixtures
# ==============================================================================


@pytest.fixture
def client(
    embed_service: EmbedService, test_settings: Settings
) -> Generator[TestClient, None, None]:
    """
    TestClient with the pipeline and settings dependencies overridden.

    The lifespan is not entered, so no real HTTP client is opened.
    """
    app.dependency_overrides[get_embed_service] = lambda: embed_service
    app.dependency_overrides[get_settings] = lambda: test_settings

    yield TestClient(app)

    app.dependency_overrides.clear()
