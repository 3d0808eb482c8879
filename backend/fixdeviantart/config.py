"""
FixDeviantArt Configuration Management Module

This module provides configuration management for the embed proxy using
Pydantic Settings. It loads and validates the environment variables required for:
- Application settings (name, environment, debug mode, logging)
- Server binding and optional TLS certificate files
- Upstream hosts (canonical DeviantArt host, oEmbed/player backend host)
- Rendering constants (site name, preview client marker, fallback theme color)
- The per-request deadline bounding all outbound calls

All settings support environment variable overrides and .env file loading with
validation and type safety. Every field has a default so the proxy starts with
an empty environment.
"""

import re

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fixdeviantart import __version__


HEX_COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")


class Settings(BaseSettings):
    """
    Configuration settings for the FixDeviantArt embed proxy.

    Configuration Categories:
    - Application: name, environment, debug mode, logging
    - Server: bind address, port, TLS material
    - Upstream: DeviantArt hosts and outbound request deadline
    - Rendering: public base URL, site name, preview client marker, colors

    Example usage:
        ```python
        from fixdeviantart.config import get_settings

        settings = get_settings()
        print(f"Fetching metadata from: {settings.oembed_endpoint}")
        ```
    """

    # =========================================================================
    # Application Settings
    # =========================================================================

    app_name: str = Field(
        default="fixdeviantart",
        description="Application name displayed in logs and the health endpoint",
    )

    app_env: str = Field(
        default="development",
        description="Application environment (development, staging, production, testing)",
    )

    debug: bool = Field(default=False, description="Enable debug mode with hot-reload")

    log_level: str = Field(
        default="info", description="Logging level (debug, info, warning, error, critical)"
    )

    json_logs: bool = Field(
        default=True, description="Emit structured JSON logs instead of human-readable lines"
    )

    # =========================================================================
    # Server Settings
    # =========================================================================

    host: str = Field(default="0.0.0.0", description="Host address for the server to bind to")

    port: int = Field(default=8000, description="Port number for the server", ge=1, le=65535)

    ssl_certfile: str | None = Field(
        default=None, description="Path to the TLS certificate chain (provisioned externally)"
    )

    ssl_keyfile: str | None = Field(
        default=None, description="Path to the TLS private key (provisioned externally)"
    )

    # =========================================================================
    # Upstream Settings
    # =========================================================================

    source_host: str = Field(
        default="deviantart.com",
        description="Host of the canonical content pages; request paths are appended to it",
    )

    api_host: str = Field(
        default="backend.deviantart.com",
        description="Host serving the oEmbed API and the embedded film player",
    )

    request_timeout_seconds: float = Field(
        default=60.0,
        description="Deadline for the whole request, covering every outbound call",
        gt=0,
    )

    user_agent: str = Field(
        default=f"fixdeviantart/{__version__} (+https://github.com/itsrcu/fixdeviantart)",
        description="User-Agent header sent on outbound requests",
    )

    # =========================================================================
    # Rendering Settings
    # =========================================================================

    public_base_url: str = Field(
        default="https://dxviantart.com",
        description="Public URL of this proxy, used for the oEmbed discovery link",
    )

    site_name: str = Field(default="dxviantart.com", description="Value of og:site_name")

    project_url: str = Field(
        default="https://github.com/itsrcu/fixdeviantart",
        description="Project information URL; target of the root redirect",
    )

    preview_client_marker: str = Field(
        default="Telegram",
        description="User-Agent substring identifying the preview-rendering chat client",
    )

    fallback_theme_color: str = Field(
        default="#015196",
        description="theme-color used when no random color can be generated",
    )

    # =========================================================================
    # Model Configuration
    # =========================================================================

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log_level is a valid logging level."""
        valid_levels = {"debug", "info", "warning", "error", "critical"}
        normalized = v.lower()
        if normalized not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {', '.join(valid_levels)}")
        return normalized

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate that app_env is a valid environment name."""
        valid_envs = {"development", "staging", "production", "testing"}
        normalized = v.lower()
        if normalized not in valid_envs:
            raise ValueError(f"Invalid app_env '{v}'. Must be one of: {', '.join(valid_envs)}")
        return normalized

    @field_validator("fallback_theme_color")
    @classmethod
    def validate_theme_color(cls, v: str) -> str:
        """Validate that the fallback color is a #rrggbb hex string."""
        if not HEX_COLOR_PATTERN.match(v):
            raise ValueError(f"Invalid fallback_theme_color '{v}'. Expected #rrggbb")
        return v.lower()

    @field_validator("source_host", "api_host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Strip schemes and trailing slashes so hosts can be joined safely."""
        host = v.strip()
        for prefix in ("https://", "http://"):
            if host.startswith(prefix):
                host = host[len(prefix) :]
        host = host.rstrip("/")
        if not host:
            raise ValueError("Host must not be empty")
        return host

    @field_validator("public_base_url", "project_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Drop trailing slashes from absolute URLs."""
        return v.rstrip("/")

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def source_base_url(self) -> str:
        """Canonical content origin, e.g. ``https://deviantart.com``."""
        return f"https://{self.source_host}"

    @property
    def oembed_endpoint(self) -> str:
        """Upstream oEmbed endpoint, e.g. ``https://backend.deviantart.com/oembed``."""
        return f"https://{self.api_host}/oembed"

    @property
    def player_embed_prefix(self) -> str:
        """Literal prefix of embedded film player URLs inside oEmbed HTML."""
        return f"https://{self.api_host}/embed/film"

    @property
    def tls_enabled(self) -> bool:
        """Check if both TLS certificate and key files are configured."""
        return bool(self.ssl_certfile and self.ssl_keyfile)


@lru_cache
def get_settings() -> Settings:
    """
    Get the global Settings instance.

    The @lru_cache decorator ensures that the Settings object is created only
    once on first call, and subsequent calls return the cached instance without
    re-reading environment variables or .env files.

    Returns:
        Settings: The global configuration instance.
    """
    return Settings()
