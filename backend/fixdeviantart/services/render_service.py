"""
Render Service Module for the FixDeviantArt embed proxy

Turns a resolved ContentRecord plus the request's client characteristics into
the final HTML document. Which document is produced is decided by a small
table over the client inputs:

    preview client | staypls=1 | document
    ---------------+-----------+---------------------------------------------
    no             | no        | redirect (meta refresh, preview tags kept)
    yes            | any       | direct: <video> for films, <img> otherwise
    any            | yes       | direct: <video> for films, <img> otherwise

The oEmbed discovery <link> is added for every client except the preview chat
client, which fetches oEmbed through its own mechanism.

Rendering is fully buffered: the template is executed and encoded to bytes
before anything is handed to the response, so a failure can never leave a
half-written document behind.
"""

import logging

from dataclasses import asdict, dataclass
from urllib.parse import quote, urlencode

from jinja2 import (
    Environment,
    PackageLoader,
    StrictUndefined,
    Template,
    TemplateError,
    select_autoescape,
)

from fixdeviantart.config import Settings, get_settings
from fixdeviantart.core.errors import RenderError
from fixdeviantart.models.content import ContentRecord
from fixdeviantart.utils.formatting import format_statistics, random_theme_color


TEMPLATE_NAME: str = "embed.html"


@dataclass(frozen=True)
class RenderPlan:
    """Which variant of the embed document to produce."""

    redirect: bool
    video: bool
    discovery_link: bool


def plan_render(is_preview_client: bool, override_redirect: bool, is_video: bool) -> RenderPlan:
    """Decide the document variant for a request."""
    return RenderPlan(
        redirect=not is_preview_client and not override_redirect,
        video=is_video,
        discovery_link=not is_preview_client,
    )


@dataclass(frozen=True)
class RenderContext:
    """Everything the template sees, built once per request."""

    plan: RenderPlan
    base_url: str
    theme_color: str
    title: str
    author_name: str
    asset_url: str
    thumbnail_url: str
    width: str
    height: str
    stats_text: str
    oembed_url: str
    site_name: str


class RenderService:
    """
    Builds embed documents from content records.

    The Jinja2 environment and compiled template are created once and shared
    read-only across requests. Undefined template variables are errors, so a
    broken template fails loudly as a RenderError instead of emitting blanks.

    Example:
        >>> renderer = RenderService()
        >>> body = renderer.render(record, base_url, user_agent="TelegramBot", override_redirect=False)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        environment: Environment | None = None,
    ) -> None:
        self.logger = logging.getLogger(__name__)
        self.settings = settings or get_settings()
        self.environment = environment or Environment(
            loader=PackageLoader("fixdeviantart", "templates"),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._template: Template | None = None

    def load_template(self) -> Template:
        """
        Compile the embed template, caching it after the first success.

        Raises:
            RenderError: The template is missing or does not compile.
        """
        if self._template is None:
            try:
                self._template = self.environment.get_template(TEMPLATE_NAME)
            except TemplateError as e:
                self.logger.error(f"Failed to load template {TEMPLATE_NAME}: {e}")
                raise RenderError(f"failed to load template: {e}") from e
        return self._template

    def is_preview_client(self, user_agent: str) -> bool:
        """Check whether the User-Agent belongs to the preview-rendering chat client."""
        return self.settings.preview_client_marker in user_agent

    def discovery_url(self, stats_text: str, author_name: str) -> str:
        """URL of this proxy's /ohembed document for the given display text and author."""
        query = urlencode({"displayText": stats_text, "author": author_name}, quote_via=quote)
        return f"{self.settings.public_base_url}/ohembed?{query}"

    def build_context(
        self,
        record: ContentRecord,
        base_url: str,
        user_agent: str,
        override_redirect: bool,
    ) -> RenderContext:
        plan = plan_render(
            is_preview_client=self.is_preview_client(user_agent),
            override_redirect=override_redirect,
            is_video=record.is_video,
        )
        stats_text = format_statistics(record.stats)
        return RenderContext(
            plan=plan,
            base_url=base_url,
            theme_color=random_theme_color(self.settings.fallback_theme_color),
            title=record.display_title,
            author_name=record.author_name,
            asset_url=record.asset_url,
            thumbnail_url=record.thumbnail_url,
            width=record.width,
            height=record.height,
            stats_text=stats_text,
            oembed_url=self.discovery_url(stats_text, record.author_name),
            site_name=self.settings.site_name,
        )

    def render_context(self, context: RenderContext) -> bytes:
        """
        Execute the template for a prepared context.

        Returns:
            bytes: The complete UTF-8 encoded document.

        Raises:
            RenderError: Template compilation, execution or encoding failed.
        """
        template = self.load_template()
        variables = asdict(context)
        variables["plan"] = context.plan

        try:
            document = template.render(**variables)
        except TemplateError as e:
            self.logger.error(f"Failed to execute template {TEMPLATE_NAME}: {e}")
            raise RenderError(f"failed to execute template: {e}") from e

        try:
            return document.encode("utf-8")
        except UnicodeEncodeError as e:
            self.logger.error(f"Failed to encode embed document: {e}")
            raise RenderError(f"failed to encode document: {e}") from e

    def render(
        self,
        record: ContentRecord,
        base_url: str,
        user_agent: str,
        override_redirect: bool,
    ) -> bytes:
        """Render the embed document for ``record`` as seen by ``user_agent``."""
        context = self.build_context(record, base_url, user_agent, override_redirect)
        return self.render_context(context)
