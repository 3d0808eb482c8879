"""
Presentation helpers for the embed document.

- format_number: abbreviate counters (999, 1.0K, 2.5M, ...)
- format_statistics: the views/favorites/comments/downloads line used as the
  oEmbed discovery display text
- random_theme_color: per-response cosmetic theme-color
"""

import logging
import secrets

from fixdeviantart.models.content import ContentStatistics


logger = logging.getLogger(__name__)

DEFAULT_THEME_COLOR: str = "#015196"

# (upper bound, divisor, suffix); values at or beyond the last bound use trillions
_NUMBER_UNITS: tuple[tuple[float, float, str], ...] = (
    (1e6, 1e3, "K"),
    (1e9, 1e6, "M"),
    (1e12, 1e9, "B"),
)


def format_number(number: float) -> str:
    """
    Abbreviate a counter for display.

    Values below 1,000 are shown as integers; larger values are divided down
    to thousands, millions, billions or trillions and shown with one decimal.
    The unit is picked from the raw value before rounding, so 999,999 shows
    as ``1000.0K`` rather than ``1.0M``.

    Example:
        >>> format_number(999)
        '999'
        >>> format_number(1000)
        '1.0K'
        >>> format_number(1_250_000)
        '1.2M'
    """
    if number < 1e3:
        return f"{number:.0f}"

    for upper_bound, divisor, suffix in _NUMBER_UNITS:
        if number < upper_bound:
            return f"{number / divisor:.1f}{suffix}"

    return f"{number / 1e12:.1f}T"


def format_statistics(stats: ContentStatistics) -> str:
    """Build the statistics line shown by chat clients as the oEmbed author."""
    return "👁️  {}  ❤️ {}  💬 {}  ⬇️ {}".format(
        format_number(stats.views),
        format_number(stats.favorites),
        format_number(stats.comments),
        format_number(stats.downloads),
    )


def random_theme_color(fallback: str = DEFAULT_THEME_COLOR) -> str:
    """
    Generate a random ``#rrggbb`` color from the system entropy source.

    Falls back to ``fallback`` if no randomness is available; this never raises.
    """
    try:
        return "#" + secrets.token_hex(3)
    except (OSError, NotImplementedError) as e:
        logger.debug(f"Entropy source unavailable, using fallback theme color: {e}")
        return fallback
