"""
Utilities Package for the FixDeviantArt embed proxy.

Modules:
--------
formatting:
    Counter abbreviation, the statistics display line, and the random
    theme-color generator used by the embed document.

logger:
    Structured logging configuration including JSONFormatter,
    StandardFormatter, setup_logging and add_log_context.
"""

from fixdeviantart.utils.formatting import (
    format_number,
    format_statistics,
    random_theme_color,
)
from fixdeviantart.utils.logger import (
    add_log_context,
    setup_logging,
)


__all__ = [
    "add_log_context",
    "format_number",
    "format_statistics",
    "random_theme_color",
    "setup_logging",
]
