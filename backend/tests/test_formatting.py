"""
Tests for the presentation helpers: counter abbreviation, the statistics line
and the per-response theme color.
"""

import re
from unittest.mock import patch

import pytest

from fixdeviantart.models.content import ContentStatistics
from fixdeviantart.utils.formatting import (
    DEFAULT_THEME_COLOR,
    format_number,
    format_statistics,
    random_theme_color,
)


@pytest.mark.unit
class TestFormatNumber:
    """Counter abbreviation thresholds."""

    @pytest.mark.parametrize(
        ("number", "expected"),
        [
            (0, "0"),
            (7, "7"),
            (999, "999"),
            (1000, "1.0K"),
            (15321, "15.3K"),
            (999_999, "1000.0K"),
            (1_000_000, "1.0M"),
            (2_500_000, "2.5M"),
            (999_999_999, "1000.0M"),
            (1_000_000_000, "1.0B"),
            (1_000_000_000_000, "1.0T"),
            (4_200_000_000_000_000, "4200.0T"),
        ],
    )
    def test_thresholds(self, number: int, expected: str) -> None:
        assert format_number(number) == expected

    def test_unit_is_chosen_before_rounding(self) -> None:
        """Just below a boundary stays in the smaller unit."""
        assert format_number(999_990) == "1000.0K"
        assert format_number(999_990_000) == "1000.0M"


@pytest.mark.unit
class TestFormatStatistics:
    def test_statistics_line(self) -> None:
        stats = ContentStatistics(views=15321, favorites=1204, comments=87, downloads=3)

        assert format_statistics(stats) == "👁️  15.3K  ❤️ 1.2K  💬 87  ⬇️ 3"

    def test_zero_counters(self) -> None:
        assert format_statistics(ContentStatistics()) == "👁️  0  ❤️ 0  💬 0  ⬇️ 0"


@pytest.mark.unit
class TestRandomThemeColor:
    def test_format(self) -> None:
        for _ in range(20):
            assert re.fullmatch(r"#[0-9a-f]{6}", random_theme_color())

    def test_fallback_when_entropy_unavailable(self) -> None:
        with patch(
            "fixdeviantart.utils.formatting.secrets.token_hex",
            side_effect=NotImplementedError("no entropy"),
        ):
            assert random_theme_color() == DEFAULT_THEME_COLOR
            assert random_theme_color("#abcdef") == "#abcdef"

    def test_fallback_on_os_error(self) -> None:
        with patch(
            "fixdeviantart.utils.formatting.secrets.token_hex",
            side_effect=OSError("urandom failed"),
        ):
            assert random_theme_color() == "#015196"
