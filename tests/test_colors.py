"""Tests for puzzlepath.ui.colors – palette, blending and star glyphs."""

from __future__ import annotations

import pytest

from puzzlepath.core.levels import Family
from puzzlepath.ui.colors import FAMILY_COLORS, FAMILY_TITLES, HomeColors, blend_hex, star_text


# ===========================================================================
# Palette
# ===========================================================================

class TestPalette:
    def test_home_colors_are_hex(self):
        for value in (HomeColors.BG_TOP, HomeColors.PRIMARY, HomeColors.STAR, HomeColors.TEXT_PRIMARY):
            assert value.startswith("#")
            assert len(value) == 7

    def test_card_bg_is_rgba(self):
        assert HomeColors.CARD_BG.startswith("rgba(")

    def test_every_family_has_color_and_title(self):
        assert set(FAMILY_COLORS) == set(Family)
        assert set(FAMILY_TITLES) == set(Family)


# ===========================================================================
# blend_hex
# ===========================================================================

class TestBlendHex:
    def test_t_zero_returns_a(self):
        assert blend_hex("#FF0000", "#0000FF", 0.0) == "#FF0000"

    def test_t_one_returns_b(self):
        assert blend_hex("#FF0000", "#0000FF", 1.0) == "#0000FF"

    def test_midpoint(self):
        assert blend_hex("#000000", "#FFFFFF", 0.5) == "#7F7F7F"

    def test_clamped(self):
        assert blend_hex("#FF0000", "#0000FF", -1.0) == "#FF0000"
        assert blend_hex("#FF0000", "#0000FF", 2.0) == "#0000FF"

    @pytest.mark.parametrize("a,b", [("FF0000", "#0000FF"), ("#FF0000", "0000FF"), ("#FFF", "#000000")])
    def test_invalid_returns_a(self, a: str, b: str):
        assert blend_hex(a, b, 0.5) == a

    def test_bad_hex_digits(self):
        assert blend_hex("#GGGGGG", "#000000", 0.5) == "#GGGGGG"


# ===========================================================================
# star_text
# ===========================================================================

class TestStarText:
    @pytest.mark.parametrize("stars,expected", [(0, "☆☆☆"), (1, "★☆☆"), (2, "★★☆"), (3, "★★★")])
    def test_glyphs(self, stars: int, expected: str):
        assert star_text(stars) == expected

    def test_clamped(self):
        assert star_text(7) == "★★★"
        assert star_text(-2) == "☆☆☆"
