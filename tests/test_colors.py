"""Tests for glowfield.colors: colour parsing."""
from __future__ import annotations

import pytest

from glowfield.colors import Rgba, clamp01, parse_rgba


class TestParse:
    def test_rgba(self) -> None:
        assert parse_rgba("rgba(139, 92, 246, 0.18)") == Rgba(139, 92, 246, 0.18)

    def test_rgb_defaults_to_opaque(self) -> None:
        assert parse_rgba("rgb(1,2,3)") == Rgba(1, 2, 3, 1.0)

    def test_hex_forms(self) -> None:
        assert parse_rgba("#8B5CF6") == Rgba(139, 92, 246, 1.0)
        assert parse_rgba("#fff") == Rgba(255, 255, 255, 1.0)
        assert parse_rgba("#00000080").a == pytest.approx(128 / 255)

    def test_transparent(self) -> None:
        assert parse_rgba("transparent").a == 0.0

    def test_channels_are_clamped(self) -> None:
        assert parse_rgba("rgba(300, 0, 0, 4)") == Rgba(255, 0, 0, 1.0)

    def test_rgba_instance_passes_through(self) -> None:
        color = Rgba(1, 2, 3, 0.5)
        assert parse_rgba(color) is color

    @pytest.mark.parametrize("value", ["", "violet", "rgba(1, 2)", "#12", "#zzzzzz", "rgba(1.2.3, 0, 0, 1)"])
    def test_invalid_strings_raise(self, value: str) -> None:
        with pytest.raises(ValueError):
            parse_rgba(value)

    def test_non_string_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_rgba(None)  # type: ignore[arg-type]


class TestRgba:
    def test_with_alpha_keeps_channels(self) -> None:
        faded = Rgba(236, 72, 153, 0.12).with_alpha(0.05)
        assert faded == Rgba(236, 72, 153, 0.05)

    def test_with_alpha_clamps(self) -> None:
        assert Rgba(0, 0, 0, 0.5).with_alpha(3).a == 1.0

    def test_to_css(self) -> None:
        assert Rgba(212, 175, 55, 0.08).to_css() == "rgba(212, 175, 55, 0.08)"
        assert parse_rgba(Rgba(1, 2, 3, 0.25).to_css()) == Rgba(1, 2, 3, 0.25)

    def test_clamp01(self) -> None:
        assert clamp01(-1.0) == 0.0
        assert clamp01(0.3) == 0.3
        assert clamp01(2.0) == 1.0
