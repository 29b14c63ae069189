"""Colour helpers shared by the orb field and the Qt renderer.

Palette entries are written the way a stylesheet would write them
(``rgba(139, 92, 246, 0.18)`` or ``#8B5CF6``).  The field keeps the parsed
:class:`Rgba` value so it stays free of any Qt dependency; the renderer turns
it into a ``QColor`` when painting.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple, Union

__all__ = ["Rgba", "parse_rgba", "clamp01"]

_RGBA_RE = re.compile(
    r"^rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)$",
    re.IGNORECASE,
)


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _clamp_channel(value: float) -> int:
    return int(max(0, min(255, round(value))))


@dataclass(frozen=True)
class Rgba:
    """Straight (non premultiplied) colour with a floating point alpha."""

    r: int
    g: int
    b: int
    a: float = 1.0

    def with_alpha(self, alpha: float) -> "Rgba":
        """Return the same colour with ``alpha`` replacing the current opacity."""

        return Rgba(self.r, self.g, self.b, clamp01(float(alpha)))

    def to_tuple(self) -> Tuple[int, int, int, float]:
        return self.r, self.g, self.b, self.a

    def to_css(self) -> str:
        return f"rgba({self.r}, {self.g}, {self.b}, {self.a:g})"


ColorLike = Union[str, Rgba]


def _hex_to_rgba(value: str) -> Rgba:
    digits = value.strip().lstrip("#")
    if len(digits) in (3, 4):
        digits = "".join(ch * 2 for ch in digits)
    if len(digits) not in (6, 8):
        raise ValueError(f"Invalid hex colour: {value!r}")
    try:
        number = int(digits, 16)
    except ValueError as exc:
        raise ValueError(f"Invalid hex colour: {value!r}") from exc
    if len(digits) == 8:
        return Rgba(
            (number >> 24) & 255,
            (number >> 16) & 255,
            (number >> 8) & 255,
            (number & 255) / 255.0,
        )
    return Rgba((number >> 16) & 255, (number >> 8) & 255, number & 255, 1.0)


def parse_rgba(value: ColorLike) -> Rgba:
    """Parse ``rgba(...)``, ``rgb(...)``, ``#rgb``/``#rrggbb[aa]`` or ``transparent``.

    Raises ``ValueError`` when the string is not a colour.
    """

    if isinstance(value, Rgba):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Colour must be a string, got {type(value).__name__}")
    text = value.strip()
    if text.lower() == "transparent":
        return Rgba(0, 0, 0, 0.0)
    if text.startswith("#"):
        return _hex_to_rgba(text)
    match = _RGBA_RE.match(text)
    if match is None:
        raise ValueError(f"Invalid colour: {value!r}")
    red, green, blue, alpha = match.groups()
    try:
        return Rgba(
            _clamp_channel(float(red)),
            _clamp_channel(float(green)),
            _clamp_channel(float(blue)),
            clamp01(float(alpha)) if alpha is not None else 1.0,
        )
    except ValueError as exc:
        raise ValueError(f"Invalid colour: {value!r}") from exc
