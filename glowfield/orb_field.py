"""Physical state of the glowing orbs drawn behind the page.

The field is a plain state transformer: it knows nothing about Qt, painting or
timers.  :class:`~glowfield.view.orb_renderer.OrbRenderer` calls :meth:`tick`
once per frame and reads the orbs back to paint them.

Motion is intentionally naive.  Each orb drifts with a constant velocity (one
Euler step per frame), its radius breathes around ``base_radius`` following a
sine of its phase, and the plane is treated as a torus: an orb leaving one edge
by more than its radius reappears just outside the opposite edge so it always
drifts back into view.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

try:
    from .colors import ColorLike, Rgba, parse_rgba
except ImportError:  # pragma: no cover
    from glowfield.colors import ColorLike, Rgba, parse_rgba

__all__ = ["Orb", "OrbField", "DEFAULT_PULSE_AMPLITUDE"]

DEFAULT_PULSE_AMPLITUDE = 30.0
DEFAULT_MAX_SPEED = 0.2
DEFAULT_PULSE_SPEED_RANGE = (0.006, 0.012)

PaletteEntry = Tuple[ColorLike, float]


@dataclass
class Orb:
    """A single glowing disc.

    ``base_radius``, ``color``, ``vx``, ``vy`` and ``pulse_speed`` are fixed at
    creation; ``x``, ``y``, ``phase`` and ``radius`` evolve every tick.
    """

    x: float
    y: float
    base_radius: float
    color: Rgba
    vx: float = 0.0
    vy: float = 0.0
    phase: float = 0.0
    pulse_speed: float = 0.0
    radius: float = 0.0

    def __post_init__(self) -> None:
        if not self.radius:
            self.radius = self.base_radius


class OrbField:
    """Ordered collection of orbs plus the surface size used for wraparound.

    List order is the paint order (first orb ends up at the back).
    """

    def __init__(
        self,
        width: float = 1.0,
        height: float = 1.0,
        *,
        pulse_amplitude: float = DEFAULT_PULSE_AMPLITUDE,
        max_speed: float = DEFAULT_MAX_SPEED,
        pulse_speed_min: float = DEFAULT_PULSE_SPEED_RANGE[0],
        pulse_speed_max: float = DEFAULT_PULSE_SPEED_RANGE[1],
    ) -> None:
        self._width = float(width)
        self._height = float(height)
        self.pulse_amplitude = float(pulse_amplitude)
        self.max_speed = float(max_speed)
        self.pulse_speed_min = float(pulse_speed_min)
        self.pulse_speed_max = float(pulse_speed_max)
        self.orbs: List[Orb] = []

    # ------------------------------------------------------------------ helpers
    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    def __len__(self) -> int:
        return len(self.orbs)

    def __iter__(self) -> Iterator[Orb]:
        return iter(self.orbs)

    def _spawn(self, color: ColorLike, base_radius: float, rng: random.Random) -> Orb:
        speed = self.max_speed
        return Orb(
            x=rng.random() * self._width,
            y=rng.random() * self._height,
            base_radius=float(base_radius),
            color=parse_rgba(color),
            vx=(rng.random() - 0.5) * 2.0 * speed,
            vy=(rng.random() - 0.5) * 2.0 * speed,
            phase=rng.random() * math.tau,
            pulse_speed=rng.uniform(self.pulse_speed_min, self.pulse_speed_max),
        )

    # ---------------------------------------------------------------- lifecycle
    def initialize(
        self,
        palette: Iterable[PaletteEntry],
        rng: Optional[random.Random] = None,
    ) -> None:
        """Replace the orbs with one freshly randomised orb per palette entry.

        ``rng`` defaults to a fresh, OS-seeded generator; pass a seeded
        ``random.Random`` to get the same field twice.
        """

        source = rng if rng is not None else random.Random()
        self.orbs = [self._spawn(color, radius, source) for color, radius in palette]

    def add(self, orb: Orb) -> Orb:
        self.orbs.append(orb)
        return orb

    def tick(self) -> None:
        """Advance every orb by one frame."""

        width = self._width
        height = self._height
        amplitude = self.pulse_amplitude
        for orb in self.orbs:
            orb.x += orb.vx
            orb.y += orb.vy
            orb.phase += orb.pulse_speed
            orb.radius = orb.base_radius + math.sin(orb.phase) * amplitude

            radius = orb.radius
            if orb.x < -radius:
                orb.x = width + radius
            if orb.x > width + radius:
                orb.x = -radius
            if orb.y < -radius:
                orb.y = height + radius
            if orb.y > height + radius:
                orb.y = -radius

    def resize(self, width: float, height: float) -> None:
        # Orbs are left where they are; the next out-of-bounds check uses the new size.
        self._width = float(width)
        self._height = float(height)

    def snapshot(self) -> Sequence[Tuple[float, float, float]]:
        """Return ``(x, y, radius)`` for each orb in paint order."""

        return [(orb.x, orb.y, orb.radius) for orb in self.orbs]
