"""Glowing, drifting orbs painted behind PyQt5 widgets."""

from .colors import Rgba, parse_rgba
from .orb_field import Orb, OrbField

__all__ = ["Orb", "OrbField", "Rgba", "parse_rgba"]

__version__ = "0.1.0"
