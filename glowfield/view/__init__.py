"""Qt side of the orb background: renderer and presenting widgets."""

from .orb_renderer import LoopState, OrbRenderer, surface_pixel_size
from .surface_widget import OrbSurfaceWidget, resolve_backend

__all__ = ["LoopState", "OrbRenderer", "OrbSurfaceWidget", "resolve_backend", "surface_pixel_size"]
