"""Default parameters for the orb background and helpers to override them."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

try:
    from .colors import Rgba, parse_rgba
    from .console import warn
except ImportError:  # pragma: no cover
    from glowfield.colors import Rgba, parse_rgba
    from glowfield.console import warn

DEFAULTS = dict(
    palette=[
        ["rgba(139, 92, 246, 0.18)", 280],  # violet royal, le plus grand
        ["rgba(192, 132, 252, 0.14)", 220],  # lavande
        ["rgba(236, 72, 153, 0.12)", 200],  # rose vif
        ["rgba(212, 175, 55, 0.08)", 180],  # or champagne
        ["rgba(99, 102, 241, 0.12)", 240],  # indigo
        ["rgba(244, 114, 182, 0.10)", 160],  # rose poudré
    ],
    motion=dict(pulseAmplitude=30.0, maxSpeed=0.2, pulseSpeedMin=0.006, pulseSpeedMax=0.012),
    gradient=dict(midStop=0.5, midAlpha=0.05),
    system=dict(frameIntervalMs=0, dprClamp=2.0, backend="auto"),
)

TOOLTIPS = {
    "palette": "Liste de paires [couleur, rayon de base] dessinées dans l'ordre.",
    "motion.pulseAmplitude": "Variation maximale du rayon autour du rayon de base (px).",
    "motion.maxSpeed": "Vitesse maximale de dérive par image sur chaque axe (px).",
    "motion.pulseSpeedMin": "Incrément de phase minimal par image.",
    "motion.pulseSpeedMax": "Incrément de phase maximal par image.",
    "gradient.midStop": "Position de l'arrêt intermédiaire du dégradé radial.",
    "gradient.midAlpha": "Opacité de la couleur à l'arrêt intermédiaire.",
    "system.frameIntervalMs": "Intervalle entre deux images (0 = fréquence de l'écran).",
    "system.dprClamp": "Limite la résolution utilisée pour protéger les performances.",
    "system.backend": "Rendu 'auto', 'opengl' ou 'raster'.",
}


def default_config() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULTS)


def merge_config(base: Dict[str, Any], payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge ``payload`` into ``base`` in place and return ``base``.

    Nested mappings are merged key by key; any other value (lists included)
    replaces the previous one.
    """

    for key, value in payload.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merge_config(current, value)
        else:
            base[key] = copy.deepcopy(value)
    return base


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Return the defaults overridden by the JSON document at ``path``.

    A missing, unreadable or malformed file leaves the defaults untouched.
    """

    config = default_config()
    if path is None:
        return config
    path = Path(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        warn(f"Config file {path} not found, using defaults.")
        return config
    except (OSError, ValueError) as exc:
        warn(f"Unable to read config file {path} ({exc}), using defaults.")
        return config
    if not isinstance(payload, Mapping):
        warn(f"Config file {path} must contain a JSON object, using defaults.")
        return config
    return merge_config(config, payload)


def palette_from_config(config: Mapping[str, Any]) -> List[Tuple[Rgba, float]]:
    """Turn the ``palette`` entry into ``(Rgba, base_radius)`` pairs.

    Raises ``ValueError`` for entries that are not a colour and a positive radius.
    """

    raw = config.get("palette", DEFAULTS["palette"])
    if not isinstance(raw, Sequence) or isinstance(raw, str):
        raise ValueError("palette must be a list of [colour, radius] pairs")
    palette: List[Tuple[Rgba, float]] = []
    for idx, entry in enumerate(raw):
        if isinstance(entry, Mapping):
            color, radius = entry.get("color"), entry.get("radius")
        elif isinstance(entry, Sequence) and not isinstance(entry, str) and len(entry) == 2:
            color, radius = entry
        else:
            raise ValueError(f"palette[{idx}] must be a [colour, radius] pair")
        try:
            radius_value = float(radius)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"palette[{idx}] radius must be a number") from exc
        if radius_value <= 0:
            raise ValueError(f"palette[{idx}] radius must be positive")
        palette.append((parse_rgba(color), radius_value))
    return palette


def _section(config: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = config.get(name, {})
    return section if isinstance(section, Mapping) else {}


def _float_option(section: Mapping[str, Any], key: str, fallback: float) -> float:
    raw = section.get(key, fallback)
    try:
        return float(raw)
    except (TypeError, ValueError):
        return fallback


def motion_options(config: Mapping[str, Any]) -> Dict[str, float]:
    """Keyword arguments for :class:`~glowfield.orb_field.OrbField`."""

    motion = _section(config, "motion")
    defaults = DEFAULTS["motion"]
    low = _float_option(motion, "pulseSpeedMin", defaults["pulseSpeedMin"])
    high = _float_option(motion, "pulseSpeedMax", defaults["pulseSpeedMax"])
    if high < low:
        low, high = high, low
    return {
        "pulse_amplitude": max(0.0, _float_option(motion, "pulseAmplitude", defaults["pulseAmplitude"])),
        "max_speed": abs(_float_option(motion, "maxSpeed", defaults["maxSpeed"])),
        "pulse_speed_min": low,
        "pulse_speed_max": high,
    }


def gradient_options(config: Mapping[str, Any]) -> Tuple[float, float]:
    """Return ``(mid_stop, mid_alpha)`` clamped to ``[0, 1]``."""

    gradient = _section(config, "gradient")
    defaults = DEFAULTS["gradient"]
    mid_stop = _float_option(gradient, "midStop", defaults["midStop"])
    mid_alpha = _float_option(gradient, "midAlpha", defaults["midAlpha"])
    return max(0.0, min(1.0, mid_stop)), max(0.0, min(1.0, mid_alpha))


def system_option(config: Mapping[str, Any], key: str) -> Any:
    return _section(config, "system").get(key, DEFAULTS["system"].get(key))
