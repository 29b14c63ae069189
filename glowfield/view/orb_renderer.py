"""Paint an :class:`~glowfield.orb_field.OrbField` behind a Qt container.

:class:`OrbRenderer` owns everything that ties the field to the screen:

* a backing ``QImage`` sized to the container and scaled by the device pixel
  ratio, so gradients stay smooth on high density displays;
* a transparent child widget presenting that image below the container's own
  children (see :mod:`glowfield.view.surface_widget`);
* an event filter acting as resize observer on the container, plus a per-frame
  check of the container's device pixel ratio for moves between screens;
* the frame loop, a chain of one-shot callbacks obtained from a frame
  scheduler, each one doing ``tick`` then ``render_frame`` then asking for the
  next frame.

The loop has three states.  ``mount`` moves ``IDLE`` to ``RUNNING``,
``dispose`` moves anything to ``DISPOSED`` which is final.  Disposing cancels
the pending frame; a callback that was already dequeued by Qt still checks the
state and returns without touching the field.
"""

from __future__ import annotations

import random
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence, Tuple

from PyQt5 import QtCore, QtGui, QtWidgets

try:
    from ..colors import Rgba
    from ..config import (
        default_config,
        gradient_options,
        merge_config,
        motion_options,
        palette_from_config,
        system_option,
    )
    from ..console import debug, warn
    from ..orb_field import Orb, OrbField, PaletteEntry
    from ..scheduler import QtFrameScheduler
    from .surface_widget import OrbSurfaceWidget
except ImportError:  # pragma: no cover
    from glowfield.colors import Rgba
    from glowfield.config import (
        default_config,
        gradient_options,
        merge_config,
        motion_options,
        palette_from_config,
        system_option,
    )
    from glowfield.console import debug, warn
    from glowfield.orb_field import Orb, OrbField, PaletteEntry
    from glowfield.scheduler import QtFrameScheduler
    from glowfield.view.surface_widget import OrbSurfaceWidget

__all__ = ["FrameScheduler", "LoopState", "OrbRenderer", "surface_pixel_size"]


class LoopState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    DISPOSED = "disposed"


class FrameScheduler(Protocol):
    def request_frame(self, callback: Callable[[], None]) -> Any:
        ...

    def cancel_frame(self, handle: Any) -> None:
        ...


_TRANSPARENT = QtGui.QColor(0, 0, 0, 0)


def _to_qcolor(color: Rgba) -> QtGui.QColor:
    qcolor = QtGui.QColor(color.r, color.g, color.b)
    qcolor.setAlphaF(color.a)
    return qcolor


def surface_pixel_size(
    width: float,
    height: float,
    device_ratio: float,
    ratio_clamp: Optional[float] = None,
) -> Tuple[int, int, float]:
    """Return ``(pixel_width, pixel_height, ratio)`` for a logical size.

    ``ratio`` is ``device_ratio`` limited to ``ratio_clamp`` when the clamp is
    positive; invalid ratios count as ``1``.
    """

    try:
        ratio = float(device_ratio)
    except (TypeError, ValueError):
        ratio = 1.0
    if ratio <= 0.0:
        ratio = 1.0
    if ratio_clamp is not None:
        try:
            clamp = float(ratio_clamp)
        except (TypeError, ValueError):
            clamp = 0.0
        if clamp > 0.0:
            ratio = min(ratio, clamp)
    pixel_width = max(0, int(round(max(0.0, float(width)) * ratio)))
    pixel_height = max(0, int(round(max(0.0, float(height)) * ratio)))
    return pixel_width, pixel_height, ratio


class OrbRenderer(QtCore.QObject):
    """Animate glowing orbs behind the widgets of a host container."""

    def __init__(
        self,
        field: Optional[OrbField] = None,
        *,
        config: Optional[Mapping[str, Any]] = None,
        palette: Optional[Sequence[PaletteEntry]] = None,
        scheduler: Optional[FrameScheduler] = None,
        rng: Optional[random.Random] = None,
        force_backend: Optional[str] = None,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.config = default_config()
        if config is not None:
            merge_config(self.config, config)
        self.field = field if field is not None else OrbField(**motion_options(self.config))
        self._palette = list(palette) if palette is not None else None
        if scheduler is None:
            interval = system_option(self.config, "frameIntervalMs")
            try:
                interval_ms = int(float(interval)) if interval else None
            except (TypeError, ValueError):
                interval_ms = None
            scheduler = QtFrameScheduler(interval_ms, parent=self)
        self._scheduler = scheduler
        self._rng = rng
        self._force_backend = force_backend or system_option(self.config, "backend")
        self._mid_stop, self._mid_alpha = gradient_options(self.config)
        self._state = LoopState.IDLE
        self._container: Optional[QtWidgets.QWidget] = None
        self._surface_widget: Optional[QtWidgets.QWidget] = None
        self._image: Optional[QtGui.QImage] = None
        self._ratio = 1.0
        self._frame_handle: Any = None
        self.frame_count = 0

    # ------------------------------------------------------------------ helpers
    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def container(self) -> Optional[QtWidgets.QWidget]:
        return self._container

    @property
    def surface(self) -> Optional[QtGui.QImage]:
        return self._image

    @property
    def surface_widget(self) -> Optional[QtWidgets.QWidget]:
        return self._surface_widget

    @property
    def device_pixel_ratio(self) -> float:
        return self._ratio

    def _palette_entries(self) -> Sequence[PaletteEntry]:
        if self._palette is not None:
            return self._palette
        return palette_from_config(self.config)

    def _container_ratio(self) -> float:
        container = self._container
        if container is None:
            return 1.0
        try:
            return float(container.devicePixelRatioF())
        except AttributeError:
            return float(container.devicePixelRatio())

    def _apply_surface_size(self, width: int, height: int) -> None:
        pixel_width, pixel_height, ratio = surface_pixel_size(
            width, height, self._container_ratio(), system_option(self.config, "dprClamp")
        )
        self._ratio = ratio
        if pixel_width <= 0 or pixel_height <= 0:
            image = None
        else:
            image = QtGui.QImage(pixel_width, pixel_height, QtGui.QImage.Format_ARGB32_Premultiplied)
            image.setDevicePixelRatio(ratio)
            image.fill(QtCore.Qt.transparent)
        self._image = image
        widget = self._surface_widget
        if widget is not None:
            widget.setGeometry(0, 0, max(0, int(width)), max(0, int(height)))
            widget.set_image(image)
        self.field.resize(max(0, width), max(0, height))
        debug(f"surface resized to {width}x{height} @ {ratio:g}x")

    # ---------------------------------------------------------------- lifecycle
    def mount(self, container: Optional[QtWidgets.QWidget]) -> Callable[[], None]:
        """Attach to ``container`` and start animating.

        Returns the disposer to call when the visual goes away.  Without a
        container nothing happens and the disposer only marks the renderer as
        disposed.
        """

        if self._state is not LoopState.IDLE:
            warn(f"mount() ignored, renderer is {self._state.value}.")
            return self.dispose
        if container is None:
            warn("mount() called without a container, orbs disabled.")
            return self.dispose

        self._container = container
        widget = OrbSurfaceWidget(container, force_backend=self._force_backend)
        widget.lower()
        widget.show()
        self._surface_widget = widget
        container.installEventFilter(self)
        container.destroyed.connect(self._on_container_destroyed)
        self._apply_surface_size(container.width(), container.height())
        self.field.initialize(self._palette_entries(), self._rng)

        self._state = LoopState.RUNNING
        debug(
            f"mounted {len(self.field)} orbs on {type(container).__name__} "
            f"({getattr(widget, 'backend_name', 'raster')} backend)"
        )
        self._on_frame()
        return self.dispose

    def dispose(self) -> None:
        """Stop the loop and release the surface; safe to call repeatedly."""

        if self._state is LoopState.DISPOSED:
            return
        self._state = LoopState.DISPOSED
        self._scheduler.cancel_frame(self._frame_handle)
        self._frame_handle = None

        container = self._container
        self._container = None
        if container is not None:
            try:
                container.removeEventFilter(self)
                container.destroyed.disconnect(self._on_container_destroyed)
            except (RuntimeError, TypeError):
                # Container already gone on the C++ side.
                pass

        widget = self._surface_widget
        self._surface_widget = None
        if widget is not None:
            try:
                widget.set_image(None)
                widget.hide()
                widget.deleteLater()
            except RuntimeError:
                pass
        self._image = None
        debug(f"disposed after {self.frame_count} frames")

    def _on_container_destroyed(self, *_args: object) -> None:
        self._container = None
        self._surface_widget = None
        self.dispose()

    def eventFilter(self, watched: QtCore.QObject, event: QtCore.QEvent) -> bool:  # type: ignore[override]
        if (
            watched is self._container
            and event.type() == QtCore.QEvent.Resize
            and self._state is LoopState.RUNNING
        ):
            size = event.size()
            self._apply_surface_size(size.width(), size.height())
        return super().eventFilter(watched, event)

    # ------------------------------------------------------------------ frames
    def _sync_device_ratio(self) -> None:
        container = self._container
        if container is None:
            return
        _, _, ratio = surface_pixel_size(1, 1, self._container_ratio(), system_option(self.config, "dprClamp"))
        if ratio != self._ratio:
            self._apply_surface_size(container.width(), container.height())

    def _on_frame(self) -> None:
        self._frame_handle = None
        if self._state is not LoopState.RUNNING:
            return
        self._sync_device_ratio()
        self.field.tick()
        self.render_frame()
        self.frame_count += 1
        self._frame_handle = self._scheduler.request_frame(self._on_frame)

    def step(self, frames: int = 1) -> None:
        """Run ``frames`` tick + render passes outside the scheduler."""

        if self._state is not LoopState.RUNNING:
            return
        for _ in range(max(0, int(frames))):
            self._sync_device_ratio()
            self.field.tick()
            self.render_frame()
            self.frame_count += 1

    def render_frame(self) -> None:
        """Clear the surface and paint every orb as a radial gradient disc."""

        image = self._image
        if image is None or image.isNull():
            return
        image.fill(QtCore.Qt.transparent)
        painter = QtGui.QPainter()
        if not painter.begin(image):
            warn("Unable to paint on the orb surface.")
            return
        try:
            painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
            painter.setCompositionMode(QtGui.QPainter.CompositionMode_SourceOver)
            painter.setPen(QtCore.Qt.NoPen)
            for orb in self.field:
                self._paint_orb(painter, orb)
        finally:
            painter.end()
        if self._surface_widget is not None:
            self._surface_widget.update()

    def _paint_orb(self, painter: QtGui.QPainter, orb: Orb) -> None:
        radius = orb.radius
        if radius <= 0.0:
            return
        center = QtCore.QPointF(orb.x, orb.y)
        gradient = QtGui.QRadialGradient(center, radius)
        gradient.setColorAt(0.0, _to_qcolor(orb.color))
        gradient.setColorAt(self._mid_stop, _to_qcolor(orb.color.with_alpha(self._mid_alpha)))
        gradient.setColorAt(1.0, _TRANSPARENT)
        painter.setBrush(QtGui.QBrush(gradient))
        painter.drawEllipse(center, radius, radius)

    def grab(self) -> Optional[QtGui.QImage]:
        """Return a copy of the last rendered frame, ``None`` when unmounted."""

        if self._image is None or self._image.isNull():
            return None
        return self._image.copy()
