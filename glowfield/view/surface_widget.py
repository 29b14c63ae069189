"""Widgets presenting the orb backing image inside the host container.

The renderer paints every frame into an off-screen ``QImage``; the widgets in
this module only copy that image to the screen on ``paintEvent``.  The raster
``QWidget`` presenter is the default: it is composited together with its
siblings, so the container background shows through transparent pixels.  The
OpenGL presenter is opt-in only.  Qt composites a ``QOpenGLWidget`` before
the raster widgets around it, so it suits containers with nothing painted
underneath.  Both let mouse events through to the foreground content.
"""

from __future__ import annotations

import os
from typing import Optional, Tuple

from PyQt5 import QtCore, QtGui, QtWidgets

try:
    from ..console import warn
except ImportError:  # pragma: no cover
    from glowfield.console import warn

__all__ = ["OrbSurfaceWidget", "resolve_backend"]

_GL_COLOR_BUFFER_BIT = 0x00004000


def _create_opengl_functions() -> Tuple[Optional[object], Optional[BaseException]]:
    """Return ``(functions, error)`` for the current GL context.

    ``functions`` is ``None`` when ``QOpenGLFunctions`` is missing from the
    bindings or cannot be initialised; ``error`` then holds the reason.
    """

    factory = getattr(QtGui, "QOpenGLFunctions", None)
    if factory is None:
        return None, AttributeError("PyQt5.QtGui has no attribute 'QOpenGLFunctions'")
    try:
        functions = factory()
        functions.initializeOpenGLFunctions()
    except Exception as exc:  # pragma: no cover - depends on bindings/runtime
        return None, exc
    return functions, None


class _SurfaceMixin:
    """Common behaviour shared by both backends."""

    def _init_surface(self) -> None:
        self.setAttribute(QtCore.Qt.WA_NoSystemBackground, True)
        self.setAttribute(QtCore.Qt.WA_TranslucentBackground, True)
        self.setAttribute(QtCore.Qt.WA_TransparentForMouseEvents, True)
        self.setAttribute(QtCore.Qt.WA_OpaquePaintEvent, False)
        self.setAutoFillBackground(False)
        self.setFocusPolicy(QtCore.Qt.NoFocus)
        self._image: Optional[QtGui.QImage] = None

    def set_image(self, image: Optional[QtGui.QImage]) -> None:
        self._image = image
        self.update()

    def image(self) -> Optional[QtGui.QImage]:
        return self._image

    def _present(self, painter: QtGui.QPainter) -> None:
        image = self._image
        if image is None or image.isNull():
            return
        painter.drawImage(QtCore.QPointF(0.0, 0.0), image)


class _OpenGLSurfaceWidget(QtWidgets.QOpenGLWidget, _SurfaceMixin):
    """OpenGL-backed presenter, only built on request."""

    backend_name = "opengl"

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        QtWidgets.QOpenGLWidget.__init__(self, parent)
        self._gl: Optional[object] = None
        self._init_surface()

    def initializeGL(self) -> None:  # pragma: no cover - requires GUI context
        self._gl, error = _create_opengl_functions()
        if error is not None:
            warn(f"OpenGL initialisation failed: {error}. Falling back to raster clear handling.")
        if self._gl is not None:
            self._gl.glClearColor(0.0, 0.0, 0.0, 0.0)

    def paintGL(self) -> None:  # pragma: no cover - requires GUI context
        if self._gl is not None:
            self._gl.glClear(_GL_COLOR_BUFFER_BIT)
        painter = QtGui.QPainter(self)
        try:
            if self._gl is None:
                painter.setCompositionMode(QtGui.QPainter.CompositionMode_Source)
                painter.fillRect(self.rect(), QtCore.Qt.transparent)
                painter.setCompositionMode(QtGui.QPainter.CompositionMode_SourceOver)
            self._present(painter)
        finally:
            painter.end()


class _RasterSurfaceWidget(QtWidgets.QWidget, _SurfaceMixin):
    """Default presenter painting through the raster ``QWidget`` backend."""

    backend_name = "raster"

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        QtWidgets.QWidget.__init__(self, parent)
        self._init_surface()

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:  # type: ignore[override]
        del event
        painter = QtGui.QPainter(self)
        try:
            self._present(painter)
        finally:
            painter.end()


_BACKENDS = {"opengl": _OpenGLSurfaceWidget, "raster": _RasterSurfaceWidget}


def resolve_backend(force_backend: Optional[str] = None) -> str:
    """Return ``"opengl"`` or ``"raster"``.

    An explicit ``force_backend`` wins over ``GLOWFIELD_FORCE_BACKEND``.
    ``"auto"``, nothing or an unknown name gives ``"raster"``.
    """

    for candidate in (force_backend, os.environ.get("GLOWFIELD_FORCE_BACKEND")):
        choice = (candidate or "").strip().lower()
        if choice in _BACKENDS:
            return choice
    return "raster"


def OrbSurfaceWidget(
    parent: Optional[QtWidgets.QWidget] = None,
    *,
    force_backend: Optional[str] = None,
) -> QtWidgets.QWidget:
    """Create the presenter widget as a child of ``parent``.

    The returned widget exposes ``set_image``, ``image`` and ``backend_name``.
    An OpenGL widget that cannot be built is replaced by the raster one.
    """

    backend = resolve_backend(force_backend)
    if backend != "raster":
        try:
            return _BACKENDS[backend](parent)
        except Exception as exc:
            warn(f"Unable to initialise {backend} backend ({exc!r}). Using raster widget instead.")
    return _RasterSurfaceWidget(parent)
