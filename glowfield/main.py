# -*- coding: utf-8 -*-
"""Demo window and command line for the orb background.

``python -m glowfield.main`` opens a frameless-looking hero window with a
title over the animated orbs.  ``--capture out.png`` renders a number of
frames off-screen instead and saves the last one.
"""

from __future__ import annotations

import argparse
import os
import random
import sys
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence


def _handle_qt_import_error(exc: ImportError) -> NoReturn:
    """Exit with a helpful message when the Qt bindings cannot be imported."""

    details = str(exc)
    message_lines = [
        "Unable to start Glowfield: importing PyQt5 failed.",
        "Check that PyQt5 is installed and that the required OpenGL libraries are available.",
    ]
    if "libGL.so.1" in details:
        message_lines.append(
            "Hint: the system library libGL.so.1 is missing. Install the Mesa/OpenGL packages for your distribution."
        )
    message_lines.append(f"Original error: {details}")
    raise SystemExit("\n".join(message_lines)) from exc


try:
    from PyQt5 import QtCore, QtGui, QtWidgets
    from PyQt5.QtCore import Qt
except ImportError as exc:  # pragma: no cover - environment dependent
    _handle_qt_import_error(exc)

try:
    from .config import TOOLTIPS, load_config, palette_from_config
    from .console import install_debug_silencer, warn
    from .view import LoopState, OrbRenderer
except ImportError:  # pragma: no cover - direct execution
    ROOT = Path(__file__).resolve().parents[1]
    if str(ROOT) not in sys.path:
        sys.path.insert(0, str(ROOT))
    from glowfield.config import TOOLTIPS, load_config, palette_from_config
    from glowfield.console import install_debug_silencer, warn
    from glowfield.view import LoopState, OrbRenderer

DEFAULT_TITLE = "Glowfield"
DEFAULT_SUBTITLE = "Ambient orbs for Qt windows"
DEFAULT_CAPTURE_SIZE = (1280, 720)


class HeroWindow(QtWidgets.QMainWindow):
    """Main window hosting the orbs behind a title block."""

    def __init__(
        self,
        config: dict,
        *,
        title: str = DEFAULT_TITLE,
        subtitle: str = DEFAULT_SUBTITLE,
        rng: Optional[random.Random] = None,
        force_backend: Optional[str] = None,
    ) -> None:
        super().__init__(None)
        self.setWindowTitle(title)

        self.hero = QtWidgets.QWidget()
        self.hero.setObjectName("hero")
        self.hero.setAttribute(Qt.WA_StyledBackground, True)
        self.hero.setStyleSheet("#hero { background: #0b0616; }")
        lay = QtWidgets.QVBoxLayout(self.hero)
        lay.setContentsMargins(48, 48, 48, 48)
        lay.addStretch(1)

        self.title_label = QtWidgets.QLabel(title)
        self.title_label.setAlignment(Qt.AlignCenter)
        self.title_label.setStyleSheet("color: #f5f3ff; font-size: 56px; font-weight: 700; background: transparent;")
        self.subtitle_label = QtWidgets.QLabel(subtitle)
        self.subtitle_label.setAlignment(Qt.AlignCenter)
        self.subtitle_label.setStyleSheet("color: #c4b5fd; font-size: 22px; background: transparent;")
        lay.addWidget(self.title_label)
        lay.addWidget(self.subtitle_label)
        lay.addStretch(1)
        self.setCentralWidget(self.hero)

        self.renderer = OrbRenderer(config=config, rng=rng, force_backend=force_backend, parent=self)

        QtWidgets.QShortcut(Qt.Key_Escape, self, activated=self.close)

    def showEvent(self, event: QtGui.QShowEvent) -> None:  # type: ignore[override]
        super().showEvent(event)
        # The hero only has its real size once the window is laid out.
        if self.renderer.state is LoopState.IDLE:
            self.renderer.mount(self.hero)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        self.renderer.dispose()
        super().closeEvent(event)


def capture(
    config: dict,
    output: Path,
    *,
    frames: int = 120,
    size: Sequence[int] = DEFAULT_CAPTURE_SIZE,
    rng: Optional[random.Random] = None,
    force_backend: Optional[str] = "raster",
) -> int:
    """Render ``frames`` frames without showing a window and save the last one."""

    if QtWidgets.QApplication.instance() is None:
        raise RuntimeError("capture() needs a QApplication")
    width, height = (max(1, int(v)) for v in size)
    container = QtWidgets.QWidget()
    container.resize(width, height)
    renderer = OrbRenderer(config=config, rng=rng, force_backend=force_backend)
    dispose = renderer.mount(container)
    try:
        renderer.step(max(0, frames - renderer.frame_count))
        image = renderer.grab()
        if image is None:
            warn("Nothing rendered, capture skipped.")
            return 1
        output = Path(output)
        if output.parent and not output.parent.exists():
            output.parent.mkdir(parents=True, exist_ok=True)
        if not image.save(str(output)):
            warn(f"Unable to write {output}.")
            return 1
        print(f"[Glowfield] Captured {renderer.frame_count} frames to {output}")
        return 0
    finally:
        dispose()
        container.deleteLater()


def _parse_size(value: str) -> tuple:
    try:
        width, height = (int(part) for part in value.lower().split("x", 1))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {value!r}") from exc
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError("size must be positive")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    epilog_lines = ["Configuration keys (JSON file given to --config):"]
    epilog_lines.extend(f"  {key}: {text}" for key, text in TOOLTIPS.items())
    parser = argparse.ArgumentParser(
        prog="glowfield",
        description="Soft glowing orbs drifting behind a Qt window.",
        epilog="\n".join(epilog_lines),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", type=Path, default=None, help="JSON file overriding the defaults")
    parser.add_argument("--seed", type=int, default=None, help="seed for the initial orb layout")
    parser.add_argument(
        "--backend",
        choices=("auto", "opengl", "raster"),
        default=None,
        help="presenter backend (default: config value, then GLOWFIELD_FORCE_BACKEND)",
    )
    parser.add_argument("--title", default=DEFAULT_TITLE)
    parser.add_argument("--subtitle", default=DEFAULT_SUBTITLE)
    parser.add_argument("--capture", type=Path, default=None, help="render off-screen and save a PNG")
    parser.add_argument("--frames", type=int, default=120, help="frames rendered before --capture saves")
    parser.add_argument(
        "--size",
        type=_parse_size,
        default=DEFAULT_CAPTURE_SIZE,
        help="capture size as WIDTHxHEIGHT (default 1280x720)",
    )
    parser.add_argument("--headless", action="store_true", help="validate the configuration and exit")
    return parser


def main(argv: Optional[List[str]] = None, headless: bool = False) -> int:
    """Start the application and return the exit code.

    With ``headless`` (or ``--headless``) only the configuration is loaded and
    validated; no Qt object is created.
    """

    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    try:
        palette_from_config(config)
    except ValueError as exc:
        warn(f"Invalid palette: {exc}")
        return 2
    if headless or args.headless:
        return 0

    install_debug_silencer()
    rng = random.Random(args.seed) if args.seed is not None else None

    if args.capture is not None:
        os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
        app = QtWidgets.QApplication.instance() or QtWidgets.QApplication(sys.argv[:1])
        app.setApplicationName("glowfield")
        return capture(
            config,
            args.capture,
            frames=args.frames,
            size=args.size,
            rng=rng,
            force_backend=args.backend or "raster",
        )

    fmt = QtGui.QSurfaceFormat()
    fmt.setAlphaBufferSize(8)
    QtGui.QSurfaceFormat.setDefaultFormat(fmt)
    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_EnableHighDpiScaling, True)
    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_UseHighDpiPixmaps, True)
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication(sys.argv[:1])
    window = HeroWindow(
        config,
        title=args.title,
        subtitle=args.subtitle,
        rng=rng,
        force_backend=args.backend,
    )
    screen = QtGui.QGuiApplication.primaryScreen()
    if screen is not None:
        geometry = screen.availableGeometry()
        width = int(geometry.width() * 0.8)
        height = int(geometry.height() * 0.8)
        window.setGeometry(
            geometry.left() + (geometry.width() - width) // 2,
            geometry.top() + (geometry.height() - height) // 2,
            width,
            height,
        )
    window.show()
    return app.exec_()


def run() -> NoReturn:
    sys.exit(main())


if __name__ == "__main__":
    run()
