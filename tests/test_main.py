"""Tests for glowfield.main: command line and off-screen capture."""
from __future__ import annotations

import json
import random

import pytest
from PyQt5 import QtGui

from glowfield import main as app_main
from glowfield.config import default_config, motion_options, palette_from_config
from glowfield.orb_field import OrbField
from glowfield.view import LoopState


@pytest.fixture(autouse=True)
def _no_silencer(monkeypatch):
    monkeypatch.setattr(app_main, "install_debug_silencer", lambda: False)


class TestParser:
    def test_defaults(self) -> None:
        args = app_main.build_parser().parse_args([])
        assert args.capture is None
        assert args.frames == 120
        assert args.size == (1280, 720)

    def test_size_option(self) -> None:
        args = app_main.build_parser().parse_args(["--size", "640x360"])
        assert args.size == (640, 360)

    @pytest.mark.parametrize("value", ["640", "0x10", "axb"])
    def test_bad_size_is_rejected(self, value: str) -> None:
        with pytest.raises(SystemExit):
            app_main.build_parser().parse_args(["--size", value])

    def test_help_lists_config_keys(self) -> None:
        assert "motion.maxSpeed" in app_main.build_parser().format_help()


class TestHeadless:
    def test_headless_validates_defaults(self) -> None:
        assert app_main.main([], headless=True) == 0

    def test_headless_flag(self) -> None:
        assert app_main.main(["--headless"]) == 0

    def test_invalid_palette_is_reported(self, tmp_path, capsys) -> None:
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"palette": [["not-a-colour", 10]]}), encoding="utf-8")
        assert app_main.main(["--config", str(path), "--headless"]) == 2
        assert "Invalid palette" in capsys.readouterr().err


class TestCapture:
    def test_capture_writes_png(self, qapp, tmp_path) -> None:
        output = tmp_path / "frames" / "orbs.png"
        code = app_main.capture(default_config(), output, frames=5, size=(160, 90), rng=random.Random(1))
        assert code == 0
        image = QtGui.QImage(str(output))
        assert (image.width(), image.height()) == (160, 90)

    def test_capture_from_command_line(self, qapp, tmp_path, capsys) -> None:
        output = tmp_path / "cli.png"
        code = app_main.main(["--capture", str(output), "--frames", "3", "--size", "64x48", "--seed", "5"])
        assert code == 0
        assert output.exists()
        assert "Captured 3 frames" in capsys.readouterr().out

    def test_capture_is_seeded(self, qapp, tmp_path) -> None:
        first = tmp_path / "a.png"
        second = tmp_path / "b.png"
        config = default_config()
        app_main.capture(config, first, frames=4, size=(80, 60), rng=random.Random(9))
        app_main.capture(config, second, frames=4, size=(80, 60), rng=random.Random(9))
        assert QtGui.QImage(str(first)) == QtGui.QImage(str(second))


class TestHeroWindow:
    def test_window_mounts_on_show_and_disposes_on_close(self, qapp) -> None:
        window = app_main.HeroWindow(default_config(), rng=random.Random(2), force_backend="raster")
        assert window.renderer.state is LoopState.IDLE
        window.show()
        assert window.renderer.state is LoopState.RUNNING
        assert window.renderer.container is window.hero
        assert window.title_label.text() == app_main.DEFAULT_TITLE
        window.close()
        assert window.renderer.state is LoopState.DISPOSED

    def test_orbs_spawn_across_the_shown_window(self, qapp) -> None:
        config = default_config()
        window = app_main.HeroWindow(config, rng=random.Random(3), force_backend="raster")
        window.resize(1200, 800)
        window.show()
        try:
            field = window.renderer.field
            assert window.hero.width() > 640
            assert window.hero.height() > 480
            assert (field.width, field.height) == (window.hero.width(), window.hero.height())

            reference = OrbField(field.width, field.height, **motion_options(config))
            reference.initialize(palette_from_config(config), random.Random(3))
            for _ in range(window.renderer.frame_count):
                reference.tick()
            assert field.snapshot() == reference.snapshot()
        finally:
            window.close()

    def test_close_before_show_never_mounts(self, qapp) -> None:
        window = app_main.HeroWindow(default_config(), force_backend="raster")
        window.close()
        window.show()
        assert window.renderer.state is LoopState.DISPOSED
        assert window.renderer.surface is None
        window.close()
