"""Tests for glowfield.console: prefixed output and the debug silencer."""
from __future__ import annotations

import io
import sys

from glowfield import console


class TestOutput:
    def test_warn_goes_to_stderr(self, capsys) -> None:
        console.warn("surface lost")
        captured = capsys.readouterr()
        assert captured.err == "[Glowfield][WARN] surface lost\n"
        assert captured.out == ""

    def test_debug_goes_to_stdout(self, capsys) -> None:
        console.debug("mounted")
        assert capsys.readouterr().out == "[Glowfield][DEBUG] mounted\n"


class TestSilencer:
    def test_filters_debug_lines(self, monkeypatch) -> None:
        stream = io.StringIO()
        monkeypatch.delenv("GLOWFIELD_DEBUG", raising=False)
        monkeypatch.setattr(sys, "stdout", stream)
        assert console.install_debug_silencer() is True
        console.debug("hidden")
        print("visible")
        sys.stdout.flush()
        assert stream.getvalue() == "visible\n"

    def test_install_twice_wraps_once(self, monkeypatch) -> None:
        stream = io.StringIO()
        monkeypatch.delenv("GLOWFIELD_DEBUG", raising=False)
        monkeypatch.setattr(sys, "stdout", stream)
        console.install_debug_silencer()
        wrapped = sys.stdout
        console.install_debug_silencer()
        assert sys.stdout is wrapped

    def test_debug_env_keeps_traces(self, monkeypatch) -> None:
        stream = io.StringIO()
        monkeypatch.setenv("GLOWFIELD_DEBUG", "1")
        monkeypatch.setattr(sys, "stdout", stream)
        assert console.install_debug_silencer() is False
        console.debug("shown")
        assert "shown" in stream.getvalue()

    def test_partial_line_waits_for_newline(self) -> None:
        stream = io.StringIO()
        silencer = console._DebugSilencer(stream, console.DEBUG_MARKER)
        silencer.write("progress ")
        assert stream.getvalue() == ""
        silencer.write("50%\n[Glowfield][DEBUG] tick\nnext")
        assert stream.getvalue() == "progress 50%\n"
        silencer.flush()
        assert stream.getvalue() == "progress 50%\nnext"

    def test_partial_debug_line_is_dropped_on_flush(self) -> None:
        stream = io.StringIO()
        silencer = console._DebugSilencer(stream, console.DEBUG_MARKER)
        silencer.write("[Glowfield][DEBUG] half")
        silencer.flush()
        assert stream.getvalue() == ""

    def test_reports_wrapped_encoding(self) -> None:
        stream = io.TextIOWrapper(io.BytesIO(), encoding="latin-1")
        assert console._DebugSilencer(stream, console.DEBUG_MARKER).encoding == "latin-1"
