"""Console output helpers.

Diagnostics are plain prefixed lines: warnings go to ``stderr`` and lifecycle
traces to ``stdout``.  The traces are noisy (one line per resize), so
:func:`install_debug_silencer` filters them out of the console unless
``GLOWFIELD_DEBUG`` is set.
"""

from __future__ import annotations

import io
import os
import sys

__all__ = ["DEBUG_MARKER", "warn", "debug", "install_debug_silencer"]

DEBUG_MARKER = "[Glowfield][DEBUG]"
WARN_MARKER = "[Glowfield][WARN]"


def warn(message: str) -> None:
    print(f"{WARN_MARKER} {message}", file=sys.stderr, flush=True)


def debug(message: str) -> None:
    print(f"{DEBUG_MARKER} {message}", flush=True)


class _DebugSilencer(io.TextIOBase):
    """``stdout`` wrapper dropping complete lines that contain ``marker``.

    A trailing partial line is held back until its newline arrives or the
    stream is flushed.
    """

    def __init__(self, stream: io.TextIOBase, marker: str) -> None:
        super().__init__()
        self._stream = stream
        self._marker = marker
        self._partial = ""

    @property
    def encoding(self) -> str:  # type: ignore[override]
        return getattr(self._stream, "encoding", None) or "utf-8"

    def writable(self) -> bool:
        return True

    def write(self, text: str) -> int:  # type: ignore[override]
        lines = (self._partial + text).splitlines(keepends=True)
        self._partial = ""
        if lines and not lines[-1].endswith("\n"):
            self._partial = lines.pop()
        kept = "".join(line for line in lines if self._marker not in line)
        if kept:
            self._stream.write(kept)
        return len(text)

    def flush(self) -> None:  # type: ignore[override]
        if self._partial and self._marker not in self._partial:
            self._stream.write(self._partial)
        self._partial = ""
        self._stream.flush()


def _debug_enabled() -> bool:
    return os.environ.get("GLOWFIELD_DEBUG", "").strip().lower() in {"1", "true", "yes"}


def install_debug_silencer(marker: str = DEBUG_MARKER) -> bool:
    """Wrap ``sys.stdout`` so debug traces stay hidden.

    Returns ``True`` when a silencer is (already) in place.
    """

    if not marker or _debug_enabled():
        return False
    if not isinstance(sys.stdout, _DebugSilencer):
        sys.stdout = _DebugSilencer(sys.stdout, marker)
    return True
