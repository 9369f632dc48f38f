"""Writers for encoders: plain pass-through, ANSI styling and the console."""

from __future__ import annotations

import os
import sys
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from logforge.encode import Color, Style, Writer

_COLOR_DIGITS = {
    Color.BLACK: b"0",
    Color.RED: b"1",
    Color.GREEN: b"2",
    Color.YELLOW: b"3",
    Color.BLUE: b"4",
    Color.MAGENTA: b"5",
    Color.CYAN: b"6",
    Color.WHITE: b"7",
}


def _write_to(inner: Any, data: bytes) -> int:
    written = inner.write(data)
    return len(data) if written is None else written


def _flush(inner: Any) -> None:
    flush = getattr(inner, "flush", None)
    if flush is not None:
        flush()


@dataclass
class SimpleWriter(Writer):
    """Passes bytes through to a binary stream and ignores styling."""

    inner: Any

    def write(self, data: bytes) -> int:
        return _write_to(self.inner, data)

    def set_style(self, style: Style) -> None:
        return None

    def flush(self) -> None:
        _flush(self.inner)


def ansi_escape(style: Style) -> bytes:
    """Return the ANSI escape sequence that selects ``style``."""
    parts = [b"\x1b[0"]
    if style.text is not None:
        parts.append(b";3" + _COLOR_DIGITS[style.text])
    if style.background is not None:
        parts.append(b";4" + _COLOR_DIGITS[style.background])
    if style.intense is not None:
        parts.append(b";1" if style.intense else b";22")
    parts.append(b"m")
    return b"".join(parts)


@dataclass
class AnsiWriter(Writer):
    """Wraps a binary stream, emitting ANSI escape codes for styles."""

    inner: Any

    def write(self, data: bytes) -> int:
        return _write_to(self.inner, data)

    def set_style(self, style: Style) -> None:
        self.inner.write(ansi_escape(style))

    def flush(self) -> None:
        _flush(self.inner)


class ColorMode(Enum):
    """When a console writer emits color."""

    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"


def _flag(environ: Mapping[str, str], key: str, default: bool) -> bool:
    value = environ.get(key)
    if value is None:
        return default
    return value != "0"


def color_mode_from_env(environ: Optional[Mapping[str, str]] = None) -> ColorMode:
    """Derive the color mode from ``NO_COLOR``, ``CLICOLOR_FORCE`` and ``CLICOLOR``."""
    if environ is None:
        environ = os.environ
    if _flag(environ, "NO_COLOR", False):
        return ColorMode.NEVER
    if _flag(environ, "CLICOLOR_FORCE", False):
        return ColorMode.ALWAYS
    if _flag(environ, "CLICOLOR", True):
        return ColorMode.AUTO
    return ColorMode.NEVER


class _StdStream:
    """One of the process's standard output streams, looked up on each use."""

    _locks = {"stdout": threading.RLock(), "stderr": threading.RLock()}

    def __init__(self, name: str) -> None:
        self.name = name
        self.lock = self._locks[name]

    def _stream(self) -> Any:
        if self.name == "stdout":
            return sys.stdout
        return sys.stderr

    def isatty(self) -> bool:
        stream = self._stream()
        if stream is None:
            return False
        try:
            return bool(stream.isatty())
        except (ValueError, OSError):
            return False

    def write(self, data: bytes) -> int:
        stream = self._stream()
        if stream is None:
            return len(data)
        buffer = getattr(stream, "buffer", None)
        if buffer is None:
            stream.write(data.decode("utf-8", errors="replace"))
            return len(data)
        stream.flush()
        buffer.write(data)
        return len(data)

    def flush(self) -> None:
        stream = self._stream()
        if stream is None:
            return
        stream.flush()
        buffer = getattr(stream, "buffer", None)
        if buffer is not None:
            buffer.flush()


class ConsoleWriter(Writer):
    """Writes styled output to a standard stream that is a console."""

    def __init__(self, stream: _StdStream) -> None:
        self._stream = stream
        self._ansi = AnsiWriter(stream)

    @classmethod
    def _open(cls, name: str) -> Optional[ConsoleWriter]:
        stream = _StdStream(name)
        mode = color_mode_from_env()
        if mode is ColorMode.NEVER:
            return None
        if mode is ColorMode.AUTO and not stream.isatty():
            return None
        return cls(stream)

    @classmethod
    def stdout(cls) -> Optional[ConsoleWriter]:
        """Return a writer for standard output, or ``None`` if it is not a console."""
        return cls._open("stdout")

    @classmethod
    def stderr(cls) -> Optional[ConsoleWriter]:
        """Return a writer for standard error, or ``None`` if it is not a console."""
        return cls._open("stderr")

    def lock(self) -> ConsoleWriterLock:
        """Lock the console so other threads cannot write until it is released."""
        return ConsoleWriterLock(self)

    def write(self, data: bytes) -> int:
        with self._stream.lock:
            return self._ansi.write(data)

    def set_style(self, style: Style) -> None:
        with self._stream.lock:
            self._ansi.set_style(style)

    def flush(self) -> None:
        with self._stream.lock:
            self._ansi.flush()


class ConsoleWriterLock(Writer):
    """Exclusive access to a console, held until released or the block exits."""

    def __init__(self, console: ConsoleWriter) -> None:
        self._console = console
        self._lock = console._stream.lock
        self._lock.acquire()
        self._held = True

    def write(self, data: bytes) -> int:
        return self._console.write(data)

    def set_style(self, style: Style) -> None:
        self._console.set_style(style)

    def flush(self) -> None:
        self._console.flush()

    def release(self) -> None:
        """Give up exclusive access to the console."""
        if self._held:
            self._held = False
            self._lock.release()

    def __enter__(self) -> ConsoleWriterLock:
        return self

    def __exit__(self, *exc: object) -> None:
        self.release()