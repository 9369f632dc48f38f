"""Compiled pieces of a pattern and how each renders a record."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Union

from logforge.align import LeftAlignWriter, MaxWidthWriter, RightAlignWriter
from logforge.encode import NEWLINE, Color, Style, Writer
from logforge.parser import (
    Alignment,
    ArgumentPiece,
    ErrorPiece,
    Parameters,
    Piece,
    TextPiece,
)
from logforge.record import Level, Record, get_mdc

_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
_WEEKDAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def _write_all(writer: Writer, data: bytes) -> None:
    while data:
        written = writer.write(data)
        if written <= 0:
            raise OSError("failed to write whole buffer")
        data = data[written:]


def _write_text(writer: Writer, text: str) -> None:
    _write_all(writer, text.encode("utf-8"))


def _offset(dt: datetime, colon: bool) -> str:
    offset = dt.utcoffset() or timedelta(0)
    seconds = int(offset.total_seconds())
    sign = "-" if seconds < 0 else "+"
    hours, minutes = divmod(abs(seconds) // 60, 60)
    separator = ":" if colon else ""
    return f"{sign}{hours:02}{separator}{minutes:02}"


def _auto_fraction(nanos: int) -> str:
    if nanos == 0:
        return ""
    if nanos % 1_000_000 == 0:
        return f".{nanos // 1_000_000:03}"
    if nanos % 1_000 == 0:
        return f".{nanos // 1_000:06}"
    return f".{nanos:09}"


def _rfc3339(dt: datetime) -> str:
    return (
        f"{dt.year:04}-{dt.month:02}-{dt.day:02}T"
        f"{dt.hour:02}:{dt.minute:02}:{dt.second:02}"
        f"{_auto_fraction(dt.microsecond * 1000)}{_offset(dt, True)}"
    )


def _pad(value: int, width: int, default: str, modifier: Optional[str]) -> str:
    mode = modifier or default
    sign = "-" if value < 0 else ""
    digits = str(abs(value))
    if mode == "-":
        return sign + digits
    fill = "0" if mode == "0" else " "
    return sign + digits.rjust(max(width - len(sign), 0), fill)


def _format_error() -> OSError:
    return OSError("formatter error")


def _numeric(dt: datetime, spec: str) -> Optional[tuple[int, int, str]]:
    hour12 = dt.hour % 12 or 12
    iso = dt.isocalendar()
    table = {
        "Y": (dt.year, 4, "0"),
        "C": (dt.year // 100, 2, "0"),
        "y": (dt.year % 100, 2, "0"),
        "m": (dt.month, 2, "0"),
        "d": (dt.day, 2, "0"),
        "e": (dt.day, 2, " "),
        "w": (dt.isoweekday() % 7, 1, "0"),
        "u": (dt.isoweekday(), 1, "0"),
        "U": (int(dt.strftime("%U")), 2, "0"),
        "W": (int(dt.strftime("%W")), 2, "0"),
        "G": (iso[0], 4, "0"),
        "g": (iso[0] % 100, 2, "0"),
        "V": (iso[1], 2, "0"),
        "j": (dt.timetuple().tm_yday, 3, "0"),
        "H": (dt.hour, 2, "0"),
        "k": (dt.hour, 2, " "),
        "I": (hour12, 2, "0"),
        "l": (hour12, 2, " "),
        "M": (dt.minute, 2, "0"),
        "S": (dt.second, 2, "0"),
        "s": (int(dt.timestamp()), 1, "0"),
    }
    return table.get(spec)


_COMPOSITE = {
    "D": "%m/%d/%y",
    "x": "%m/%d/%y",
    "F": "%Y-%m-%d",
    "v": "%e-%b-%Y",
    "R": "%H:%M",
    "T": "%H:%M:%S",
    "X": "%H:%M:%S",
    "r": "%I:%M:%S %p",
    "c": "%a %b %e %H:%M:%S %Y",
}


def _read_spec(fmt: str, index: int) -> tuple[str, int]:
    if index >= len(fmt):
        raise _format_error()
    ch = fmt[index]
    if ch == ".":
        if fmt[index + 1 : index + 2] == "f":
            return ".f", index + 2
        if fmt[index + 1 : index + 2] in ("3", "6", "9") and fmt[
            index + 2 : index + 3
        ] == "f":
            return fmt[index : index + 3], index + 3
        raise _format_error()
    if ch in "369" and fmt[index + 1 : index + 2] == "f":
        return fmt[index : index + 2], index + 2
    if ch == ":":
        if fmt[index + 1 : index + 2] == "z":
            return ":z", index + 2
        raise _format_error()
    return ch, index + 1


def _render_spec(dt: datetime, spec: str, modifier: Optional[str], utc: bool) -> str:
    numeric = _numeric(dt, spec)
    if numeric is not None:
        return _pad(*numeric, modifier)
    nanos = dt.microsecond * 1000
    if spec in _COMPOSITE:
        return _format_time(dt, _COMPOSITE[spec], utc)
    if spec in ("b", "h"):
        return _MONTHS[dt.month - 1][:3]
    if spec == "B":
        return _MONTHS[dt.month - 1]
    if spec == "a":
        return _WEEKDAYS[dt.weekday()][:3]
    if spec == "A":
        return _WEEKDAYS[dt.weekday()]
    if spec == "p":
        return "AM" if dt.hour < 12 else "PM"
    if spec == "P":
        return "am" if dt.hour < 12 else "pm"
    if spec == "f":
        return f"{nanos:09}"
    if spec == ".f":
        return _auto_fraction(nanos)
    if spec in (".3f", ".6f", ".9f"):
        digits = int(spec[1])
        return "." + f"{nanos:09}"[:digits]
    if spec in ("3f", "6f", "9f"):
        return f"{nanos:09}"[: int(spec[0])]
    if spec == "Z":
        return "UTC" if utc else _offset(dt, True)
    if spec == "z":
        return _offset(dt, False)
    if spec == ":z":
        return _offset(dt, True)
    if spec == "+":
        return _rfc3339(dt)
    if spec == "t":
        return "\t"
    if spec == "n":
        return "\n"
    if spec == "%":
        return "%"
    raise _format_error()


def _format_time(dt: datetime, fmt: str, utc: bool = False) -> str:
    out = []
    index = 0
    while index < len(fmt):
        ch = fmt[index]
        if ch != "%":
            out.append(ch)
            index += 1
            continue
        index += 1
        modifier = None
        if index < len(fmt) and fmt[index] in "-_0":
            modifier = fmt[index]
            index += 1
        spec, index = _read_spec(fmt, index)
        out.append(_render_spec(dt, spec, modifier, utc))
    return "".join(out)


class Timezone(Enum):
    """The timezone a date formatter renders in."""

    UTC = "utc"
    LOCAL = "local"


class ChunkKind(Enum):
    """What a formatted chunk renders."""

    TIME = "time"
    LEVEL = "level"
    MESSAGE = "message"
    MODULE = "module"
    FILE = "file"
    LINE = "line"
    THREAD = "thread"
    THREAD_ID = "thread_id"
    PROCESS_ID = "process_id"
    SYSTEM_THREAD_ID = "system_thread_id"
    TARGET = "target"
    NEWLINE = "newline"
    ALIGN = "align"
    HIGHLIGHT = "highlight"
    DEBUG = "debug"
    RELEASE = "release"
    MDC = "mdc"


@dataclass(frozen=True)
class TextChunk:
    """Literal text."""

    text: str

    def encode(self, writer: Writer, record: Record) -> None:
        _write_text(writer, self.text)


@dataclass(frozen=True)
class ErrorChunk:
    """A part of the pattern that failed to compile; renders as an error marker."""

    message: str

    def encode(self, writer: Writer, record: Record) -> None:
        _write_text(writer, f"{{ERROR: {self.message}}}")


_HIGHLIGHTS = {
    Level.ERROR: Style(text=Color.RED, intense=True),
    Level.WARN: Style(text=Color.YELLOW),
    Level.INFO: Style(text=Color.GREEN),
    Level.TRACE: Style(text=Color.CYAN),
}


@dataclass(frozen=True)
class FormattedChunk:
    """A formatter together with its width and alignment parameters."""

    kind: ChunkKind
    parameters: Parameters = Parameters()
    format: str = "%+"
    timezone: Timezone = Timezone.LOCAL
    chunks: tuple[Chunk, ...] = ()
    key: str = ""
    default: str = ""

    def encode(self, writer: Writer, record: Record) -> None:
        params = self.parameters
        if params.max_width is not None:
            limited: Writer = MaxWidthWriter(writer, params.max_width)
        else:
            limited = writer
        if params.min_width is None:
            self._encode_body(limited, record)
            return
        if params.align is Alignment.LEFT:
            padded: Union[LeftAlignWriter, RightAlignWriter] = LeftAlignWriter(
                limited, params.min_width, params.fill
            )
        else:
            padded = RightAlignWriter(limited, params.min_width, params.fill)
        self._encode_body(padded, record)
        padded.finish()

    def _encode_nested(self, writer: Writer, record: Record) -> None:
        for chunk in self.chunks:
            chunk.encode(writer, record)

    def _encode_body(self, writer: Writer, record: Record) -> None:
        kind = self.kind
        if kind is ChunkKind.TIME:
            if self.timezone is Timezone.UTC:
                now = datetime.now(timezone.utc)
            else:
                now = datetime.now().astimezone()
            text = _format_time(now, self.format, self.timezone is Timezone.UTC)
            _write_text(writer, text)
        elif kind is ChunkKind.LEVEL:
            _write_text(writer, str(record.level))
        elif kind is ChunkKind.MESSAGE:
            _write_text(writer, record.message)
        elif kind is ChunkKind.MODULE:
            _write_text(writer, record.module_path or "???")
        elif kind is ChunkKind.FILE:
            _write_text(writer, record.file or "???")
        elif kind is ChunkKind.LINE:
            _write_text(writer, "???" if record.line is None else str(record.line))
        elif kind is ChunkKind.THREAD:
            _write_text(writer, threading.current_thread().name or "unnamed")
        elif kind is ChunkKind.THREAD_ID:
            _write_text(writer, str(threading.get_ident()))
        elif kind is ChunkKind.PROCESS_ID:
            _write_text(writer, str(os.getpid()))
        elif kind is ChunkKind.SYSTEM_THREAD_ID:
            _write_text(writer, str(threading.get_native_id()))
        elif kind is ChunkKind.TARGET:
            _write_text(writer, record.target)
        elif kind is ChunkKind.NEWLINE:
            _write_text(writer, NEWLINE)
        elif kind is ChunkKind.ALIGN:
            self._encode_nested(writer, record)
        elif kind is ChunkKind.HIGHLIGHT:
            style = _HIGHLIGHTS.get(record.level)
            if style is not None:
                writer.set_style(style)
            self._encode_nested(writer, record)
            if style is not None:
                writer.set_style(Style())
        elif kind is ChunkKind.DEBUG:
            if __debug__:
                self._encode_nested(writer, record)
        elif kind is ChunkKind.RELEASE:
            if not __debug__:
                self._encode_nested(writer, record)
        elif kind is ChunkKind.MDC:
            _write_text(writer, get_mdc(self.key, self.default))


Chunk = Union[TextChunk, ErrorChunk, FormattedChunk]

_SIMPLE = {
    "l": ChunkKind.LEVEL,
    "level": ChunkKind.LEVEL,
    "m": ChunkKind.MESSAGE,
    "message": ChunkKind.MESSAGE,
    "M": ChunkKind.MODULE,
    "module": ChunkKind.MODULE,
    "n": ChunkKind.NEWLINE,
    "f": ChunkKind.FILE,
    "file": ChunkKind.FILE,
    "L": ChunkKind.LINE,
    "line": ChunkKind.LINE,
    "T": ChunkKind.THREAD,
    "thread": ChunkKind.THREAD,
    "I": ChunkKind.THREAD_ID,
    "thread_id": ChunkKind.THREAD_ID,
    "P": ChunkKind.PROCESS_ID,
    "pid": ChunkKind.PROCESS_ID,
    "i": ChunkKind.SYSTEM_THREAD_ID,
    "tid": ChunkKind.SYSTEM_THREAD_ID,
    "t": ChunkKind.TARGET,
    "target": ChunkKind.TARGET,
}

_NESTED = {
    "h": ChunkKind.HIGHLIGHT,
    "highlight": ChunkKind.HIGHLIGHT,
    "D": ChunkKind.DEBUG,
    "debug": ChunkKind.DEBUG,
    "R": ChunkKind.RELEASE,
    "release": ChunkKind.RELEASE,
    "": ChunkKind.ALIGN,
}


def _time_chunk(args: tuple[tuple[Piece, ...], ...], params: Parameters) -> Chunk:
    if len(args) > 2:
        return ErrorChunk("expected at most two arguments")

    if args:
        parts = []
        for piece in args[0]:
            if isinstance(piece, TextPiece):
                parts.append(piece.text)
            elif isinstance(piece, ArgumentPiece):
                parts.append("{ERROR: unexpected formatter}")
            else:
                parts.append(f"{{ERROR: {piece.message}}}")
        fmt = "".join(parts)
    else:
        fmt = "%+"

    zone = Timezone.LOCAL
    if len(args) > 1:
        if not args[1]:
            return ErrorChunk("invalid timezone")
        first = args[1][0]
        if not isinstance(first, TextPiece):
            return ErrorChunk("invalid timezone")
        if first.text == "utc":
            zone = Timezone.UTC
        elif first.text == "local":
            zone = Timezone.LOCAL
        else:
            return ErrorChunk(f"invalid timezone `{first.text}`")

    return FormattedChunk(ChunkKind.TIME, params, format=fmt, timezone=zone)


def _mdc_text(arg: tuple[Piece, ...], what: str) -> Union[str, ErrorChunk]:
    if not arg:
        return ErrorChunk(f"invalid MDC {what}")
    first = arg[0]
    if isinstance(first, TextPiece):
        return first.text
    if isinstance(first, ErrorPiece):
        return ErrorChunk(first.message)
    return ErrorChunk(f"invalid MDC {what}")


def _mdc_chunk(args: tuple[tuple[Piece, ...], ...], params: Parameters) -> Chunk:
    if len(args) > 2:
        return ErrorChunk("expected at most two arguments")
    if not args:
        return ErrorChunk("missing MDC key")
    key = _mdc_text(args[0], "key")
    if isinstance(key, ErrorChunk):
        return key
    default = ""
    if len(args) > 1:
        value = _mdc_text(args[1], "default")
        if isinstance(value, ErrorChunk):
            return value
        default = value
    return FormattedChunk(ChunkKind.MDC, params, key=key, default=default)


def chunk_from_piece(piece: Piece) -> Chunk:
    """Compile a parsed piece into a chunk, or an error chunk if it is invalid."""
    if isinstance(piece, TextPiece):
        return TextChunk(piece.text)
    if isinstance(piece, ErrorPiece):
        return ErrorChunk(piece.message)

    name = piece.formatter.name
    args = piece.formatter.args
    params = piece.parameters
    if name in ("d", "date"):
        return _time_chunk(args, params)
    if name in _NESTED:
        if len(args) != 1:
            return ErrorChunk("expected exactly one argument")
        return FormattedChunk(
            _NESTED[name],
            params,
            chunks=tuple(chunk_from_piece(p) for p in args[0]),
        )
    if name in _SIMPLE:
        if args:
            return ErrorChunk("unexpected arguments")
        return FormattedChunk(_SIMPLE[name], params)
    if name in ("X", "mdc"):
        return _mdc_chunk(args, params)
    return ErrorChunk(f"unknown formatter `{name}`")