"""Writers that enforce minimum and maximum widths counted in characters."""

from __future__ import annotations

from typing import Union

from logforge.encode import Style, Writer


def _is_char_boundary(byte: int) -> bool:
    return byte < 0x80 or byte >= 0xC0


def char_starts(data: bytes) -> int:
    """Count the UTF-8 characters that start in ``data``."""
    return sum(1 for byte in data if _is_char_boundary(byte))


def _write_all(writer: Writer, data: bytes) -> None:
    while data:
        written = writer.write(data)
        if written <= 0:
            raise OSError("failed to write whole buffer")
        data = data[written:]


class MaxWidthWriter(Writer):
    """Passes through at most ``remaining`` characters and drops the rest."""

    def __init__(self, writer: Writer, remaining: int) -> None:
        self.writer = writer
        self.remaining = remaining

    def write(self, data: bytes) -> int:
        data = bytes(data)
        remaining = self.remaining
        end = len(data)
        for index, byte in enumerate(data):
            if _is_char_boundary(byte):
                if remaining == 0:
                    end = index
                    break
                remaining -= 1
        if end:
            _write_all(self.writer, data[:end])
            self.remaining = remaining
        return len(data)

    def set_style(self, style: Style) -> None:
        self.writer.set_style(style)

    def flush(self) -> None:
        self.writer.flush()


class LeftAlignWriter(Writer):
    """Writes through, then pads with ``fill`` up to a minimum width."""

    def __init__(self, writer: Writer, to_fill: int, fill: str = " ") -> None:
        self.writer = writer
        self.to_fill = to_fill
        self.fill = fill

    def write(self, data: bytes) -> int:
        data = bytes(data)
        _write_all(self.writer, data)
        self.to_fill = max(0, self.to_fill - char_starts(data))
        return len(data)

    def set_style(self, style: Style) -> None:
        self.writer.set_style(style)

    def flush(self) -> None:
        self.writer.flush()

    def finish(self) -> None:
        """Write the padding still owed."""
        if self.to_fill:
            _write_all(self.writer, (self.fill * self.to_fill).encode("utf-8"))
        self.to_fill = 0


class RightAlignWriter(Writer):
    """Buffers output, then writes padding followed by the buffered output."""

    def __init__(self, writer: Writer, to_fill: int, fill: str = " ") -> None:
        self.writer = writer
        self.to_fill = to_fill
        self.fill = fill
        self._buffer: list[Union[bytearray, Style]] = []

    def write(self, data: bytes) -> int:
        data = bytes(data)
        self.to_fill = max(0, self.to_fill - char_starts(data))
        if self._buffer and isinstance(self._buffer[-1], bytearray):
            self._buffer[-1].extend(data)
        else:
            self._buffer.append(bytearray(data))
        return len(data)

    def set_style(self, style: Style) -> None:
        self._buffer.append(style)

    def flush(self) -> None:
        return None

    def finish(self) -> None:
        """Write the padding, then replay the buffered output and styles."""
        if self.to_fill:
            _write_all(self.writer, (self.fill * self.to_fill).encode("utf-8"))
        self.to_fill = 0
        buffered, self._buffer = self._buffer, []
        for item in buffered:
            if isinstance(item, Style):
                self.writer.set_style(item)
            else:
                _write_all(self.writer, bytes(item))