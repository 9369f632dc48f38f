"""Parser for the pattern encoder's format strings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

_SPECIAL = frozenset("{}()\\")


class Alignment(Enum):
    """Which side of a padded value the fill goes on."""

    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class Parameters:
    """The format specification that follows ``:`` in an argument."""

    fill: str = " "
    align: Alignment = Alignment.LEFT
    min_width: Optional[int] = None
    max_width: Optional[int] = None


@dataclass(frozen=True)
class TextPiece:
    """Literal text."""

    text: str


@dataclass(frozen=True)
class ErrorPiece:
    """A part of the pattern that could not be parsed."""

    message: str


@dataclass(frozen=True)
class Formatter:
    """A formatter name and its parenthesised arguments."""

    name: str
    args: tuple[tuple["Piece", ...], ...] = ()


@dataclass(frozen=True)
class ArgumentPiece:
    """A ``{...}`` argument: a formatter and its format specification."""

    formatter: Formatter
    parameters: Parameters = Parameters()


Piece = Union[TextPiece, ArgumentPiece, ErrorPiece]


class _ParseError(Exception):
    pass


class Parser:
    """Iterates over the pieces of a pattern string."""

    def __init__(self, pattern: str) -> None:
        self._pattern = pattern
        self._pos = 0

    def __iter__(self) -> Parser:
        return self

    def __next__(self) -> Piece:
        piece = self._next_piece()
        if piece is None:
            raise StopIteration
        return piece

    def _peek(self, offset: int = 0) -> Optional[str]:
        index = self._pos + offset
        if index < len(self._pattern):
            return self._pattern[index]
        return None

    def _consume(self, ch: str) -> bool:
        if self._peek() == ch:
            self._pos += 1
            return True
        return False

    def _next_piece(self) -> Optional[Piece]:
        ch = self._peek()
        if ch is None:
            return None
        if ch == "{":
            self._pos += 1
            if self._consume("{"):
                return TextPiece("{")
            piece = self._argument()
            if self._consume("}"):
                return piece
            self._pos = len(self._pattern)
            return ErrorPiece("expected '}'")
        if ch == "}":
            self._pos += 1
            if self._consume("}"):
                return TextPiece("}")
            return ErrorPiece("unmatched '}'")
        if ch in "()":
            self._pos += 1
            if self._consume(ch):
                return TextPiece(ch)
            return ErrorPiece(f"unexpected '{ch}'")
        if ch == "\\":
            self._pos += 1
            escaped = self._peek()
            if escaped is not None and escaped in _SPECIAL:
                self._pos += 1
                return TextPiece(escaped)
            return ErrorPiece("unexpected '\\'")
        return self._text()

    def _argument(self) -> Piece:
        try:
            formatter = Formatter(self._name(), self._args())
        except _ParseError as err:
            return ErrorPiece(str(err))
        return ArgumentPiece(formatter, self._parameters())

    def _name(self) -> str:
        first = self._peek()
        if first is None or not first.isalpha():
            return ""
        start = self._pos
        self._pos += 1
        while (ch := self._peek()) is not None and ch.isalnum():
            self._pos += 1
        return self._pattern[start : self._pos]

    def _args(self) -> tuple[tuple[Piece, ...], ...]:
        args = []
        while self._peek() == "(":
            args.append(self._arg())
        return tuple(args)

    def _arg(self) -> tuple[Piece, ...]:
        self._consume("(")
        pieces = []
        while not self._consume(")"):
            piece = self._next_piece()
            if piece is None:
                raise _ParseError("unclosed '('")
            pieces.append(piece)
        return tuple(pieces)

    def _parameters(self) -> Parameters:
        if not self._consume(":"):
            return Parameters()

        fill = " "
        align = Alignment.LEFT
        ch = self._peek()
        if ch is not None and self._peek(1) in ("<", ">"):
            self._pos += 1
            fill = ch

        if self._consume("<"):
            align = Alignment.LEFT
        elif self._consume(">"):
            align = Alignment.RIGHT

        min_width = self._integer()
        max_width = self._integer() if self._consume(".") else None
        return Parameters(fill, align, min_width, max_width)

    def _integer(self) -> Optional[int]:
        start = self._pos
        while (ch := self._peek()) is not None and "0" <= ch <= "9":
            self._pos += 1
        if self._pos == start:
            return None
        return int(self._pattern[start : self._pos])

    def _text(self) -> TextPiece:
        start = self._pos
        while (ch := self._peek()) is not None and ch not in _SPECIAL:
            self._pos += 1
        return TextPiece(self._pattern[start : self._pos])


def parse(pattern: str) -> list[Piece]:
    """Return every piece of ``pattern`` in order."""
    return list(Parser(pattern))