"""Lexical primitives shared by every lockfile reader.

Readers take the full source text and a position and return either a
``(new_position, value)`` pair or a :class:`Failure`. Values are
:class:`Span` views into the source; nothing here copies text. Spans are
turned into ``str`` only by the assembly step, via :meth:`Span.text`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import NoReturn, TypeVar, Union

from ..errors import LockfileParseError, LockfileSyntaxError

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class Span:
    """Borrowed view of ``source[start:end]``."""

    start: int
    end: int
    quoted: bool = False

    @property
    def is_empty(self) -> bool:
        return self.start >= self.end

    def equals(self, source: str, literal: str) -> bool:
        """Compare against ``literal`` without slicing the source."""
        return self.end - self.start == len(literal) and source.startswith(literal, self.start)

    def text(self, source: str, *, decode_escapes: bool = False) -> str:
        value = source[self.start : self.end]
        if decode_escapes and self.quoted and "\\" in value:
            return unescape(value)
        return value


@dataclass(slots=True, frozen=True)
class Failure:
    """Tagged failure result carrying the error kind to raise."""

    kind: type[LockfileParseError]
    message: str
    offset: int

    def raise_(self) -> NoReturn:
        raise self.kind(self.message, offset=self.offset)


Result = Union[tuple[int, T], Failure]

_BARE_STOP = frozenset(":,\r\n")
_ESCAPES = {'"': '"', "\\": "\\", "/": "/", "n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f"}
_ESCAPE_RE = re.compile(r"\\(u[0-9a-fA-F]{4}|.)")


def unescape(value: str) -> str:
    """Decode JSON-style backslash escapes inside a quoted scalar."""

    def _replace(match: re.Match[str]) -> str:
        token = match.group(1)
        if token[0] == "u" and len(token) == 5:
            return chr(int(token[1:], 16))
        return _ESCAPES.get(token, match.group(0))

    return _ESCAPE_RE.sub(_replace, value)


def syntax_error(message: str, offset: int) -> Failure:
    return Failure(LockfileSyntaxError, message, offset)


def at_end(source: str, pos: int) -> bool:
    return pos >= len(source)


def skip_spaces(source: str, pos: int) -> int:
    end = len(source)
    while pos < end and source[pos] in " \t":
        pos += 1
    return pos


def indentation(source: str, pos: int) -> int:
    """Number of leading spaces of the line starting at ``pos``."""
    width = 0
    end = len(source)
    while pos + width < end and source[pos + width] == " ":
        width += 1
    return width


def end_of_line(source: str, pos: int) -> int:
    """Position of the line terminator (or end of input) at or after ``pos``."""
    newline = source.find("\n", pos)
    if newline == -1:
        return len(source)
    if newline > pos and source[newline - 1] == "\r":
        return newline - 1
    return newline


def next_line(source: str, pos: int) -> int:
    """Position just past the line terminator following ``pos``."""
    newline = source.find("\n", pos)
    return len(source) if newline == -1 else newline + 1


def is_blank_line(source: str, pos: int) -> bool:
    stop = end_of_line(source, pos)
    return skip_spaces(source, pos) >= stop


def skip_blank_lines(source: str, pos: int) -> int:
    """Skip whitespace-only lines; return the start of the next non-blank line."""
    while pos < len(source) and is_blank_line(source, pos):
        pos = next_line(source, pos)
    return pos


def line_end(source: str, pos: int) -> int | Failure:
    """Consume optional trailing spaces and one line terminator (or end of input)."""
    pos = skip_spaces(source, pos)
    if pos >= len(source):
        return pos
    if source[pos] == "\n":
        return pos + 1
    if source.startswith("\r\n", pos):
        return pos + 2
    return syntax_error(f"expected end of line, found {source[pos]!r}", pos)


def expect(source: str, pos: int, token: str) -> int | Failure:
    if source.startswith(token, pos):
        return pos + len(token)
    if pos >= len(source):
        return syntax_error(f"expected {token!r}, found end of input", pos)
    return syntax_error(f"expected {token!r}, found {source[pos]!r}", pos)


def read_quoted(source: str, pos: int) -> Result[Span]:
    """Read a double-quoted scalar; the span excludes the quotes."""
    if pos >= len(source) or source[pos] != '"':
        return syntax_error("expected a quoted scalar", pos)
    cursor = pos + 1
    end = len(source)
    while cursor < end:
        char = source[cursor]
        if char == "\\":
            if cursor + 1 >= end or source[cursor + 1] in "\r\n":
                break
            cursor += 2
            continue
        if char == '"':
            return cursor + 1, Span(pos + 1, cursor, quoted=True)
        if char == "\n":
            break
        cursor += 1
    return syntax_error("unterminated quoted scalar", pos)


def read_bare(source: str, pos: int) -> Result[Span]:
    """Read an unquoted scalar ending at ``:``, ``,``, a line break or end of input."""
    cursor = pos
    end = len(source)
    while cursor < end and source[cursor] not in _BARE_STOP:
        cursor += 1
    stop = cursor
    while stop > pos and source[stop - 1] in " \t":
        stop -= 1
    if stop == pos:
        return syntax_error("expected a scalar", pos)
    return cursor, Span(pos, stop)


def read_scalar(source: str, pos: int) -> Result[Span]:
    if pos < len(source) and source[pos] == '"':
        return read_quoted(source, pos)
    return read_bare(source, pos)


def read_value(source: str, pos: int) -> Result[Span]:
    """Read a property value: a quoted scalar or bare text up to the end of the line."""
    if pos < len(source) and source[pos] == '"':
        return read_quoted(source, pos)
    stop = end_of_line(source, pos)
    trimmed = stop
    while trimmed > pos and source[trimmed - 1] in " \t":
        trimmed -= 1
    if trimmed == pos:
        return syntax_error("expected a value", pos)
    return stop, Span(pos, trimmed)
