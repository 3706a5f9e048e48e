"""Error types raised by the lockfile parser and its configuration loader."""

from __future__ import annotations


class LockfileParseError(ValueError):
    """Base error for any failure to parse a lockfile.

    ``offset`` is the position in the input text where the problem was
    detected. Mapping it to a line/column is left to the caller.
    """

    def __init__(self, message: str, *, offset: int) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset

    def __str__(self) -> str:
        return f"{self.message} (at offset {self.offset})"


class LockfileSyntaxError(LockfileParseError):
    """Raised on a local grammar violation (unexpected token, missing delimiter)."""


class FormatError(LockfileParseError):
    """Raised when input matches the grammar but carries an invalid value."""


class TruncatedInputError(LockfileParseError):
    """Raised when input ends before a required section."""


class TrailingContentError(LockfileParseError):
    """Raised when non-whitespace content follows the last package entry."""


class ConfigError(RuntimeError):
    """Raised when parse options cannot be loaded or are invalid."""
