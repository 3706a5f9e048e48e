"""Reader for the ``__metadata`` block."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..errors import FormatError, TruncatedInputError
from ..models import Metadata
from .lexical import Failure, Result, Span, at_end, expect, line_end, syntax_error
from .properties import child_line, read_key, read_pair_line, skip_nested

HEADER = "__metadata"
_INTEGER = re.compile(r"[0-9]+")


@dataclass(slots=True, frozen=True)
class RawMetadata:
    version: Span
    cache_key: Span | None


def read_metadata(source: str, pos: int) -> Result[RawMetadata]:
    """Read ``__metadata:`` and its indented ``version``/``cacheKey`` fields.

    Fields may appear in any order. Other keys are skipped along with any
    lines nested under them.
    """
    if at_end(source, pos):
        return Failure(TruncatedInputError, "input ended before the __metadata block", pos)
    if not source.startswith(HEADER, pos):
        return syntax_error("expected '__metadata:'", pos)
    header = pos
    pos = expect(source, pos + len(HEADER), ":")
    if isinstance(pos, Failure):
        return pos
    pos = line_end(source, pos)
    if isinstance(pos, Failure):
        return pos

    version = None
    cache_key = None
    indent = None
    while True:
        child = child_line(source, pos, 0, indent)
        if child is None:
            break
        if isinstance(child, Failure):
            return child
        line, indent = child
        key = read_key(source, line + indent)
        if isinstance(key, Failure):
            return key
        _, name = key
        if not (name.equals(source, "version") or name.equals(source, "cacheKey")):
            pos = skip_nested(source, line, indent)
            continue
        pair = read_pair_line(source, line + indent)
        if isinstance(pair, Failure):
            return pair
        pos, (_, value) = pair
        if name.equals(source, "version"):
            version = value
        else:
            cache_key = value

    if version is None:
        return Failure(FormatError, "__metadata is missing 'version'", header)
    if _INTEGER.fullmatch(source, version.start, version.end) is None:
        return Failure(FormatError, "__metadata 'version' must be an integer", version.start)
    return pos, RawMetadata(version=version, cache_key=cache_key)


def assemble_metadata(source: str, raw: RawMetadata, *, decode_escapes: bool = False) -> Metadata:
    cache_key = None
    if raw.cache_key is not None:
        cache_key = raw.cache_key.text(source, decode_escapes=decode_escapes)
    return Metadata(version=int(raw.version.text(source)), cache_key=cache_key)
