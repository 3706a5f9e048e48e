"""Ident and descriptor grammar.

``[@scope/]name@[protocol:]range``. The range is kept verbatim; protocols
are not interpreted here.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from .lexical import (
    Failure,
    Result,
    Span,
    expect,
    line_end,
    read_scalar,
    skip_spaces,
    syntax_error,
)


@dataclass(slots=True, frozen=True)
class RawIdent:
    scope: Span | None
    name: Span


@dataclass(slots=True, frozen=True)
class RawDescriptor:
    ident: RawIdent
    range: Span
    span: Span


def _scope_end(source: str, span: Span) -> int | Failure:
    """Return the position just past ``@scope/``, or ``span.start`` when unscoped."""
    if span.is_empty or source[span.start] != "@":
        return span.start
    slash = source.find("/", span.start + 1, span.end)
    if slash == -1:
        return syntax_error("scoped package name is missing '/'", span.start)
    if slash == span.start + 1:
        return syntax_error("package scope must not be empty", span.start)
    return slash + 1


def parse_ident(source: str, span: Span) -> RawIdent | Failure:
    name_start = _scope_end(source, span)
    if isinstance(name_start, Failure):
        return name_start
    if name_start >= span.end:
        return syntax_error("package name must not be empty", span.start)
    scope = None
    if name_start != span.start:
        scope = Span(span.start + 1, name_start - 1, span.quoted)
    return RawIdent(scope=scope, name=Span(name_start, span.end, span.quoted))


def parse_descriptor(source: str, span: Span) -> RawDescriptor | Failure:
    """Split ``span`` into ident and range.

    The separator is the first ``@`` after the (optional) scope. Scoped names
    start with ``@`` so that one is skipped; nested descriptors inside the
    range (``patch:``, ``npm:alias@range``) keep their own ``@``.
    """
    name_start = _scope_end(source, span)
    if isinstance(name_start, Failure):
        return name_start
    at = source.find("@", name_start, span.end)
    if at == -1:
        return syntax_error("descriptor is missing '@range'", span.start)
    ident = parse_ident(source, Span(span.start, at, span.quoted))
    if isinstance(ident, Failure):
        return ident
    if at + 1 >= span.end:
        return syntax_error("descriptor range must not be empty", at)
    return RawDescriptor(ident=ident, range=Span(at + 1, span.end, span.quoted), span=span)


def split_descriptors(source: str, span: Span) -> Iterator[Span]:
    """Yield the comma-separated pieces of ``span`` with surrounding spaces trimmed."""
    start = span.start
    while True:
        comma = source.find(",", start, span.end)
        stop = span.end if comma == -1 else comma
        left = skip_spaces(source, start)
        right = stop
        while right > left and source[right - 1] in " \t":
            right -= 1
        yield Span(min(left, right), right, span.quoted)
        if comma == -1:
            return
        start = comma + 1


def parse_descriptor_line(source: str, pos: int) -> Result[list[RawDescriptor]]:
    """Read an entry header: one or more descriptors followed by ``:`` and a line break."""
    descriptors: list[RawDescriptor] = []
    while True:
        scalar = read_scalar(source, pos)
        if isinstance(scalar, Failure):
            return scalar
        pos, token = scalar
        for piece in split_descriptors(source, token):
            if piece.is_empty:
                return syntax_error("empty descriptor in entry header", piece.start)
            descriptor = parse_descriptor(source, piece)
            if isinstance(descriptor, Failure):
                return descriptor
            descriptors.append(descriptor)
        pos = skip_spaces(source, pos)
        if pos < len(source) and source[pos] == ",":
            pos = skip_spaces(source, pos + 1)
            continue
        break

    pos = expect(source, pos, ":")
    if isinstance(pos, Failure):
        return pos
    pos = line_end(source, pos)
    if isinstance(pos, Failure):
        return pos
    return pos, descriptors
