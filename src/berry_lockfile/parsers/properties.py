"""Classify one indented property line of a package entry.

Block headers are tried first, then known ``key: value`` fields. Anything
else that is ``key:``-shaped is :class:`Unknown` and is skipped together
with every line indented deeper than it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .lexical import (
    Failure,
    Result,
    Span,
    at_end,
    expect,
    indentation,
    line_end,
    next_line,
    read_scalar,
    read_value,
    skip_blank_lines,
    skip_spaces,
    syntax_error,
)

VERSION = "version"
RESOLUTION = "resolution"
LANGUAGE_NAME = "languageName"
LINK_TYPE = "linkType"
CHECKSUM = "checksum"
DEPENDENCIES = "dependencies"
PEER_DEPENDENCIES = "peerDependencies"
BIN = "bin"
CONDITIONS = "conditions"
DEPENDENCIES_META = "dependenciesMeta"
PEER_DEPENDENCIES_META = "peerDependenciesMeta"

SIMPLE_KEYS = (VERSION, RESOLUTION, LANGUAGE_NAME, LINK_TYPE, CHECKSUM)
_PAIR_BLOCKS = (DEPENDENCIES, PEER_DEPENDENCIES, BIN)
_META_BLOCKS = (DEPENDENCIES_META, PEER_DEPENDENCIES_META)

Pairs = list[tuple[Span, Span]]


@dataclass(slots=True, frozen=True)
class Simple:
    key: str
    value: Span


@dataclass(slots=True, frozen=True)
class DependenciesBlock:
    items: Pairs


@dataclass(slots=True, frozen=True)
class PeerDependenciesBlock:
    items: Pairs


@dataclass(slots=True, frozen=True)
class BinBlock:
    items: Pairs


@dataclass(slots=True, frozen=True)
class ConditionsBlock:
    value: Span


@dataclass(slots=True, frozen=True)
class RawMetaEntry:
    name: Span
    flags: Pairs


@dataclass(slots=True, frozen=True)
class MetaBlock:
    which: str
    entries: list[RawMetaEntry]


@dataclass(slots=True, frozen=True)
class Unknown:
    key: Span


Property = Union[
    Simple,
    DependenciesBlock,
    PeerDependenciesBlock,
    BinBlock,
    ConditionsBlock,
    MetaBlock,
    Unknown,
]


def _match_key(source: str, key: Span, candidates: tuple[str, ...]) -> str | None:
    for candidate in candidates:
        if key.equals(source, candidate):
            return candidate
    return None


def read_key(source: str, pos: int) -> Result[Span]:
    """Read ``key:`` and return the position just past the colon."""
    scalar = read_scalar(source, pos)
    if isinstance(scalar, Failure):
        return scalar
    after, key = scalar
    after = expect(source, after, ":")
    if isinstance(after, Failure):
        return after
    return after, key


def read_pair_line(source: str, pos: int) -> Result[tuple[Span, Span]]:
    """Read one ``key: value`` line, including its line terminator."""
    key = read_key(source, pos)
    if isinstance(key, Failure):
        return key
    after, name = key
    value = read_value(source, skip_spaces(source, after))
    if isinstance(value, Failure):
        return value
    after, text = value
    after = line_end(source, after)
    if isinstance(after, Failure):
        return after
    return after, (name, text)


def child_line(
    source: str, pos: int, parent_indent: int, child_indent: int | None
) -> tuple[int, int] | Failure | None:
    """Locate the next line nested under ``parent_indent``.

    Returns ``(line_start, width)``, or ``None`` once the block has ended.
    All children must share the indentation of the first one.
    """
    line = skip_blank_lines(source, pos)
    if at_end(source, line):
        return None
    width = indentation(source, line)
    if width <= parent_indent:
        return None
    if child_indent is not None and width != child_indent:
        return syntax_error("inconsistent indentation in block", line)
    return line, width


def read_pairs(source: str, pos: int, parent_indent: int) -> Result[Pairs]:
    """Read ``name: value`` lines indented deeper than ``parent_indent``.

    Returns the position of the first line that is not part of the block.
    """
    items: Pairs = []
    child_indent = None
    while True:
        child = child_line(source, pos, parent_indent, child_indent)
        if child is None:
            return pos, items
        if isinstance(child, Failure):
            return child
        line, child_indent = child
        pair = read_pair_line(source, line + child_indent)
        if isinstance(pair, Failure):
            return pair
        pos, item = pair
        items.append(item)


def _read_meta_entries(source: str, pos: int, parent_indent: int) -> Result[list[RawMetaEntry]]:
    entries: list[RawMetaEntry] = []
    child_indent = None
    while True:
        child = child_line(source, pos, parent_indent, child_indent)
        if child is None:
            return pos, entries
        if isinstance(child, Failure):
            return child
        line, child_indent = child
        key = read_key(source, line + child_indent)
        if isinstance(key, Failure):
            return key
        after, name = key
        after = line_end(source, after)
        if isinstance(after, Failure):
            return after
        flags = read_pairs(source, after, child_indent)
        if isinstance(flags, Failure):
            return flags
        pos, items = flags
        entries.append(RawMetaEntry(name=name, flags=items))


def skip_nested(source: str, pos: int, indent: int) -> int:
    """Skip the current line and any following lines indented deeper than ``indent``."""
    pos = next_line(source, pos)
    while True:
        line = skip_blank_lines(source, pos)
        if at_end(source, line) or indentation(source, line) <= indent:
            return pos
        pos = next_line(source, line)


def classify_property(source: str, line: int, indent: int) -> Result[Property]:
    """Classify the property line starting at ``line`` (indented by ``indent``)."""
    key_result = read_key(source, line + indent)
    if isinstance(key_result, Failure):
        return key_result
    after, key = key_result
    value_start = skip_spaces(source, after)
    header_only = not isinstance(line_end(source, value_start), Failure)

    block = _match_key(source, key, _PAIR_BLOCKS + _META_BLOCKS)
    if block is not None:
        if not header_only:
            return syntax_error(f"'{block}' must be followed by an indented block", value_start)
        body = line_end(source, value_start)
        if block in _META_BLOCKS:
            entries = _read_meta_entries(source, body, indent)
            if isinstance(entries, Failure):
                return entries
            return entries[0], MetaBlock(which=block, entries=entries[1])
        pairs = read_pairs(source, body, indent)
        if isinstance(pairs, Failure):
            return pairs
        pos, items = pairs
        if block == DEPENDENCIES:
            return pos, DependenciesBlock(items)
        if block == PEER_DEPENDENCIES:
            return pos, PeerDependenciesBlock(items)
        return pos, BinBlock(items)

    if key.equals(source, CONDITIONS):
        pair = read_pair_line(source, line + indent)
        if isinstance(pair, Failure):
            return pair
        pos, (_, value) = pair
        return pos, ConditionsBlock(value)

    simple = _match_key(source, key, SIMPLE_KEYS)
    if simple is not None:
        pair = read_pair_line(source, line + indent)
        if isinstance(pair, Failure):
            return pair
        pos, (_, value) = pair
        return pos, Simple(key=simple, value=value)

    return skip_nested(source, line, indent), Unknown(key)
