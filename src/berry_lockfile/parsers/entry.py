"""Package entry reading and assembly.

:func:`read_entry` walks one entry (header plus property block) and keeps
everything as spans. :func:`assemble_package` is the point where spans are
copied into an owned :class:`~berry_lockfile.models.Package`.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import FormatError, TruncatedInputError
from ..models import (
    DependencyMeta,
    Descriptor,
    Ident,
    LinkType,
    Package,
    PeerDependencyMeta,
)
from .descriptor import RawDescriptor, RawIdent, parse_descriptor, parse_descriptor_line
from .lexical import Failure, Result, Span, at_end, indentation, skip_blank_lines, syntax_error
from .properties import (
    CHECKSUM,
    DEPENDENCIES_META,
    LANGUAGE_NAME,
    LINK_TYPE,
    RESOLUTION,
    VERSION,
    BinBlock,
    ConditionsBlock,
    DependenciesBlock,
    MetaBlock,
    PeerDependenciesBlock,
    Property,
    Simple,
    classify_property,
)

_DEPENDENCY_FLAGS = ("built", "optional", "unplugged")
_SIMPLE_FIELDS = {
    VERSION: "version",
    RESOLUTION: "resolution",
    CHECKSUM: "checksum",
    LANGUAGE_NAME: "language_name",
    LINK_TYPE: "link_type",
}


@dataclass(slots=True, frozen=True)
class RawEntry:
    descriptors: list[RawDescriptor]
    properties: list[Property]
    header: int


def read_entry(source: str, pos: int) -> Result[RawEntry] | None:
    """Read the entry starting at ``pos``.

    Returns ``None`` when the line is not an entry header, so the caller can
    stop without consuming anything. Failures inside the property block are
    returned as :class:`Failure`.
    """
    header = parse_descriptor_line(source, pos)
    if isinstance(header, Failure):
        return None
    body, descriptors = header

    properties: list[Property] = []
    property_indent = None
    while True:
        line = skip_blank_lines(source, body)
        if at_end(source, line):
            if not properties:
                return Failure(
                    TruncatedInputError, "input ended before the package entry's properties", line
                )
            break
        width = indentation(source, line)
        if width == 0:
            break
        if property_indent is None:
            property_indent = width
        elif width != property_indent:
            return syntax_error("unexpected indentation in package entry", line + width)
        classified = classify_property(source, line, width)
        if isinstance(classified, Failure):
            return classified
        body, prop = classified
        properties.append(prop)

    return body, RawEntry(descriptors=descriptors, properties=properties, header=pos)


def _ident(source: str, raw: RawIdent, decode: bool) -> Ident:
    scope = None if raw.scope is None else raw.scope.text(source, decode_escapes=decode)
    return Ident(scope=scope, name=raw.name.text(source, decode_escapes=decode))


def _descriptor(source: str, raw: RawDescriptor, decode: bool) -> Descriptor:
    return Descriptor(
        ident=_ident(source, raw.ident, decode),
        range=raw.range.text(source, decode_escapes=decode),
    )


def _pairs(source: str, items: list[tuple[Span, Span]], decode: bool) -> tuple[tuple[str, str], ...]:
    return tuple(
        (name.text(source, decode_escapes=decode), value.text(source, decode_escapes=decode))
        for name, value in items
    )


def _flag(source: str, value: Span) -> bool | Failure:
    if value.equals(source, "true"):
        return True
    if value.equals(source, "false"):
        return False
    return Failure(FormatError, "meta flags must be 'true' or 'false'", value.start)


def _meta(source: str, block: MetaBlock, decode: bool) -> dict[str, object] | Failure:
    """Build the ``name -> meta`` map of a dependenciesMeta/peerDependenciesMeta block."""
    result: dict[str, object] = {}
    for entry in block.entries:
        flags: dict[str, bool] = {}
        for key, value in entry.flags:
            if block.which == DEPENDENCIES_META:
                known = next((flag for flag in _DEPENDENCY_FLAGS if key.equals(source, flag)), None)
            else:
                known = "optional" if key.equals(source, "optional") else None
            if known is None:
                continue
            parsed = _flag(source, value)
            if isinstance(parsed, Failure):
                return parsed
            flags[known] = parsed
        name = entry.name.text(source, decode_escapes=decode)
        if block.which == DEPENDENCIES_META:
            result[name] = DependencyMeta(**flags)
        else:
            result[name] = PeerDependencyMeta(**flags)
    return result


def assemble_package(source: str, raw: RawEntry, *, decode_escapes: bool = False) -> Package | Failure:
    """Fold the classified properties of ``raw`` into an owned Package."""
    decode = decode_escapes
    simple: dict[str, Span] = {}
    fields: dict[str, object] = {}

    for prop in raw.properties:
        if isinstance(prop, Simple):
            simple[prop.key] = prop.value
        elif isinstance(prop, DependenciesBlock):
            fields["dependencies"] = _pairs(source, prop.items, decode)
        elif isinstance(prop, PeerDependenciesBlock):
            fields["peer_dependencies"] = _pairs(source, prop.items, decode)
        elif isinstance(prop, BinBlock):
            fields["bin"] = _pairs(source, prop.items, decode)
        elif isinstance(prop, ConditionsBlock):
            fields["conditions"] = prop.value.text(source, decode_escapes=decode)
        elif isinstance(prop, MetaBlock):
            meta = _meta(source, prop, decode)
            if isinstance(meta, Failure):
                return meta
            if prop.which == DEPENDENCIES_META:
                fields["dependencies_meta"] = meta
            else:
                fields["peer_dependencies_meta"] = meta
        # Unknown properties were skipped while reading.

    for key in (VERSION, RESOLUTION):
        if key not in simple:
            return Failure(FormatError, f"package entry is missing '{key}'", raw.header)

    link_type = simple.get(LINK_TYPE)
    if link_type is not None:
        try:
            fields["link_type"] = LinkType(link_type.text(source))
        except ValueError:
            return Failure(FormatError, "linkType must be 'hard' or 'soft'", link_type.start)

    resolution = simple[RESOLUTION]
    locator = parse_descriptor(source, resolution)
    if isinstance(locator, Failure):
        return locator

    for key, span in simple.items():
        if key != LINK_TYPE:
            fields[_SIMPLE_FIELDS[key]] = span.text(source, decode_escapes=decode)

    try:
        return Package.from_iterables(
            descriptors=(_descriptor(source, item, decode) for item in raw.descriptors),
            ident=_ident(source, locator.ident, decode),
            **fields,
        )
    except ValueError as exc:
        return Failure(FormatError, str(exc), raw.header)
