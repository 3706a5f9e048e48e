"""Parse a Yarn Berry yarn.lock into a Lockfile."""

from __future__ import annotations

import logging

from ..errors import FormatError, TrailingContentError, TruncatedInputError
from ..models import Lockfile, Metadata
from ..settings import ParseOptions
from .entry import RawEntry, assemble_package, read_entry
from .lexical import Failure, at_end, next_line, skip_blank_lines, syntax_error
from .metadata import assemble_metadata, read_metadata

logger = logging.getLogger(__name__)

_BOM = "\ufeff"


def _read_banner(source: str, pos: int) -> int | Failure:
    """Consume the leading ``#`` comment lines."""
    pos = skip_blank_lines(source, pos)
    if at_end(source, pos):
        return Failure(TruncatedInputError, "input is empty; expected a lockfile banner", pos)
    if source[pos] != "#":
        return syntax_error("expected a '#' banner comment", pos)
    while pos < len(source) and source[pos] == "#":
        pos = next_line(source, pos)
    return pos


def _parse(source: str, options: ParseOptions) -> Lockfile | Failure:
    pos = _read_banner(source, 1 if source.startswith(_BOM) else 0)
    if isinstance(pos, Failure):
        return pos

    metadata = read_metadata(source, skip_blank_lines(source, pos))
    if isinstance(metadata, Failure):
        return metadata
    pos, raw_metadata = metadata

    raw_entries: list[RawEntry] = []
    while True:
        line = skip_blank_lines(source, pos)
        if at_end(source, line):
            break
        entry = read_entry(source, line)
        if entry is None:
            return Failure(
                TrailingContentError, "unexpected content after the last package entry", line
            )
        if isinstance(entry, Failure):
            return entry
        pos, raw = entry
        raw_entries.append(raw)

    decode = options.decode_escapes
    packages = []
    seen: dict[str, int] = {}
    for raw in raw_entries:
        package = assemble_package(source, raw, decode_escapes=decode)
        if isinstance(package, Failure):
            return package
        if options.warn_on_duplicates:
            for descriptor in package.descriptors:
                key = str(descriptor)
                if key in seen:
                    logger.warning(
                        "Descriptor %s appears in entries at offsets %d and %d; keeping both",
                        key,
                        seen[key],
                        raw.header,
                    )
                else:
                    seen[key] = raw.header
        packages.append(package)

    meta: Metadata = assemble_metadata(source, raw_metadata, decode_escapes=decode)
    logger.debug("Parsed lockfile v%d with %d package entries", meta.version, len(packages))
    return Lockfile.from_packages(metadata=meta, packages=packages)


def parse_lockfile(text: str | bytes, options: ParseOptions | None = None) -> Lockfile:
    """Parse the complete text of a yarn.lock file.

    Bytes are decoded as UTF-8. Error offsets are positions in the decoded
    text. Either a fully populated Lockfile is returned or a
    :class:`~berry_lockfile.errors.LockfileParseError` subclass is raised.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FormatError("lockfile is not valid UTF-8", offset=exc.start) from exc

    result = _parse(text, options or ParseOptions())
    if isinstance(result, Failure):
        result.raise_()
    return result
