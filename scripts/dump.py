#!/usr/bin/env python3
"""Local CLI entrypoint to parse a yarn.lock and print it as JSON.

Usage:
  python scripts/dump.py path/to/yarn.lock [--options options.json] [--validate]
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from berry_lockfile import ConfigError, LockfileParseError, load_options, parse_lockfile
from berry_lockfile.schema import validate_document


def _line_column(text: str, offset: int) -> tuple[int, int]:
    line = text.count("\n", 0, offset) + 1
    column = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, column


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("lockfile", type=Path, help="Path to the yarn.lock to parse")
    parser.add_argument(
        "--options",
        type=Path,
        default=None,
        help="JSON file with parse options (defaults to $BERRY_LOCKFILE_OPTIONS)",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate the output against the bundled JSON schema",
    )
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        options = load_options(args.options)
        text = args.lockfile.read_text(encoding="utf-8")
    except (ConfigError, OSError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    try:
        lockfile = parse_lockfile(text, options)
    except LockfileParseError as exc:
        line, column = _line_column(text, exc.offset)
        print(f"ERROR: {args.lockfile}:{line}:{column}: {exc.message}", file=sys.stderr)
        return 1

    document = lockfile.to_dict()
    if args.validate:
        try:
            validate_document(document)
        except ValueError as exc:
            print(f"ERROR: Output failed schema validation:{exc}", file=sys.stderr)
            return 1

    print(json.dumps(document, indent=2))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
