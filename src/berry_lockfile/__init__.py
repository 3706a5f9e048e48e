"""Parser for Yarn Berry (v2+) ``yarn.lock`` files.

The single entry point is :func:`parse_lockfile`, which turns lockfile text
into an immutable :class:`Lockfile`. It performs no I/O; reading files and
reporting errors are left to the caller.
"""

from .errors import (
    ConfigError,
    FormatError,
    LockfileParseError,
    LockfileSyntaxError,
    TrailingContentError,
    TruncatedInputError,
)
from .models import (
    DependencyMeta,
    Descriptor,
    Ident,
    LinkType,
    Locator,
    Lockfile,
    Metadata,
    Package,
    PeerDependencyMeta,
)
from .parsers import parse_lockfile
from .settings import ParseOptions, load_options

__all__ = [
    "ConfigError",
    "DependencyMeta",
    "Descriptor",
    "FormatError",
    "Ident",
    "LinkType",
    "Locator",
    "Lockfile",
    "LockfileParseError",
    "LockfileSyntaxError",
    "Metadata",
    "Package",
    "ParseOptions",
    "PeerDependencyMeta",
    "TrailingContentError",
    "TruncatedInputError",
    "load_options",
    "parse_lockfile",
]
