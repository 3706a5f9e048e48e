"""Data models for parsed lockfiles."""

from __future__ import annotations

from .ident import Descriptor, Ident, Locator
from .lockfile import Lockfile
from .metadata import Metadata
from .package import DependencyMeta, LinkType, Package, PeerDependencyMeta

__all__ = [
    "DependencyMeta",
    "Descriptor",
    "Ident",
    "LinkType",
    "Locator",
    "Lockfile",
    "Metadata",
    "Package",
    "PeerDependencyMeta",
]
