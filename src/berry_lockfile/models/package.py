"""Package entry model."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from .ident import Descriptor, Ident, Locator


def _empty_mapping() -> Mapping:
    return MappingProxyType({})


class LinkType(str, Enum):
    """How a package is linked on disk."""

    # The package manager owns the location (typically the cache).
    HARD = "hard"
    # The package manager doesn't own the location (workspaces, portals, links).
    SOFT = "soft"


@dataclass(frozen=True)
class DependencyMeta:
    """Extra settings for a direct dependency (``dependenciesMeta``)."""

    built: bool | None = None
    optional: bool | None = None
    unplugged: bool | None = None

    def to_dict(self) -> dict[str, bool]:
        data = {"built": self.built, "optional": self.optional, "unplugged": self.unplugged}
        return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class PeerDependencyMeta:
    """Extra settings for a peer dependency (``peerDependenciesMeta``)."""

    optional: bool = False

    def to_dict(self) -> dict[str, bool]:
        return {"optional": self.optional}


@dataclass(frozen=True)
class Package:
    """One resolved package and every descriptor that points to it."""

    descriptors: tuple[Descriptor, ...]
    ident: Ident
    version: str
    resolution: str
    dependencies: tuple[tuple[str, str], ...] = ()
    peer_dependencies: tuple[tuple[str, str], ...] = ()
    checksum: str | None = None
    language_name: str | None = None
    link_type: LinkType | None = None
    bin: tuple[tuple[str, str], ...] = ()
    conditions: str | None = None
    # Read-only maps, excluded from the hash (mappingproxy is unhashable).
    dependencies_meta: Mapping[str, DependencyMeta] = field(
        default_factory=_empty_mapping, hash=False
    )
    peer_dependencies_meta: Mapping[str, PeerDependencyMeta] = field(
        default_factory=_empty_mapping, hash=False
    )

    def __post_init__(self) -> None:
        if not self.descriptors:
            raise ValueError("Package must be referenced by at least one descriptor")
        if not self.version:
            raise ValueError("Package version must be non-empty")
        if not self.resolution.startswith(f"{self.ident}@"):
            raise ValueError(f"Resolution {self.resolution!r} does not match ident {self.ident}")
        if not isinstance(self.dependencies_meta, MappingProxyType):
            object.__setattr__(
                self, "dependencies_meta", MappingProxyType(dict(self.dependencies_meta))
            )
        if not isinstance(self.peer_dependencies_meta, MappingProxyType):
            object.__setattr__(
                self, "peer_dependencies_meta", MappingProxyType(dict(self.peer_dependencies_meta))
            )

    @property
    def locator(self) -> Locator:
        reference = self.resolution[len(str(self.ident)) + 1 :]
        return Locator(ident=self.ident, reference=reference)

    def dependency_descriptors(self) -> list[Descriptor]:
        """Return ``dependencies`` as descriptors, in file order."""
        return [_pair_to_descriptor(name, range_) for name, range_ in self.dependencies]

    def peer_dependency_descriptors(self) -> list[Descriptor]:
        return [_pair_to_descriptor(name, range_) for name, range_ in self.peer_dependencies]

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "descriptors": [str(descriptor) for descriptor in self.descriptors],
            "ident": self.ident.to_dict(),
            "version": self.version,
            "resolution": self.resolution,
            "dependencies": [list(pair) for pair in self.dependencies],
            "peerDependencies": [list(pair) for pair in self.peer_dependencies],
            "bin": [list(pair) for pair in self.bin],
        }
        if self.checksum is not None:
            data["checksum"] = self.checksum
        if self.language_name is not None:
            data["languageName"] = self.language_name
        if self.link_type is not None:
            data["linkType"] = self.link_type.value
        if self.conditions is not None:
            data["conditions"] = self.conditions
        if self.dependencies_meta:
            data["dependenciesMeta"] = {
                name: meta.to_dict() for name, meta in self.dependencies_meta.items()
            }
        if self.peer_dependencies_meta:
            data["peerDependenciesMeta"] = {
                name: meta.to_dict() for name, meta in self.peer_dependencies_meta.items()
            }
        return data

    @classmethod
    def from_iterables(
        cls,
        *,
        descriptors: Iterable[Descriptor],
        ident: Ident,
        version: str,
        resolution: str,
        dependencies: Iterable[tuple[str, str]] = (),
        peer_dependencies: Iterable[tuple[str, str]] = (),
        bin: Iterable[tuple[str, str]] = (),
        **fields: object,
    ) -> Package:
        return cls(
            descriptors=tuple(descriptors),
            ident=ident,
            version=version,
            resolution=resolution,
            dependencies=tuple(dependencies),
            peer_dependencies=tuple(peer_dependencies),
            bin=tuple(bin),
            **fields,
        )


def _pair_to_descriptor(name: str, range_: str) -> Descriptor:
    if name.startswith("@") and "/" in name:
        scope, _, bare = name[1:].partition("/")
        return Descriptor(Ident(scope=scope, name=bare), range_)
    return Descriptor(Ident(scope=None, name=name), range_)
