"""Top-level lockfile model."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from .ident import Descriptor
from .metadata import Metadata
from .package import Package


@dataclass(frozen=True)
class Lockfile:
    """Immutable snapshot of a parsed lockfile.

    ``packages`` keeps file order. Entries are never merged or deduplicated,
    so two entries naming the same descriptor are both retained.
    """

    metadata: Metadata
    packages: tuple[Package, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "metadata": self.metadata.to_dict(),
            "packages": [package.to_dict() for package in self.packages],
            "totals": self.totals,
        }

    @property
    def totals(self) -> dict[str, int]:
        descriptor_count = sum(len(package.descriptors) for package in self.packages)
        return {"packages": len(self.packages), "descriptors": descriptor_count}

    def iter_descriptors(self) -> Iterator[tuple[Descriptor, Package]]:
        """Yield every ``(descriptor, package)`` pair in file order."""
        for package in self.packages:
            for descriptor in package.descriptors:
                yield descriptor, package

    @classmethod
    def from_packages(cls, *, metadata: Metadata, packages: Iterable[Package]) -> Lockfile:
        return cls(metadata=metadata, packages=tuple(packages))
