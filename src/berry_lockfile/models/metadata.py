"""Lockfile ``__metadata`` model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Metadata:
    """Format version and cache key from the ``__metadata`` block."""

    version: int
    cache_key: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.version, bool) or not isinstance(self.version, int):
            raise ValueError(f"Metadata version must be an integer: {self.version!r}")
        if self.version < 0:
            raise ValueError("Metadata version must be non-negative")

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"version": self.version}
        if self.cache_key is not None:
            data["cacheKey"] = self.cache_key
        return data
