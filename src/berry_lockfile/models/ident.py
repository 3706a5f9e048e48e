"""Package identity models: idents, descriptors and locators."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Ident:
    """Scope and name of a package, independent of any version."""

    scope: str | None
    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Ident name must be non-empty")
        if self.scope is not None:
            if not self.scope:
                raise ValueError("Ident scope must be non-empty when present")
            if self.scope.startswith("@") or "/" in self.scope:
                raise ValueError(f"Ident scope must not include '@' or '/': {self.scope}")

    def __str__(self) -> str:
        if self.scope is None:
            return self.name
        return f"@{self.scope}/{self.name}"

    def to_dict(self) -> dict[str, object]:
        return {"scope": self.scope, "name": self.name}


@dataclass(frozen=True)
class Descriptor:
    """A dependency reference exactly as a requester wrote it (``ident@range``).

    The range keeps its protocol prefix and is never decomposed, so
    ``npm:^1.0.0 || ^2.0.0`` is stored as one string.
    """

    ident: Ident
    range: str

    def __post_init__(self) -> None:
        if not self.range:
            raise ValueError("Descriptor range must be non-empty")

    def __str__(self) -> str:
        return f"{self.ident}@{self.range}"

    @property
    def protocol(self) -> str | None:
        """Return the protocol prefix of the range (``npm``, ``workspace``...), if any."""
        head, sep, _ = self.range.partition(":")
        if not sep or not head.isalpha():
            return None
        return head


@dataclass(frozen=True)
class Locator:
    """The resolved identity of a single package (``ident@reference``).

    A descriptor may match several candidate packages; a locator names
    exactly one.
    """

    ident: Ident
    reference: str

    def __str__(self) -> str:
        return f"{self.ident}@{self.reference}"
