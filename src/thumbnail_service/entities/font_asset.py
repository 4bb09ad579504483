"""Font asset domain entities."""

import re
from dataclasses import dataclass

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


@dataclass(frozen=True, order=True)
class FontKey:
    """Cache key for a font binary.

    Attributes:
        family: Font family name (e.g. "Inter")
        weight: Integer font weight (e.g. 400 = regular, 700 = bold)
    """

    family: str
    weight: int

    @property
    def slug(self) -> str:
        """Deterministic, filesystem-safe name for this key (e.g. "Inter-500")."""
        family = _UNSAFE_FILENAME_CHARS.sub("_", self.family.strip())
        return f"{family}-{self.weight}"

    def __str__(self) -> str:
        return f"{self.family}:{self.weight}"


@dataclass(frozen=True)
class FontAsset:
    """An immutable font binary for one (family, weight) key."""

    key: FontKey
    data: bytes

    @property
    def family(self) -> str:
        return self.key.family

    @property
    def weight(self) -> int:
        return self.key.weight
