"""Capacity-based eviction for the on-disk font tier.

Eviction never runs inside font resolution; the application applies it
explicitly (at startup, or from an operator command) through
DiskFontRepository.prune().
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DiskEvictionPolicy:
    """Keep the cache under a byte budget by dropping the oldest files first.

    Attributes:
        max_bytes: Total size the cache may occupy after pruning
    """

    max_bytes: int

    def __post_init__(self) -> None:
        if self.max_bytes < 0:
            raise ValueError("max_bytes must be non-negative")

    def select(self, entries: list[tuple[Path, int, float]]) -> list[Path]:
        """Choose which files to delete.

        Args:
            entries: (path, size in bytes, modification time) for every cached file

        Returns:
            Paths to delete, oldest first
        """
        total = sum(size for _, size, _ in entries)
        victims = []
        for path, size, _ in sorted(entries, key=lambda e: (e[2], str(e[0]))):
            if total <= self.max_bytes:
                break
            victims.append(path)
            total -= size
        return victims
