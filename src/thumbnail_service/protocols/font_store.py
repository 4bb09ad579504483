"""Persistent font storage protocol.

Defines the interface for the durable tier of the font cache. Values are
raw font bytes keyed by (family, weight); no wrapping format.

Implementations:
- Local filesystem directory (default)
- Redis
"""

from typing import Protocol, runtime_checkable

from thumbnail_service.entities import FontKey


@runtime_checkable
class FontStore(Protocol):
    """Protocol for persistent font storage backends."""

    def initialize(self) -> None:
        """Create or verify the backing storage.

        Raises:
            Exception: If the storage cannot be created or reached
        """
        ...

    async def get(self, key: FontKey) -> bytes | None:
        """Read the font bytes for a key.

        Args:
            key: The (family, weight) key

        Returns:
            The stored bytes, or None on a miss
        """
        ...

    async def put(self, key: FontKey, data: bytes) -> None:
        """Store font bytes for a key, overwriting identical content safely.

        Args:
            key: The (family, weight) key
            data: Raw font bytes

        Raises:
            OSError: If the write fails (callers treat this as best-effort)
        """
        ...

    def count_all(self) -> int:
        """Count stored fonts.

        Returns:
            Number of stored entries
        """
        ...

    def size_bytes(self) -> int:
        """Total size of stored fonts.

        Returns:
            Size in bytes
        """
        ...

    def health_check(self) -> bool:
        """Check if the store is accessible.

        Returns:
            True if healthy, False otherwise
        """
        ...
