"""Filesystem implementation of FontStore.

One file per (family, weight) key, named "{family}-{weight}.woff2", holding
the raw font bytes. Writes go to a temporary file that is renamed into
place, so concurrent writers of identical content never expose a torn file.
"""

import asyncio
import logging
import os
from pathlib import Path
from uuid import uuid4

from thumbnail_service.config import settings
from thumbnail_service.entities import FontKey

logger = logging.getLogger(__name__)


class DiskFontRepository:
    """Directory-backed persistent font tier.

    This class satisfies the FontStore protocol through structural
    typing - no explicit inheritance needed.
    """

    FILE_SUFFIX = ".woff2"

    def __init__(self, cache_dir: str | Path | None = None) -> None:
        """Initialize the repository.

        Args:
            cache_dir: Directory holding cached fonts. Defaults to settings.font_cache_dir.
        """
        self._cache_dir = Path(cache_dir or settings.font_cache_dir)

    @classmethod
    def create(cls, cache_dir: str | Path | None = None) -> "DiskFontRepository":
        """Factory method to create DiskFontRepository with defaults.

        Args:
            cache_dir: Cache directory. If None, uses settings.

        Returns:
            Configured DiskFontRepository
        """
        return cls(cache_dir=cache_dir)

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def initialize(self) -> None:
        """Create the cache directory if it does not exist.

        Raises:
            OSError: If the directory cannot be created
        """
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("Font cache directory ready: %s", self._cache_dir)

    def path_for(self, key: FontKey) -> Path:
        """Return the file path for a key."""
        return self._cache_dir / f"{key.slug}{self.FILE_SUFFIX}"

    async def get(self, key: FontKey) -> bytes | None:
        """Read cached font bytes, or None on a miss.

        Unreadable files are treated as misses so the caller refetches.
        """
        path = self.path_for(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Could not read cached font %s: %s", path, e)
            return None

    async def put(self, key: FontKey, data: bytes) -> None:
        """Write font bytes atomically.

        Raises:
            OSError: If the file cannot be written
        """
        await asyncio.to_thread(self._write_atomic, self.path_for(key), data)

    @staticmethod
    def _write_atomic(path: Path, data: bytes) -> None:
        tmp_path = path.with_name(f".{path.stem}.tmp.{uuid4()}")
        try:
            tmp_path.write_bytes(data)
            os.replace(tmp_path, path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    def entries(self) -> list[tuple[Path, int, float]]:
        """List cached font files.

        Returns:
            List of (path, size in bytes, modification time) tuples
        """
        if not self._cache_dir.is_dir():
            return []

        result = []
        for path in self._cache_dir.glob(f"*{self.FILE_SUFFIX}"):
            try:
                stat = path.stat()
            except OSError:
                continue
            result.append((path, stat.st_size, stat.st_mtime))
        return result

    def count_all(self) -> int:
        return len(self.entries())

    def size_bytes(self) -> int:
        return sum(size for _, size, _ in self.entries())

    def health_check(self) -> bool:
        """Check that the cache directory exists and is writable."""
        return self._cache_dir.is_dir() and os.access(self._cache_dir, os.W_OK)

    def prune(self, policy) -> int:
        """Delete the files selected by an eviction policy.

        Args:
            policy: Object with a select(entries) method (see DiskEvictionPolicy)

        Returns:
            Number of files deleted
        """
        removed = 0
        for path in policy.select(self.entries()):
            try:
                path.unlink()
                removed += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning("Could not evict cached font %s: %s", path, e)
        if removed:
            logger.info("Evicted %d cached font file(s) from %s", removed, self._cache_dir)
        return removed
