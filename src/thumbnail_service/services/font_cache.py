"""Two-tier font cache.

Resolves font binaries by (family, weight): process memory first, then the
persistent store, then the font provider. Concurrent resolutions of the
same key share a single in-flight fetch.
"""

import asyncio
import logging

from thumbnail_service.config import settings
from thumbnail_service.entities import FontKey
from thumbnail_service.exceptions import CacheError, FetchError
from thumbnail_service.protocols import AssetFetcher, FontStore
from thumbnail_service.services.stylesheet import build_stylesheet_url, parse_font_urls

logger = logging.getLogger(__name__)


class FontCache:
    """Memory + persistent cache for immutable font binaries.

    This service depends on PROTOCOLS, not concrete implementations:
    - AssetFetcher: fetches provider stylesheets and font binaries
    - FontStore: the persistent tier (disk, Redis, ...)

    Example:
        ```python
        from thumbnail_service.repositories import DiskFontRepository, HttpAssetFetcher
        from thumbnail_service.services import FontCache

        cache = FontCache.create(
            fetcher=HttpAssetFetcher.create(),
            store=DiskFontRepository.create(),
        )
        cache.initialize()
        fonts = await cache.resolve_many("Inter", {500, 700})
        ```
    """

    def __init__(
        self,
        fetcher: AssetFetcher,
        store: FontStore,
        provider_url: str | None = None,
        preferred_subset: str | None = None,
    ) -> None:
        """Initialize the font cache.

        Args:
            fetcher: Network fetcher for stylesheets and binaries (required).
            store: Persistent tier (required).
            provider_url: Stylesheet endpoint. Defaults to settings.
            preferred_subset: Subset label preferred among duplicate blocks. Defaults to settings.
        """
        self._fetcher = fetcher
        self._store = store
        self._provider_url = provider_url or settings.font_provider_url
        self._preferred_subset = preferred_subset or settings.font_preferred_subset
        self._memory: dict[FontKey, bytes] = {}
        self._inflight: dict[FontKey, asyncio.Task[bytes]] = {}
        self._store_ready = False

    @classmethod
    def create(
        cls,
        fetcher: AssetFetcher,
        store: FontStore,
        provider_url: str | None = None,
        preferred_subset: str | None = None,
    ) -> "FontCache":
        """Factory method to create FontCache with settings defaults.

        Args:
            fetcher: Network fetcher (required).
            store: Persistent tier (required).
            provider_url: Stylesheet endpoint. If None, uses settings.
            preferred_subset: Preferred subset label. If None, uses settings.

        Returns:
            Configured FontCache instance
        """
        return cls(
            fetcher=fetcher,
            store=store,
            provider_url=provider_url,
            preferred_subset=preferred_subset,
        )

    def initialize(self) -> bool:
        """Prepare the persistent tier.

        A store that cannot be prepared is not fatal: reads from it miss and
        writes to it are logged and ignored.

        Returns:
            True if the persistent tier is ready, False otherwise
        """
        try:
            self._store.initialize()
            self._store_ready = True
        except Exception as e:
            logger.error("Persistent font store unavailable, continuing without it: %s", e)
            self._store_ready = False
        return self._store_ready

    async def resolve_one(self, family: str, weight: int) -> bytes:
        """Resolve the font binary for one (family, weight).

        Args:
            family: Font family name
            weight: Exact font weight

        Returns:
            The font bytes

        Raises:
            CacheError: If the weight is not advertised or a fetch fails
        """
        key = FontKey(family, weight)

        cached = self._memory.get(key)
        if cached is not None:
            logger.debug("Font memory hit: %s", key)
            return cached

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.create_task(self._load(key))
            self._inflight[key] = task
            task.add_done_callback(lambda t, k=key: self._clear_inflight(k, t))
        else:
            logger.debug("Joining in-flight resolution for %s", key)

        # A cancelled caller must not cancel the fetch other callers are awaiting
        return await asyncio.shield(task)

    def _clear_inflight(self, key: FontKey, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled():
            # Mark the exception as retrieved when every waiter has gone away
            task.exception()

    async def resolve_many(self, family: str, weights: set[int] | list[int]) -> dict[int, bytes]:
        """Resolve several weights of one family concurrently.

        All-or-nothing: if any weight fails, the call raises and no partial
        mapping is returned. Weights resolved before the failure stay cached.

        Args:
            family: Font family name
            weights: Weights to resolve

        Returns:
            Mapping of weight to font bytes

        Raises:
            CacheError: The first failure among the requested weights
        """
        ordered = sorted(set(weights))
        results = await asyncio.gather(
            *(self.resolve_one(family, weight) for weight in ordered),
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, BaseException):
                raise result

        return dict(zip(ordered, results))

    async def _load(self, key: FontKey) -> bytes:
        stored = await self._store.get(key)
        if stored is not None:
            logger.debug("Font persistent hit: %s", key)
            self._memory[key] = stored
            return stored

        logger.info("Font cache miss, downloading %s", key)
        data = await self._download(key)

        try:
            await self._store.put(key, data)
        except OSError as e:
            logger.warning("Failed to cache font %s to persistent store: %s", key, e)

        self._memory[key] = data
        return data

    async def _download(self, key: FontKey) -> bytes:
        css_url = build_stylesheet_url(self._provider_url, key.family, [key.weight])
        try:
            css = await self._fetcher.fetch_text(css_url)
        except FetchError as e:
            raise CacheError(key.family, key.weight, CacheError.FETCH_FAILED, str(e)) from e

        urls = parse_font_urls(css, [key.weight], self._preferred_subset)
        font_url = urls.get(key.weight)
        if font_url is None:
            raise CacheError(key.family, key.weight, CacheError.WEIGHT_NOT_FOUND)

        try:
            return await self._fetcher.fetch_bytes(font_url)
        except FetchError as e:
            raise CacheError(key.family, key.weight, CacheError.FETCH_FAILED, str(e)) from e

    def is_cached(self, family: str, weight: int) -> bool:
        """Check whether a key is in the memory tier."""
        return FontKey(family, weight) in self._memory

    def get_stats(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with memory, persistent and in-flight counts
        """
        stats = {
            "memory_entries": len(self._memory),
            "inflight": len(self._inflight),
            "persistent_ready": self._store_ready,
            "persistent_entries": 0,
            "persistent_bytes": 0,
        }
        if self._store_ready:
            stats["persistent_entries"] = self._store.count_all()
            stats["persistent_bytes"] = self._store.size_bytes()
        return stats

    def is_healthy(self) -> bool:
        """Check if the persistent tier is reachable."""
        return self._store_ready and self._store.health_check()

    @property
    def store(self) -> FontStore:
        """Get the underlying persistent store (for testing)."""
        return self._store

    @property
    def fetcher(self) -> AssetFetcher:
        """Get the underlying fetcher (for testing)."""
        return self._fetcher
