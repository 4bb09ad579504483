"""Tests for the two-tier font cache."""

import asyncio

import pytest
from conftest import TEST_FAMILY, FakeFetcher, MemoryFontStore

from thumbnail_service.entities import FontKey
from thumbnail_service.exceptions import CacheError, FetchError
from thumbnail_service.repositories import DiskFontRepository
from thumbnail_service.services import FontCache

PROVIDER = "https://provider.test/css2"


def make_cache(fetcher, store) -> FontCache:
    cache = FontCache.create(fetcher=fetcher, store=store, provider_url=PROVIDER, preferred_subset="latin")
    cache.initialize()
    return cache


@pytest.mark.asyncio
async def test_cold_resolve_downloads_and_persists(fetcher, store, test_font):
    cache = make_cache(fetcher, store)

    data = await cache.resolve_one(TEST_FAMILY, 700)

    assert data == test_font
    assert len(fetcher.css_calls) == 1
    assert "wght@700" in fetcher.css_calls[0]
    assert fetcher.byte_calls == ["https://fonts.test/latin/700.ttf"]
    assert store.data[FontKey(TEST_FAMILY, 700)] == test_font
    assert cache.is_cached(TEST_FAMILY, 700)


@pytest.mark.asyncio
async def test_memory_hit_skips_store_and_network(fetcher, store):
    cache = make_cache(fetcher, store)
    await cache.resolve_one(TEST_FAMILY, 500)
    gets_before = store.gets

    await cache.resolve_one(TEST_FAMILY, 500)

    assert store.gets == gets_before
    assert len(fetcher.css_calls) == 1
    assert len(fetcher.byte_calls) == 1


@pytest.mark.asyncio
async def test_persistent_hit_after_restart(fetcher, test_font):
    store = MemoryFontStore({FontKey(TEST_FAMILY, 500): test_font})
    cache = make_cache(fetcher, store)

    data = await cache.resolve_one(TEST_FAMILY, 500)

    assert data == test_font
    assert fetcher.css_calls == []
    assert fetcher.byte_calls == []
    assert store.puts == 0


@pytest.mark.asyncio
async def test_concurrent_requests_share_one_fetch(fetcher, store, test_font):
    fetcher.gate = asyncio.Event()
    cache = make_cache(fetcher, store)

    tasks = [asyncio.create_task(cache.resolve_one(TEST_FAMILY, 700)) for _ in range(10)]
    await asyncio.sleep(0.01)
    assert cache.get_stats()["inflight"] == 1
    fetcher.gate.set()
    results = await asyncio.gather(*tasks)

    assert all(r == test_font for r in results)
    assert len(fetcher.css_calls) == 1
    assert len(fetcher.byte_calls) == 1
    assert store.puts == 1
    assert cache.get_stats()["inflight"] == 0


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_cancel_shared_fetch(fetcher, store, test_font):
    fetcher.gate = asyncio.Event()
    cache = make_cache(fetcher, store)

    first = asyncio.create_task(cache.resolve_one(TEST_FAMILY, 500))
    second = asyncio.create_task(cache.resolve_one(TEST_FAMILY, 500))
    await asyncio.sleep(0.01)
    first.cancel()
    fetcher.gate.set()

    assert await second == test_font
    with pytest.raises(asyncio.CancelledError):
        await first
    assert len(fetcher.css_calls) == 1


@pytest.mark.asyncio
async def test_unadvertised_weight_is_not_found(fetcher, store):
    cache = make_cache(fetcher, store)

    with pytest.raises(CacheError) as exc_info:
        await cache.resolve_one(TEST_FAMILY, 900)

    assert exc_info.value.reason == CacheError.WEIGHT_NOT_FOUND
    assert exc_info.value.weight == 900
    assert fetcher.byte_calls == []
    assert store.data == {}
    assert not cache.is_cached(TEST_FAMILY, 900)


@pytest.mark.asyncio
async def test_fetch_failure_is_not_cached_and_can_be_retried(fetcher, store, test_font):
    fetcher.css_error = FetchError(PROVIDER, "Service Unavailable", status=503)
    cache = make_cache(fetcher, store)

    with pytest.raises(CacheError) as exc_info:
        await cache.resolve_one(TEST_FAMILY, 500)
    assert exc_info.value.reason == CacheError.FETCH_FAILED
    assert store.data == {}

    fetcher.css_error = None
    assert await cache.resolve_one(TEST_FAMILY, 500) == test_font
    assert len(fetcher.css_calls) == 2


@pytest.mark.asyncio
async def test_font_download_failure_is_fetch_failed(store, test_font):
    fetcher = FakeFetcher({500: test_font})

    async def failing_fetch_bytes(url):
        raise FetchError(url, "connection reset", transport=True)

    fetcher.fetch_bytes = failing_fetch_bytes
    cache = make_cache(fetcher, store)

    with pytest.raises(CacheError) as exc_info:
        await cache.resolve_one(TEST_FAMILY, 500)

    assert exc_info.value.reason == CacheError.FETCH_FAILED


@pytest.mark.asyncio
async def test_persistent_write_failure_still_serves_font(fetcher, store, test_font):
    store.put_error = PermissionError("read-only file system")
    cache = make_cache(fetcher, store)

    assert await cache.resolve_one(TEST_FAMILY, 500) == test_font
    assert await cache.resolve_one(TEST_FAMILY, 500) == test_font

    assert store.puts == 1
    assert len(fetcher.byte_calls) == 1


@pytest.mark.asyncio
async def test_uninitialized_store_is_not_fatal(fetcher, store, test_font):
    store.init_error = OSError("cannot create directory")
    cache = FontCache.create(fetcher=fetcher, store=store, provider_url=PROVIDER)

    assert cache.initialize() is False
    assert await cache.resolve_one(TEST_FAMILY, 500) == test_font
    assert cache.is_healthy() is False


@pytest.mark.asyncio
async def test_resolve_many_returns_every_weight(fetcher, store, test_font):
    cache = make_cache(fetcher, store)

    fonts = await cache.resolve_many(TEST_FAMILY, {500, 700})

    assert fonts == {500: test_font, 700: test_font}


@pytest.mark.asyncio
async def test_resolve_many_is_all_or_nothing(fetcher, store):
    cache = make_cache(fetcher, store)

    with pytest.raises(CacheError) as exc_info:
        await cache.resolve_many(TEST_FAMILY, [500, 900])

    assert exc_info.value.weight == 900
    # The weight that did resolve stays cached
    assert cache.is_cached(TEST_FAMILY, 500)


@pytest.mark.asyncio
async def test_stats_report_both_tiers(fetcher, store):
    cache = make_cache(fetcher, store)
    await cache.resolve_many(TEST_FAMILY, {500, 700})

    stats = cache.get_stats()

    assert stats["memory_entries"] == 2
    assert stats["persistent_entries"] == 2
    assert stats["persistent_bytes"] > 0
    assert stats["persistent_ready"] is True
    assert cache.is_healthy() is True


@pytest.mark.asyncio
async def test_unwritable_disk_tier_still_serves_font(fetcher, tmp_path, test_font):
    blocker = tmp_path / "read-only"
    blocker.write_text("not a directory")
    cache = make_cache(fetcher, DiskFontRepository(cache_dir=blocker))

    assert await cache.resolve_one(TEST_FAMILY, 500) == test_font
    assert cache.is_cached(TEST_FAMILY, 500)
