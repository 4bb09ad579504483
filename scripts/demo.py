#!/usr/bin/env python3
"""
Demo script for the thumbnail service.

This script resolves the configured fonts through the two-tier cache (showing
cold and warm timings) and renders a sample assistant and model thumbnail to
PNG files in the current directory.
"""

import asyncio
import time
from pathlib import Path

from thumbnail_service.config import settings
from thumbnail_service.entities import AssistantEntity, ModelEntity
from thumbnail_service.logging_setup import setup_logging
from thumbnail_service.repositories import DiskFontRepository, HttpAssetFetcher
from thumbnail_service.services import FontCache, RenderPipeline


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def demo_font_cache(fetcher: HttpAssetFetcher, weights: list[int]) -> dict[int, bytes]:
    """Demonstrate cold, persistent and memory font resolution."""
    print_section("Font Cache")
    print(f"\n  Family: {settings.font_family}")
    print(f"  Weights: {weights}")
    print(f"  Cache dir: {settings.font_cache_dir}")

    store = DiskFontRepository.create()
    cache = FontCache.create(fetcher=fetcher, store=store)
    print(f"  Persistent tier ready: {cache.initialize()}")

    start = time.time()
    fonts = await cache.resolve_many(settings.font_family, weights)
    print(f"\n  First resolution: {(time.time() - start) * 1000:.1f} ms")
    for weight, data in sorted(fonts.items()):
        print(f"  ✓ {weight}: {len(data):,} bytes")

    start = time.time()
    await cache.resolve_many(settings.font_family, weights)
    print(f"  Memory hit: {(time.time() - start) * 1000:.3f} ms")

    # A fresh cache over the same directory simulates a process restart
    restarted = FontCache.create(fetcher=fetcher, store=store)
    restarted.initialize()
    start = time.time()
    await restarted.resolve_many(settings.font_family, weights)
    print(f"  Persistent hit after restart: {(time.time() - start) * 1000:.1f} ms")

    stats = cache.get_stats()
    print(f"\n  Persistent entries: {stats['persistent_entries']} ({stats['persistent_bytes']:,} bytes)")
    return fonts


async def demo_render(pipeline: RenderPipeline, fonts: dict[int, bytes]) -> None:
    """Render sample thumbnails to disk."""
    print_section("Rendering")

    assistant = AssistantEntity(
        id="65f1c0ffee0000000000beef",
        name="Travel Planner",
        description="Plans trips with day-by-day itineraries, budgets and packing lists.",
        created_by_name="demo",
    )
    model = ModelEntity(id="meta-llama/Llama-3.1-8B-Instruct", name="Llama 3.1 8B Instruct")

    for name, render in (
        ("assistant-thumbnail.png", pipeline.render_assistant(assistant, avatar="", fonts=fonts)),
        ("model-thumbnail.png", pipeline.render_model(model, logo="", fonts=fonts)),
    ):
        start = time.time()
        png = await render
        Path(name).write_bytes(png)
        print(f"  ✓ {name}: {len(png):,} bytes in {(time.time() - start) * 1000:.1f} ms")


async def main() -> None:
    """Run all demos."""
    setup_logging("WARNING")
    print("\n🖼️  Thumbnail Service Demo")

    pipeline = RenderPipeline.create()
    fetcher = HttpAssetFetcher.create()
    try:
        fonts = await demo_font_cache(fetcher, sorted(pipeline.font_weights))
        await demo_render(pipeline, fonts)
    finally:
        await fetcher.close()

    print("\n✓ Done")


if __name__ == "__main__":
    asyncio.run(main())
