"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> ThumbnailService -> FontCache / RenderPipeline -> Repository
    (HTTP)  -> (Orchestration)  -> (Business)                 -> (Data Access)

Usage:
    ```python
    from thumbnail_service.services import FontCache, RenderPipeline

    cache = FontCache.create(fetcher=fetcher, store=store)
    cache.initialize()
    pipeline = RenderPipeline.create()
    ```
"""

from .eviction import DiskEvictionPolicy
from .font_cache import FontCache
from .render_pipeline import RenderPipeline
from .stylesheet import build_stylesheet_url, parse_font_urls
from .thumbnail_service import ThumbnailService

__all__ = [
    "DiskEvictionPolicy",
    "FontCache",
    "RenderPipeline",
    "ThumbnailService",
    "build_stylesheet_url",
    "parse_font_urls",
]
