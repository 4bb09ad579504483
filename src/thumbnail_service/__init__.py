"""Thumbnail Service - on-demand PNG thumbnails for assistants and models.

This package provides a layered architecture for thumbnail rendering:

Layers:
    - protocols: Interface contracts (AssetFetcher, FontStore, entity sources)
    - repositories: Data access implementations (HTTP, disk, Redis, JSON)
    - services: Business logic (font cache, render pipeline, thumbnails)
    - rendering: Pipeline stages (document, vector, raster)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from thumbnail_service.repositories import DiskFontRepository, HttpAssetFetcher
    from thumbnail_service.services import FontCache, RenderPipeline

    cache = FontCache.create(fetcher=HttpAssetFetcher.create(), store=DiskFontRepository.create())
    cache.initialize()
    fonts = await cache.resolve_many("Inter", {500, 700})
    ```

For HTTP API:
    ```python
    from thumbnail_service.api.app import app
    ```
"""

from thumbnail_service.config import get_redis_client, settings
from thumbnail_service.entities import AssistantEntity, FontAsset, FontKey, ModelEntity, RenderRequest
from thumbnail_service.exceptions import CacheError, FetchError, RenderError, ThumbnailError
from thumbnail_service.handlers import FontHandler, ThumbnailHandler
from thumbnail_service.protocols import AssetFetcher, FontStore
from thumbnail_service.repositories import DiskFontRepository, HttpAssetFetcher, RedisFontRepository
from thumbnail_service.services import FontCache, RenderPipeline, ThumbnailService

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Protocols (interfaces)
    "AssetFetcher",
    "FontStore",
    # Services (business logic)
    "FontCache",
    "RenderPipeline",
    "ThumbnailService",
    # Handlers (HTTP)
    "FontHandler",
    "ThumbnailHandler",
    # Repositories (data access)
    "DiskFontRepository",
    "HttpAssetFetcher",
    "RedisFontRepository",
    # Entities (domain models)
    "AssistantEntity",
    "FontAsset",
    "FontKey",
    "ModelEntity",
    "RenderRequest",
    # Errors
    "ThumbnailError",
    "FetchError",
    "CacheError",
    "RenderError",
]
