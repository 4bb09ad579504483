"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from thumbnail_service.config import settings
from thumbnail_service.handlers import FontHandler, ThumbnailHandler
from thumbnail_service.logging_setup import setup_logging
from thumbnail_service.protocols import FontStore
from thumbnail_service.repositories import (
    DiskFontRepository,
    FileAvatarRepository,
    HttpAssetFetcher,
    JsonAssistantRepository,
    RedisFontRepository,
    StaticModelRegistry,
)
from thumbnail_service.services import DiskEvictionPolicy, FontCache, RenderPipeline, ThumbnailService

logger = logging.getLogger(__name__)


def get_thumbnail_handler(request: Request) -> ThumbnailHandler:
    """Dependency injection for ThumbnailHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The ThumbnailHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "thumbnail_handler", None)
    if handler is None:
        raise RuntimeError("ThumbnailHandler not initialized. Check lifespan setup.")
    return handler


def get_font_handler(request: Request) -> FontHandler:
    """Dependency injection for FontHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "font_handler", None)
    if handler is None:
        raise RuntimeError("FontHandler not initialized. Check lifespan setup.")
    return handler


def build_font_store() -> FontStore:
    """Select the persistent font tier from settings.

    Disk is the default. Redis is used when FONT_CACHE_BACKEND=redis; the
    disk tier is pruned to FONT_CACHE_MAX_BYTES when that is set.
    """
    if settings.uses_redis:
        return RedisFontRepository.create()

    store = DiskFontRepository.create()
    if settings.font_cache_max_bytes is not None:
        try:
            store.initialize()
            store.prune(DiskEvictionPolicy(settings.font_cache_max_bytes))
        except OSError as e:
            logger.warning("Could not prune font cache %s: %s", store.cache_dir, e)
    return store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores in app.state:
    1. Repositories (fetcher, font store, entity sources) - created explicitly
    2. Services (font cache, render pipeline, thumbnails) - app.state.thumbnail_service
    3. Handlers (HTTP endpoints) - app.state.thumbnail_handler, app.state.font_handler

    Args:
        app: The FastAPI application instance

    Yields:
        None

    Cleanup:
        Closes the HTTP client and removes all services from app.state on shutdown
    """
    setup_logging()

    fetcher = HttpAssetFetcher.create()
    store = build_font_store()

    font_cache = FontCache.create(fetcher=fetcher, store=store)
    font_cache.initialize()

    pipeline = RenderPipeline.create()
    thumbnail_service = ThumbnailService(
        font_cache=font_cache,
        pipeline=pipeline,
        assistants=JsonAssistantRepository.from_file(),
        avatars=FileAvatarRepository(),
        models=StaticModelRegistry.from_json(),
        fetcher=fetcher,
    )

    # Store in app.state (FastAPI pattern)
    app.state.font_cache = font_cache
    app.state.thumbnail_service = thumbnail_service
    app.state.thumbnail_handler = ThumbnailHandler(thumbnail_service=thumbnail_service)
    app.state.font_handler = FontHandler(
        font_cache=font_cache,
        family=pipeline.font_family,
        weights=pipeline.font_weights,
    )

    logger.info("Thumbnail service initialized")
    logger.info("Fonts: %s %s", pipeline.font_family, sorted(pipeline.font_weights))
    logger.info("Persistent font tier: %s (healthy: %s)", type(store).__name__, font_cache.is_healthy())

    yield

    await fetcher.close()
    del app.state.font_handler
    del app.state.thumbnail_handler
    del app.state.thumbnail_service
    del app.state.font_cache
    logger.info("Thumbnail service shut down")


# Type aliases for cleaner dependency injection
ThumbnailHandlerDep = Annotated[ThumbnailHandler, Depends(get_thumbnail_handler)]
FontHandlerDep = Annotated[FontHandler, Depends(get_font_handler)]
