"""Thumbnail service: request validation and input assembly.

Loads the entity, resolves the fonts, prepares the optional sub-image and
hands everything to the render pipeline.
"""

import asyncio
import logging
import re

from thumbnail_service.config import settings
from thumbnail_service.exceptions import EntityNotFoundError, EntityRedirect, FetchError, InvalidRequestError
from thumbnail_service.protocols import AssetFetcher, AssistantStore, AvatarStore, ModelRegistry
from thumbnail_service.rendering import to_jpeg_data_uri
from thumbnail_service.services.font_cache import FontCache
from thumbnail_service.services.render_pipeline import RenderPipeline

logger = logging.getLogger(__name__)

_OBJECT_ID = re.compile(r"^[0-9a-fA-F]{24}$")


class ThumbnailService:
    """Produces assistant and model thumbnails.

    A missing or unreadable avatar/logo degrades to an empty slot; it never
    fails the request. Font and render failures propagate.
    """

    def __init__(
        self,
        font_cache: FontCache,
        pipeline: RenderPipeline,
        assistants: AssistantStore,
        avatars: AvatarStore,
        models: ModelRegistry,
        fetcher: AssetFetcher,
        base_path: str | None = None,
    ) -> None:
        """Initialize the thumbnail service.

        Args:
            font_cache: Font cache shared across requests.
            pipeline: Render pipeline.
            assistants: Assistant lookup.
            avatars: Avatar lookup.
            models: Model registry.
            fetcher: Used to download model logos.
            base_path: Redirect target for unlisted models. Defaults to settings.
        """
        self._fonts = font_cache
        self._pipeline = pipeline
        self._assistants = assistants
        self._avatars = avatars
        self._models = models
        self._fetcher = fetcher
        self._base_path = base_path or settings.base_path

    async def assistant_thumbnail(self, assistant_id: str) -> bytes:
        """Render the thumbnail of an assistant.

        Raises:
            InvalidRequestError: If the id is not a 24-character hex object id
            EntityNotFoundError: If the assistant does not exist
            CacheError: If a font cannot be resolved
            RenderError: If rendering fails
        """
        if not _OBJECT_ID.match(assistant_id):
            raise InvalidRequestError("Invalid assistant id.")

        assistant = await self._assistants.find_by_id(assistant_id)
        if assistant is None:
            raise EntityNotFoundError("Assistant not found.")

        fonts = await self._fonts.resolve_many(self._pipeline.font_family, self._pipeline.font_weights)
        avatar = await self._load_avatar(assistant.id)
        return await self._pipeline.render_assistant(assistant, avatar=avatar, fonts=fonts)

    async def model_thumbnail(self, model_id: str) -> bytes:
        """Render the thumbnail of a model.

        Raises:
            EntityRedirect: If the model is unknown or unlisted
            CacheError: If a font cannot be resolved
            RenderError: If rendering fails
        """
        model = self._models.find(model_id)
        if model is None or model.unlisted:
            raise EntityRedirect(self._base_path)

        fonts = await self._fonts.resolve_many(self._pipeline.font_family, self._pipeline.font_weights)
        logo = await self._load_logo(model.logo_url)
        return await self._pipeline.render_model(model, logo=logo, fonts=fonts)

    async def _load_avatar(self, assistant_id: str) -> str:
        try:
            data = await self._avatars.get_avatar(assistant_id)
        except OSError as e:
            logger.warning("Could not read avatar for assistant %s: %s", assistant_id, e)
            return ""
        if data is None:
            return ""
        return await self._to_data_uri(data, f"avatar of assistant {assistant_id}")

    async def _load_logo(self, logo_url: str | None) -> str:
        if not logo_url:
            return ""
        try:
            data = await self._fetcher.fetch_bytes(logo_url)
        except FetchError as e:
            logger.warning("Could not fetch model logo %s: %s", logo_url, e)
            return ""
        return await self._to_data_uri(data, f"logo {logo_url}")

    @staticmethod
    async def _to_data_uri(data: bytes, label: str) -> str:
        try:
            return await asyncio.to_thread(to_jpeg_data_uri, data)
        except ValueError as e:
            logger.warning("Could not convert %s to JPEG: %s", label, e)
            return ""
