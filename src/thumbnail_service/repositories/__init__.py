"""Repository layer for data access.

This layer abstracts external dependencies (font provider, persistent
storage, entity sources) behind protocol-based interfaces. This enables:
- Easy swapping of implementations (disk -> Redis, JSON file -> database)
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from thumbnail_service.protocols import AssetFetcher, AssistantStore, AvatarStore, FontStore, ModelRegistry

from .disk_font_repository import DiskFontRepository
from .file_assistant_repository import FileAvatarRepository, JsonAssistantRepository
from .http_asset_fetcher import HttpAssetFetcher
from .model_registry import StaticModelRegistry
from .redis_font_repository import RedisFontRepository

__all__ = [
    "AssetFetcher",
    "AssistantStore",
    "AvatarStore",
    "FontStore",
    "ModelRegistry",
    "DiskFontRepository",
    "FileAvatarRepository",
    "HttpAssetFetcher",
    "JsonAssistantRepository",
    "RedisFontRepository",
    "StaticModelRegistry",
]
