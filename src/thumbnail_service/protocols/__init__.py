"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (disk -> Redis, httpx -> test fakes, etc.)
- Unit testing with counting fake implementations
- Clear separation of concerns

Usage:
    ```python
    from thumbnail_service.protocols import FontStore

    store: FontStore = DiskFontRepository.create()   # works
    store: FontStore = RedisFontRepository.create()  # also works
    ```
"""

from .asset_fetcher import AssetFetcher
from .entity_store import AssistantStore, AvatarStore, ModelRegistry
from .font_store import FontStore

__all__ = [
    "AssetFetcher",
    "AssistantStore",
    "AvatarStore",
    "FontStore",
    "ModelRegistry",
]
