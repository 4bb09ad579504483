"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services,
repositories and the render pipeline. They are NOT used for API
contracts - use DTOs from the dto package for that.
"""

from .assistant import AssistantEntity
from .font_asset import FontAsset, FontKey
from .model import ModelEntity
from .render_request import MarkupSnapshot, RenderRequest

__all__ = [
    "AssistantEntity",
    "FontAsset",
    "FontKey",
    "MarkupSnapshot",
    "ModelEntity",
    "RenderRequest",
]
