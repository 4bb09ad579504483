"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .font_handler import FontHandler
from .thumbnail_handler import ThumbnailHandler

__all__ = [
    "FontHandler",
    "ThumbnailHandler",
]
