"""HTTP handlers for thumbnail operations.

Handlers translate service results and exceptions into HTTP responses:
status codes, redirects and caching headers.
"""

import logging

from fastapi import HTTPException, Response, status
from fastapi.responses import RedirectResponse

from thumbnail_service.exceptions import (
    CacheError,
    EntityNotFoundError,
    EntityRedirect,
    InvalidRequestError,
    RenderError,
)
from thumbnail_service.services import ThumbnailService

logger = logging.getLogger(__name__)

CACHE_CONTROL = "public, max-age=3600"


class ThumbnailHandler:
    """HTTP handlers for thumbnail operations.

    Example:
        ```python
        handler = ThumbnailHandler(thumbnail_service=service)

        @app.get("/assistant/{assistant_id}/thumbnail.png")
        async def assistant_thumbnail(assistant_id: str):
            return await handler.assistant_thumbnail(assistant_id)
        ```
    """

    def __init__(self, thumbnail_service: ThumbnailService) -> None:
        """Initialize the thumbnail handler.

        Args:
            thumbnail_service: The thumbnail service (required).
        """
        self._thumbnails = thumbnail_service

    async def assistant_thumbnail(self, assistant_id: str) -> Response:
        """Handle GET /assistant/{assistant_id}/thumbnail.png requests.

        Returns:
            PNG response

        Raises:
            HTTPException: 400 for a malformed id, 404 for an unknown
                assistant, 500 if fonts or rendering fail
        """
        try:
            png = await self._thumbnails.assistant_thumbnail(assistant_id)
        except InvalidRequestError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
        except EntityNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
        except (CacheError, RenderError) as e:
            raise self._render_failure(e) from e

        return self._png(png)

    async def model_thumbnail(self, model_id: str) -> Response:
        """Handle GET /models/{model_id}/thumbnail.png requests.

        Returns:
            PNG response, or a 302 redirect for unknown and unlisted models

        Raises:
            HTTPException: 500 if fonts or rendering fail
        """
        try:
            png = await self._thumbnails.model_thumbnail(model_id)
        except EntityRedirect as e:
            return RedirectResponse(url=e.location, status_code=status.HTTP_302_FOUND)
        except (CacheError, RenderError) as e:
            raise self._render_failure(e) from e

        return self._png(png)

    @staticmethod
    def _png(data: bytes) -> Response:
        return Response(
            content=data,
            media_type="image/png",
            headers={"Cache-Control": CACHE_CONTROL},
        )

    @staticmethod
    def _render_failure(error: CacheError | RenderError) -> HTTPException:
        logger.error("Thumbnail generation failed (%s): %s", error.reason, error)
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate thumbnail: {error.reason}",
        )
