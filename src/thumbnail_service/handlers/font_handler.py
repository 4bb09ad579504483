"""HTTP handlers for font cache operations."""

from fastapi import HTTPException, status

from thumbnail_service.dto import (
    FontCacheStatsResponse,
    HealthCheckResponse,
    WarmFontsRequest,
    WarmFontsResponse,
)
from thumbnail_service.exceptions import CacheError
from thumbnail_service.services import FontCache


class FontHandler:
    """HTTP handlers for font cache inspection and pre-warming.

    Args:
        font_cache: The shared font cache (required).
        family: Family the thumbnails use.
        weights: Weights the thumbnails use.
    """

    def __init__(self, font_cache: FontCache, family: str, weights: set[int]) -> None:
        self._fonts = font_cache
        self._family = family
        self._weights = sorted(weights)

    async def get_stats(self) -> FontCacheStatsResponse:
        """Handle GET /fonts/stats requests.

        Raises:
            HTTPException: If the persistent tier cannot be inspected
        """
        try:
            stats = self._fonts.get_stats()
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to get stats: {e}",
            ) from e

        return FontCacheStatsResponse(family=self._family, weights=self._weights, **stats)

    async def warm(self, request: WarmFontsRequest | None = None) -> WarmFontsResponse:
        """Handle POST /fonts/warm requests.

        Only the configured family and weights can be warmed.

        Raises:
            HTTPException: 400 for another family or weight, 500 if any weight cannot be resolved
        """
        family = (request.family if request else None) or self._family
        weights = (request.weights if request else None) or self._weights

        if family != self._family:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Only {self._family} can be warmed",
            )
        unknown = sorted(set(weights) - set(self._weights))
        if unknown:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Weights not configured: {unknown}",
            )

        try:
            fonts = await self._fonts.resolve_many(family, weights)
        except CacheError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to warm fonts: {e}",
            ) from e

        return WarmFontsResponse(
            success=True,
            family=family,
            weights={weight: len(data) for weight, data in fonts.items()},
            message=f"Resolved {len(fonts)} weight(s) of {family}",
        )

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        is_healthy = self._fonts.is_healthy()

        return HealthCheckResponse(
            status="healthy" if is_healthy else "degraded",
            font_store_healthy=is_healthy,
        )
