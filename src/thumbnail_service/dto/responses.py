"""Response DTOs for API endpoints."""

from pydantic import BaseModel, Field


class FontCacheStatsResponse(BaseModel):
    """Response DTO for font cache statistics."""

    family: str = Field(..., description="Font family the thumbnails use")
    weights: list[int] = Field(..., description="Weights the thumbnails use")
    memory_entries: int = Field(..., description="Fonts held in process memory", ge=0)
    inflight: int = Field(..., description="Resolutions currently in progress", ge=0)
    persistent_ready: bool = Field(..., description="Whether the persistent tier was prepared")
    persistent_entries: int = Field(..., description="Fonts held in the persistent tier", ge=0)
    persistent_bytes: int = Field(..., description="Total size of the persistent tier in bytes", ge=0)


class WarmFontsResponse(BaseModel):
    """Response DTO for the font pre-warm operation."""

    success: bool = Field(..., description="Whether every weight was resolved")
    family: str = Field(..., description="Font family resolved")
    weights: dict[int, int] = Field(..., description="Resolved weight -> font size in bytes")
    message: str = Field(..., description="Human-readable status message")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'degraded'")
    font_store_healthy: bool = Field(..., description="Whether the persistent font tier is reachable")
