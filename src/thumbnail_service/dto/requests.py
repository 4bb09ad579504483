"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field


class WarmFontsRequest(BaseModel):
    """Request DTO for pre-warming the font cache.

    Omitted fields fall back to the family and weights the thumbnails use;
    anything outside that configured set is rejected.
    """

    family: str | None = Field(None, description="Font family to resolve", min_length=1)
    weights: list[int] | None = Field(
        None,
        description="Exact weights to resolve",
        min_length=1,
    )
