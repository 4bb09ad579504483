"""Raster synthesis: SVG -> PNG with CairoSVG."""

import logging

import cairosvg

logger = logging.getLogger(__name__)


class PngRasterizer:
    """Renders SVG documents to PNG at their own declared size.

    No scaling or cropping is applied: the PNG has exactly the width and
    height the SVG declares.
    """

    def __init__(self, background_color: str | None = None) -> None:
        """Initialize the rasterizer.

        Args:
            background_color: Fill behind the drawing. None keeps transparency.
        """
        self._background_color = background_color

    def rasterize(self, svg: str) -> bytes:
        """Render SVG text to PNG bytes."""
        png = cairosvg.svg2png(
            bytestring=svg.encode("utf-8"),
            background_color=self._background_color,
            unsafe=False,
        )
        logger.debug("Rasterized SVG (%d chars) to PNG (%d bytes)", len(svg), len(png))
        return png
