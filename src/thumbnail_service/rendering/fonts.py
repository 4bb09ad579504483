"""Font outlines for vector synthesis.

Text is emitted as glyph outlines rather than <text> elements, so the
rasterizer never consults system fonts and output only depends on the font
bytes supplied with the request. No shaping: one glyph per code point via
the font's cmap, advances from the horizontal metrics.
"""

import io
import struct

from fontTools.pens.svgPathPen import SVGPathPen
from fontTools.pens.transformPen import TransformPen
from fontTools.ttLib import TTFont, TTLibError

from thumbnail_service.entities import FontAsset
from thumbnail_service.exceptions import RenderError


class OutlineFont:
    """A parsed font able to measure and outline strings."""

    def __init__(self, asset: FontAsset) -> None:
        """Parse font bytes (TTF, OTF, WOFF or WOFF2).

        Raises:
            RenderError: If the bytes are not a readable font
        """
        try:
            self._font = TTFont(io.BytesIO(asset.data), lazy=True)
            self._units_per_em = self._font["head"].unitsPerEm
            hhea = self._font["hhea"]
            self._ascent = hhea.ascent
            self._descent = hhea.descent
            self._cmap = self._font.getBestCmap() or {}
            location = None
            if "fvar" in self._font and any(a.axisTag == "wght" for a in self._font["fvar"].axes):
                location = {"wght": asset.weight}
            self._glyph_set = self._font.getGlyphSet(location=location)
        except (TTLibError, KeyError, AssertionError, OSError, struct.error) as e:
            raise RenderError(
                RenderError.INVALID_FONT, f"Cannot read font {asset.family} weight {asset.weight}: {e}"
            ) from e

    def _glyph_name(self, ch: str) -> str:
        return self._cmap.get(ord(ch), ".notdef")

    def scale(self, size: float) -> float:
        return size / self._units_per_em

    def ascent(self, size: float) -> float:
        return self._ascent * self.scale(size)

    def descent(self, size: float) -> float:
        """Distance below the baseline, as a positive number."""
        return -self._descent * self.scale(size)

    def advance(self, text: str, size: float) -> float:
        """Width of a string at the given pixel size."""
        units = 0
        for ch in text:
            name = self._glyph_name(ch)
            glyph = self._glyph_set.get(name)
            if glyph is not None:
                units += glyph.width
        return units * self.scale(size)

    def outline(self, text: str, size: float, x: float, baseline: float) -> str:
        """SVG path data for a string whose baseline starts at (x, baseline)."""
        scale = self.scale(size)
        commands = []
        cursor = x
        for ch in text:
            glyph = self._glyph_set.get(self._glyph_name(ch))
            if glyph is None:
                continue
            pen = SVGPathPen(self._glyph_set)
            # Font units are y-up; SVG is y-down
            glyph.draw(TransformPen(pen, (scale, 0, 0, -scale, cursor, baseline)))
            path = pen.getCommands()
            if path:
                commands.append(path)
            cursor += glyph.width * scale
        return " ".join(commands)
