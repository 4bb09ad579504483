"""Render pipeline stages.

- document: entity data -> markup snapshot (Jinja2)
- vector: markup snapshot + fonts -> SVG (glyph outlines via fontTools)
- raster: SVG -> PNG (CairoSVG)
- images: sub-image conversion to JPEG data URIs (Pillow)
"""

from .document import DocumentRenderer
from .images import to_jpeg, to_jpeg_data_uri
from .raster import PngRasterizer
from .vector import VectorSynthesizer

__all__ = [
    "DocumentRenderer",
    "PngRasterizer",
    "VectorSynthesizer",
    "to_jpeg",
    "to_jpeg_data_uri",
]
