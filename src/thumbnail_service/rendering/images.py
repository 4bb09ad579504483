"""Sub-image preparation for embedding in markup snapshots."""

import base64
import io
import logging

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

JPEG_QUALITY = 90


def to_jpeg(data: bytes) -> bytes:
    """Re-encode any Pillow-readable image as baseline JPEG.

    Transparent images are flattened onto white.

    Raises:
        ValueError: If the bytes are not a readable image or exceed the pixel limit
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
                rgba = image.convert("RGBA")
                flattened = Image.new("RGB", rgba.size, (255, 255, 255))
                flattened.paste(rgba, mask=rgba.getchannel("A"))
                converted = flattened
            else:
                converted = image.convert("RGB")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise ValueError(f"Unreadable image: {e}") from e

    buffer = io.BytesIO()
    converted.save(buffer, format="JPEG", quality=JPEG_QUALITY)
    return buffer.getvalue()


def to_jpeg_data_uri(data: bytes) -> str:
    """Convert image bytes to a data:image/jpeg;base64 URI.

    Raises:
        ValueError: If the bytes are not a readable image
    """
    return "data:image/jpeg;base64," + base64.b64encode(to_jpeg(data)).decode("ascii")
