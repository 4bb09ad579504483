"""Tests for sub-image conversion."""

import base64
import io

import pytest
from PIL import Image

from thumbnail_service.rendering import to_jpeg, to_jpeg_data_uri


def png_bytes(mode: str, color) -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, (8, 8), color).save(buffer, format="PNG")
    return buffer.getvalue()


def test_to_jpeg_converts_png():
    data = to_jpeg(png_bytes("RGB", (255, 0, 0)))

    with Image.open(io.BytesIO(data)) as image:
        assert image.format == "JPEG"
        assert image.size == (8, 8)


def test_transparency_is_flattened_onto_white():
    data = to_jpeg(png_bytes("RGBA", (0, 0, 0, 0)))

    with Image.open(io.BytesIO(data)) as image:
        assert image.mode == "RGB"
        assert all(channel > 240 for channel in image.getpixel((4, 4)))


def test_unreadable_image_raises_value_error():
    with pytest.raises(ValueError):
        to_jpeg(b"not an image")


def test_data_uri():
    uri = to_jpeg_data_uri(png_bytes("RGB", (0, 128, 0)))

    assert uri.startswith("data:image/jpeg;base64,")
    payload = base64.b64decode(uri.split(",", 1)[1])
    assert payload[:2] == b"\xff\xd8"


def test_oversized_image_raises_value_error(monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 16)

    with pytest.raises(ValueError):
        to_jpeg(png_bytes("RGB", (0, 0, 255)))
