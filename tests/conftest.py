"""Shared fixtures: generated test fonts and protocol fakes."""

import asyncio
import io

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from thumbnail_service.entities import FontKey
from thumbnail_service.exceptions import FetchError

TEST_FAMILY = "Test Sans"
FONT_HOST = "https://fonts.test"


def build_test_font(family: str = TEST_FAMILY, style: str = "Regular") -> bytes:
    """Build a TrueType font covering printable ASCII.

    Every glyph except the space is a 400x700 box on a 500-unit advance
    (1000 units per em), so a 10px run advances 5px per character.
    """
    glyph_order = [".notdef", "space"] + [f"uni{cp:04X}" for cp in range(33, 127)]
    cmap = {32: "space"}
    cmap.update({cp: f"uni{cp:04X}" for cp in range(33, 127)})

    glyphs = {}
    metrics = {}
    for name in glyph_order:
        pen = TTGlyphPen(None)
        if name != "space":
            pen.moveTo((50, 0))
            pen.lineTo((50, 700))
            pen.lineTo((450, 700))
            pen.lineTo((450, 0))
            pen.closePath()
        glyphs[name] = pen.glyph()
        metrics[name] = (500, 0 if name == "space" else 50)

    builder = FontBuilder(1000, isTTF=True)
    builder.setupGlyphOrder(glyph_order)
    builder.setupCharacterMap(cmap)
    builder.setupGlyf(glyphs)
    builder.setupHorizontalMetrics(metrics)
    builder.setupHorizontalHeader(ascent=800, descent=-200)
    builder.setupNameTable({"familyName": family, "styleName": style})
    builder.setupOS2(sTypoAscender=800, sTypoDescender=-200, usWinAscent=800, usWinDescent=200)
    builder.setupPost()

    buffer = io.BytesIO()
    builder.save(buffer)
    return buffer.getvalue()


def provider_stylesheet(weights) -> str:
    """A Google-Fonts-like stylesheet advertising the given weights."""
    blocks = []
    for weight in sorted(weights):
        for subset in ("latin-ext", "latin"):
            blocks.append(
                f"/* {subset} */\n"
                "@font-face {\n"
                "  font-family: 'Test Sans';\n"
                "  font-style: normal;\n"
                f"  font-weight: {weight};\n"
                "  font-display: swap;\n"
                f"  src: url({FONT_HOST}/{subset}/{weight}.ttf) format('truetype');\n"
                "}\n"
            )
    return "".join(blocks)


class FakeFetcher:
    """AssetFetcher fake serving provider CSS and font binaries, counting calls.

    Args:
        fonts: weight -> font bytes the "provider" advertises
        assets: extra URL -> bytes responses (e.g. logos)
    """

    def __init__(self, fonts: dict[int, bytes], assets: dict[str, bytes] | None = None) -> None:
        self.fonts = dict(fonts)
        self.assets = dict(assets or {})
        self.css_calls: list[str] = []
        self.byte_calls: list[str] = []
        self.css_error: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def fetch_text(self, url: str) -> str:
        self.css_calls.append(url)
        if self.gate is not None:
            await self.gate.wait()
        if self.css_error is not None:
            raise self.css_error
        return provider_stylesheet(self.fonts)

    async def fetch_bytes(self, url: str) -> bytes:
        self.byte_calls.append(url)
        if url in self.assets:
            return self.assets[url]
        if url.startswith(FONT_HOST):
            weight = int(url.rsplit("/", 1)[1].split(".")[0])
            return self.fonts[weight]
        raise FetchError(url, "Not Found", status=404)


class MemoryFontStore:
    """FontStore fake holding fonts in a dict, counting calls."""

    def __init__(self, data: dict[FontKey, bytes] | None = None) -> None:
        self.data = dict(data or {})
        self.gets = 0
        self.puts = 0
        self.put_error: OSError | None = None
        self.init_error: Exception | None = None

    def initialize(self) -> None:
        if self.init_error is not None:
            raise self.init_error

    async def get(self, key: FontKey) -> bytes | None:
        self.gets += 1
        return self.data.get(key)

    async def put(self, key: FontKey, data: bytes) -> None:
        self.puts += 1
        if self.put_error is not None:
            raise self.put_error
        self.data[key] = data

    def count_all(self) -> int:
        return len(self.data)

    def size_bytes(self) -> int:
        return sum(len(v) for v in self.data.values())

    def health_check(self) -> bool:
        return self.init_error is None


@pytest.fixture(scope="session")
def test_font() -> bytes:
    return build_test_font()


@pytest.fixture
def fonts(test_font) -> dict[int, bytes]:
    return {500: test_font, 700: test_font}


@pytest.fixture
def fetcher(fonts) -> FakeFetcher:
    return FakeFetcher(fonts)


@pytest.fixture
def store() -> MemoryFontStore:
    return MemoryFontStore()
