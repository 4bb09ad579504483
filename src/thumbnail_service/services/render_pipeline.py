"""Render pipeline: document -> vector -> raster.

Each stage consumes only the previous stage's output. The vector and
raster stages are CPU-bound and run in a worker thread.
"""

import asyncio
import logging

from thumbnail_service.config import settings
from thumbnail_service.entities import AssistantEntity, MarkupSnapshot, ModelEntity, RenderRequest
from thumbnail_service.rendering import DocumentRenderer, PngRasterizer, VectorSynthesizer

logger = logging.getLogger(__name__)


class RenderPipeline:
    """Turns entity data plus resolved fonts into PNG bytes.

    Example:
        ```python
        pipeline = RenderPipeline.create()
        png = await pipeline.render_assistant(assistant, avatar="", fonts={500: ..., 700: ...})
        ```
    """

    def __init__(
        self,
        document_renderer: DocumentRenderer,
        vector_synthesizer: VectorSynthesizer,
        rasterizer: PngRasterizer,
        width: int | None = None,
        height: int | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            document_renderer: Stage 1, entity data -> markup snapshot.
            vector_synthesizer: Stage 2, snapshot + fonts -> SVG.
            rasterizer: Stage 3, SVG -> PNG.
            width: Output width in pixels. Defaults to settings.
            height: Output height in pixels. Defaults to settings.
        """
        self._documents = document_renderer
        self._vector = vector_synthesizer
        self._rasterizer = rasterizer
        self._width = width or settings.thumbnail_width
        self._height = height or settings.thumbnail_height

    @classmethod
    def create(
        cls,
        font_family: str | None = None,
        width: int | None = None,
        height: int | None = None,
    ) -> "RenderPipeline":
        """Factory method wiring the default stages.

        Args:
            font_family: Family used by the templates. If None, uses settings.
            width: Output width. If None, uses settings.
            height: Output height. If None, uses settings.

        Returns:
            Configured RenderPipeline
        """
        weights = sorted(settings.font_weights)
        documents = DocumentRenderer(
            font_family=font_family,
            regular_weight=weights[0],
            bold_weight=weights[-1],
        )
        return cls(
            document_renderer=documents,
            vector_synthesizer=VectorSynthesizer(default_family=documents.font_family),
            rasterizer=PngRasterizer(),
            width=width,
            height=height,
        )

    @property
    def font_family(self) -> str:
        return self._documents.font_family

    @property
    def font_weights(self) -> set[int]:
        """Weights the documents reference; the caller must resolve all of them."""
        return self._documents.font_weights

    @property
    def size(self) -> tuple[int, int]:
        return (self._width, self._height)

    def render(self, request: RenderRequest) -> bytes:
        """Run vector then raster synthesis.

        Raises:
            RenderError: If vector synthesis fails; rasterization is then skipped
        """
        svg = self._vector.synthesize(request)
        png = self._rasterizer.rasterize(svg)
        logger.debug("Rendered %dx%d thumbnail (%d bytes)", request.width, request.height, len(png))
        return png

    async def render_snapshot(self, snapshot: MarkupSnapshot, fonts: dict[int, bytes]) -> bytes:
        """Render a snapshot with fonts of the pipeline's family, off the event loop."""
        request = RenderRequest.with_family(
            snapshot=snapshot,
            width=self._width,
            height=self._height,
            family=self.font_family,
            fonts=fonts,
        )
        return await asyncio.to_thread(self.render, request)

    async def render_assistant(self, assistant: AssistantEntity, avatar: str, fonts: dict[int, bytes]) -> bytes:
        snapshot = self._documents.render_assistant(assistant, avatar=avatar)
        return await self.render_snapshot(snapshot, fonts)

    async def render_model(self, model: ModelEntity, logo: str, fonts: dict[int, bytes]) -> bytes:
        snapshot = self._documents.render_model(model, logo=logo)
        return await self.render_snapshot(snapshot, fonts)
