"""Document synthesis: entity data -> markup snapshot.

Thumbnails are described as HTML fragments rendered from Jinja2 templates,
with their CSS kept next to them as embedded style text. User-supplied
strings are autoescaped; images must already be data URIs.
"""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from thumbnail_service.config import settings
from thumbnail_service.entities import AssistantEntity, MarkupSnapshot, ModelEntity

TEMPLATES_DIR = Path(__file__).parent / "templates"


class DocumentRenderer:
    """Renders assistant and model thumbnails into markup snapshots.

    Example:
        ```python
        renderer = DocumentRenderer(font_family="Inter", regular_weight=500, bold_weight=700)
        snapshot = renderer.render_assistant(assistant, avatar="data:image/jpeg;base64,...")
        ```
    """

    def __init__(
        self,
        font_family: str | None = None,
        regular_weight: int = 500,
        bold_weight: int = 700,
        brand: str = "HuggingChat",
        templates_dir: Path | None = None,
    ) -> None:
        self._font_family = font_family or settings.font_family
        self._regular_weight = regular_weight
        self._bold_weight = bold_weight
        self._brand = brand
        self._env = Environment(
            loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    @property
    def font_weights(self) -> set[int]:
        """Weights the templates reference."""
        return {self._regular_weight, self._bold_weight}

    @property
    def font_family(self) -> str:
        return self._font_family

    def _styles(self) -> str:
        return self._env.get_template("thumbnail.css").render(
            font_family=self._font_family,
            regular_weight=self._regular_weight,
            bold_weight=self._bold_weight,
        )

    def render_assistant(self, assistant: AssistantEntity, avatar: str = "") -> MarkupSnapshot:
        """Render an assistant thumbnail.

        Args:
            assistant: The assistant to describe
            avatar: JPEG data URI, or "" for the placeholder slot
        """
        markup = self._env.get_template("assistant.html").render(
            name=assistant.name,
            description=assistant.description,
            created_by_name=assistant.created_by_name,
            avatar=avatar,
            brand=self._brand,
        )
        return MarkupSnapshot(markup=markup, styles=self._styles())

    def render_model(self, model: ModelEntity, logo: str = "") -> MarkupSnapshot:
        """Render a model thumbnail.

        Args:
            model: The model to describe
            logo: JPEG data URI, or "" to omit the logo
        """
        markup = self._env.get_template("model.html").render(
            name=model.name,
            logo=logo,
            brand=self._brand,
        )
        return MarkupSnapshot(markup=markup, styles=self._styles())
