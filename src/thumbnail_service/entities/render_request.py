"""Render pipeline input entities."""

from dataclasses import dataclass, field

from .font_asset import FontAsset, FontKey


@dataclass(frozen=True)
class MarkupSnapshot:
    """A self-contained markup fragment plus its embedded style text.

    Attributes:
        markup: HTML fragment; all images must be data URIs
        styles: CSS text for the fragment (simple tag, class and id selectors)
    """

    markup: str
    styles: str = ""

    def as_document(self) -> str:
        """Join styles and markup into the single fragment consumed by vector synthesis."""
        if not self.styles:
            return self.markup
        return f"<style>{self.styles}</style>{self.markup}"


@dataclass(frozen=True)
class RenderRequest:
    """Everything one thumbnail render needs.

    Attributes:
        snapshot: The markup snapshot to render
        width: Output width in pixels
        height: Output height in pixels
        fonts: Resolved fonts keyed by (family, weight)
    """

    snapshot: MarkupSnapshot
    width: int
    height: int
    fonts: dict[FontKey, FontAsset] = field(default_factory=dict)

    @classmethod
    def with_family(
        cls,
        snapshot: MarkupSnapshot,
        width: int,
        height: int,
        family: str,
        fonts: dict[int, bytes],
    ) -> "RenderRequest":
        """Build a request from a weight -> bytes map for a single family."""
        assets = {}
        for weight, data in fonts.items():
            key = FontKey(family, weight)
            assets[key] = FontAsset(key=key, data=data)
        return cls(snapshot=snapshot, width=width, height=height, fonts=assets)
