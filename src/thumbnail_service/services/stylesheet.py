"""Font provider stylesheet handling.

Builds the provider stylesheet URL for a family and a set of weights, and
parses the returned CSS into a weight -> font URL mapping.

A provider stylesheet holds one @font-face block per (weight, style, subset);
Google Fonts labels each block with a subset comment such as /* latin */.
Selection policy for a requested weight:

1. Only blocks whose declared font-weight equals the weight exactly.
2. Italic/oblique blocks are ignored.
3. The block labelled with the preferred subset wins; otherwise the first
   remaining block in document order.
"""

import re
from dataclasses import dataclass
from urllib.parse import quote_plus

_FONT_FACE = re.compile(
    r"(?:/\*\s*(?P<subset>[^*]*?)\s*\*/\s*)?@font-face\s*\{(?P<body>[^}]*)\}",
    re.DOTALL,
)
_DECLARATION = re.compile(r"(?P<name>[\w-]+)\s*:\s*(?P<value>[^;]+?)\s*(?:;|$)")
_SRC_URL = re.compile(r"url\(\s*['\"]?(?P<url>[^'\")]+?)['\"]?\s*\)")


@dataclass(frozen=True)
class FontFaceBlock:
    """One @font-face block from a provider stylesheet."""

    weight: int | None
    style: str
    url: str
    subset: str | None = None

    @property
    def is_italic(self) -> bool:
        return self.style.startswith(("italic", "oblique"))


def build_stylesheet_url(provider_url: str, family: str, weights: list[int] | set[int]) -> str:
    """Build the provider stylesheet URL.

    Args:
        provider_url: Stylesheet endpoint (e.g. https://fonts.googleapis.com/css2)
        family: Font family name
        weights: Weights to request; joined with ";" in ascending order

    Returns:
        The stylesheet URL
    """
    weights_param = ";".join(str(w) for w in sorted(set(weights)))
    return f"{provider_url}?family={quote_plus(family)}:wght@{weights_param}&display=swap"


def _parse_weight(value: str) -> int | None:
    value = value.strip()
    if value == "normal":
        return 400
    if value == "bold":
        return 700
    if value.isdigit():
        return int(value)
    # Ranges such as "100 900" (variable fonts) never match a single weight
    return None


def parse_font_faces(css: str) -> list[FontFaceBlock]:
    """Parse every @font-face block that declares a src url.

    Args:
        css: Stylesheet text

    Returns:
        Blocks in document order
    """
    blocks = []
    for match in _FONT_FACE.finditer(css):
        declarations = {
            d.group("name").lower(): d.group("value")
            for d in _DECLARATION.finditer(match.group("body"))
        }
        src = _SRC_URL.search(declarations.get("src", ""))
        if src is None:
            continue
        blocks.append(
            FontFaceBlock(
                weight=_parse_weight(declarations.get("font-weight", "400")),
                style=declarations.get("font-style", "normal").strip().lower(),
                url=src.group("url"),
                subset=match.group("subset") or None,
            )
        )
    return blocks


def select_font_url(
    blocks: list[FontFaceBlock],
    weight: int,
    preferred_subset: str | None = "latin",
) -> str | None:
    """Pick the font URL for exactly this weight.

    Args:
        blocks: Parsed @font-face blocks
        weight: Requested weight; no nearest-weight substitution
        preferred_subset: Subset label to prefer among duplicates

    Returns:
        The chosen URL, or None if the weight is not advertised
    """
    candidates = [b for b in blocks if b.weight == weight and not b.is_italic]
    if not candidates:
        return None

    if preferred_subset:
        for block in candidates:
            if block.subset == preferred_subset:
                return block.url

    return candidates[0].url


def parse_font_urls(
    css: str,
    weights: list[int] | set[int],
    preferred_subset: str | None = "latin",
) -> dict[int, str]:
    """Map each requested weight to its font URL.

    Weights the stylesheet does not advertise are absent from the result.
    """
    blocks = parse_font_faces(css)
    urls = {}
    for weight in weights:
        url = select_font_url(blocks, weight, preferred_subset)
        if url is not None:
            urls[weight] = url
    return urls
