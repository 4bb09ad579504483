"""Minimal CSS support for markup snapshots.

Only what thumbnail markup needs: selectors matched with soupsieve (the
selector engine behind BeautifulSoup), declaration blocks, inline style
attributes, and inheritance of the text properties.
"""

import logging
import re
from dataclasses import dataclass, field

import soupsieve
from bs4 import Tag

logger = logging.getLogger(__name__)

INHERITED_PROPERTIES = (
    "color",
    "font-family",
    "font-size",
    "font-weight",
    "line-height",
    "text-align",
)

ROOT_FONT_SIZE = 16.0

_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_RULE = re.compile(r"(?P<selectors>[^{}]+)\{(?P<body>[^{}]*)\}")
_SPECIFICITY_IDS = re.compile(r"#[\w-]+")
_SPECIFICITY_CLASSES = re.compile(r"\.[\w-]+|\[[^\]]*\]|(?<!:):(?!:)[\w-]+")
_SPECIFICITY_TYPES = re.compile(r"(?:^|[\s>+~])([a-zA-Z][\w-]*)")
_LENGTH = re.compile(r"^(?P<num>-?\d*\.?\d+)(?P<unit>px|em|rem|%)?$")


@dataclass(frozen=True)
class Selector:
    """A compiled selector (soupsieve) with its cascade specificity."""

    text: str
    pattern: soupsieve.SoupSieve
    specificity: tuple[int, int, int]

    def matches(self, element: Tag) -> bool:
        return self.pattern.match(element)


@dataclass(frozen=True)
class CssRule:
    selector: Selector
    declarations: dict[str, str] = field(default_factory=dict)
    order: int = 0


def specificity(text: str) -> tuple[int, int, int]:
    """(ids, classes + attributes + pseudo-classes, types) of a selector."""
    bare = re.sub(r"\[[^\]]*\]", "[]", text)
    return (
        len(_SPECIFICITY_IDS.findall(bare)),
        len(_SPECIFICITY_CLASSES.findall(bare)),
        len(_SPECIFICITY_TYPES.findall(bare)),
    )


def parse_selector(text: str) -> Selector | None:
    """Compile a selector, or None if soupsieve cannot parse it."""
    text = text.strip()
    try:
        pattern = soupsieve.compile(text)
    except soupsieve.SelectorSyntaxError:
        return None
    return Selector(text=text, pattern=pattern, specificity=specificity(text))


def parse_declarations(text: str) -> dict[str, str]:
    """Parse "a: b; c: d" into a dict.

    Semicolons inside parentheses (e.g. data URIs in url(...)) do not split
    declarations.
    """
    declarations = {}
    depth = 0
    current = []
    chunks = []
    for ch in text:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(0, depth - 1)
        if ch == ";" and depth == 0:
            chunks.append("".join(current))
            current = []
        else:
            current.append(ch)
    chunks.append("".join(current))

    for chunk in chunks:
        if ":" not in chunk:
            continue
        name, value = chunk.split(":", 1)
        name = name.strip().lower()
        value = value.replace("!important", "").strip()
        if name and value:
            declarations[name] = value
    return declarations


def parse_stylesheet(css: str) -> list[CssRule]:
    """Parse a stylesheet into rules, skipping selectors that do not compile."""
    rules = []
    css = _COMMENT.sub("", css)
    for match in _RULE.finditer(css):
        declarations = parse_declarations(match.group("body"))
        for selector_text in match.group("selectors").split(","):
            if not selector_text.strip() or selector_text.strip().startswith("@"):
                continue
            selector = parse_selector(selector_text)
            if selector is None:
                logger.warning("Ignoring invalid selector: %s", selector_text.strip())
                continue
            rules.append(CssRule(selector=selector, declarations=declarations, order=len(rules)))
    return rules


def declared_style(element: Tag, rules: list[CssRule]) -> dict[str, str]:
    """Declarations that apply directly to an element (rules, then inline style)."""
    matched = [rule for rule in rules if rule.selector.matches(element)]
    matched.sort(key=lambda r: (r.selector.specificity, r.order))

    style: dict[str, str] = {}
    for rule in matched:
        style.update(rule.declarations)
    inline = element.get("style")
    if inline:
        style.update(parse_declarations(inline))
    return style


def compute_style(declared: dict[str, str], parent: dict[str, str]) -> dict[str, str]:
    """Apply inheritance: inherited properties fall back to the parent's values."""
    computed = {name: parent[name] for name in INHERITED_PROPERTIES if name in parent}
    computed.update(declared)

    # Relative font sizes resolve against the parent before children inherit them
    if "font-size" in declared:
        parent_size = parse_length(parent.get("font-size", f"{ROOT_FONT_SIZE}px"), ROOT_FONT_SIZE)
        computed["font-size"] = f"{parse_length(declared['font-size'], parent_size, em=parent_size)}px"
    return computed


def parse_length(value: str, reference: float, em: float = ROOT_FONT_SIZE) -> float:
    """Convert a CSS length to pixels.

    Args:
        value: Length such as "12px", "1.5em", "50%" or "0"
        reference: Base for percentages
        em: Pixel size of 1em

    Raises:
        ValueError: If the value is not a supported length
    """
    match = _LENGTH.match(value.strip())
    if match is None:
        raise ValueError(f"Unsupported length: {value!r}")
    number = float(match.group("num"))
    unit = match.group("unit")
    if unit == "%":
        return reference * number / 100
    if unit == "em":
        return number * em
    if unit == "rem":
        return number * ROOT_FONT_SIZE
    return number


def parse_box(value: str | None, reference: float, em: float = ROOT_FONT_SIZE) -> tuple[float, float, float, float]:
    """Parse a 1-4 value padding/margin shorthand into (top, right, bottom, left)."""
    if not value:
        return (0.0, 0.0, 0.0, 0.0)
    parts = [0.0 if p == "auto" else parse_length(p, reference, em) for p in value.split()]
    if len(parts) == 1:
        return (parts[0],) * 4
    if len(parts) == 2:
        return (parts[0], parts[1], parts[0], parts[1])
    if len(parts) == 3:
        return (parts[0], parts[1], parts[2], parts[1])
    return (parts[0], parts[1], parts[2], parts[3])


def parse_font_weight(value: str) -> int:
    """Convert a font-weight value to an integer.

    Raises:
        ValueError: For relative or unknown keywords
    """
    value = value.strip().lower()
    if value == "normal":
        return 400
    if value == "bold":
        return 700
    if value.isdigit():
        return int(value)
    raise ValueError(f"Unsupported font-weight: {value!r}")


def primary_family(value: str) -> str:
    """First family of a font-family list, unquoted."""
    return value.split(",")[0].strip().strip("'\"")
