"""Vector synthesis: markup snapshot + fonts -> SVG.

A small box layout engine covering what thumbnail markup uses:

- block flow and flex containers (row/column, gap, justify-content,
  align-items, flex-grow)
- padding, margin, width/height in px, em, rem and %
- background colors, borders and border-radius
- text with inherited color/font properties, greedy word wrapping,
  text-align and line clamping with an ellipsis
- <img> with data URI sources, clipped to the border radius

Every font family/weight the markup references must be supplied with the
request; there is no fallback font.
"""

import logging
import re
from dataclasses import dataclass, field
from xml.sax.saxutils import quoteattr

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from thumbnail_service.entities import FontKey, RenderRequest
from thumbnail_service.exceptions import RenderError
from thumbnail_service.rendering.css import (
    INHERITED_PROPERTIES,
    compute_style,
    declared_style,
    parse_box,
    parse_font_weight,
    parse_length,
    parse_stylesheet,
    primary_family,
)
from thumbnail_service.rendering.fonts import OutlineFont

logger = logging.getLogger(__name__)

INLINE_TAGS = frozenset({"a", "b", "code", "em", "i", "label", "small", "span", "strong", "sub", "sup", "u"})
SKIPPED_TAGS = frozenset({"head", "link", "meta", "script", "style", "title"})
ELLIPSIS = "…"
_WHITESPACE = re.compile(r"\s+")
_TOKENS = re.compile(r"\n|[^\S\n]+|[^\s]+")


@dataclass
class TextRun:
    text: str
    font: FontKey
    size: float
    color: str


@dataclass
class Line:
    fragments: list[tuple[TextRun, str, float]] = field(default_factory=list)
    width: float = 0.0
    height: float = 0.0
    baseline: float = 0.0


@dataclass
class Box:
    kind: str  # "block", "flex", "text" or "image"
    style: dict[str, str]
    children: list["Box"] = field(default_factory=list)
    runs: list[TextRun] = field(default_factory=list)
    src: str = ""
    attr_width: str | None = None
    attr_height: str | None = None
    lines: list[Line] = field(default_factory=list)
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    margin: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
    padding: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)

    @property
    def em(self) -> float:
        return parse_length(self.style.get("font-size", "16px"), 16.0)

    @property
    def outer_width(self) -> float:
        return self.margin[3] + self.width + self.margin[1]

    @property
    def outer_height(self) -> float:
        return self.margin[0] + self.height + self.margin[2]


def _fmt(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def _rebind_blank_runs(box: Box, font_refs: set[FontKey]) -> None:
    """Measure whitespace-only runs in unreferenced fonts with a neighbouring run's font.

    Every text box holds at least one non-blank run, and non-blank runs
    always reference their font.
    """
    if box.kind == "text":
        referenced = [run.font for run in box.runs if run.font in font_refs]
        previous = referenced[0] if referenced else None
        for run in box.runs:
            if run.font in font_refs:
                previous = run.font
            elif previous is not None:
                run.font = previous
    for child in box.children:
        _rebind_blank_runs(child, font_refs)


class VectorSynthesizer:
    """Converts a markup snapshot and its fonts into an SVG document.

    Example:
        ```python
        synthesizer = VectorSynthesizer(default_family="Inter")
        svg = synthesizer.synthesize(request)
        ```
    """

    def __init__(self, default_family: str | None = None, default_font_size: float = 16.0) -> None:
        """Initialize the synthesizer.

        Args:
            default_family: Family used where the markup sets none. Defaults to
                the first family of the request's fonts.
            default_font_size: Root font size in pixels.
        """
        self._default_family = default_family
        self._default_font_size = default_font_size

    def synthesize(self, request: RenderRequest) -> str:
        """Lay out the snapshot at the request's size and return SVG text.

        Raises:
            RenderError: missing_font if a referenced font was not supplied,
                malformed_document if the snapshot cannot be interpreted,
                invalid_font if supplied font bytes cannot be parsed
        """
        root, font_refs = self._build_tree(request)

        missing = sorted(key for key in font_refs if key not in request.fonts)
        if missing:
            names = ", ".join(str(key) for key in missing)
            raise RenderError(RenderError.MISSING_FONT, f"Fonts referenced by the document were not supplied: {names}")

        fonts = {key: OutlineFont(request.fonts[key]) for key in sorted(font_refs)}
        _rebind_blank_runs(root, font_refs)
        layout = _Layout(fonts)
        painter = _Painter(fonts)
        try:
            layout.measure(root, float(request.width), float(request.height))
            layout.place(root, 0.0, 0.0)
            painter.paint(root)
        except ValueError as e:
            raise RenderError(RenderError.MALFORMED_DOCUMENT, f"Invalid style value: {e}") from e
        return painter.document(request.width, request.height)

    def _build_tree(self, request: RenderRequest) -> tuple[Box, set[FontKey]]:
        soup = BeautifulSoup(request.snapshot.as_document(), "html.parser")
        css = "\n".join(style.get_text() for style in soup.find_all("style"))
        for style in soup.find_all("style"):
            style.decompose()

        if soup.find(True) is None:
            raise RenderError(RenderError.MALFORMED_DOCUMENT, "Markup snapshot contains no elements")

        family = self._default_family
        if family is None:
            family = min(request.fonts).family if request.fonts else "sans-serif"

        root_style = {
            "font-family": family,
            "font-weight": "400",
            "font-size": f"{self._default_font_size}px",
            "color": "#000000",
            "line-height": "normal",
            "text-align": "left",
        }
        builder = _TreeBuilder(parse_stylesheet(css))
        try:
            root = Box(
                kind="block",
                style={**root_style, "width": f"{request.width}px", "height": f"{request.height}px"},
            )
            root.children = builder.children(soup, root_style, flex=False)
        except ValueError as e:
            raise RenderError(RenderError.MALFORMED_DOCUMENT, f"Invalid style value: {e}") from e
        return root, builder.font_refs


class _TreeBuilder:
    def __init__(self, rules) -> None:
        self._rules = rules
        self.font_refs: set[FontKey] = set()

    @staticmethod
    def font_key(style: dict[str, str]) -> FontKey:
        return FontKey(primary_family(style["font-family"]), parse_font_weight(style["font-weight"]))

    def element(self, el: Tag, parent_style: dict[str, str]) -> Box | None:
        declared = declared_style(el, self._rules)
        style = compute_style(declared, parent_style)
        if style.get("display") == "none":
            return None
        if "font-family" in declared or "font-weight" in declared:
            self.font_refs.add(self.font_key(style))

        if el.name == "img":
            return Box(
                kind="image",
                style=style,
                src=(el.get("src") or "").strip(),
                attr_width=el.get("width"),
                attr_height=el.get("height"),
            )

        is_flex = style.get("display") in ("flex", "inline-flex")
        box = Box(kind="flex" if is_flex else "block", style=style)
        box.children = self.children(el, style, flex=is_flex)
        return box

    def children(self, parent: Tag, style: dict[str, str], flex: bool) -> list[Box]:
        boxes: list[Box] = []
        pending: list[TextRun] = []

        def flush() -> None:
            if any(run.text.strip() for run in pending):
                boxes.append(self.text_box(list(pending), style))
            pending.clear()

        for node in parent.children:
            if isinstance(node, Comment):
                continue
            if isinstance(node, NavigableString):
                pending.extend(self.text_runs(str(node), style))
                continue
            if not isinstance(node, Tag) or node.name in SKIPPED_TAGS:
                continue
            if node.name == "br":
                pending.append(TextRun("\n", self.font_key(style), 0.0, ""))
                continue
            if node.name in INLINE_TAGS and not flex and not self._has_block_content(node):
                pending.extend(self.inline_runs(node, style))
                continue
            flush()
            box = self.element(node, style)
            if box is not None:
                boxes.append(box)
        flush()
        return boxes

    def _has_block_content(self, el: Tag) -> bool:
        return any(
            isinstance(d, Tag) and (d.name == "img" or (d.name not in INLINE_TAGS and d.name != "br"))
            for d in el.descendants
        )

    def inline_runs(self, el: Tag, parent_style: dict[str, str]) -> list[TextRun]:
        declared = declared_style(el, self._rules)
        style = compute_style(declared, parent_style)
        if style.get("display") == "none":
            return []
        if "font-family" in declared or "font-weight" in declared:
            self.font_refs.add(self.font_key(style))

        runs = []
        for node in el.children:
            if isinstance(node, Comment):
                continue
            if isinstance(node, NavigableString):
                runs.extend(self.text_runs(str(node), style))
            elif isinstance(node, Tag) and node.name == "br":
                runs.append(TextRun("\n", self.font_key(style), 0.0, ""))
            elif isinstance(node, Tag) and node.name not in SKIPPED_TAGS:
                runs.extend(self.inline_runs(node, style))
        return runs

    def text_runs(self, text: str, style: dict[str, str]) -> list[TextRun]:
        text = _WHITESPACE.sub(" ", text)
        if not text:
            return []
        key = self.font_key(style)
        if text.strip():
            self.font_refs.add(key)
        size = parse_length(style["font-size"], 16.0)
        return [TextRun(text, key, size, style.get("color", "#000000"))]

    def text_box(self, runs: list[TextRun], parent_style: dict[str, str]) -> Box:
        style = {name: parent_style[name] for name in INHERITED_PROPERTIES if name in parent_style}
        for name in ("-webkit-line-clamp", "line-clamp"):
            if name in parent_style:
                style["line-clamp"] = parent_style[name]
        return Box(kind="text", style=style, runs=runs)


class _Layout:
    def __init__(self, fonts: dict[FontKey, OutlineFont]) -> None:
        self._fonts = fonts

    # -- sizing -------------------------------------------------------------

    def _edges(self, box: Box, name: str, reference: float) -> tuple[float, float, float, float]:
        em = box.em
        top, right, bottom, left = parse_box(box.style.get(name), reference, em)
        sides = {}
        for side in ("top", "right", "bottom", "left"):
            value = box.style.get(f"{name}-{side}")
            if value is not None:
                sides[side] = 0.0 if value == "auto" else parse_length(value, reference, em)
        return (
            sides.get("top", top),
            sides.get("right", right),
            sides.get("bottom", bottom),
            sides.get("left", left),
        )

    def _explicit(self, box: Box, name: str, reference: float | None, attr: str | None = None) -> float | None:
        value = box.style.get(name)
        if value in (None, "auto"):
            value = attr
        if value is None:
            return None
        if value.endswith("%") and reference is None:
            return None
        if value.isdigit():
            value = f"{value}px"
        return parse_length(value, reference, box.em)

    def _grows(self, box: Box) -> bool:
        grow = box.style.get("flex-grow") or box.style.get("flex", "0").split()[0]
        try:
            return float(grow) > 0
        except ValueError:
            return grow == "auto"

    def max_content(self, box: Box, reference: float) -> float:
        """Width the box would take with no wrapping."""
        box.margin = self._edges(box, "margin", reference)
        box.padding = self._edges(box, "padding", reference)
        explicit = self._explicit(box, "width", reference, box.attr_width)
        if explicit is not None:
            return explicit + box.margin[1] + box.margin[3]
        if box.kind == "text":
            return sum(self._fonts[run.font].advance(run.text, run.size) for run in box.runs if run.text != "\n")
        if box.kind == "image":
            return box.margin[1] + box.margin[3]

        widths = [self.max_content(child, reference) for child in box.children]
        if box.kind == "flex" and box.style.get("flex-direction", "row") == "row":
            content = sum(widths) + self._gap(box, reference) * max(0, len(widths) - 1)
        else:
            content = max(widths, default=0.0)
        return content + box.padding[1] + box.padding[3] + box.margin[1] + box.margin[3]

    def _gap(self, box: Box, reference: float) -> float:
        value = box.style.get("gap")
        return parse_length(value.split()[0], reference, box.em) if value else 0.0

    def measure(self, box: Box, available: float, available_height: float | None = None) -> None:
        """Compute width and height for a box.

        Args:
            box: The box to size
            available: Width available to the box, margins included
            available_height: Definite height of the containing block, if any
        """
        box.margin = self._edges(box, "margin", available)
        box.padding = self._edges(box, "padding", available)
        pad_x = box.padding[1] + box.padding[3]
        pad_y = box.padding[0] + box.padding[2]

        if box.kind == "image":
            width = self._explicit(box, "width", available, box.attr_width) or 0.0
            height = self._explicit(box, "height", available_height, box.attr_height)
            box.width = width
            box.height = width if height is None else height
            return

        explicit_width = self._explicit(box, "width", available)
        box.width = explicit_width if explicit_width is not None else max(0.0, available - box.margin[1] - box.margin[3])
        content_width = max(0.0, box.width - pad_x)
        explicit_height = self._explicit(box, "height", available_height)
        inner_height = None if explicit_height is None else max(0.0, explicit_height - pad_y)

        if box.kind == "text":
            box.lines = self._wrap(box, content_width)
            content_height = sum(line.height for line in box.lines)
        elif box.kind == "flex" and box.style.get("flex-direction", "row") == "row":
            content_height = self._measure_row(box, content_width, inner_height)
        else:
            content_height = self._measure_column(box, content_width, inner_height)

        box.height = explicit_height if explicit_height is not None else content_height + pad_y

    def _measure_column(self, box: Box, content_width: float, inner_height: float | None) -> float:
        is_flex = box.kind == "flex"
        shrink = is_flex and box.style.get("align-items", "stretch") not in ("stretch", "normal")
        gap = self._gap(box, content_width) if is_flex else 0.0
        total = 0.0
        for child in box.children:
            available = content_width
            if shrink and child.kind != "image":
                available = min(content_width, self.max_content(child, content_width))
            self.measure(child, available, inner_height)
            total += child.outer_height
        return total + gap * max(0, len(box.children) - 1)

    def _measure_row(self, box: Box, content_width: float, inner_height: float | None) -> float:
        gap = self._gap(box, content_width)
        remaining = content_width - gap * max(0, len(box.children) - 1)
        growers = []
        for child in box.children:
            if child.kind == "image" or self._explicit(child, "width", content_width) is not None:
                self.measure(child, content_width, inner_height)
                remaining -= child.outer_width
            elif self._grows(child):
                growers.append(child)
            else:
                width = min(self.max_content(child, content_width), max(0.0, remaining))
                self.measure(child, width, inner_height)
                remaining -= child.outer_width
        for child in growers:
            self.measure(child, max(0.0, remaining) / len(growers), inner_height)
        return max((child.outer_height for child in box.children), default=0.0)

    # -- text ---------------------------------------------------------------

    def _line_height(self, run: TextRun, style: dict[str, str]) -> float:
        value = style.get("line-height", "normal")
        if value == "normal":
            return run.size * 1.2
        try:
            return run.size * float(value)
        except ValueError:
            return parse_length(value, run.size, run.size)

    def _wrap(self, box: Box, max_width: float) -> list[Line]:
        lines: list[Line] = []
        current = Line()

        def finish() -> None:
            while current.fragments and not current.fragments[-1][1].strip():
                current.width -= current.fragments.pop()[2]
            lines.append(current)

        for run in box.runs:
            if run.text == "\n":
                finish()
                current = Line()
                continue
            font = self._fonts[run.font]
            for token in _TOKENS.findall(run.text):
                width = font.advance(token, run.size)
                if not token.strip():
                    if current.fragments:
                        current.fragments.append((run, token, width))
                        current.width += width
                    continue
                if current.fragments and current.width + width > max_width + 0.01:
                    finish()
                    current = Line()
                if width > max_width:
                    # Words wider than the line are broken between characters
                    for ch in token:
                        ch_width = font.advance(ch, run.size)
                        if current.fragments and current.width + ch_width > max_width + 0.01:
                            finish()
                            current = Line()
                        current.fragments.append((run, ch, ch_width))
                        current.width += ch_width
                    continue
                current.fragments.append((run, token, width))
                current.width += width
        finish()

        lines = [line for line in lines if line.fragments]
        clamp = box.style.get("line-clamp")
        if clamp and clamp.isdigit() and 0 < int(clamp) < len(lines):
            lines = lines[: int(clamp)]
            self._ellipsize(lines[-1], max_width)

        for line in lines:
            self._line_metrics(line, box.style)
        return lines

    def _ellipsize(self, line: Line, max_width: float) -> None:
        run = line.fragments[-1][0]
        font = self._fonts[run.font]
        suffix = ELLIPSIS if font.advance(ELLIPSIS, run.size) > 0 else "..."
        suffix_width = font.advance(suffix, run.size)
        while line.fragments and line.width + suffix_width > max_width:
            fragment_run, text, width = line.fragments.pop()
            line.width -= width
            if len(text) > 1:
                text = text[:-1]
                width = self._fonts[fragment_run.font].advance(text, fragment_run.size)
                line.fragments.append((fragment_run, text, width))
                line.width += width
        while line.fragments and not line.fragments[-1][1].strip():
            line.width -= line.fragments.pop()[2]
        line.fragments.append((run, suffix, suffix_width))
        line.width += suffix_width

    def _line_metrics(self, line: Line, style: dict[str, str]) -> None:
        ascent = descent = height = 0.0
        for run, _, _ in line.fragments:
            font = self._fonts[run.font]
            ascent = max(ascent, font.ascent(run.size))
            descent = max(descent, font.descent(run.size))
            height = max(height, self._line_height(run, style))
        line.height = height
        line.baseline = (height - (ascent + descent)) / 2 + ascent

    # -- positioning --------------------------------------------------------

    def place(self, box: Box, x: float, y: float) -> None:
        """Assign absolute positions to a measured box and its descendants."""
        box.x, box.y = x, y
        left = x + box.padding[3]
        top = y + box.padding[0]
        content_width = box.width - box.padding[1] - box.padding[3]
        content_height = box.height - box.padding[0] - box.padding[2]

        if box.kind == "flex" and box.style.get("flex-direction", "row") == "row":
            self._place_main_axis(box, left, top, content_width, content_height, horizontal=True)
        elif box.kind == "flex":
            self._place_main_axis(box, left, top, content_width, content_height, horizontal=False)
        else:
            cursor = top
            for child in box.children:
                self.place(child, left + child.margin[3], cursor + child.margin[0])
                cursor += child.outer_height

    def _place_main_axis(self, box, left, top, content_width, content_height, horizontal: bool) -> None:
        gap = self._gap(box, content_width)
        children = box.children
        if horizontal:
            used = sum(c.outer_width for c in children)
            free = content_width - used - gap * max(0, len(children) - 1)
        else:
            used = sum(c.outer_height for c in children)
            free = content_height - used - gap * max(0, len(children) - 1)

        justify = box.style.get("justify-content", "flex-start")
        offset = 0.0
        spacing = gap
        if justify == "center":
            offset = free / 2
        elif justify in ("flex-end", "end"):
            offset = free
        elif justify == "space-between" and len(children) > 1:
            spacing = gap + max(0.0, free) / (len(children) - 1)

        align = box.style.get("align-items", "stretch")
        cursor = offset
        for child in children:
            if horizontal:
                cross_free = content_height - child.outer_height
                cross = cross_free / 2 if align == "center" else cross_free if align in ("flex-end", "end") else 0.0
                self.place(child, left + cursor + child.margin[3], top + cross + child.margin[0])
                cursor += child.outer_width + spacing
            else:
                cross_free = content_width - child.outer_width
                cross = cross_free / 2 if align == "center" else cross_free if align in ("flex-end", "end") else 0.0
                self.place(child, left + cross + child.margin[3], top + cursor + child.margin[0])
                cursor += child.outer_height + spacing


class _Painter:
    def __init__(self, fonts: dict[FontKey, OutlineFont]) -> None:
        self._fonts = fonts
        self._defs: list[str] = []
        self._body: list[str] = []

    def _radius(self, box: Box) -> float:
        value = box.style.get("border-radius")
        if not value:
            return 0.0
        radius = parse_length(value.split()[0], min(box.width, box.height), box.em)
        return min(radius, box.width / 2, box.height / 2)

    def _rect(self, box: Box, radius: float, extra: str) -> str:
        rx = f' rx="{_fmt(radius)}"' if radius else ""
        return (
            f'<rect x="{_fmt(box.x)}" y="{_fmt(box.y)}" width="{_fmt(box.width)}" '
            f'height="{_fmt(box.height)}"{rx}{extra}/>'
        )

    def paint(self, box: Box) -> None:
        radius = self._radius(box)
        background = box.style.get("background-color") or box.style.get("background")
        if background and "url(" not in background and "gradient(" not in background:
            self._body.append(self._rect(box, radius, f" fill={quoteattr(background)}"))

        border = box.style.get("border")
        if border and border not in ("none", "0"):
            parts = border.split()
            width = parse_length(parts[0], 0.0, box.em)
            color = parts[-1] if len(parts) > 2 else "#000000"
            if width > 0:
                self._body.append(
                    self._rect(box, radius, f' fill="none" stroke={quoteattr(color)} stroke-width="{_fmt(width)}"')
                )

        if box.kind == "image":
            self._paint_image(box, radius)
        elif box.kind == "text":
            self._paint_text(box)

        for child in box.children:
            self.paint(child)

    def _paint_image(self, box: Box, radius: float) -> None:
        if not box.src or box.width <= 0 or box.height <= 0:
            return
        if not box.src.startswith("data:"):
            raise RenderError(
                RenderError.MALFORMED_DOCUMENT, "Images in a markup snapshot must be inline data URIs"
            )
        clip = ""
        if radius:
            clip_id = f"clip{len(self._defs)}"
            self._defs.append(f'<clipPath id="{clip_id}">{self._rect(box, radius, "")}</clipPath>')
            clip = f' clip-path="url(#{clip_id})"'
        self._body.append(
            f'<image x="{_fmt(box.x)}" y="{_fmt(box.y)}" width="{_fmt(box.width)}" height="{_fmt(box.height)}" '
            f'preserveAspectRatio="xMidYMid slice" xlink:href={quoteattr(box.src)}{clip}/>'
        )

    def _paint_text(self, box: Box) -> None:
        align = box.style.get("text-align", "left")
        content_width = box.width - box.padding[1] - box.padding[3]
        cursor_y = box.y + box.padding[0]
        for line in box.lines:
            x = box.x + box.padding[3]
            if align == "center":
                x += (content_width - line.width) / 2
            elif align in ("right", "end"):
                x += content_width - line.width
            baseline = cursor_y + line.baseline

            # Consecutive fragments of one run share a single path element
            groups: list[tuple[TextRun, str, float]] = []
            for run, text, width in line.fragments:
                if groups and groups[-1][0] is run:
                    groups[-1] = (run, groups[-1][1] + text, groups[-1][2] + width)
                else:
                    groups.append((run, text, width))

            for run, text, width in groups:
                if text.strip():
                    d = self._fonts[run.font].outline(text, run.size, x, baseline)
                    if d:
                        self._body.append(f"<path d={quoteattr(d)} fill={quoteattr(run.color)}/>")
                x += width
            cursor_y += line.height

    def document(self, width: int, height: int) -> str:
        defs = f"<defs>{''.join(self._defs)}</defs>" if self._defs else ""
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" '
            f'width="{width}" height="{height}" viewBox="0 0 {width} {height}">'
            f"{defs}{''.join(self._body)}</svg>"
        )
