"""Minimal SVG markup builder.

Composition is expressed as a small element tree (document, group, clip
circle, nested embed, rect, text) and rendered deterministically: attribute
order is insertion order and numbers are formatted without trailing zeros,
so identical inputs always yield byte-identical markup.

Source art is never parsed. Embedded markup is reduced to the content
between its outer <svg> tags and nested verbatim.
"""

import html
import re
from dataclasses import dataclass, field
from typing import Optional, Union

SVG_NS = "http://www.w3.org/2000/svg"

_PROLOG_RE = re.compile(r"^\s*(?:<\?xml[^>]*\?>|<!DOCTYPE[^>]*>|<!--.*?-->|\s)*", re.IGNORECASE | re.DOTALL)
_OPEN_SVG_RE = re.compile(r"<svg\b[^>]*?(/?)>", re.IGNORECASE)
_CLOSE_SVG_RE = re.compile(r"</svg\s*>", re.IGNORECASE)
_ROOT_ATTR_RE = r"""(?<![\w:-]){name}\s*=\s*["']([^"']*)["']"""
_LENGTH_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+)\s*(px)?\s*$")


def fmt(value: Union[int, float]) -> str:
    """Format a number for markup: 19.0 -> '19', 18.5 -> '18.5'."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, float):
        return f"{value:.4f}".rstrip("0").rstrip(".")
    return str(value)


def _attr_value(value) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return fmt(value)
    return html.escape(str(value), quote=True)


@dataclass
class Raw:
    """Pre-rendered markup inserted verbatim."""

    markup: str

    def render(self, depth: int = 0) -> str:
        text = self.markup.strip()
        if not text:
            return ""
        return "  " * depth + text


@dataclass
class Element:
    tag: str
    attrs: list[tuple[str, object]] = field(default_factory=list)
    children: list[Union["Element", Raw]] = field(default_factory=list)
    text: Optional[str] = None

    def render(self, depth: int = 0) -> str:
        pad = "  " * depth
        attrs = "".join(f' {k}="{_attr_value(v)}"' for k, v in self.attrs if v is not None)
        if self.text is not None:
            return f"{pad}<{self.tag}{attrs}>{html.escape(self.text, quote=False)}</{self.tag}>"
        rendered = [c.render(depth + 1) for c in self.children]
        rendered = [r for r in rendered if r]
        if not rendered:
            return f"{pad}<{self.tag}{attrs} />"
        inner = "\n".join(rendered)
        return f"{pad}<{self.tag}{attrs}>\n{inner}\n{pad}</{self.tag}>"


def document(width, height, view_box: str, children) -> Element:
    return Element(
        "svg",
        [("xmlns", SVG_NS), ("width", width), ("height", height), ("viewBox", view_box)],
        list(children),
    )


def group(*children, transform: Optional[str] = None, clip_path: Optional[str] = None) -> Element:
    attrs = [("transform", transform), ("clip-path", f"url(#{clip_path})" if clip_path else None)]
    return Element("g", attrs, list(children))


def translate(x, y) -> str:
    return f"translate({fmt(x)},{fmt(y)})"


def circle(cx, cy, r, **style) -> Element:
    attrs: list[tuple[str, object]] = [("cx", cx), ("cy", cy), ("r", r)]
    attrs += [(k.replace("_", "-"), v) for k, v in style.items()]
    return Element("circle", attrs)


def clip_circle(clip_id: str, cx, cy, r) -> Element:
    """<defs> holding a circular clipPath."""
    clip = Element("clipPath", [("id", clip_id)], [circle(cx, cy, r)])
    return Element("defs", [], [clip])


def embed(inner_markup: str, width, height, view_box: Optional[str] = None) -> Element:
    """Nest foreign art as an inner <svg> viewport."""
    return Element(
        "svg",
        [("width", width), ("height", height), ("viewBox", view_box)],
        [Raw(inner_markup)],
    )


def rect(width, height, fill: str) -> Element:
    return Element("rect", [("width", width), ("height", height), ("fill", fill)])


def text(content: str, x, y, font_size, fill: str = "#FFFFFF") -> Element:
    return Element(
        "text",
        [
            ("x", x),
            ("y", y),
            ("font-family", "Arial, sans-serif"),
            ("font-size", font_size),
            ("font-weight", "bold"),
            ("text-anchor", "middle"),
            ("dominant-baseline", "central"),
            ("fill", fill),
        ],
        text=content,
    )


# =============================================================================
# Minimal inner-markup extraction
# =============================================================================


def strip_svg_wrapper(markup: str) -> str:
    """Return the graphical content inside the outermost <svg> element.

    Drops any XML declaration, DOCTYPE or leading comments. Markup without an
    <svg> wrapper is returned trimmed; a self-closing root yields "".
    """
    body = _PROLOG_RE.sub("", markup or "", count=1)
    opening = _OPEN_SVG_RE.search(body)
    if not opening:
        return body.strip()
    if opening.group(1):
        return ""

    closings = list(_CLOSE_SVG_RE.finditer(body, opening.end()))
    end = closings[-1].start() if closings else len(body)
    return body[opening.end() : end].strip()


def _root_attr(markup: str, name: str) -> Optional[str]:
    opening = _OPEN_SVG_RE.search(markup or "")
    if not opening:
        return None
    match = re.search(_ROOT_ATTR_RE.format(name=re.escape(name)), opening.group(0))
    return match.group(1).strip() if match else None


def _parse_length(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    match = _LENGTH_RE.match(value)
    return float(match.group(1)) if match else None


def read_svg_size(markup: str) -> tuple[Optional[float], Optional[float], Optional[str]]:
    """Read (width, height, viewBox) from the root <svg> tag.

    Missing width/height fall back to the viewBox extent. Values that are
    absent or not plain numbers (e.g. percentages) come back as None.
    """
    width = _parse_length(_root_attr(markup, "width"))
    height = _parse_length(_root_attr(markup, "height"))
    view_box = _root_attr(markup, "viewBox")

    if view_box and (width is None or height is None):
        parts = re.split(r"[\s,]+", view_box.strip())
        if len(parts) == 4:
            try:
                vb_width, vb_height = float(parts[2]), float(parts[3])
            except ValueError:
                vb_width = vb_height = None
            if width is None:
                width = vb_width
            if height is None:
                height = vb_height

    return width, height, view_box or None
