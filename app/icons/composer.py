"""Vector composition of flag-pair and crypto icons.

Flag pairs: two circular flags (circle-flags art, 512x512 viewBox) clipped to
circles and overlapped on a diagonal, each with a light-gray edge ring.

    size 56  -> flag diameter 38, second flag offset 18
    size 100 -> flag diameter 66, second flag offset 34
    badged   -> 66 / 34 layout on a 100x100 layout canvas at any pixel size

Crypto icons: local art scaled into a 0..100 viewBox, or a generated
fallback (derived color square + first letter).

Badges sit bottom-left: translate(0, canvas - badge_height).
"""

from dataclasses import dataclass
from typing import Optional

from app.icons import svg
from app.icons.colors import derive_color
from app.icons.models import BadgeAsset, CompositionSpec, IconKind

FLAG_ART_VIEWBOX = "0 0 512 512"
FLAG_RING_COLOR = "#EAEAEA"
CLIP_ID = "circleClip"
BADGED_CANVAS = 100

CRYPTO_VIEWBOX = "0 0 100 100"
CRYPTO_ART_SCALE = {100: 3.125, 56: 1.75}
FALLBACK_FONT_SIZE = {100: 50, 56: 28}


@dataclass(frozen=True)
class FlagLayout:
    """Geometry of the two-circle flag composition."""

    canvas: int
    diameter: int
    offset: int

    @classmethod
    def for_size(cls, size: int, badged: bool = False) -> "FlagLayout":
        if badged:
            return cls(canvas=BADGED_CANVAS, diameter=66, offset=34)
        if size == 56:
            return cls(canvas=56, diameter=38, offset=18)
        return cls(canvas=size, diameter=66, offset=34)

    @property
    def center(self) -> float:
        return self.diameter / 2

    @property
    def clip_radius(self) -> float:
        # Half a unit inside the edge so the 1-unit ring covers the clip seam
        return self.center - 0.5

    @property
    def view_box(self) -> str:
        return f"0 0 {self.canvas} {self.canvas}"


def badge_offset(canvas: float, badge: BadgeAsset) -> tuple[float, float]:
    """Bottom-left anchor for a badge on a square canvas."""
    return 0, canvas - badge.height


def _badge_group(canvas: float, badge: BadgeAsset) -> svg.Element:
    x, y = badge_offset(canvas, badge)
    inner = svg.strip_svg_wrapper(badge.markup)
    return svg.group(
        svg.embed(inner, badge.width, badge.height, badge.view_box),
        transform=svg.translate(x, y),
    )


def _flag_group(flag_markup: str, layout: FlagLayout, offset: int) -> svg.Element:
    d = layout.diameter
    return svg.group(
        svg.group(
            svg.embed(svg.strip_svg_wrapper(flag_markup), d, d, FLAG_ART_VIEWBOX),
            clip_path=CLIP_ID,
        ),
        svg.circle(
            layout.center,
            layout.center,
            layout.clip_radius,
            fill="none",
            stroke=FLAG_RING_COLOR,
            stroke_width=1,
        ),
        transform=svg.translate(offset, offset),
    )


def combine_flags(
    flag1: str,
    flag2: str,
    size: int = 56,
    badge: Optional[BadgeAsset] = None,
) -> str:
    """Compose two circular flags into one paired-currency icon.

    Args:
        flag1: Base currency flag markup (full SVG document)
        flag2: Quote currency flag markup
        size: Output canvas size in pixels (56 or 100)
        badge: Optional overlay badge

    Returns:
        Self-contained SVG markup
    """
    layout = FlagLayout.for_size(size, badged=badge is not None)
    children = [
        svg.clip_circle(CLIP_ID, layout.center, layout.center, layout.clip_radius),
        _flag_group(flag1, layout, 0),
        _flag_group(flag2, layout, layout.offset),
    ]
    if badge is not None:
        children.append(_badge_group(layout.canvas, badge))

    return svg.document(size, size, layout.view_box, children).render()


def fallback_icon(symbol: str, size: int = 100) -> list[svg.Element]:
    """Colored square with the symbol's initial, for cryptos without art."""
    initial = (symbol or "?")[0].upper()
    return [
        svg.rect(100, 100, f"#{derive_color(symbol)}"),
        svg.text(initial, 50, 50, FALLBACK_FONT_SIZE.get(size, 50)),
    ]


def create_crypto_icon(
    symbol: str,
    size: int = 100,
    art: Optional[str] = None,
    badge: Optional[BadgeAsset] = None,
) -> str:
    """Compose a crypto icon, falling back to a generated glyph without art.

    The badge is anchored against the requested pixel size.
    """
    inner = svg.strip_svg_wrapper(art) if art else ""
    if inner:
        scale = CRYPTO_ART_SCALE.get(size, CRYPTO_ART_SCALE[100])
        children = [svg.group(svg.Raw(inner), transform=f"translate(0,0) scale({svg.fmt(scale)})")]
    else:
        children = fallback_icon(symbol, size)

    if badge is not None:
        children.append(_badge_group(size, badge))

    return svg.document(size, size, CRYPTO_VIEWBOX, children).render()


def compose(spec: CompositionSpec, badge: Optional[BadgeAsset] = None) -> str:
    """Render one variant described by a CompositionSpec."""
    if spec.kind == IconKind.FLAG:
        return combine_flags(spec.primary_art or "", spec.secondary_art or "", spec.size, badge)
    return create_crypto_icon(spec.symbol, spec.size, spec.primary_art, badge)
