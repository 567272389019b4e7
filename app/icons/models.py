"""Domain types for icon generation."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

SIZES = (56, 100)


class IconKind(str, Enum):
    FLAG = "flag"
    CRYPTO = "crypto"


class Overlay(str, Enum):
    """Badge overlay applied to a base icon.

    Values are the variant names used in generated asset names and as badge
    file stems in the brand asset store.
    """

    NONE = "Original"
    OTC = "OTC"
    LEVERAGED = "LEVERAGED"


BADGE_OVERLAYS = (Overlay.OTC, Overlay.LEVERAGED)


@dataclass(frozen=True)
class VariantKey:
    """Typed (overlay, size) key carried through the pipeline."""

    overlay: Overlay
    size: int

    @property
    def name(self) -> str:
        return f"{self.overlay.value}_{self.size}x{self.size}"


# Canonical result order: Original_56, Original_100, OTC_56, OTC_100, ...
VARIANT_MATRIX: tuple[VariantKey, ...] = tuple(
    VariantKey(overlay=overlay, size=size)
    for overlay in (Overlay.NONE, Overlay.OTC, Overlay.LEVERAGED)
    for size in SIZES
)


@dataclass(frozen=True)
class ReferenceEntry:
    """Canonical currency or cryptocurrency record.

    Attributes:
        key: Canonical code (currencies) or symbol (cryptos), unique
        display_name: Human readable name
        icon_ref: Source icon reference (flag URL for currencies)
        countries: Alias names (currencies only)
        color: Brand color from the crypto manifest, may be empty
    """

    key: str
    display_name: str
    icon_ref: str = ""
    countries: tuple[str, ...] = ()
    color: str = ""


@dataclass(frozen=True)
class BadgeAsset:
    """Brand-scoped overlay badge with its intrinsic size."""

    variant: Overlay
    brand: str
    width: float
    height: float
    markup: str
    view_box: Optional[str] = None


@dataclass(frozen=True)
class CompositionSpec:
    """Everything the composer needs for one variant."""

    kind: IconKind
    size: int
    overlay: Overlay
    brand: str
    primary_art: Optional[str]
    secondary_art: Optional[str] = None
    symbol: str = ""

    @property
    def variant(self) -> VariantKey:
        return VariantKey(overlay=self.overlay, size=self.size)


@dataclass
class GeneratedAsset:
    """One rendered variant returned to the caller."""

    variant: VariantKey
    svg: str
    png: bytes = field(repr=False)

    @property
    def name(self) -> str:
        return self.variant.name
