"""Brand Icon Generation System.

Generates paired-currency flag icons and cryptocurrency icons in six
variants per request:

Variants:
- Original_56x56 / Original_100x100: base icon
- OTC_56x56 / OTC_100x100: base icon with the brand's OTC badge
- LEVERAGED_56x56 / LEVERAGED_100x100: base icon with the brand's LEVERAGED badge

Output: SVG markup + PNG (CairoSVG)
Lookup: weighted fuzzy search over currencies and cryptos (autocomplete)
"""

from app.icons.colors import derive_color
from app.icons.context import IconContext, build_icon_context
from app.icons.generator import generate_crypto_assets, generate_flag_assets
from app.icons.models import GeneratedAsset, VariantKey

__all__ = [
    "derive_color",
    "IconContext",
    "build_icon_context",
    "generate_crypto_assets",
    "generate_flag_assets",
    "GeneratedAsset",
    "VariantKey",
]
