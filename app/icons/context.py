"""Immutable startup context shared by all icon requests.

Built once in the app lifespan and stored on app.state; handlers receive it
through a dependency. Everything here is read-only after construction, so
concurrent requests need no locking.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from app.config import Settings
from app.icons.errors import AssetNotFound, InvalidInput
from app.icons.models import BADGE_OVERLAYS, BadgeAsset, Overlay, ReferenceEntry
from app.icons.search import FuzzyIndex, SearchHit, build_crypto_index, build_currency_index
from app.icons.sources import (
    CRYPTO_MANIFEST_FILE,
    FOREX_FILE,
    BadgeStore,
    FlagArtResolver,
    LocalArtStore,
    list_brands,
    load_cryptos,
    load_currencies,
)

logger = logging.getLogger(__name__)


def _exact_lookup(entries: tuple[ReferenceEntry, ...]) -> Mapping[str, ReferenceEntry]:
    lookup: dict[str, ReferenceEntry] = {}
    for entry in entries:
        # First occurrence wins for duplicate keys
        lookup.setdefault(entry.key.lower(), entry)
    return MappingProxyType(lookup)


@dataclass(frozen=True)
class IconContext:
    currencies: tuple[ReferenceEntry, ...]
    cryptos: tuple[ReferenceEntry, ...]
    brands: tuple[str, ...]
    badges: Mapping[tuple[str, Overlay], BadgeAsset]
    currency_index: FuzzyIndex
    crypto_index: FuzzyIndex
    art_store: LocalArtStore
    flag_resolver: FlagArtResolver
    default_brand: str = "Default"
    _currency_lookup: Mapping[str, ReferenceEntry] = field(init=False, repr=False)
    _crypto_lookup: Mapping[str, ReferenceEntry] = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "_currency_lookup", _exact_lookup(self.currencies))
        object.__setattr__(self, "_crypto_lookup", _exact_lookup(self.cryptos))

    # -------------------------------------------------------------------------
    # Exact resolution (generation)
    # -------------------------------------------------------------------------

    def resolve_currency(self, code: Optional[str]) -> ReferenceEntry:
        code = (code or "").strip()
        if not code:
            raise InvalidInput("Currency code is required")
        entry = self._currency_lookup.get(code.lower())
        if entry is None:
            raise InvalidInput(f"Unknown currency code: {code}")
        return entry

    def resolve_crypto(self, symbol: Optional[str]) -> ReferenceEntry:
        symbol = (symbol or "").strip()
        if not symbol:
            raise InvalidInput("Crypto symbol is required")
        entry = self._crypto_lookup.get(symbol.lower())
        if entry is None:
            raise InvalidInput(f"Unknown crypto symbol: {symbol}")
        return entry

    def resolve_brand(self, brand: Optional[str]) -> str:
        return (brand or "").strip() or self.default_brand

    def badge(self, brand: str, variant: Overlay) -> BadgeAsset:
        asset = self.badges.get((brand, variant))
        if asset is None:
            raise AssetNotFound(brand, variant.value)
        return asset

    # -------------------------------------------------------------------------
    # Interactive lookup
    # -------------------------------------------------------------------------

    def search_currencies(self, query: str) -> list[SearchHit]:
        return self.currency_index.search(query)

    def search_cryptos(self, query: str) -> list[SearchHit]:
        return self.crypto_index.search(query)

    def list_brands(self) -> list[str]:
        return list(self.brands)


def _preload_badges(store: BadgeStore, brands: list[str]) -> dict[tuple[str, Overlay], BadgeAsset]:
    badges: dict[tuple[str, Overlay], BadgeAsset] = {}
    for brand in brands:
        for variant in BADGE_OVERLAYS:
            try:
                badges[(brand, variant)] = store.load(brand, variant)
            except AssetNotFound as e:
                logger.warning(f"[STARTUP] {e}")
    return badges


def build_icon_context(settings: Settings, flag_resolver: Optional[FlagArtResolver] = None) -> IconContext:
    """Load reference data, badges and indices once at startup."""
    currencies = load_currencies(settings.DATA_DIR / FOREX_FILE)
    cryptos = load_cryptos(settings.DATA_DIR / CRYPTO_MANIFEST_FILE)
    brands = list_brands(settings.BADGES_DIR)
    badges = _preload_badges(BadgeStore(settings.BADGES_DIR), brands)

    index_options = {
        "threshold": settings.SEARCH_THRESHOLD,
        "limit": settings.SEARCH_LIMIT,
        "empty_query_mode": settings.SEARCH_EMPTY_QUERY_MODE,
    }

    ctx = IconContext(
        currencies=tuple(currencies),
        cryptos=tuple(cryptos),
        brands=tuple(brands),
        badges=MappingProxyType(badges),
        currency_index=build_currency_index(currencies, **index_options),
        crypto_index=build_crypto_index(cryptos, **index_options),
        art_store=LocalArtStore(settings.CRYPTO_ICONS_DIR),
        flag_resolver=flag_resolver
        or FlagArtResolver(settings.FLAG_BASE_URL, timeout=settings.FLAG_FETCH_TIMEOUT_SECONDS),
        default_brand=settings.DEFAULT_BRAND,
    )

    logger.info(
        f"[STARTUP] Icon context ready: currencies={len(currencies)}, cryptos={len(cryptos)}, "
        f"brands={brands}, badges={len(badges)}"
    )
    return ctx
