"""Reference data, art stores and the external flag resolver.

- Reference data: currencies from forex.yaml, cryptos from the
  cryptocurrency-icons manifest, brands from the badge directory
- BadgeStore: <BADGES_DIR>/<brand>/<OTC|LEVERAGED>.svg
- LocalArtStore: <CRYPTO_ICONS_DIR>/<symbol>.svg
- FlagArtResolver: circle-flags SVGs over HTTP
"""

import json
import logging
import re
import time
from pathlib import Path
from typing import Optional

import httpx
import yaml

from app.icons.errors import AssetNotFound, ExternalFetchFailure
from app.icons.models import BadgeAsset, Overlay, ReferenceEntry
from app.icons.svg import read_svg_size
from app.telemetry.metrics import record_flag_fetch

logger = logging.getLogger(__name__)

FOREX_FILE = "forex.yaml"
CRYPTO_MANIFEST_FILE = "crypto_manifest.json"
UNKNOWN_COUNTRY = "xx"

_COUNTRY_FROM_ICON_RE = re.compile(r"/([a-z_]+)\.svg$")
_SAFE_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9 _.-]*$")


# =============================================================================
# Reference data
# =============================================================================


def load_currencies(path: Path) -> list[ReferenceEntry]:
    """Load currencies from forex.yaml.

    Format:
        currencies:
          - USD:
              Name: US Dollar
              Icon: https://.../flags/us.svg
              Countries: [United States, ...]
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    entries: list[ReferenceEntry] = []
    for item in data.get("currencies") or []:
        if not isinstance(item, dict) or not item:
            continue
        code, details = next(iter(item.items()))
        details = details or {}
        entries.append(
            ReferenceEntry(
                key=str(code),
                display_name=str(details.get("Name") or code),
                icon_ref=str(details.get("Icon") or ""),
                countries=tuple(str(c) for c in details.get("Countries") or ()),
            )
        )

    logger.info(f"Loaded {len(entries)} currencies from {path.name}")
    return entries


def load_cryptos(path: Path) -> list[ReferenceEntry]:
    """Load cryptos from a cryptocurrency-icons style manifest.json."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    entries = [
        ReferenceEntry(
            key=str(row["symbol"]),
            display_name=str(row.get("name") or row["symbol"]),
            icon_ref=f"{str(row['symbol']).lower()}.svg",
            color=str(row.get("color") or ""),
        )
        for row in data
        if isinstance(row, dict) and row.get("symbol")
    ]

    logger.info(f"Loaded {len(entries)} cryptos from {path.name}")
    return entries


def list_brands(badges_dir: Path) -> list[str]:
    """Brands are the sub-directories of the badge store."""
    if not badges_dir.is_dir():
        logger.warning(f"Badge directory not found: {badges_dir}")
        return []
    return sorted(p.name for p in badges_dir.iterdir() if p.is_dir() and not p.name.startswith("."))


def country_code_from_icon(icon_ref: str) -> str:
    """Extract the circle-flags country code from a flag URL ('.../us.svg' -> 'us')."""
    match = _COUNTRY_FROM_ICON_RE.search(icon_ref or "")
    return match.group(1) if match else UNKNOWN_COUNTRY


# =============================================================================
# Local stores
# =============================================================================


class BadgeStore:
    """Brand-scoped overlay badges on disk."""

    def __init__(self, badges_dir: Path):
        self.badges_dir = Path(badges_dir)

    def path_for(self, brand: str, variant: Overlay) -> Optional[Path]:
        if not brand or not _SAFE_NAME_RE.match(brand) or ".." in brand:
            return None
        return self.badges_dir / brand / f"{variant.value}.svg"

    def load(self, brand: str, variant: Overlay) -> BadgeAsset:
        """Load a badge and its intrinsic size.

        Raises:
            AssetNotFound: missing file, unsafe brand name or unreadable size
        """
        path = self.path_for(brand, variant)
        if path is None or not path.is_file():
            raise AssetNotFound(brand, variant.value)

        markup = path.read_text(encoding="utf-8")
        width, height, view_box = read_svg_size(markup)
        if not width or not height:
            raise AssetNotFound(brand, variant.value, reason="badge has no intrinsic width/height")

        return BadgeAsset(
            variant=variant,
            brand=brand,
            width=width,
            height=height,
            markup=markup,
            view_box=view_box,
        )


class LocalArtStore:
    """Crypto icon SVGs keyed by lower-cased symbol."""

    def __init__(self, icons_dir: Path):
        self.icons_dir = Path(icons_dir)

    def load(self, symbol: str) -> Optional[str]:
        if not symbol or not _SAFE_NAME_RE.match(symbol):
            return None
        path = self.icons_dir / f"{symbol.lower()}.svg"
        if not path.is_file():
            logger.debug(f"No local art for {symbol}")
            return None
        return path.read_text(encoding="utf-8")


# =============================================================================
# External flag art
# =============================================================================


class FlagArtResolver:
    """Fetches circular country flags (circle-flags) over HTTP.

    Usage:
        resolver = FlagArtResolver("https://hatscripts.github.io/circle-flags/flags")
        svg = await resolver.fetch_flag("us")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def url_for(self, country_code: str) -> str:
        return f"{self.base_url}/{country_code}.svg"

    async def fetch_flag(self, country_code: str) -> str:
        """Fetch one flag SVG.

        Raises:
            ExternalFetchFailure: timeout, transport error, non-2xx or non-SVG body
        """
        url = self.url_for(country_code)
        start = time.time()
        status = "error"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url)

            if response.status_code != 200:
                status = f"http_{response.status_code // 100}xx"
                raise ExternalFetchFailure(country_code, f"HTTP {response.status_code}")

            body = response.text
            if "<svg" not in body:
                status = "invalid"
                raise ExternalFetchFailure(country_code, "response is not SVG")

            status = "ok"
            return body

        except httpx.TimeoutException as e:
            status = "timeout"
            raise ExternalFetchFailure(country_code, "timeout") from e
        except httpx.HTTPError as e:
            raise ExternalFetchFailure(country_code, str(e) or e.__class__.__name__) from e
        finally:
            latency_ms = (time.time() - start) * 1000
            record_flag_fetch(status, latency_ms)
            logger.debug(f"Flag fetch {country_code}: {status} ({latency_ms:.0f}ms)")
