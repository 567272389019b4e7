"""Tests for reference data loaders, badge/art stores and the flag resolver."""

import httpx
import pytest

from app.config import PACKAGE_DIR
from app.icons.errors import AssetNotFound, ExternalFetchFailure
from app.icons.models import Overlay
from app.icons.sources import (
    BadgeStore,
    FlagArtResolver,
    LocalArtStore,
    country_code_from_icon,
    list_brands,
    load_cryptos,
    load_currencies,
)

DATA_DIR = PACKAGE_DIR / "data"


class TestReferenceData:
    def test_load_currencies(self):
        """forex.yaml rows become reference entries."""
        currencies = {c.key: c for c in load_currencies(DATA_DIR / "forex.yaml")}
        usd = currencies["USD"]
        assert usd.display_name == "US Dollar"
        assert usd.icon_ref.endswith("/us.svg")
        assert "United States" in usd.countries

    def test_load_currencies_skips_malformed_rows(self, tmp_path):
        """Non-mapping rows are skipped."""
        path = tmp_path / "forex.yaml"
        path.write_text("currencies:\n  - XAU:\n      Name: Gold\n  - just-a-string\n  - {}\n")
        entries = load_currencies(path)
        assert [e.key for e in entries] == ["XAU"]
        assert entries[0].countries == ()

    def test_load_cryptos(self):
        """Manifest rows carry name, icon file and color."""
        cryptos = {c.key: c for c in load_cryptos(DATA_DIR / "crypto_manifest.json")}
        assert cryptos["BTC"].display_name == "Bitcoin"
        assert cryptos["BTC"].icon_ref == "btc.svg"
        assert cryptos["BTC"].color == "#f7931a"
        assert cryptos["SHIB"].color == ""

    def test_list_brands(self):
        """Brands are sorted badge sub-directories."""
        assert list_brands(DATA_DIR / "badges") == ["Default", "Midnight"]

    def test_list_brands_missing_dir(self, tmp_path):
        """A missing badge directory yields no brands."""
        assert list_brands(tmp_path / "nope") == []

    @pytest.mark.parametrize(
        "icon_ref, expected",
        [
            ("https://hatscripts.github.io/circle-flags/flags/us.svg", "us"),
            ("https://cdn.example/flags/european_union.svg", "european_union"),
            ("https://cdn.example/flags/US.svg", "xx"),
            ("", "xx"),
        ],
    )
    def test_country_code_from_icon(self, icon_ref, expected):
        """Country code is the lower-case flag file stem."""
        assert country_code_from_icon(icon_ref) == expected


class TestBadgeStore:
    """Brand-scoped badges with intrinsic sizes."""

    def test_load_otc(self):
        """OTC badge size comes from its root attributes."""
        badge = BadgeStore(DATA_DIR / "badges").load("Default", Overlay.OTC)
        assert (badge.width, badge.height) == (80.0, 42.0)
        assert badge.view_box == "0 0 80 42"
        assert badge.brand == "Default"

    def test_load_leveraged(self):
        """LEVERAGED badge loads for a second brand."""
        badge = BadgeStore(DATA_DIR / "badges").load("Midnight", Overlay.LEVERAGED)
        assert (badge.width, badge.height) == (48.0, 48.0)

    def test_unknown_brand(self):
        """Unknown brands raise AssetNotFound."""
        with pytest.raises(AssetNotFound):
            BadgeStore(DATA_DIR / "badges").load("NoSuchBrand", Overlay.OTC)

    @pytest.mark.parametrize("brand", ["../badges", "", "Default/../Midnight"])
    def test_unsafe_brand_names(self, brand):
        """Path-like brand names are refused."""
        with pytest.raises(AssetNotFound):
            BadgeStore(DATA_DIR / "badges").load(brand, Overlay.OTC)

    def test_badge_without_size(self, tmp_path):
        """Badges need a readable size."""
        (tmp_path / "Acme").mkdir()
        (tmp_path / "Acme" / "OTC.svg").write_text("<svg><rect/></svg>")
        with pytest.raises(AssetNotFound, match="intrinsic"):
            BadgeStore(tmp_path).load("Acme", Overlay.OTC)

    def test_viewbox_only_badge(self, tmp_path):
        """Size falls back to the viewBox."""
        (tmp_path / "Acme").mkdir()
        (tmp_path / "Acme" / "LEVERAGED.svg").write_text('<svg viewBox="0 0 40 30"><rect/></svg>')
        badge = BadgeStore(tmp_path).load("Acme", Overlay.LEVERAGED)
        assert (badge.width, badge.height) == (40.0, 30.0)


class TestLocalArtStore:
    def test_known_symbol(self):
        """Art is found by lower-cased symbol."""
        art = LocalArtStore(DATA_DIR / "crypto_icons").load("BTC")
        assert art is not None
        assert "<svg" in art

    def test_missing_symbol(self):
        """Symbols without art return None."""
        assert LocalArtStore(DATA_DIR / "crypto_icons").load("SHIB") is None

    def test_unsafe_symbol(self):
        """Path-like symbols are refused."""
        assert LocalArtStore(DATA_DIR / "crypto_icons").load("../btc") is None


class TestFlagArtResolver:
    """HTTP flag fetches against a mocked transport."""

    def _resolver(self, handler) -> FlagArtResolver:
        return FlagArtResolver("https://flags.test/flags/", timeout=1.0, transport=httpx.MockTransport(handler))

    def test_url_for(self):
        """Flag URLs are <base>/<code>.svg."""
        resolver = FlagArtResolver("https://flags.test/flags/")
        assert resolver.url_for("us") == "https://flags.test/flags/us.svg"

    @pytest.mark.asyncio
    async def test_fetch_ok(self):
        """A 200 SVG body is returned as-is."""
        requested = []

        def handler(request):
            requested.append(str(request.url))
            return httpx.Response(200, text='<svg viewBox="0 0 512 512"></svg>')

        body = await self._resolver(handler).fetch_flag("gb")
        assert body.startswith("<svg")
        assert requested == ["https://flags.test/flags/gb.svg"]

    @pytest.mark.asyncio
    async def test_fetch_not_found(self):
        """Non-200 responses raise with the country code."""
        resolver = self._resolver(lambda request: httpx.Response(404))
        with pytest.raises(ExternalFetchFailure, match="HTTP 404") as exc_info:
            await resolver.fetch_flag("zz")
        assert exc_info.value.country_code == "zz"

    @pytest.mark.asyncio
    async def test_fetch_timeout(self):
        """Timeouts raise ExternalFetchFailure."""
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(ExternalFetchFailure, match="timeout"):
            await self._resolver(handler).fetch_flag("us")

    @pytest.mark.asyncio
    async def test_fetch_transport_error(self):
        """Transport errors raise ExternalFetchFailure."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ExternalFetchFailure, match="connection refused"):
            await self._resolver(handler).fetch_flag("us")

    @pytest.mark.asyncio
    async def test_fetch_non_svg_body(self):
        """Non-SVG bodies are rejected."""
        resolver = self._resolver(lambda request: httpx.Response(200, text="<html>rate limited</html>"))
        with pytest.raises(ExternalFetchFailure, match="not SVG"):
            await resolver.fetch_flag("us")
