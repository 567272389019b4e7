"""Shared fixtures: packaged reference data with a mocked flag CDN."""

import httpx
import pytest

from app.config import Settings
from app.icons.context import build_icon_context
from app.icons.sources import FlagArtResolver

FLAG_BASE_URL = "https://flags.test/flags"


def make_flag_svg(color: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<svg xmlns="http://www.w3.org/2000/svg" width="512" height="512" viewBox="0 0 512 512">'
        f'<circle cx="256" cy="256" r="256" fill="{color}"/>'
        "</svg>"
    )


FLAG_ART = {
    "us": make_flag_svg("#B22234"),
    "eu": make_flag_svg("#003399"),
    "gb": make_flag_svg("#012169"),
    "jp": make_flag_svg("#BC002D"),
}


def flag_handler(request: httpx.Request) -> httpx.Response:
    country = request.url.path.rsplit("/", 1)[-1].removesuffix(".svg")
    if country in FLAG_ART:
        return httpx.Response(200, text=FLAG_ART[country], headers={"content-type": "image/svg+xml"})
    return httpx.Response(404, text="Not Found")


@pytest.fixture
def settings() -> Settings:
    return Settings(SEARCH_EMPTY_QUERY_MODE="all", SAVE_GENERATED_ASSETS=False)


@pytest.fixture
def flag_resolver() -> FlagArtResolver:
    return FlagArtResolver(FLAG_BASE_URL, timeout=5.0, transport=httpx.MockTransport(flag_handler))


@pytest.fixture
def icon_context(settings, flag_resolver):
    return build_icon_context(settings, flag_resolver=flag_resolver)
