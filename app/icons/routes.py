"""API Routes for icon search and generation.

Endpoints:
- GET  /api/search-currencies?q=   fuzzy currency lookup (autocomplete)
- GET  /api/search-cryptos?q=      fuzzy crypto lookup (autocomplete)
- GET  /api/brands                 available badge brands
- POST /api/generate               six flag-pair variants for a currency pair
- POST /api/generate-crypto        six crypto icon variants for a symbol

Generation responses carry the SVG inline and the PNG as base64.
"""

import asyncio
import base64
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.config import get_settings
from app.icons.colors import derive_color
from app.icons.context import IconContext
from app.icons.errors import ExternalFetchFailure, GenerationFailure, InvalidInput, RenderFailure
from app.icons.generator import generate_crypto_assets, generate_flag_assets
from app.icons.models import GeneratedAsset
from app.icons.storage import build_crypto_dir, build_flag_dir, save_assets
from app.telemetry.metrics import record_search
from app.telemetry.sentry import capture_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["icons"])


def get_icon_context(request: Request) -> IconContext:
    return request.app.state.icon_context


# =============================================================================
# Pydantic Models
# =============================================================================


class GenerateFlagsRequest(BaseModel):
    """Request to generate flag-pair icons."""

    currency1: Optional[str] = None
    currency2: Optional[str] = None
    brand: Optional[str] = None


class GenerateCryptoRequest(BaseModel):
    """Request to generate crypto icons.

    Only the first token of symbol is used ("BTC Bitcoin" -> "BTC").
    """

    symbol: Optional[str] = None
    brand: Optional[str] = None


class CurrencySuggestion(BaseModel):
    code: str
    name: str
    icon: str
    score: Optional[float] = None


class CryptoSuggestion(BaseModel):
    symbol: str
    name: str
    color: str
    score: Optional[float] = None


class BrandResponse(BaseModel):
    name: str


class GeneratedAssetResponse(BaseModel):
    name: str
    svg: str
    pngBase64: str


def _serialize(assets: list[GeneratedAsset]) -> list[dict]:
    return [
        GeneratedAssetResponse(
            name=a.name,
            svg=a.svg,
            pngBase64=base64.b64encode(a.png).decode("ascii"),
        ).model_dump()
        for a in assets
    ]


def _error_response(error: Exception) -> JSONResponse:
    if isinstance(error, InvalidInput):
        return JSONResponse(status_code=400, content={"error": str(error)})
    if isinstance(error, ExternalFetchFailure):
        return JSONResponse(status_code=502, content={"error": str(error)})
    if isinstance(error, RenderFailure):
        capture_exception(error)
    return JSONResponse(status_code=500, content={"error": str(error)})


# =============================================================================
# Search Endpoints
# =============================================================================


@router.get("/search-currencies", response_model=list[CurrencySuggestion])
async def search_currencies(
    q: str = Query("", description="Code, name or country"),
    ctx: IconContext = Depends(get_icon_context),
):
    record_search("currencies")
    return [
        CurrencySuggestion(code=h.entry.key, name=h.entry.display_name, icon=h.entry.icon_ref, score=h.score)
        for h in ctx.search_currencies(q)
    ]


@router.get("/search-cryptos", response_model=list[CryptoSuggestion])
async def search_cryptos(
    q: str = Query("", description="Symbol or name"),
    ctx: IconContext = Depends(get_icon_context),
):
    record_search("cryptos")
    return [
        CryptoSuggestion(
            symbol=h.entry.key,
            name=h.entry.display_name,
            color=h.entry.color or f"#{derive_color(h.entry.key)}",
            score=h.score,
        )
        for h in ctx.search_cryptos(q)
    ]


@router.get("/brands", response_model=list[BrandResponse])
async def list_brands(ctx: IconContext = Depends(get_icon_context)):
    return [BrandResponse(name=b) for b in ctx.list_brands()]


# =============================================================================
# Generation Endpoints
# =============================================================================


@router.post("/generate")
async def generate_flags(body: GenerateFlagsRequest, ctx: IconContext = Depends(get_icon_context)):
    """Generate the six flag-pair variants for a currency pair."""
    try:
        assets = await generate_flag_assets(ctx, body.currency1, body.currency2, body.brand)
    except (InvalidInput, GenerationFailure) as e:
        return _error_response(e)

    settings = get_settings()
    if settings.SAVE_GENERATED_ASSETS:
        directory, prefix = build_flag_dir(
            settings.OUTPUT_DIR, body.currency1.strip().upper(), body.currency2.strip().upper()
        )
        await asyncio.to_thread(save_assets, directory, prefix, assets)

    return _serialize(assets)


@router.post("/generate-crypto")
async def generate_crypto(body: GenerateCryptoRequest, ctx: IconContext = Depends(get_icon_context)):
    """Generate the six crypto icon variants for a symbol."""
    tokens = (body.symbol or "").split()
    symbol = tokens[0] if tokens else ""

    try:
        assets = await generate_crypto_assets(ctx, symbol, body.brand)
    except (InvalidInput, GenerationFailure) as e:
        return _error_response(e)

    settings = get_settings()
    if settings.SAVE_GENERATED_ASSETS:
        directory, prefix = build_crypto_dir(settings.OUTPUT_DIR, symbol.upper())
        await asyncio.to_thread(save_assets, directory, prefix, assets)

    return _serialize(assets)
