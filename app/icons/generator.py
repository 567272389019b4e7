"""Variant orchestration: one request -> six rendered variants.

Every request produces the fixed matrix

    {Original, OTC, LEVERAGED} x {56x56, 100x100}

in canonical order (Original_56x56, Original_100x100, OTC_56x56, ...).
Generation is all-or-nothing: an unresolved code, a missing badge, a failed
flag fetch or a render error fails the whole request.

Usage:
    assets = await generate_flag_assets(ctx, "USD", "EUR", "Default")
    assets = await generate_crypto_assets(ctx, "BTC", "Default")
"""

import asyncio
import logging
import time
from typing import Optional

from app.icons.composer import compose
from app.icons.context import IconContext
from app.icons.errors import (
    AssetNotFound,
    ExternalFetchFailure,
    IconError,
    InvalidInput,
    RenderFailure,
)
from app.icons.models import (
    BADGE_OVERLAYS,
    VARIANT_MATRIX,
    BadgeAsset,
    CompositionSpec,
    GeneratedAsset,
    IconKind,
    Overlay,
)
from app.icons.raster import svg_to_png
from app.icons.sources import country_code_from_icon
from app.telemetry.metrics import record_generation, record_render

logger = logging.getLogger(__name__)


def _status_for(error: Exception) -> str:
    if isinstance(error, InvalidInput):
        return "invalid_input"
    if isinstance(error, AssetNotFound):
        return "asset_not_found"
    if isinstance(error, ExternalFetchFailure):
        return "fetch_failed"
    if isinstance(error, RenderFailure):
        return "render_failed"
    return "error"


def _load_badges(ctx: IconContext, brand: str) -> dict[Overlay, BadgeAsset]:
    return {variant: ctx.badge(brand, variant) for variant in BADGE_OVERLAYS}


def render_variant(spec: CompositionSpec, badge: Optional[BadgeAsset] = None) -> GeneratedAsset:
    """Compose and rasterize a single variant.

    Raises:
        RenderFailure: composition or rasterization failed
    """
    try:
        markup = compose(spec, badge)
        png = svg_to_png(markup, spec.size, spec.size)
    except RenderFailure:
        record_render("error")
        raise
    except Exception as e:
        record_render("error")
        raise RenderFailure(f"SVG composition failed for {spec.variant.name}: {e}") from e
    record_render("ok")
    return GeneratedAsset(variant=spec.variant, svg=markup, png=png)


async def _render_matrix(specs: list[CompositionSpec], badges: dict[Overlay, BadgeAsset]) -> list[GeneratedAsset]:
    # Rasterization is CPU-bound (cairo); run variants in worker threads.
    # gather preserves input order, so results stay in canonical order.
    return await asyncio.gather(
        *(asyncio.to_thread(render_variant, spec, badges.get(spec.overlay)) for spec in specs)
    )


async def _run(kind: IconKind, label: str, build) -> list[GeneratedAsset]:
    start = time.time()
    try:
        assets = await build()
    except IconError as e:
        latency_ms = (time.time() - start) * 1000
        record_generation(kind.value, _status_for(e), latency_ms)
        if isinstance(e, RenderFailure):
            logger.exception(f"[ICONS] Render failure for {kind.value} {label}: {e}")
        elif isinstance(e, InvalidInput):
            logger.warning(f"[ICONS] Invalid {kind.value} request {label}: {e}")
        else:
            logger.error(f"[ICONS] Generation failed for {kind.value} {label}: {e}")
        raise

    latency_ms = (time.time() - start) * 1000
    record_generation(kind.value, "ok", latency_ms)
    logger.info(f"[ICONS] Generated {len(assets)} {kind.value} variants for {label} in {latency_ms:.0f}ms")
    return assets


async def generate_flag_assets(
    ctx: IconContext,
    code1: Optional[str],
    code2: Optional[str],
    brand: Optional[str] = None,
) -> list[GeneratedAsset]:
    """Generate the six flag-pair variants for a currency pair.

    Args:
        ctx: Startup context
        code1: Base currency code (case-insensitive)
        code2: Quote currency code (case-insensitive)
        brand: Badge brand (default brand when blank)

    Returns:
        Six GeneratedAsset in canonical order

    Raises:
        InvalidInput: unknown or missing currency code
        GenerationFailure: missing badge, flag fetch failure or render failure
    """

    async def build() -> list[GeneratedAsset]:
        base = ctx.resolve_currency(code1)
        quote = ctx.resolve_currency(code2)
        brand_name = ctx.resolve_brand(brand)
        badges = _load_badges(ctx, brand_name)

        flag1, flag2 = await asyncio.gather(
            ctx.flag_resolver.fetch_flag(country_code_from_icon(base.icon_ref)),
            ctx.flag_resolver.fetch_flag(country_code_from_icon(quote.icon_ref)),
        )

        specs = [
            CompositionSpec(
                kind=IconKind.FLAG,
                size=variant.size,
                overlay=variant.overlay,
                brand=brand_name,
                primary_art=flag1,
                secondary_art=flag2,
            )
            for variant in VARIANT_MATRIX
        ]
        return await _render_matrix(specs, badges)

    return await _run(IconKind.FLAG, f"{code1}/{code2}", build)


async def generate_crypto_assets(
    ctx: IconContext,
    symbol: Optional[str],
    brand: Optional[str] = None,
) -> list[GeneratedAsset]:
    """Generate the six crypto icon variants for a symbol.

    The symbol must exist in the crypto reference data even though a
    fallback glyph could be drawn for anything.

    Raises:
        InvalidInput: unknown or missing symbol
        GenerationFailure: missing badge or render failure
    """

    async def build() -> list[GeneratedAsset]:
        entry = ctx.resolve_crypto(symbol)
        brand_name = ctx.resolve_brand(brand)
        badges = _load_badges(ctx, brand_name)

        art = await asyncio.to_thread(ctx.art_store.load, entry.key)
        if art is None:
            logger.info(f"[ICONS] No local art for {entry.key}, using generated fallback")

        specs = [
            CompositionSpec(
                kind=IconKind.CRYPTO,
                size=variant.size,
                overlay=variant.overlay,
                brand=brand_name,
                primary_art=art,
                symbol=entry.key,
            )
            for variant in VARIANT_MATRIX
        ]
        return await _render_matrix(specs, badges)

    return await _run(IconKind.CRYPTO, str(symbol), build)
