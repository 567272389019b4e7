"""Optional persistence of generated assets to the output directory.

Layout:
    flags:   {OUTPUT_DIR}/{c1}_{c2}/{c1}_{c2}_{variant}.svg|.png
    cryptos: {OUTPUT_DIR}/cryptos/{SYMBOL}/{SYMBOL}_{variant}.svg|.png

Best-effort: write failures are logged, never raised to the request.
"""

import logging
from pathlib import Path
from typing import Sequence

from app.icons.models import GeneratedAsset

logger = logging.getLogger(__name__)


def build_flag_dir(output_dir: Path, code1: str, code2: str) -> tuple[Path, str]:
    prefix = f"{code1}_{code2}"
    return Path(output_dir) / prefix, prefix


def build_crypto_dir(output_dir: Path, symbol: str) -> tuple[Path, str]:
    return Path(output_dir) / "cryptos" / symbol, symbol


def save_assets(directory: Path, prefix: str, assets: Sequence[GeneratedAsset]) -> list[Path]:
    """Write SVG and PNG files for each asset.

    Returns:
        Paths written (empty on failure)
    """
    written: list[Path] = []
    try:
        directory.mkdir(parents=True, exist_ok=True)
        for asset in assets:
            svg_path = directory / f"{prefix}_{asset.name}.svg"
            png_path = directory / f"{prefix}_{asset.name}.png"
            svg_path.write_text(asset.svg, encoding="utf-8")
            png_path.write_bytes(asset.png)
            written += [svg_path, png_path]
    except OSError as e:
        logger.error(f"Failed to save generated assets to {directory}: {e}")
        return []

    logger.info(f"Saved {len(written)} files to {directory}")
    return written
