"""SVG -> PNG rasterization.

CairoSVG renders the composed markup at the target pixel size; Pillow checks
the result and normalizes it to an RGBA PNG of exactly width x height.
"""

import io
import logging

import cairosvg
from PIL import Image

from app.icons.errors import RenderFailure

logger = logging.getLogger(__name__)


def svg_to_png(markup: str, width: int, height: int) -> bytes:
    """Render SVG markup to a PNG of exactly width x height pixels.

    Args:
        markup: Self-contained SVG document
        width: Output width in pixels
        height: Output height in pixels

    Returns:
        PNG bytes (RGBA)

    Raises:
        RenderFailure: markup could not be rendered
    """
    try:
        png_bytes = cairosvg.svg2png(
            bytestring=markup.encode("utf-8"),
            output_width=width,
            output_height=height,
        )
    except Exception as e:
        raise RenderFailure(f"SVG rasterization failed: {e}") from e

    try:
        img = Image.open(io.BytesIO(png_bytes))
        if img.size == (width, height) and img.mode == "RGBA":
            return png_bytes

        if img.mode != "RGBA":
            img = img.convert("RGBA")

        if img.size != (width, height):
            logger.debug(f"Renderer produced {img.size}, resizing to {width}x{height}")
            img = img.resize((width, height), Image.Resampling.LANCZOS)

        output = io.BytesIO()
        img.save(output, format="PNG", optimize=True)
        return output.getvalue()

    except Exception as e:
        raise RenderFailure(f"PNG post-processing failed: {e}") from e


def png_dimensions(png_bytes: bytes) -> tuple[int, int]:
    """Decoded (width, height) of a PNG."""
    with Image.open(io.BytesIO(png_bytes)) as img:
        return img.size
