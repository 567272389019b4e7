"""
Prometheus metrics for icon generation.

Design principles:
- Low cardinality (controlled labels)
- Best-effort (never block main flow)

=============================================================================
CARDINALITY CONTROL
=============================================================================

ALLOWED LABELS (bounded sets):
- kind:    "flag", "crypto"
- status:  "ok", "invalid_input", "asset_not_found", "fetch_failed",
           "render_failed", "error" (generation); "ok", "timeout",
           "http_4xx", "http_5xx", "invalid", "error" (flag fetch)
- index:   "currencies", "cryptos"

FORBIDDEN AS LABELS:
- currency codes, crypto symbols, brand names, country codes
- URLs, queries, error messages

Use logs for per-request detail, not metric labels.
=============================================================================
"""

import logging

from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
    REGISTRY,
)

logger = logging.getLogger(__name__)

# =============================================================================
# GENERATION METRICS
# =============================================================================

icon_generation_requests_total = Counter(
    "icon_generation_requests_total",
    "Icon generation requests by kind and outcome",
    ["kind", "status"],
)

icon_generation_latency_ms = Histogram(
    "icon_generation_latency_ms",
    "End-to-end generation latency (six variants) in milliseconds",
    ["kind"],
    buckets=[10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000],
)

icon_render_total = Counter(
    "icon_render_total",
    "SVG -> PNG rasterizations by outcome",
    ["status"],
)

# =============================================================================
# EXTERNAL ART METRICS
# =============================================================================

icon_flag_fetch_total = Counter(
    "icon_flag_fetch_total",
    "Flag art fetches by outcome",
    ["status"],
)

icon_flag_fetch_latency_ms = Histogram(
    "icon_flag_fetch_latency_ms",
    "Flag art fetch latency in milliseconds",
    buckets=[10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000],
)

# =============================================================================
# SEARCH METRICS
# =============================================================================

icon_search_requests_total = Counter(
    "icon_search_requests_total",
    "Fuzzy search requests by index",
    ["index"],
)


def record_generation(kind: str, status: str, latency_ms: float) -> None:
    """Record one generation request."""
    try:
        icon_generation_requests_total.labels(kind=kind, status=status).inc()
        icon_generation_latency_ms.labels(kind=kind).observe(latency_ms)
    except Exception as e:
        logger.warning(f"Failed to record generation metric: {e}")


def record_render(status: str) -> None:
    try:
        icon_render_total.labels(status=status).inc()
    except Exception as e:
        logger.warning(f"Failed to record render metric: {e}")


def record_flag_fetch(status: str, latency_ms: float) -> None:
    """Record one flag fetch."""
    try:
        icon_flag_fetch_total.labels(status=status).inc()
        icon_flag_fetch_latency_ms.observe(latency_ms)
    except Exception as e:
        logger.warning(f"Failed to record flag fetch metric: {e}")


def record_search(index: str) -> None:
    try:
        icon_search_requests_total.labels(index=index).inc()
    except Exception as e:
        logger.warning(f"Failed to record search metric: {e}")


def get_metrics_text() -> tuple[str, str]:
    """
    Generate Prometheus metrics text output.

    Returns:
        Tuple of (content, content_type)
    """
    return generate_latest(REGISTRY).decode("utf-8"), CONTENT_TYPE_LATEST
