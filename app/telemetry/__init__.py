"""
Telemetry Module

Provides Prometheus metrics for icon generation, flag fetches, rendering and
search, plus optional Sentry error tracking.
"""

from app.telemetry.metrics import (
    icon_generation_requests_total,
    icon_generation_latency_ms,
    icon_render_total,
    icon_flag_fetch_total,
    icon_flag_fetch_latency_ms,
    icon_search_requests_total,
    record_generation,
    record_render,
    record_flag_fetch,
    record_search,
    get_metrics_text,
)

__all__ = [
    "icon_generation_requests_total",
    "icon_generation_latency_ms",
    "icon_render_total",
    "icon_flag_fetch_total",
    "icon_flag_fetch_latency_ms",
    "icon_search_requests_total",
    "record_generation",
    "record_render",
    "record_flag_fetch",
    "record_search",
    "get_metrics_text",
]
