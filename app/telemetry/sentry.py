"""
Sentry integration for error tracking.

Provides:
- Automatic exception capture with stacktrace
- FastAPI request context
- Explicit capture of render failures (composition bugs)

Security:
- Sensitive headers are scrubbed before sending
- Request bodies are NOT captured
- PII is disabled by default
"""

import logging
import os
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

logger = logging.getLogger(__name__)

# Module-level flag to track initialization
_sentry_initialized = False

SENSITIVE_HEADERS = ("authorization", "cookie", "set-cookie", "x-api-key", "x-forwarded-for")


def scrub_sensitive_data(event: dict, hint: dict) -> Optional[dict]:
    """
    Scrub sensitive data from Sentry events before sending.

    Removes authorization/cookie headers and the request body.
    """
    try:
        request = event.get("request") or {}

        headers = request.get("headers") or {}
        for key in list(headers.keys()):
            if key.lower() in SENSITIVE_HEADERS:
                headers[key] = "[REDACTED]"
        request["headers"] = headers

        if "data" in request:
            request["data"] = "[SCRUBBED]"

        event["request"] = request

    except Exception as e:
        # Never fail scrubbing - just log and continue
        logger.warning(f"Sentry scrubbing error (continuing): {e}")

    return event


def init_sentry(dsn: str) -> bool:
    """
    Initialize Sentry SDK if a DSN is configured.

    Returns True if Sentry was initialized, False otherwise.

    Environment variables:
    - SENTRY_TRACES_SAMPLE_RATE: Optional. Default 0.05 (5%).
    - SENTRY_ENVIRONMENT: Optional. Default "development".
    """
    global _sentry_initialized

    if _sentry_initialized:
        logger.debug("Sentry already initialized, skipping")
        return True

    if not dsn:
        logger.info("Sentry not configured (SENTRY_DSN not set)")
        return False

    environment = os.getenv("SENTRY_ENVIRONMENT", "development")
    traces_sample_rate = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.05"))

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            LoggingIntegration(
                level=logging.ERROR,
                event_level=logging.ERROR,
            ),
        ],
        traces_sample_rate=traces_sample_rate,
        send_default_pii=False,
        before_send=scrub_sensitive_data,
        ignore_errors=[KeyboardInterrupt, SystemExit],
    )

    _sentry_initialized = True
    logger.info(f"Sentry initialized: env={environment}, traces_sample_rate={traces_sample_rate}")
    return True


def is_sentry_enabled() -> bool:
    """Check if Sentry is initialized and active."""
    return _sentry_initialized


def capture_exception(exception: Exception, **extra_context) -> None:
    """
    Capture an exception to Sentry with extra context.

    No-op when Sentry is not initialized.
    """
    if not _sentry_initialized:
        return

    with sentry_sdk.push_scope() as scope:
        for key, value in extra_context.items():
            scope.set_extra(key, value)
        sentry_sdk.capture_exception(exception)
