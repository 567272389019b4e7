"""FastAPI application for the Brand Icon Generator."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from app.config import get_settings
from app.icons.context import build_icon_context
from app.icons.routes import router as icons_router
from app.telemetry.metrics import get_metrics_text
from app.telemetry.sentry import init_sentry, is_sentry_enabled

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize Sentry for error tracking (before FastAPI app creation)
# Only activates if SENTRY_DSN is set
init_sentry(settings.SENTRY_DSN)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"Starting {settings.APP_NAME}...")
    app.state.icon_context = build_icon_context(settings)
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title=settings.APP_NAME,
    description="Branded flag-pair and cryptocurrency icon generator",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(icons_router)


@app.get("/health")
async def health():
    ctx = getattr(app.state, "icon_context", None)
    return {
        "status": "ok" if ctx is not None else "starting",
        "currencies": len(ctx.currencies) if ctx else 0,
        "cryptos": len(ctx.cryptos) if ctx else 0,
        "brands": list(ctx.brands) if ctx else [],
        "sentry": is_sentry_enabled(),
    }


@app.get("/metrics")
async def metrics():
    if not settings.METRICS_ENABLED:
        return PlainTextResponse("metrics disabled", status_code=404)
    content, content_type = get_metrics_text()
    return PlainTextResponse(content, media_type=content_type)
