"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    APP_NAME: str = "Brand Icon Generator"
    LOG_LEVEL: str = "INFO"

    # ═══════════════════════════════════════════════════════════════
    # Static reference data and art stores
    # ═══════════════════════════════════════════════════════════════

    DATA_DIR: Path = PACKAGE_DIR / "data"
    BADGES_DIR: Path = PACKAGE_DIR / "data" / "badges"
    CRYPTO_ICONS_DIR: Path = PACKAGE_DIR / "data" / "crypto_icons"
    DEFAULT_BRAND: str = "Default"

    # Generated files (optional, off by default: the API returns assets inline)
    OUTPUT_DIR: Path = Path("./output")
    SAVE_GENERATED_ASSETS: bool = False

    # ═══════════════════════════════════════════════════════════════
    # External flag art (circle-flags)
    # ═══════════════════════════════════════════════════════════════

    FLAG_BASE_URL: str = "https://hatscripts.github.io/circle-flags/flags"
    FLAG_FETCH_TIMEOUT_SECONDS: float = 10.0

    # ═══════════════════════════════════════════════════════════════
    # Fuzzy search
    # ═══════════════════════════════════════════════════════════════

    SEARCH_THRESHOLD: float = 0.3
    SEARCH_LIMIT: int = 5
    SEARCH_EMPTY_QUERY_MODE: str = "all"  # "all" | "none"

    # Telemetry
    METRICS_ENABLED: bool = True
    SENTRY_DSN: str = ""

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
