from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "DuelVault"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/duelvault"

    ygoprodeck_base_url: str = "https://db.ygoprodeck.com/api/v7"

    # Locale of the primary catalog fetch; English is always fetched alongside
    # to backfill name_en
    catalog_locale: str = "de"

    http_timeout: float = 30.0
    bulk_http_timeout: float = 120.0

    sync_batch_size: int = 500

    # price_only: existing printings only get price + timestamp refreshed
    # overwrite: set name and rarity are refreshed as well
    printing_update_policy: Literal["price_only", "overwrite"] = "price_only"

    free_tier_limit: int = 500

    secret_key: str = "change-me"
    token_max_age_seconds: int = 7 * 24 * 60 * 60


settings = Settings()


# =============================================================================
# DECK CONSTRUCTION LIMITS
# =============================================================================

# Copies of one printing allowed per deck zone
MAX_COPIES_PER_ZONE = 3

# Advisory zone sizes (surfaced as warnings, never rejected)
MAIN_DECK_MIN = 40
MAIN_DECK_MAX = 60
EXTRA_DECK_MAX = 15
SIDE_DECK_MAX = 15
