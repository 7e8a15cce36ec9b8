import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Football data provider (API-Football)
    football_api_key: Optional[str] = Field(
        None, description="API key sent as x-apisports-key."
    )
    football_api_base_url: str = Field(
        "https://v3.football.api-sports.io",
        description="Base URL of the API-Football v3 service.",
    )
    request_timeout: float = Field(
        30.0, gt=0, description="HTTP timeout in seconds for provider requests."
    )

    # Supabase Configuration (bet / wallet store)
    supabase_url: Optional[str] = Field(None, description="URL for the Supabase project.")
    supabase_key: Optional[str] = Field(None, description="Anon key for the Supabase project.")
    wallet_id: Optional[str] = Field(
        None, description="Wallet whose history drives the suggestions."
    )

    # Evidence gathering
    form_match_count: int = Field(
        5, ge=1, le=20, description="Recent matches used to compute a team's form."
    )
    h2h_match_count: int = Field(
        5, ge=1, le=20, description="Direct meetings used for head-to-head analysis."
    )
    enrichment_batch_size: int = Field(
        5,
        ge=1,
        description="Maximum matches enriched with provider data per batch.",
    )
    enrichment_max_batches: int = Field(
        1,
        ge=1,
        description="Batches of matches enriched per suggestion refresh.",
    )

    # Response cache TTLs (seconds)
    cache_ttl_fixtures: int = Field(300, ge=0)
    cache_ttl_live: int = Field(60, ge=0)
    cache_ttl_static: int = Field(3600, ge=0)
    cache_max_entries: int = Field(100, ge=1)

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
