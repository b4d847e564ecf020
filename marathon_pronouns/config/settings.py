import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Event Sources
    oengus_api_url: str = Field(
        "https://oengus.io/api", description="Base URL for the Oengus REST API."
    )
    horaro_url: str = Field(
        "https://horaro.org", description="Base URL for Horaro schedules."
    )

    # Pronoun Lookup Services
    speedruncom_users_url: str = Field(
        "https://www.speedrun.com/api/v1/users",
        description="speedrun.com user endpoint (first lookup service).",
    )
    alejo_pronouns_users_url: str = Field(
        "https://pronouns.alejo.io/api/users",
        description="pronouns.alejo.io user endpoint (second lookup service).",
    )

    # HTTP Settings
    http_timeout_seconds: float = Field(
        30.0, gt=0, description="Timeout applied to every outbound HTTP request."
    )
    request_max_attempts: int = Field(
        3, ge=1, description="Total attempts for a request on transient failures."
    )

    # Resolution Cache
    cache_ttl_seconds: float = Field(
        3600.0, gt=0, description="Lifetime of a cached pronoun resolution."
    )

    # Batch Aggregation
    batch_max_concurrency: int = Field(
        5, ge=1, description="Marathons processed at once by the batch combiner."
    )

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
