"""
Application settings loaded from environment variables or .env.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """
    Marketplace API settings.

    SUPABASE_URL and SUPABASE_KEY are required; everything else has a
    development default.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_key: str = Field(..., description="Supabase anon/public key")

    # ===================
    # INVENTORY IMPORT
    # ===================
    import_preview_ttl_minutes: int = Field(
        default=30,
        ge=1,
        le=720,
        description="Minutes an unconfirmed import session is kept in memory"
    )

    # ===================
    # SERVER
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$"
    )
    debug: bool = Field(default=True, description="Expose /docs and error details")
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$"
    )
    api_host: str = "0.0.0.0"
    api_port: int = Field(default=8000, ge=1000, le=65535)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Load settings once per process.

    Raises:
        ValidationError: If SUPABASE_URL or SUPABASE_KEY is missing
    """
    return Settings()


settings = get_settings()
