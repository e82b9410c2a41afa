"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional

from models.search import SearchField


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )
    supabase_service_key: Optional[str] = Field(
        None,
        description="Supabase service role key (for admin operations)"
    )

    # ===================
    # IMPORTS
    # ===================
    import_max_rows: int = Field(
        default=5000,
        ge=1,
        le=100000,
        description="Maximum data rows accepted in one upload"
    )
    import_max_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=1024,
        description="Maximum upload size in bytes"
    )
    batch_function: str = Field(
        default="apply_catalog_batch",
        description="Postgres function that applies an import batch atomically"
    )

    # ===================
    # CARTON PRICING
    # ===================
    pricing_factory_discount: float = Field(
        default=0.45,
        ge=0,
        lt=1,
        description="Discount off vendor list price"
    )
    pricing_margin: float = Field(
        default=0.445,
        ge=0,
        lt=1,
        description="Target gross margin"
    )
    pricing_factor: float = Field(
        default=1.7,
        gt=0,
        description="Multiplier applied after margin"
    )

    # ===================
    # SEARCH
    # ===================
    search_fields: list[SearchField] = Field(
        default=[
            SearchField.MATERIAL_NO,
            SearchField.SKU,
            SearchField.ITEM_NO,
            SearchField.TITLE,
        ],
        description="Searchable fields, queried in this order"
    )
    search_result_limit: int = Field(
        default=250,
        ge=1,
        le=1000,
        description="Maximum rows returned per searched field"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
