"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


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
    # SUPABASE (rule/config store)
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )

    # ===================
    # SHOPIFY (remote catalog)
    # ===================
    shopify_shop_domain: str = Field(
        ...,
        description="Shop domain, e.g. my-store.myshopify.com"
    )
    shopify_access_token: str = Field(
        ...,
        description="Admin API access token"
    )
    shopify_api_version: str = Field(
        default="2025-01",
        pattern=r"^\d{4}-\d{2}$",
        description="Admin GraphQL API version"
    )
    shopify_page_size: int = Field(
        default=100,
        ge=1,
        le=250,
        description="Nodes requested per GraphQL page"
    )
    shopify_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=120,
        description="HTTP timeout for a single GraphQL request"
    )

    # ===================
    # RESORT ENGINE
    # ===================
    reorder_poll_interval_seconds: float = Field(
        default=2.0,
        ge=0,
        le=60,
        description="Wait between reorder job status checks"
    )
    reorder_poll_max_attempts: int = Field(
        default=30,
        ge=1,
        le=300,
        description="Status checks before reporting the reorder as unconfirmed"
    )
    sales_recency_window_days: int = Field(
        default=60,
        ge=1,
        le=365,
        description="Trailing window for recent units sold"
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
