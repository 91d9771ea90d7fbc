"""Application configuration."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from storefront.services.ordering.models import FulfillmentMode


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./storefront.db"

    # Catalog
    catalog_file: Optional[str] = None

    # Restaurant
    restaurant_name: str = "The Best Dam Kebap"

    # Ordering
    default_mode: FulfillmentMode = FulfillmentMode.PICKUP
    checkout_event_buffer: int = 16

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
