"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    poll_interval_seconds: float = 3.0
    menu_cache_ttl_seconds: int = 300
    partial_order_grace_seconds: int = 30
    kitchen_alert_webhook_url: str | None = None
    default_customer_name: str = "Friend"
    cancelled_visible_hours: int = 12
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
