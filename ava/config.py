"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration.

    Values are read from environment variables (or a `.env` file).
    """

    # Supabase (remote store). Leaving these empty selects the local store.
    supabase_url: str = ""
    supabase_service_key: str = ""
    supabase_http_max_connections: int = 100
    supabase_http_max_keepalive_connections: int = 50
    supabase_postgrest_timeout_seconds: int = 30

    # Persistence
    persistence_backend: Literal["auto", "remote", "local"] = "auto"
    local_store_path: str | None = None
    transaction_max_attempts: int = 5
    transaction_backoff_seconds: float = 0.05
    local_lock_timeout_seconds: float = 2.0

    # Change notifications
    enable_change_feed: bool = True
    change_feed_interval_seconds: int = 1
    event_keepalive_seconds: float = 15.0

    # Admin credentials
    admin_username: str = "admin"
    admin_password: str = ""

    # App
    app_name: str = "AVA Election API"
    app_version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000"
    slow_request_log_threshold_ms: int = 0

    @property
    def is_production(self) -> bool:
        """Return True when running in production."""
        return self.environment == "production"

    @property
    def origins_list(self) -> list[str]:
        """Parse comma-separated ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def remote_configured(self) -> bool:
        """Return True when a Supabase URL and service key are both present."""
        return bool(self.supabase_url.strip() and self.supabase_service_key.strip())

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
