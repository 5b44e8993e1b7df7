"""Application configuration via pydantic-settings."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "RentShare"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 4

    # Database
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "rentshare"
    postgres_password: str = Field(default="rentshare_secret")
    postgres_db: str = "rentshare"
    db_pool_size: int = 10
    db_max_overflow: int = 5
    database_url_override: Optional[str] = Field(default=None, alias="DATABASE_URL")

    @computed_field
    @property
    def database_url(self) -> str:
        """Async database connection URL."""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Tokens issued by the external auth provider
    auth_jwt_secret: str = Field(default="change-me-auth-provider-jwt-secret")
    auth_jwt_algorithm: str = "HS256"
    auth_jwt_audience: Optional[str] = "authenticated"

    # Payments (Stripe)
    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None
    payment_currency: str = "eur"
    payment_timeout_seconds: float = 15.0

    # Checkout redirects land back on the web client
    public_base_url: str = "http://localhost:3000"

    # CORS
    cors_origins: List[str] = ["http://localhost:3000"]

    # Requests slower than this are logged
    slow_request_seconds: float = 1.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
