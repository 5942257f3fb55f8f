"""
Application configuration, loaded from environment variables or a local .env file.
No secrets are ever hardcoded outside of development defaults.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ── Environment ──
    environment: str = "development"

    # ── Postgres ──
    postgres_user: str = "bookmarkd_user"
    postgres_password: str = "changeme"
    postgres_db: str = "bookmarkd"
    postgres_host: str = "postgres"
    postgres_port: int = 5432
    database_url: Optional[str] = None

    # ── Redis ──
    redis_host: str = "redis"
    redis_port: int = 6379
    redis_password: str = "changeme"
    redis_url: Optional[str] = None

    # ── JWT ──
    jwt_secret_key: str = "CHANGE_ME"
    jwt_algorithm: str = "HS256"
    token_expire_hours: int = 4
    bcrypt_rounds: int = 12

    # ── External book metadata ──
    google_books_api_url: str = "https://www.googleapis.com/books/v1"
    book_metadata_cache_ttl_seconds: int = 86400
    book_metadata_missing_ttl_seconds: int = 3600

    # ── Activity feed ──
    feed_review_window: int = 50
    feed_size: int = 30

    # ── Monitoring ──
    enable_metrics: bool = True
    log_level: str = "INFO"
    log_format: str = "json"

    # ── CORS ──
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    @property
    def database_dsn(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def sync_database_dsn(self) -> str:
        return self.database_dsn.replace("+asyncpg", "")

    @property
    def redis_dsn(self) -> str:
        if self.redis_url:
            return self.redis_url
        return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/0"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
