"""Application configuration powered by Pydantic settings."""
from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    PROJECT_NAME: str = Field(default="Nest Farm Shop")
    VERSION: str = Field(default="0.1.0")
    LOG_LEVEL: str = Field(default="INFO")

    DATABASE_URL: str = Field(default="sqlite:///./data.db")
    AUTO_CREATE_TABLES: bool = Field(default=True)

    JWT_SECRET: str = Field(default="super-secret-key-change-me-in-production")
    JWT_ALGORITHM: str = Field(default="HS256")
    TOKEN_TTL_DAYS: int = Field(default=7)

    INCUBATION_DAYS: int = Field(default=12)

    FRONTEND_URL: str = Field(default="http://localhost:3000")
    CORS_ALLOW_ALL: bool = Field(default=True)

    RATE_LIMIT_AUTH: str = Field(default="20/minute")

    SEED_ADMIN_ENABLED: bool = Field(default=True)
    SEED_ADMIN_NAME: str = Field(default="Administrator")
    SEED_ADMIN_EMAIL: str = Field(default="admin@farm.com")
    SEED_ADMIN_PASSWORD: str = Field(default="admin123")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> Settings:
    """Return cached settings instance to avoid repeated parsing."""

    if overrides:
        return Settings(**overrides)
    return Settings()


settings = get_settings()
