# app/config.py
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Server settings, read from environment variables or a .env file.
    """

    # Database
    DATABASE_URL: str = Field(
        default="sqlite:///./marketplace.db",
        description="SQLAlchemy database URL"
    )
    DATABASE_ECHO: bool = False

    # Application
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = Field(default=8085, ge=1, le=65535)

    # comma-separated, e.g. "http://localhost:3000,https://market.example.com"
    CORS_ORIGINS: str = "*"

    # Insert the default categories on startup
    SEED_CATEGORIES: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
