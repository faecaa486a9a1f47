"""Application configuration via environment variables."""

from functools import lru_cache
from typing import ClassVar

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    database_url: str = "sqlite+aiosqlite:///./minilytics.db"
    jwt_secret: str = "change-me"
    jwt_audience: str = "authenticated"
    api_host: str = "0.0.0.0"
    api_port: int = 8787
    environment: str = "development"
    public_base_url: str = "http://localhost:8787"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    INSECURE_SECRETS: ClassVar[set[str]] = {"change-me", "change-me-in-production", "secret", ""}

    def validate_production(self) -> None:
        """Raise if running in production with an insecure default JWT secret."""
        if self.environment == "production" and self.jwt_secret in self.INSECURE_SECRETS:
            raise RuntimeError(
                "JWT_SECRET must be set to the identity provider's signing secret in production."
            )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings singleton."""
    return Settings()
