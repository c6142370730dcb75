"""Application settings loaded from environment variables and .env file."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Backend URLs, tokens and the repository sprints are managed for."""

    model_config = SettingsConfigDict(
        env_prefix="SPRINT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    github_url: str = "https://api.github.com/"
    github_token: str | None = None
    zenhub_url: str = "https://api.zenhub.com/"
    zenhub_token: str | None = None
    owner: str | None = None
    repo: str | None = None
    timeout: float = 30.0
    log_level: str = "WARNING"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
