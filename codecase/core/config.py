"""Application configuration from environment."""
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from env / .env."""

    app_name: str = "CodeCase Engine"
    debug: bool = False
    log_level: str = "INFO"

    # Database (async driver; alembic converts it to a sync url)
    database_url: str = "sqlite+aiosqlite:///./codecase.db"

    # Case content; bundled JSON is used when unset
    content_dir: Path | None = None

    # Hint economy
    hint_cost: int = 3
    starting_hints: int = 2
    max_hint_balance: int = 99

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def get_settings() -> Settings:
    return Settings()
