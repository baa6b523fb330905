from functools import lru_cache
import json
from pathlib import Path
from typing import Literal
from urllib.parse import quote_plus

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

from .domain.entities import MAX_AUDIO_SIZE_BYTES
from .domain.errors import ConfigurationError

_ENV_CANDIDATES = (
    Path(__file__).resolve().parent.parent.parent / ".env",
    Path(__file__).resolve().parent.parent / ".env",
    Path.cwd() / ".env",
)

for env_path in _ENV_CANDIDATES:
    if env_path.is_file():
        load_dotenv(env_path, override=False)
        break


class Settings(BaseSettings):
    """Application configuration sourced from environment variables."""

    telegram_bot_token: str | None = Field(default=None, alias="TELEGRAM_BOT_TOKEN")
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    ai_model: str = "gpt-4o-mini"
    transcription_model: str = "whisper-1"

    database_url: str | None = None
    postgres_host: str | None = None
    postgres_port: int = 5432
    postgres_db: str | None = None
    postgres_user: str | None = None
    postgres_password: str | None = None
    postgres_ssl: bool = False
    db_pool_min: int = Field(default=2, ge=1)
    db_pool_max: int = Field(default=10, ge=1)

    max_audio_size_bytes: int = Field(default=MAX_AUDIO_SIZE_BYTES, gt=0)
    extraction_confidence_threshold: float = Field(default=0.3, ge=0.0, le=1.0)

    log_level: str = "INFO"
    log_file: str | None = None
    environment: Literal["development", "production", "test"] = "development"

    api_prefix: str = "/api"
    allow_origins: list[str] = Field(default_factory=lambda: ["http://localhost:8000"])

    model_config = SettingsConfigDict(env_file=None, populate_by_name=True)

    @field_validator("allow_origins", mode="before")
    @classmethod
    def parse_allow_origins(cls, value: object) -> list[str]:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                try:
                    return json.loads(stripped)
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in stripped.split(",") if item.strip()]
        if isinstance(value, (list, tuple)):
            return [str(item) for item in value]
        raise ValueError("Invalid allow_origins format.")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalise_log_level(cls, value: object) -> str:
        return str(value or "INFO").upper()

    @property
    def sqlalchemy_url(self) -> str:
        """Explicit ``database_url`` or a PostgreSQL URL built from the parts."""
        if self.database_url:
            return self.database_url
        user = quote_plus(self.postgres_user or "")
        password = quote_plus(self.postgres_password or "")
        url = (
            f"postgresql+psycopg://{user}:{password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )
        if self.postgres_ssl:
            url += "?sslmode=require"
        return url

    def missing_settings(self) -> list[str]:
        missing: list[str] = []
        if not self.telegram_bot_token:
            missing.append("TELEGRAM_BOT_TOKEN")
        if not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        if not self.database_url:
            for name in ("postgres_host", "postgres_db", "postgres_user", "postgres_password"):
                if not getattr(self, name):
                    missing.append(name.upper())
        return missing

    def validate_required(self) -> None:
        """Raise ``ConfigurationError`` when the bot cannot start."""
        missing = self.missing_settings()
        if missing:
            raise ConfigurationError(
                "Missing required configuration: " + ", ".join(missing)
            )
        if self.db_pool_max < self.db_pool_min:
            raise ConfigurationError("DB_POOL_MAX must be greater than or equal to DB_POOL_MIN")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings to avoid repeated environment parsing."""
    return Settings()
