# helpdesk/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    APP_NAME: str = "Help Center API"
    APP_DESC: str = "Support ticket intake and admin triage"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # CORS origins, comma-separated
    CORS_ORIGINS: str = "*"

    # Ticket store: memory | sheet | sql
    STORE_BACKEND: str = Field(default="memory")
    SEED_DEMO_DATA: bool = True
    STORE_LATENCY_SECONDS: float = 0.0

    # Spreadsheet script endpoint
    SHEET_SCRIPT_URL: str | None = None
    SHEET_TIMEOUT_SECONDS: float = 30.0

    DATABASE_URL: str = Field(default="sqlite:///./tickets.db")

    DEFAULT_APPROVER: str = "Admin User"
    CLIENT_TIMEOUT_SECONDS: float = 30.0

    # Pydantic v2 style config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
