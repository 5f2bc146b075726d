"""Environment-based configuration for MammoGuard."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from MAMMOGUARD_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MAMMOGUARD_",
        case_sensitive=False,
    )

    # Server
    host: str = "127.0.0.1"
    port: int = 8080

    # Remote classifier
    classifier_url: str = "http://127.0.0.1:8000/predict"
    request_timeout: float = Field(default=60.0, gt=0)

    # Input limits
    max_file_size: int = Field(default=20_971_520, ge=1)

    # Reports (None = download only, nothing written locally)
    reports_dir: str | None = None

    log_level: str = "INFO"


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
