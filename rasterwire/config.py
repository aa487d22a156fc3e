"""Application configuration for the rasterwire image service."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_REPO_ROOT = Path(__file__).resolve().parent.parent

MAX_DOWNLOAD_BYTES = 16 * 1024 * 1024
DEFAULT_DIMENSION = 512


class Settings(BaseSettings):
    """Centralised runtime configuration.

    Values can be overridden using environment variables prefixed with
    ``RASTERWIRE_`` (e.g. ``RASTERWIRE_IMAGES_ROOT``). An optional ``.env``
    file located at the repository root will be read automatically if present.
    """

    model_config = SettingsConfigDict(
        env_prefix="RASTERWIRE_",
        env_file=_REPO_ROOT / ".env",
        extra="ignore",
    )

    images_root: Path = _REPO_ROOT / "images"
    max_download_bytes: int = Field(MAX_DOWNLOAD_BYTES, gt=0)
    default_width: int = Field(DEFAULT_DIMENSION, ge=0)
    default_height: int = Field(DEFAULT_DIMENSION, ge=0)
    fetch_timeout_seconds: Optional[float] = 30.0
    # Unset keeps requested dimensions unbounded.
    max_dimension: Optional[int] = Field(None, ge=0)
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"
    cors_allow_origins: Tuple[str, ...] = ("*",)


settings = Settings()
