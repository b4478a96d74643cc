# Config
"""
Configuration for the lingostat ingestion engine.

Settings are read from environment variables and an optional .env file.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Bounded fan-out recommended for production runs
RECOMMENDED_MAX_CONCURRENCY = 16


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Logging
    log_level: str = "INFO"
    dev_mode: bool = False
    log_file_path: Optional[Path] = None
    structured_logging: bool = True

    # Run workspace
    workspace_dir: Path = Path("temp")

    # Concurrency (None keeps fan-out unbounded)
    max_concurrency: Optional[int] = Field(None, description="Max simultaneous adapter calls")
    fail_fast: bool = False

    # Language detection
    default_language: str = "en"
    language_min_confidence: float = Field(0.0, ge=0.0, le=1.0)
    language_sample_chars: int = Field(2000, ge=1)

    # Google Drive
    google_credentials_json: Optional[str] = None
    drive_credentials_path: Path = Path("credentials.json")
    drive_token_path: Path = Path("token.json")
    drive_chunk_size: int = 1024 * 1024

    # Media and video lookups
    ffprobe_path: Optional[str] = None
    video_lookup_timeout: int = 30

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("max_concurrency")
    @classmethod
    def validate_max_concurrency(cls, v: Optional[int]) -> Optional[int]:
        """Concurrency bound must be positive when set."""
        if v is not None and v < 1:
            raise ValueError("max_concurrency must be at least 1")
        return v

    @field_validator("default_language")
    @classmethod
    def validate_default_language(cls, v: str) -> str:
        """Normalize the fallback language code."""
        v = v.strip().lower()
        if not v:
            raise ValueError("default_language must not be empty")
        return v

    @property
    def is_bounded(self) -> bool:
        """Whether adapter fan-out is capped."""
        return self.max_concurrency is not None


# Singleton instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
