# fieldstream/config.py
"""
fieldstream configuration, via Pydantic Settings.

Resolution order: explicit arguments > env vars (FIELDSTREAM_*) > .env file > defaults.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FieldstreamConfig(BaseSettings):
    """Central configuration for fieldstream."""

    model_config = SettingsConfigDict(
        env_prefix="FIELDSTREAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Extraction ---
    # Require the field prefix even for single-field signatures.
    strict_mode: bool = False
    # Defer "required field not found" until finalize.
    skip_early_fail: bool = False

    # --- CLI ---
    # Characters per chunk when replaying a file as a stream.
    stream_chunk_size: int = Field(16, ge=1)

    # --- Logging ---
    log_level: str = "INFO"

    # --- Paths ---
    home_dir: Path = Field(default_factory=lambda: Path.home() / ".fieldstream")

    @property
    def log_dir(self) -> Path:
        return self.home_dir / "logs"

    @property
    def schema_dir(self) -> Path:
        return self.home_dir / "schemas"


@lru_cache(maxsize=1)
def get_config() -> FieldstreamConfig:
    """Return the global config singleton."""
    return FieldstreamConfig()
