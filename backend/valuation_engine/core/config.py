"""
config.py — Centralized Engine Configuration Loader

Purpose:
- Define a single source of truth for engine settings.
- Load and validate environment variables from `.env` or OS environment.

Settings covered:
- Location of the industry multiple reference table (JSON)
- Fixed default multiple used when no industry information is supplied
- Log level used by the command-line runner

The calculation constants themselves (range spread, premium threshold,
interpolation denominators, performance multipliers) live next to the code
that uses them and are intentionally not exposed here.

This module does NOT:
- Read the reference table (see valuation/multiples.py).
- Make any external calls.
"""

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# config.py is at: backend/valuation_engine/core/config.py
# .env should be at: backend/.env
_CONFIG_DIR = Path(__file__).parent  # backend/valuation_engine/core
_PACKAGE_DIR = _CONFIG_DIR.parent  # backend/valuation_engine
_BACKEND_DIR = _PACKAGE_DIR.parent  # backend
_ENV_FILE = _BACKEND_DIR / ".env"

if _ENV_FILE.exists():
    _ENV_FILE_PATH = str(_ENV_FILE.resolve())
else:
    # Fallback: use relative path (pydantic will look in CWD)
    _ENV_FILE_PATH = ".env"

DEFAULT_MULTIPLES_PATH = _PACKAGE_DIR / "data" / "naics_multiples.json"


class Settings(BaseSettings):
    """
    Engine settings container.

    Only deployment concerns live here; every value has a working default so
    the engine runs without any environment configured.
    """
    VALUATION_MULTIPLES_PATH: Path = Field(
        DEFAULT_MULTIPLES_PATH,
        description="Path to the industry multiple reference table (JSON)",
    )
    VALUATION_DEFAULT_MULTIPLE: float = Field(
        5.0,
        description="Multiple applied when no industry code or description is supplied",
    )
    LOG_LEVEL: str = Field(
        "INFO",
        description="Root log level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )

    @field_validator("VALUATION_MULTIPLES_PATH", mode="before")
    @classmethod
    def expand_multiples_path(cls, v: Any) -> Any:
        """Expand `~` and fall back to the packaged table on empty values."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_MULTIPLES_PATH
        if isinstance(v, (str, Path)):
            return Path(v).expanduser()
        return v

    @field_validator("VALUATION_DEFAULT_MULTIPLE")
    @classmethod
    def check_default_multiple(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("VALUATION_DEFAULT_MULTIPLE must be strictly positive")
        return v

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Singleton: every import references the same object.
settings = Settings()
