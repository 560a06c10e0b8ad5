"""Application settings loaded from environment variables and config files."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, PositiveInt, SecretStr
from pydantic.networks import PostgresDsn
from pydantic_settings import BaseSettings, SettingsConfigDict

from tubetrack.config import CONFIG_ROOT

DEFAULT_MODEL_NAME = "gemini-flash-latest"


class ConfigurationError(RuntimeError):
    """Raised when a required credential or setting is missing."""


class TranscriptSource(str, Enum):
    """Available transcript backends."""

    PAGE_SCRAPE = "page_scrape"
    TRANSCRIPT_API = "transcript_api"
    DISABLED = "disabled"


class GenerationProfile(BaseModel):
    """Generation parameters applied to a single prompt family."""

    timeout_seconds: PositiveFloat = 60.0
    temperature: float = Field(default=0.8, ge=0.0, le=2.0)
    top_p: float = Field(default=0.95, gt=0.0, le=1.0)
    max_output_tokens: PositiveInt = 8192

    model_config = ConfigDict(extra="forbid")


class GenerationConfig(BaseModel):
    """Top-level configuration for all generation profiles."""

    profiles: Dict[str, GenerationProfile] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    def profile(self, name: str) -> GenerationProfile:
        """Return the named profile, falling back to built-in defaults."""

        if name in self.profiles:
            return self.profiles[name]
        return _DEFAULT_PROFILES.get(name, GenerationProfile())


_DEFAULT_PROFILES: Dict[str, GenerationProfile] = {
    "rich": GenerationProfile(timeout_seconds=60),
    "metadata_only": GenerationProfile(timeout_seconds=30),
    "video": GenerationProfile(timeout_seconds=60),
    "analytical": GenerationProfile(timeout_seconds=90),
}


def _load_generation_config(config_path: Path) -> GenerationConfig:
    if not config_path.exists():
        return GenerationConfig()

    raw_data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}

    profiles: Dict[str, GenerationProfile] = {}
    for profile_name, config in raw_data.get("profiles", {}).items():
        profiles[profile_name] = GenerationProfile(**config)
    return GenerationConfig(profiles=profiles)


class Settings(BaseSettings):
    """Primary application settings for Tubetrack."""

    database_url: PostgresDsn = Field(alias="DATABASE_URL")
    youtube_api_key: Optional[SecretStr] = Field(default=None, alias="YOUTUBE_API_KEY")
    gemini_api_key: Optional[SecretStr] = Field(default=None, alias="GEMINI_API_KEY")
    openai_api_key: Optional[SecretStr] = Field(default=None, alias="OPENAI_API_KEY")
    anthropic_api_key: Optional[SecretStr] = Field(default=None, alias="ANTHROPIC_API_KEY")

    summary_model_name: str = Field(default=DEFAULT_MODEL_NAME, alias="SUMMARY_MODEL_NAME")
    transcript_source: TranscriptSource = Field(default=TranscriptSource.PAGE_SCRAPE, alias="TRANSCRIPT_SOURCE")
    transcript_max_chars: PositiveInt = Field(default=3000, alias="TRANSCRIPT_MAX_CHARS")
    http_timeout_seconds: PositiveFloat = Field(default=15.0, alias="HTTP_TIMEOUT_SECONDS")

    generation: GenerationConfig = Field(
        default_factory=lambda: _load_generation_config(CONFIG_ROOT / "generation.yaml")
    )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached instance of the application settings."""

    return Settings()


__all__ = [
    "ConfigurationError",
    "GenerationConfig",
    "GenerationProfile",
    "Settings",
    "TranscriptSource",
    "get_settings",
]
