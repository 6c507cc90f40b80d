# src/datamart_extractor/core/config.py
# Configuration management for the statistics extractor.
"""
Settings models and loading utilities.

The settings file (.datamart.yaml) stores:
- Where the embedded store files are written
- Which registry to sample (empty URL = this process)
- The polling rate (0 = extract once and exit)
- The objects and attributes to sample
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from datamart_extractor.errors import ConfigError
from datamart_extractor.models import BeanEntry

SETTINGS_FILENAME = ".datamart.yaml"

ENV_URL = "DATAMART_URL"
ENV_POLLING_RATE = "DATAMART_POLLING_RATE"
ENV_FOLDER = "DATAMART_FOLDER"


class ExtractorSettings(BaseModel):
    """Extractor settings model."""

    folder_location: Path = Field(
        default=Path("."),
        description="Directory receiving the embedded store files",
    )
    url: Optional[str] = Field(
        default=None,
        description="Registry URL; empty samples the local process",
    )
    polling_rate: int = Field(
        default=0,
        ge=0,
        description="Seconds between extractions; 0 runs a single extraction",
    )
    beans: list[BeanEntry] = Field(
        default_factory=list,
        description="Ordered sampling targets",
    )

    @field_validator("polling_rate", mode="before")
    @classmethod
    def _none_is_single_run(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("url", mode="before")
    @classmethod
    def _blank_url_is_local(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_periodic(self) -> bool:
        return self.polling_rate > 0


def find_settings_file(path: Optional[Path] = None) -> Optional[Path]:
    """
    Locate the settings file.

    Searches in order:
    1. Specified path
    2. Current directory (.datamart.yaml)
    3. Home directory (~/.datamart.yaml)
    """
    if path is not None:
        return path if path.exists() else None

    for candidate in (Path(SETTINGS_FILENAME), Path.home() / SETTINGS_FILENAME):
        if candidate.exists():
            return candidate
    return None


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Environment variables win over file values."""
    overrides = {
        "url": os.getenv(ENV_URL),
        "polling_rate": os.getenv(ENV_POLLING_RATE),
        "folder_location": os.getenv(ENV_FOLDER),
    }
    return {**data, **{k: v for k, v in overrides.items() if v is not None}}


def parse_settings(data: Optional[dict[str, Any]]) -> ExtractorSettings:
    """Validate a settings mapping. Raises ConfigError."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Settings must be a mapping, got {type(data).__name__}")
    try:
        return ExtractorSettings.model_validate(_apply_env_overrides(data))
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e


def load_settings(path: Optional[Path] = None) -> ExtractorSettings:
    """
    Load extractor settings from a YAML file.

    Raises:
        ConfigError: no settings file was found, or it is not valid
    """
    settings_file = find_settings_file(path)
    if settings_file is None:
        searched = str(path) if path is not None else f"./{SETTINGS_FILENAME}, ~/{SETTINGS_FILENAME}"
        raise ConfigError(f"No settings file found (searched {searched})")

    try:
        with open(settings_file, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read settings file {settings_file}: {e}") from e

    return parse_settings(data)


def save_settings(settings: ExtractorSettings, path: Path) -> Path:
    """Write settings back to YAML."""
    data = settings.model_dump(mode="json", exclude_none=True)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False)
    return path
