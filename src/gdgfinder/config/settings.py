# src/gdgfinder/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/gdgfinder/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `GDGFINDER_LOG_LEVEL`, `GDGFINDER_DIRECTORY_URL`)
- an external YAML file via `GDGFINDER_CONFIG_PATH`

Design rule:
- Tuning knobs live in YAML, not hard-coded in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from gdgfinder.core.env import load_dotenv_if_present, resolve_project_path


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `gdgfinder.config`."""
    text = resources.files("gdgfinder.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(resolve_project_path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "GDG Finder"
    http_timeout_seconds: float = 15
    log_level: str = "INFO"


class DirectorySettings(BaseModel):
    url: str = "https://developers.google.com/community/gdg/directory/directory.json"


class SearchSettings(BaseModel):
    max_workers: int = Field(2, ge=1)
    # How many distance computations run between two checks of the stop signal.
    cancel_check_interval: int = Field(256, ge=1)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    directory: DirectorySettings = Field(default_factory=DirectorySettings)
    search: SearchSettings = Field(default_factory=SearchSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("GDGFINDER_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    directory_url = os.getenv("GDGFINDER_DIRECTORY_URL")
    if directory_url:
        data.setdefault("directory", {})["url"] = directory_url

    workers = os.getenv("GDGFINDER_SORT_WORKERS")
    if workers:
        data.setdefault("search", {})["max_workers"] = workers

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("GDGFINDER_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
