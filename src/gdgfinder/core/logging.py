"""
Logging configuration.

Entrypoints (the CLI, embedding applications) call `configure_logging()` once. It applies
the packaged YAML config (`src/gdgfinder/config/logging.yaml`) and then the runtime level
from settings (e.g., `GDGFINDER_LOG_LEVEL`). Library modules only ever create loggers.
"""

from __future__ import annotations

import copy
import logging.config

from gdgfinder.config.settings import get_logging_config, get_settings


def configure_logging(level: str | None = None) -> None:
    """Configure the Python logging system based on packaged YAML config + settings."""
    settings = get_settings()
    # The loaded config is cached; never mutate the shared copy.
    config = copy.deepcopy(get_logging_config())

    level = (level or settings.app.log_level).upper()
    config.setdefault("root", {})["level"] = level
    for handler in config.get("handlers", {}).values():
        if isinstance(handler, dict) and "level" in handler:
            handler["level"] = level

    logging.config.dictConfig(config)
