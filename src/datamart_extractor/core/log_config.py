# src/datamart_extractor/core/log_config.py
# Logging initialization: rich console output or a user-supplied dictConfig file.

"""
configure_logging() is called once by the CLI before anything else runs.

When a logging configuration file is named (argument or the
DATAMART_LOGGING_CONFIG variable) it must exist; it is read as YAML and
handed to logging.config.dictConfig. Otherwise records go to a
RichHandler on stderr.
"""

import logging
import logging.config
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from rich.logging import RichHandler

from datamart_extractor.errors import ConfigError

ENV_LOGGING_CONFIG = "DATAMART_LOGGING_CONFIG"


def logging_config_file(config_file: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """
    Resolve the logging configuration file, if one is configured.

    Raises ConfigError when a file is named but does not exist.
    """
    name = config_file or os.getenv(ENV_LOGGING_CONFIG)
    if not name:
        return None
    path = Path(name)
    if not path.exists():
        raise ConfigError(f"Logging configuration file {path.absolute()} does not exist")
    return path


def configure_logging(
    level: Union[int, str] = "INFO",
    config_file: Optional[Union[str, Path]] = None,
) -> None:
    """Initialize logging for the process."""
    path = logging_config_file(config_file)
    if path is not None:
        try:
            with open(path, encoding="utf-8") as f:
                logging.config.dictConfig(yaml.safe_load(f))
        except (OSError, yaml.YAMLError, ValueError, TypeError) as e:
            raise ConfigError(f"Invalid logging configuration {path}: {e}") from e
        return

    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
