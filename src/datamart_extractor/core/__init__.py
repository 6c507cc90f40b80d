# src/datamart_extractor/core/__init__.py
# Core utilities: settings and logging setup.

from datamart_extractor.core.config import ExtractorSettings, load_settings, parse_settings
from datamart_extractor.core.log_config import configure_logging

__all__ = ["ExtractorSettings", "configure_logging", "load_settings", "parse_settings"]
