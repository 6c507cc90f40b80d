# src/datamart_extractor/cli/__init__.py
# CLI package for the statistics extractor.
"""
CLI module providing the `datamart` command-line interface.

Commands:
- datamart run: Extract once or continuously, per the settings file
- datamart beans: Show configured entries and the objects they resolve to
"""

from datamart_extractor.cli.main import app

__all__ = ["app"]
