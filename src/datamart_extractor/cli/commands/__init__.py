# src/datamart_extractor/cli/commands/__init__.py
"""CLI sub-commands."""
