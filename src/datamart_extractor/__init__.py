# src/datamart_extractor/__init__.py
# Main package init - exports public API for the statistics extractor.

"""
datamart-extractor: samples attributes from a managed-object registry and
stores them as time-stamped rows in an embedded SQLite database.

It runs once, or forever on a fixed polling interval, and closes the store
cleanly when the process shuts down.

CLI Usage:
    datamart run                      # Extract using ./.datamart.yaml
    datamart run --once               # Single extraction pass
    datamart beans                    # Show what each entry resolves to
"""

from datamart_extractor.core.config import ExtractorSettings, load_settings
from datamart_extractor.errors import (
    ConfigError,
    DatamartError,
    PersistenceError,
    RegistryConnectionError,
)
from datamart_extractor.extraction import (
    AttributeSampler,
    ConnectionGate,
    EmbeddedStore,
    ExtractionCycle,
    RowExporter,
    Scheduler,
)
from datamart_extractor.models import (
    AttributeSpec,
    BeanEntry,
    ExtractionOutcome,
    ResolvedInstance,
)
from datamart_extractor.registry import LocalRegistry, ObjectName, connect, platform_registry

__version__ = "0.1.0"
__all__ = [
    # Settings
    "ExtractorSettings",
    "load_settings",
    # Errors
    "ConfigError",
    "DatamartError",
    "PersistenceError",
    "RegistryConnectionError",
    # Models
    "AttributeSpec",
    "BeanEntry",
    "ExtractionOutcome",
    "ResolvedInstance",
    # Registry
    "LocalRegistry",
    "ObjectName",
    "connect",
    "platform_registry",
    # Extraction
    "AttributeSampler",
    "ConnectionGate",
    "EmbeddedStore",
    "ExtractionCycle",
    "RowExporter",
    "Scheduler",
]
