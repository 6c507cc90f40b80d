# src/datamart_extractor/errors.py
# Exception hierarchy shared by the registry, store and scheduling layers.

"""
Every failure raised by this library derives from DatamartError.

Severity is encoded in the type:
- RegistryConnectionError: fatal at startup, the extractor never starts
- RegistryIOError / MalformedObjectNameError: one entry is skipped for a cycle
- AttributeReadError: one attribute is skipped for one object
- PersistenceError: the rest of the cycle is abandoned
- GateStateError: misuse of the connection gate (programming error)
- ConfigError: settings or logging configuration cannot be loaded
"""


class DatamartError(Exception):
    """Base class for all datamart-extractor errors."""


class ConfigError(DatamartError):
    """Settings or logging configuration is missing or invalid."""


class RegistryConnectionError(DatamartError):
    """The managed-object registry could not be reached at startup."""


class RegistryIOError(DatamartError):
    """A registry call failed after the connection was established."""


class MalformedObjectNameError(DatamartError, ValueError):
    """An object name or pattern does not follow `domain:key=value[,...]`."""


class AttributeReadError(DatamartError):
    """A single attribute could not be read from a registry object."""


class PersistenceError(DatamartError):
    """Writing to the embedded store failed. The store error is chained as __cause__."""


class GateStateError(DatamartError, RuntimeError):
    """The connection gate was released without being held by the caller."""
