# src/datamart_extractor/registry/base.py
# Connection contract shared by the local and remote registries.

"""
RegistryConnection is the handle the extraction layer talks to.

Implementations:
- LocalRegistry: objects living in this interpreter
- RemoteRegistry: a registry reached over HTTP/JSON
"""

from abc import ABC, abstractmethod
from typing import Any, Union

from datamart_extractor.registry.object_name import ObjectName

NameLike = Union[str, ObjectName]


def as_object_name(name: NameLike) -> ObjectName:
    """Parse strings, pass ObjectName through. Raises MalformedObjectNameError."""
    if isinstance(name, ObjectName):
        return name
    return ObjectName.parse(name)


class RegistryConnection(ABC):
    """Live connection to a managed-object registry."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable location of this registry."""
        ...

    @abstractmethod
    def query_names(self, pattern: NameLike) -> list[ObjectName]:
        """
        Return the live object names selected by ``pattern``.

        Raises:
            MalformedObjectNameError: the pattern cannot be parsed
            RegistryIOError: the registry could not be queried
        """
        ...

    @abstractmethod
    def get_attribute(self, name: NameLike, attribute: str) -> Any:
        """
        Read one top-level attribute of one object.

        Raises:
            AttributeReadError: the object or attribute does not exist
            RegistryIOError: the registry could not be queried
        """
        ...

    def close(self) -> None:
        """Release the connection. Default: nothing to release."""
        return None
