# src/datamart_extractor/registry/__init__.py
# Managed-object registry access: names, connections and the connect() entry point.

"""
The registry is the monitored system: named, hierarchical objects whose
attributes are sampled each cycle.

connect() is the only way the extractor obtains a registry:
- no URL: the in-process platform registry
- a URL: a remote registry, verified before returning
"""

from typing import Optional

from datamart_extractor.registry.base import RegistryConnection, as_object_name
from datamart_extractor.registry.local import LocalRegistry, platform_registry
from datamart_extractor.registry.object_name import ObjectName, name_to_alias, wildcard_match
from datamart_extractor.registry.remote import RemoteRegistry


def connect(url: Optional[str] = None) -> RegistryConnection:
    """
    Return a live registry connection.

    Raises:
        RegistryConnectionError: the URL is malformed or the registry is unreachable
    """
    if not url:
        return platform_registry()
    return RemoteRegistry.connect(url)


__all__ = [
    "LocalRegistry",
    "ObjectName",
    "RegistryConnection",
    "RemoteRegistry",
    "as_object_name",
    "connect",
    "name_to_alias",
    "platform_registry",
    "wildcard_match",
]
