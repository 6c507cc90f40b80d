# src/datamart_extractor/registry/local.py
# In-process managed-object registry and the interpreter's platform objects.

"""
LocalRegistry keeps managed objects registered by the running process.

Any Python object can be registered. Attributes are read as object
attributes (properties included) or, for mappings, as keys::

    registry = LocalRegistry()
    registry.register("app:type=Cache,name=users", cache_stats)
    registry.get_attribute("app:type=Cache,name=users", "HitCount")

platform_registry() returns the process-wide registry, seeded with objects
describing the interpreter itself (runtime, memory, threads, collectors).
"""

import gc
import os
import platform
import socket
import sys
import threading
import time
from collections.abc import Mapping
from typing import Any

from datamart_extractor.errors import AttributeReadError
from datamart_extractor.registry.base import NameLike, RegistryConnection, as_object_name
from datamart_extractor.registry.object_name import ObjectName

PLATFORM_DOMAIN = "python.lang"


class LocalRegistry(RegistryConnection):
    """Thread-safe registry of objects living in this interpreter."""

    def __init__(self) -> None:
        self._objects: dict[ObjectName, Any] = {}
        self._lock = threading.Lock()

    @property
    def description(self) -> str:
        return f"local registry (pid {os.getpid()})"

    def register(self, name: NameLike, obj: Any) -> ObjectName:
        """Register ``obj`` under a concrete (non-pattern) name."""
        object_name = as_object_name(name)
        if object_name.is_pattern:
            raise ValueError(f"Cannot register an object under a pattern: {object_name}")
        with self._lock:
            if object_name in self._objects:
                raise ValueError(f"Object already registered: {object_name}")
            self._objects[object_name] = obj
        return object_name

    def unregister(self, name: NameLike) -> None:
        object_name = as_object_name(name)
        with self._lock:
            self._objects.pop(object_name, None)

    def is_registered(self, name: NameLike) -> bool:
        with self._lock:
            return as_object_name(name) in self._objects

    def query_names(self, pattern: NameLike) -> list[ObjectName]:
        selector = as_object_name(pattern)
        with self._lock:
            names = list(self._objects)
        return sorted(
            (n for n in names if selector.matches(n)),
            key=lambda n: n.canonical_name,
        )

    def get_attribute(self, name: NameLike, attribute: str) -> Any:
        object_name = as_object_name(name)
        with self._lock:
            obj = self._objects.get(object_name)
        if obj is None:
            raise AttributeReadError(f"No object registered as {object_name}")
        return read_member(obj, attribute, owner=str(object_name))


def read_member(obj: Any, member: str, owner: str = "") -> Any:
    """Read ``member`` from a mapping key or an attribute. Raises AttributeReadError."""
    label = owner or type(obj).__name__
    if isinstance(obj, Mapping):
        if member in obj:
            return obj[member]
        raise AttributeReadError(f"{label} has no attribute {member!r}")
    if member.startswith("_"):
        raise AttributeReadError(f"{label} does not expose private attribute {member!r}")
    try:
        return getattr(obj, member)
    except AttributeError as e:
        raise AttributeReadError(f"{label} has no attribute {member!r}") from e
    except Exception as e:
        raise AttributeReadError(f"Reading {member!r} from {label} failed: {e}") from e


# ----------------------------------------------------------------------
# Platform objects
# ----------------------------------------------------------------------

class RuntimeObject:
    """Interpreter identity and uptime."""

    def __init__(self) -> None:
        self._start_time = time.time()
        self._start_monotonic = time.monotonic()

    @property
    def Name(self) -> str:
        return f"{os.getpid()}@{socket.gethostname()}"

    @property
    def Pid(self) -> int:
        return os.getpid()

    @property
    def VmName(self) -> str:
        return platform.python_implementation()

    @property
    def VmVersion(self) -> str:
        return platform.python_version()

    @property
    def StartTime(self) -> int:
        return int(self._start_time * 1000)

    @property
    def Uptime(self) -> int:
        return int((time.monotonic() - self._start_monotonic) * 1000)


class MemoryObject:
    """Allocator and garbage-collector counters."""

    @property
    def AllocatedBlocks(self) -> int:
        return sys.getallocatedblocks()

    @property
    def ObjectCount(self) -> int:
        return len(gc.get_objects())

    @property
    def GcEnabled(self) -> bool:
        return gc.isenabled()

    @property
    def PendingCounts(self) -> dict[str, int]:
        return {f"gen{i}": count for i, count in enumerate(gc.get_count())}


class ThreadingObject:
    """Thread counts of the interpreter."""

    @property
    def ThreadCount(self) -> int:
        return threading.active_count()

    @property
    def DaemonThreadCount(self) -> int:
        return sum(1 for t in threading.enumerate() if t.daemon)

    @property
    def ThreadNames(self) -> list[str]:
        return sorted(t.name for t in threading.enumerate())


class GarbageCollectorObject:
    """Statistics for one garbage-collector generation."""

    def __init__(self, generation: int) -> None:
        self.generation = generation

    def _stats(self) -> dict[str, int]:
        return gc.get_stats()[self.generation]

    @property
    def CollectionCount(self) -> int:
        return self._stats()["collections"]

    @property
    def CollectedCount(self) -> int:
        return self._stats()["collected"]

    @property
    def UncollectableCount(self) -> int:
        return self._stats()["uncollectable"]

    @property
    def Threshold(self) -> int:
        return gc.get_threshold()[self.generation]


def register_platform_objects(registry: LocalRegistry) -> None:
    """Register the interpreter's platform objects under ``python.lang``."""
    registry.register(f"{PLATFORM_DOMAIN}:type=Runtime", RuntimeObject())
    registry.register(f"{PLATFORM_DOMAIN}:type=Memory", MemoryObject())
    registry.register(f"{PLATFORM_DOMAIN}:type=Threading", ThreadingObject())
    for generation in range(len(gc.get_stats())):
        registry.register(
            f"{PLATFORM_DOMAIN}:type=GarbageCollector,name=gen{generation}",
            GarbageCollectorObject(generation),
        )


# Global registry instance
_platform_registry: LocalRegistry | None = None
_platform_lock = threading.Lock()


def platform_registry() -> LocalRegistry:
    """Get the process-wide registry, creating and seeding it if needed."""
    global _platform_registry
    with _platform_lock:
        if _platform_registry is None:
            _platform_registry = LocalRegistry()
            register_platform_objects(_platform_registry)
        return _platform_registry
