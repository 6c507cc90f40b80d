# src/datamart_extractor/registry/object_name.py
# Object names and wildcard patterns for the managed-object registry.

"""
Object names have the form ``domain:key=value[,key=value...]``.

Patterns may use ``*`` and ``?`` inside the domain and inside property
values, and may end the key list with ``*`` to accept objects carrying
extra keys::

    python.lang:type=Runtime                       exact name
    python.lang:type=GarbageCollector,*            every collector
    python.*:type=Memory                           any python domain
    python.lang:type=GarbageCollector,name=gen?    gen0, gen1, gen2

The canonical form sorts keys alphabetically so that two spellings of the
same object compare equal.
"""

import re
from functools import lru_cache

from datamart_extractor.errors import MalformedObjectNameError

_WILDCARDS = ("*", "?")
_FORBIDDEN_KEY_CHARS = set(":,=*?\n")
_FORBIDDEN_VALUE_CHARS = set(":,=\n")


def name_to_alias(name: str) -> str:
    """
    Derive a storage-friendly alias from an object or attribute name.

    ``python.lang:type=GarbageCollector,name=gen0`` becomes
    ``python_lang_type_GarbageCollector_name_gen0``.
    """
    alias = re.sub(r"[^A-Za-z0-9_]+", "_", name).strip("_")
    return alias or "_"


def _has_wildcard(text: str) -> bool:
    return any(w in text for w in _WILDCARDS)


@lru_cache(maxsize=256)
def _wildcard_regex(text: str) -> re.Pattern[str]:
    parts = []
    for char in text:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def wildcard_match(pattern: str, text: str) -> bool:
    """Match ``text`` against a pattern using only ``*`` and ``?``."""
    return _wildcard_regex(pattern).fullmatch(text) is not None


class ObjectName:
    """
    Parsed object name or pattern.

    Instances are immutable and hashable; equality uses the canonical name.
    """

    __slots__ = ("_domain", "_properties", "_property_list_pattern")

    def __init__(
        self,
        domain: str,
        properties: dict[str, str],
        property_list_pattern: bool = False,
    ) -> None:
        if ":" in domain or "\n" in domain:
            raise MalformedObjectNameError(f"Invalid character in domain: {domain!r}")
        if not properties and not property_list_pattern:
            raise MalformedObjectNameError("Key properties cannot be empty")
        for key, value in properties.items():
            if not key or _FORBIDDEN_KEY_CHARS & set(key):
                raise MalformedObjectNameError(f"Invalid key: {key!r}")
            if not value or _FORBIDDEN_VALUE_CHARS & set(value):
                raise MalformedObjectNameError(f"Invalid value for key {key!r}: {value!r}")
        self._domain = domain
        self._properties = dict(properties)
        self._property_list_pattern = property_list_pattern

    @classmethod
    def parse(cls, name: str) -> "ObjectName":
        """Parse ``domain:key=value[,...]``. Raises MalformedObjectNameError."""
        if not isinstance(name, str) or not name.strip():
            raise MalformedObjectNameError("Object name cannot be empty")
        domain, sep, key_list = name.partition(":")
        if not sep:
            raise MalformedObjectNameError(f"Domain part must be specified: {name!r}")
        if not key_list:
            raise MalformedObjectNameError(f"Key properties cannot be empty: {name!r}")

        properties: dict[str, str] = {}
        list_pattern = False
        for item in key_list.split(","):
            if item == "*":
                if list_pattern:
                    raise MalformedObjectNameError(f"Repeated '*' in key list: {name!r}")
                list_pattern = True
                continue
            key, eq, value = item.partition("=")
            if not eq:
                raise MalformedObjectNameError(f"Missing '=' in key property {item!r}: {name!r}")
            if key in properties:
                raise MalformedObjectNameError(f"Duplicate key {key!r}: {name!r}")
            properties[key] = value
        return cls(domain, properties, list_pattern)

    @property
    def domain(self) -> str:
        return self._domain

    @property
    def properties(self) -> dict[str, str]:
        return dict(self._properties)

    def get(self, key: str) -> str | None:
        return self._properties.get(key)

    @property
    def is_property_list_pattern(self) -> bool:
        return self._property_list_pattern

    @property
    def is_pattern(self) -> bool:
        return (
            self._property_list_pattern
            or _has_wildcard(self._domain)
            or any(_has_wildcard(v) for v in self._properties.values())
        )

    @property
    def canonical_name(self) -> str:
        keys = ",".join(f"{k}={self._properties[k]}" for k in sorted(self._properties))
        if self._property_list_pattern:
            keys = f"{keys},*" if keys else "*"
        return f"{self._domain}:{keys}"

    def matches(self, other: "ObjectName") -> bool:
        """True if ``other`` (a concrete name) is selected by this name or pattern."""
        if other.is_pattern:
            return False
        if not wildcard_match(self._domain, other.domain):
            return False
        other_props = other._properties
        for key, value in self._properties.items():
            if key not in other_props:
                return False
            if not wildcard_match(value, other_props[key]):
                return False
        if not self._property_list_pattern and len(other_props) != len(self._properties):
            return False
        return True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ObjectName):
            return NotImplemented
        return self.canonical_name == other.canonical_name

    def __hash__(self) -> int:
        return hash(self.canonical_name)

    def __str__(self) -> str:
        return self.canonical_name

    def __repr__(self) -> str:
        return f"ObjectName({self.canonical_name!r})"
