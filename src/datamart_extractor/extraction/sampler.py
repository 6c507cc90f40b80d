# src/datamart_extractor/extraction/sampler.py
"""
Attribute sampling: resolve configured entries to live objects and read
their attributes.

Failures here degrade a single entry or attribute and are logged where they
happen; nothing raised by the registry escapes resolve() or read_attributes().
"""

import logging
from typing import Any

from datamart_extractor.errors import (
    AttributeReadError,
    MalformedObjectNameError,
    RegistryIOError,
)
from datamart_extractor.models import (
    AttributeSpec,
    BeanEntry,
    ResolvedInstance,
    SampledAttribute,
    ValueType,
)
from datamart_extractor.registry.base import RegistryConnection
from datamart_extractor.registry.local import read_member
from datamart_extractor.registry.object_name import name_to_alias

logger = logging.getLogger(__name__)


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"not a boolean: {value!r}")
    return bool(value)


_CONVERTERS = {
    ValueType.INT: int,
    ValueType.FLOAT: float,
    ValueType.BOOL: _to_bool,
    ValueType.STR: str,
}


def convert_value(value: Any, data_type: ValueType | None) -> Any:
    """Apply a declared type. None values and undeclared types pass through."""
    if value is None or data_type is None:
        return value
    return _CONVERTERS[data_type](value)


class AttributeSampler:
    """Resolves entries against a registry and reads their attributes."""

    def resolve(self, entry: BeanEntry, registry: RegistryConnection) -> list[ResolvedInstance]:
        """
        Expand an entry into the concrete objects to sample this cycle.

        A non-pattern entry yields itself. A pattern entry yields one
        instance per live match, aliased after the matched name; a malformed
        pattern or an unreachable registry yields nothing.
        """
        if not entry.pattern:
            return [ResolvedInstance.of_entry(entry)]

        try:
            matches = registry.query_names(entry.name)
        except MalformedObjectNameError as e:
            logger.error("Non standard name for object name %s: %s", entry.name, e)
            return []
        except RegistryIOError as e:
            logger.error("Error while trying to access the registry for %s: %s", entry.name, e)
            return []

        instances = []
        for match in matches:
            actual = match.canonical_name
            instances.append(ResolvedInstance(entry=entry, name=actual, alias=name_to_alias(actual)))
        logger.debug("Pattern %s matched %d object(s)", entry.name, len(instances))
        return instances

    def read_attribute(
        self, instance: ResolvedInstance, spec: AttributeSpec, registry: RegistryConnection
    ) -> Any:
        """Read one attribute, following dotted paths into composite values."""
        head, *rest = spec.path
        value = registry.get_attribute(instance.name, head)
        for part in rest:
            if value is None:
                raise AttributeReadError(f"{spec.name} of {instance.name} is empty at {part!r}")
            value = read_member(value, part, owner=f"{instance.name}/{spec.name}")
        return convert_value(value, spec.data_type)

    def read_attributes(
        self, instance: ResolvedInstance, registry: RegistryConnection
    ) -> dict[AttributeSpec, Any]:
        """Read every configured attribute; failing ones are logged and left out."""
        values: dict[AttributeSpec, Any] = {}
        for spec in instance.attributes:
            try:
                values[spec] = self.read_attribute(instance, spec, registry)
            except (AttributeReadError, RegistryIOError, MalformedObjectNameError) as e:
                logger.warning("Could not read %s from %s: %s", spec.name, instance.name, e)
            except (TypeError, ValueError, ArithmeticError) as e:
                logger.warning(
                    "Could not convert %s of %s to %s: %s",
                    spec.name,
                    instance.name,
                    spec.data_type.value if spec.data_type else "?",
                    e,
                )
        return values

    def sample(
        self, instance: ResolvedInstance, registry: RegistryConnection
    ) -> list[SampledAttribute]:
        """read_attributes() as a list of SampledAttribute triples."""
        return [
            SampledAttribute(
                object_name=instance.name,
                object_alias=instance.alias,
                attribute=spec,
                value=value,
            )
            for spec, value in self.read_attributes(instance, registry).items()
        ]
