# src/datamart_extractor/models.py
# Core Pydantic models for sampling targets, sampled values and cycle outcomes.

"""
Defines the data structures passed between the extraction components:
- AttributeSpec: one attribute to read from an object
- BeanEntry: a configured sampling target (exact name or pattern)
- ResolvedInstance: one concrete object an entry resolved to during a cycle
- SampledAttribute: a value read from the registry, ready for export
- ExtractionOutcome: summary of one extraction cycle

Configured entries are frozen. Pattern expansion produces ResolvedInstance
values next to the entry instead of rewriting the entry's name and alias.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from datamart_extractor.registry.object_name import name_to_alias


class ValueType(str, Enum):
    """Declared type an attribute value is converted to before export."""

    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    STR = "str"


class AttributeSpec(BaseModel):
    """An attribute to sample. Dotted names address nested composite values."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Attribute name or dotted path")
    alias: str = Field(default="", description="Column-friendly name, derived when empty")
    data_type: Optional[ValueType] = Field(
        default=None, description="Declared type; None keeps the value's own type"
    )

    @model_validator(mode="before")
    @classmethod
    def _derive_alias(cls, data: Any) -> Any:
        if isinstance(data, str):
            data = {"name": data}
        if isinstance(data, dict) and not data.get("alias") and data.get("name"):
            data = {**data, "alias": name_to_alias(str(data["name"]))}
        return data

    @property
    def path(self) -> list[str]:
        """Attribute name split into its composite path."""
        return self.name.split(".")


class BeanEntry(BaseModel):
    """A configured sampling target."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Object name or pattern")
    alias: str = Field(default="", description="Display/row key, derived when empty")
    pattern: bool = Field(default=False, description="Expand name against live objects")
    enable: bool = Field(default=True, description="Disabled entries are skipped")
    attributes: list[AttributeSpec] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _derive_alias(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("alias") and data.get("name"):
            data = {**data, "alias": name_to_alias(str(data["name"]))}
        return data


class ResolvedInstance(BaseModel):
    """One concrete object name a BeanEntry resolved to, valid for a single cycle."""

    model_config = ConfigDict(frozen=True)

    entry: BeanEntry
    name: str
    alias: str

    @classmethod
    def of_entry(cls, entry: BeanEntry) -> "ResolvedInstance":
        """Instance for a non-pattern entry: the entry's own name and alias."""
        return cls(entry=entry, name=entry.name, alias=entry.alias)

    @property
    def attributes(self) -> list[AttributeSpec]:
        return self.entry.attributes


class SampledAttribute(BaseModel):
    """A (object, attribute, value) triple read during a cycle."""

    object_name: str
    object_alias: str
    attribute: AttributeSpec
    value: Any = None


class OutcomeStatus(str, Enum):
    """Final status of an extraction cycle."""

    SUCCESS = "success"
    FAILED = "failed"


class ExtractionOutcome(BaseModel):
    """Summary of one extraction cycle."""

    status: OutcomeStatus = OutcomeStatus.SUCCESS
    started_at: datetime = Field(default_factory=datetime.now)
    ended_at: Optional[datetime] = None
    entries_processed: int = 0
    skipped_entries: int = 0
    instances_written: int = 0
    rows_written: int = 0
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS
