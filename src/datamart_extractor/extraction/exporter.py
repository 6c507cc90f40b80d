# src/datamart_extractor/extraction/exporter.py
# Writes sampled attribute values into the embedded store.

"""
RowExporter persists one row per sampled attribute::

    captured_at | bean_name | bean_alias | attribute_name | attribute_alias | value | value_type

``value`` keeps SQLite's native type for scalars (bools are stored as 0/1)
and ``value_type`` records the Python type, so decode_value() restores the
sampled value exactly. Non-scalar values are stored as JSON text.

Every store error surfaces as PersistenceError.
"""

import json
import sqlite3
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional

from datamart_extractor.errors import PersistenceError
from datamart_extractor.models import AttributeSpec, ResolvedInstance, SampledAttribute

TABLE_NAME = "statistics"

SQL_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    captured_at      TIMESTAMP NOT NULL,
    bean_name        TEXT NOT NULL,
    bean_alias       TEXT NOT NULL,
    attribute_name   TEXT NOT NULL,
    attribute_alias  TEXT NOT NULL,
    value,
    value_type       TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_{TABLE_NAME}_bean_time
    ON {TABLE_NAME}(bean_name, captured_at);
"""

INSERT_SQL = f"""
INSERT INTO {TABLE_NAME}
    (captured_at, bean_name, bean_alias, attribute_name, attribute_alias, value, value_type)
VALUES (?, ?, ?, ?, ?, ?, ?)
"""


SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1


def encode_value(value: Any) -> tuple[Any, str]:
    """
    Map a sampled value to (stored value, value_type).

    Integers outside SQLite's 64-bit range are stored as decimal text.

    Raises:
        TypeError, ValueError: a composite value that is not JSON-serialisable
    """
    if value is None:
        return None, "null"
    if isinstance(value, bool):
        return int(value), "bool"
    if isinstance(value, int):
        if not SQLITE_INT_MIN <= value <= SQLITE_INT_MAX:
            return str(value), "int"
        return value, "int"
    if isinstance(value, float):
        return value, "float"
    if isinstance(value, str):
        return value, "str"
    return json.dumps(value, default=str, sort_keys=True), "json"


def decode_value(stored: Any, value_type: str) -> Any:
    """Inverse of encode_value()."""
    if value_type == "null" or stored is None:
        return None
    if value_type == "bool":
        return bool(stored)
    if value_type == "int":
        return int(stored)
    if value_type == "float":
        return float(stored)
    if value_type == "json":
        return json.loads(stored)
    return stored


class RowExporter:
    """Exports sampled values through an acquired store connection."""

    def init_schema(self, conn: sqlite3.Connection) -> None:
        """Create the statistics table if needed. Idempotent."""
        try:
            conn.executescript(SQL_SCHEMA)
        except sqlite3.Error as e:
            raise PersistenceError("While creating the statistics schema") from e

    def write(
        self,
        conn: sqlite3.Connection,
        instance: ResolvedInstance,
        values: Mapping[AttributeSpec, Any],
        captured_at: Optional[datetime] = None,
    ) -> int:
        """
        Write one row per attribute, tagged with the instance and capture time.

        Returns:
            Number of rows written.

        Raises:
            PersistenceError: any store failure, with the store error as cause
        """
        captured_at = captured_at or datetime.now()
        samples = [
            SampledAttribute(
                object_name=instance.name,
                object_alias=instance.alias,
                attribute=spec,
                value=value,
            )
            for spec, value in values.items()
        ]
        try:
            rows = [self._row(sample, captured_at) for sample in samples]
            conn.executemany(INSERT_SQL, rows)
        except (sqlite3.Error, OverflowError, TypeError, ValueError) as e:
            raise PersistenceError(f"While writing statistics for {instance.name}") from e
        return len(rows)

    @staticmethod
    def _row(sample: SampledAttribute, captured_at: datetime) -> tuple:
        stored, value_type = encode_value(sample.value)
        return (
            captured_at.isoformat(sep=" "),
            sample.object_name,
            sample.object_alias,
            sample.attribute.name,
            sample.attribute.alias,
            stored,
            value_type,
        )


def fetch_samples(
    conn: sqlite3.Connection, bean_name: Optional[str] = None
) -> list[dict[str, Any]]:
    """Read exported rows back, with values decoded to their sampled types."""
    query = (
        f"SELECT captured_at, bean_name, bean_alias, attribute_name, attribute_alias, "
        f"value, value_type FROM {TABLE_NAME}"
    )
    params: tuple = ()
    if bean_name is not None:
        query += " WHERE bean_name = ?"
        params = (bean_name,)
    query += " ORDER BY id"
    try:
        cursor = conn.execute(query, params)
        rows = cursor.fetchall()
    except sqlite3.Error as e:
        raise PersistenceError("While reading statistics") from e
    results = []
    for row in rows:
        record = dict(zip(
            ("captured_at", "bean_name", "bean_alias", "attribute_name",
             "attribute_alias", "value", "value_type"),
            tuple(row),
        ))
        record["value"] = decode_value(record["value"], record["value_type"])
        results.append(record)
    return results
