# src/datamart_extractor/extraction/store.py
# Embedded SQLite store: file naming, connection opening and shutdown.

"""
EmbeddedStore is the store boundary used by ConnectionGate.

Each extractor process writes to its own database file named after the
moment the store was created::

    <folder_location>/Extractor20261019143012.db

Connections run in autocommit mode, so every exported row is committed as
soon as it is written. A failed cycle leaves the rows it already wrote.
"""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

DB_PREFIX = "Extractor"
DB_SUFFIX = ".db"
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


class EmbeddedStore:
    """
    File-backed SQLite store.

    Parameters
    ----------
    folder_location : str | Path
        Directory holding the database file (created when the driver opens).
    created_at : datetime, optional
        Timestamp embedded in the file name. Defaults to now.
    """

    def __init__(
        self,
        folder_location: Union[str, Path],
        created_at: Optional[datetime] = None,
    ) -> None:
        self.folder = Path(folder_location)
        self.created_at = created_at or datetime.now()
        self.path = self.folder / f"{DB_PREFIX}{self.created_at.strftime(TIMESTAMP_FORMAT)}{DB_SUFFIX}"
        self._driver_open = False

    @classmethod
    def from_settings(cls, settings) -> "EmbeddedStore":  # type: ignore[no-untyped-def]
        return cls(settings.folder_location)

    def open_driver(self) -> None:
        """Prepare the store directory. Idempotent."""
        if self._driver_open:
            return
        self.folder.mkdir(parents=True, exist_ok=True)
        logger.debug("Using SQLite %s for %s", sqlite3.sqlite_version, self.path)
        self._driver_open = True

    def connect(self, path: Optional[Path] = None) -> sqlite3.Connection:
        """
        Open a connection to the store file.

        The connection may be closed from a thread other than the one that
        opened it (shutdown handler), hence check_same_thread=False.
        """
        self.open_driver()
        conn = sqlite3.connect(
            str(path or self.path),
            isolation_level=None,
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        return conn

    def shutdown(self, conn: sqlite3.Connection) -> None:
        """Flush pending work before the connection is released."""
        if conn.in_transaction:
            conn.commit()
        conn.execute("PRAGMA optimize;")

    @staticmethod
    def release_resources(conn: Optional[sqlite3.Connection]) -> None:
        """Close the connection. Safe on None and on closed connections."""
        if conn is not None:
            conn.close()

    @staticmethod
    def is_closed(conn: Optional[sqlite3.Connection]) -> bool:
        if conn is None:
            return True
        try:
            conn.execute("SELECT 1;")
        except sqlite3.ProgrammingError:
            return True
        return False
