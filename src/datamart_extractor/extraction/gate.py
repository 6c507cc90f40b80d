# src/datamart_extractor/extraction/gate.py
# Single-slot owner of the store connection, guarded by one lock.

"""
ConnectionGate enforces that at most one extraction cycle writes at a time.

    conn = gate.acquire()      # blocks while another holder is active
    try:
        ...                    # write rows
    finally:
        gate.release()         # shutdown + close + unlock

or, equivalently, ``with gate.connection() as conn: ...``.

close_if_open() is reserved for shutdown paths (atexit, stop()). It waits
for any in-flight holder, closes whatever is still open and never raises.

The lock is reentrant: a shutdown handler triggered by a signal may run on
the very thread that holds the gate.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from datamart_extractor.errors import GateStateError, PersistenceError
from datamart_extractor.extraction.store import EmbeddedStore

logger = logging.getLogger(__name__)


class ConnectionGate:
    """Owns the only writable connection to the embedded store."""

    def __init__(self, store: EmbeddedStore) -> None:
        self.store = store
        self._lock = threading.RLock()
        self._conn: Optional[sqlite3.Connection] = None
        self._holder: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def is_held(self) -> bool:
        return self._holder is not None

    def acquire(self) -> sqlite3.Connection:
        """
        Wait for the lock, then open a fresh store connection.

        Raises:
            GateStateError: the calling thread already holds the gate
            PersistenceError: the store could not be opened (lock is released)
        """
        self._lock.acquire()
        if self._holder == threading.get_ident():
            self._lock.release()
            raise GateStateError("acquire() called while this thread already holds the gate")
        try:
            conn = self.store.connect()
        except (sqlite3.Error, OSError) as e:
            self._lock.release()
            raise PersistenceError(f"Cannot open store {self.store.path}: {e}") from e
        except BaseException:
            self._lock.release()
            raise
        self._conn = conn
        self._holder = threading.get_ident()
        return conn

    def release(self) -> None:
        """
        Shut down and close the held connection, then unlock.

        Raises:
            GateStateError: the calling thread does not hold the gate
                (the lock is left untouched)
            PersistenceError: shutting the store down failed (the lock is
                still released)
        """
        if self._holder != threading.get_ident():
            raise GateStateError("release() called without a matching acquire()")

        conn = self._conn
        try:
            if conn is not None:
                self.store.shutdown(conn)
        except sqlite3.Error as e:
            raise PersistenceError(f"Error while shutting down store {self.store.path}") from e
        finally:
            try:
                self.store.release_resources(conn)
            finally:
                self._conn = None
                self._holder = None
                self._lock.release()

    def close_if_open(self) -> None:
        """Best-effort close for shutdown paths. Never raises."""
        self._lock.acquire()
        try:
            conn = self._conn
            if conn is not None and not self.store.is_closed(conn):
                try:
                    self.store.shutdown(conn)
                finally:
                    self.store.release_resources(conn)
        except Exception:
            logger.exception("Error while closing store connection during shutdown")
        finally:
            self._conn = None
            self._lock.release()

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Scoped acquire/release."""
        conn = self.acquire()
        try:
            yield conn
        finally:
            self.release()
