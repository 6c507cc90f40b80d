# tests/test_gate.py
"""
Tests for the embedded store and the connection gate.

Tests cover:
- Store file naming and connection lifecycle
- At-most-one holder across threads
- Release discipline and misuse
- Best-effort close on shutdown paths
"""

import sqlite3
import threading
import time
from datetime import datetime
from unittest.mock import Mock

import pytest

from datamart_extractor.errors import GateStateError, PersistenceError
from datamart_extractor.extraction.gate import ConnectionGate
from datamart_extractor.extraction.store import EmbeddedStore


class TestEmbeddedStore:
    """Tests for EmbeddedStore."""

    def test_file_name_uses_creation_timestamp(self, tmp_path):
        store = EmbeddedStore(tmp_path, created_at=datetime(2026, 1, 2, 3, 4, 5))
        assert store.path == tmp_path / "Extractor20260102030405.db"

    def test_connect_creates_folder(self, store):
        assert not store.folder.exists()
        conn = store.connect()
        try:
            assert store.folder.is_dir()
            assert store.path.exists()
        finally:
            store.release_resources(conn)

    def test_shutdown_and_release(self, store):
        conn = store.connect()
        store.shutdown(conn)
        store.release_resources(conn)
        assert store.is_closed(conn)
        store.release_resources(conn)
        store.release_resources(None)


class TestConnectionGate:
    """Tests for ConnectionGate."""

    def test_acquire_release(self, gate):
        conn = gate.acquire()
        assert gate.is_open and gate.is_held
        conn.execute("CREATE TABLE t (x INTEGER)")
        gate.release()
        assert not gate.is_open and not gate.is_held
        assert gate.store.is_closed(conn)

    def test_context_manager(self, gate):
        with gate.connection() as conn:
            conn.execute("SELECT 1")
            assert gate.is_open
        assert not gate.is_open

    def test_context_manager_releases_on_error(self, gate):
        with pytest.raises(ZeroDivisionError):
            with gate.connection():
                1 / 0
        assert not gate.is_held
        gate.acquire()
        gate.release()

    def test_second_acquire_waits_for_release(self, gate):
        """Test a second thread only gets the connection after the first releases."""
        events = []

        def second():
            gate.acquire()
            events.append("second acquired")
            gate.release()

        gate.acquire()
        events.append("first acquired")
        worker = threading.Thread(target=second)
        worker.start()
        time.sleep(0.2)
        assert events == ["first acquired"]
        events.append("first released")
        gate.release()
        worker.join(timeout=5)
        assert not worker.is_alive()
        assert events == ["first acquired", "first released", "second acquired"]

    def test_release_without_acquire(self, gate):
        """Test misuse raises without corrupting the lock."""
        with pytest.raises(GateStateError):
            gate.release()
        gate.acquire()
        gate.release()

    def test_double_release(self, gate):
        gate.acquire()
        gate.release()
        with pytest.raises(GateStateError):
            gate.release()

    def test_release_from_other_thread_rejected(self, gate):
        gate.acquire()
        errors = []

        def intruder():
            try:
                gate.release()
            except GateStateError as e:
                errors.append(e)

        worker = threading.Thread(target=intruder)
        worker.start()
        worker.join(timeout=5)
        assert len(errors) == 1
        assert gate.is_held
        gate.release()

    def test_reacquire_same_thread_rejected(self, gate):
        gate.acquire()
        with pytest.raises(GateStateError):
            gate.acquire()
        assert gate.is_held
        gate.release()
        assert not gate.is_held

    def test_open_failure_releases_lock(self, tmp_path):
        store = EmbeddedStore(tmp_path)
        store.connect = Mock(side_effect=sqlite3.OperationalError("unable to open"))
        gate = ConnectionGate(store)
        with pytest.raises(PersistenceError, match="Cannot open store"):
            gate.acquire()
        assert not gate.is_held

        acquired = []

        def other():
            acquired.append(gate._lock.acquire(blocking=False))
            if acquired[0]:
                gate._lock.release()

        worker = threading.Thread(target=other)
        worker.start()
        worker.join(timeout=5)
        assert acquired == [True]

    def test_shutdown_failure_still_unlocks(self, gate):
        gate.acquire()
        gate.store.shutdown = Mock(side_effect=sqlite3.OperationalError("disk I/O error"))
        with pytest.raises(PersistenceError):
            gate.release()
        assert not gate.is_held and not gate.is_open

    def test_close_if_open_when_closed(self, gate):
        """Test close_if_open is a no-op on an idle gate."""
        gate.close_if_open()
        gate.close_if_open()
        assert not gate.is_open

    def test_close_if_open_waits_for_holder(self, gate):
        """Test a concurrent close blocks until the cycle releases, then does nothing."""
        closed = threading.Event()
        conn = gate.acquire()

        def closer():
            gate.close_if_open()
            closed.set()

        worker = threading.Thread(target=closer)
        worker.start()
        time.sleep(0.2)
        assert not closed.is_set()
        conn.execute("SELECT 1")
        gate.release()
        worker.join(timeout=5)
        assert closed.is_set()
        assert not gate.is_open

    def test_close_if_open_same_thread(self, gate):
        """Test a shutdown handler on the holding thread closes the connection."""
        conn = gate.acquire()
        gate.close_if_open()
        assert gate.store.is_closed(conn)
        gate.release()
        assert not gate.is_held

    def test_close_if_open_swallows_errors(self, gate, caplog):
        gate.acquire()
        gate.store.shutdown = Mock(side_effect=sqlite3.OperationalError("boom"))
        gate.close_if_open()
        assert "Error while closing store connection" in caplog.text
        assert not gate.is_open
        gate.release()
