# src/datamart_extractor/extraction/scheduler.py
# Runs extraction cycles once or on a fixed-rate timer thread.

"""
Scheduler decides between a single extraction and continuous extraction.

    NotStarted -> SingleRun                  (polling_rate == 0)
    NotStarted -> Running -> Stopped         (polling_rate > 0)

In continuous mode a daemon thread runs a cycle at start + N * interval.
A cycle that overruns the interval makes the timer skip the missed ticks
rather than run cycles back to back. Errors inside a scheduled cycle are
logged and the next tick still fires.

A single atexit handler, registered when the recurring schedule starts,
closes the store connection if the process exits mid-cycle.
"""

import atexit
import logging
import threading
import time
from enum import Enum
from typing import Optional

from datamart_extractor.core.config import ExtractorSettings
from datamart_extractor.extraction.cycle import ExtractionCycle
from datamart_extractor.extraction.gate import ConnectionGate
from datamart_extractor.extraction.store import EmbeddedStore
from datamart_extractor.models import ExtractionOutcome
from datamart_extractor.registry import connect
from datamart_extractor.registry.base import RegistryConnection

logger = logging.getLogger(__name__)

TIMER_THREAD_NAME = "Statistics Extractor"


class SchedulerState(str, Enum):
    """Lifecycle state of a Scheduler."""

    NOT_STARTED = "not_started"
    SINGLE_RUN = "single_run"
    RUNNING = "running"
    STOPPED = "stopped"


class Scheduler:
    """
    Drives extraction cycles for one settings object.

    The registry connection is opened at construction; failure to reach the
    registry propagates as RegistryConnectionError and nothing is scheduled.
    """

    def __init__(
        self,
        settings: ExtractorSettings,
        registry: Optional[RegistryConnection] = None,
        gate: Optional[ConnectionGate] = None,
        cycle: Optional[ExtractionCycle] = None,
    ) -> None:
        self.settings = settings
        self.registry = registry if registry is not None else connect(settings.url)
        logger.info("Extracting statistics to directory %s", settings.folder_location)
        self.gate = gate or ConnectionGate(EmbeddedStore.from_settings(settings))
        self.cycle = cycle or ExtractionCycle(settings.beans, self.registry, self.gate)

        self._state = SchedulerState.NOT_STARTED
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._shutdown_hook_registered = False
        self.cycles_run = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_periodically_extracting(self) -> bool:
        return self.settings.is_periodic

    def start(self) -> Optional[ExtractionOutcome]:
        """
        Start extracting.

        Single-run mode runs one cycle on the calling thread and returns its
        outcome; errors propagate. Recurring mode returns None immediately.
        """
        with self._state_lock:
            if self._state is not SchedulerState.NOT_STARTED:
                raise RuntimeError(f"Scheduler already started (state: {self._state.value})")
            if self.is_periodically_extracting:
                self._state = SchedulerState.RUNNING
            else:
                self._state = SchedulerState.SINGLE_RUN

        if self._state is SchedulerState.SINGLE_RUN:
            self.cycles_run += 1
            return self.cycle.run()

        self._register_shutdown_hook()
        self._thread = threading.Thread(
            target=self._run_loop,
            name=TIMER_THREAD_NAME,
            daemon=True,
        )
        self._thread.start()
        return None

    def _register_shutdown_hook(self) -> None:
        if not self._shutdown_hook_registered:
            atexit.register(self._on_shutdown)
            self._shutdown_hook_registered = True

    def _unregister_shutdown_hook(self) -> None:
        if self._shutdown_hook_registered:
            atexit.unregister(self._on_shutdown)
            self._shutdown_hook_registered = False

    def _on_shutdown(self) -> None:
        self._stop_event.set()
        self.gate.close_if_open()

    def _run_loop(self) -> None:
        interval = float(self.settings.polling_rate)
        started = time.monotonic()
        tick = 0
        while not self._stop_event.is_set():
            self._run_scheduled_cycle()
            tick += 1
            now = time.monotonic()
            next_at = started + tick * interval
            if next_at <= now:
                # Overran: resume on the next slot of the original grid.
                tick = int((now - started) // interval) + 1
                next_at = started + tick * interval
            if self._stop_event.wait(next_at - now):
                break

    def _run_scheduled_cycle(self) -> None:
        self.cycles_run += 1
        try:
            self.cycle.run()
        except Exception:
            logger.debug("While extracting statistics", exc_info=True)

    def stop(self) -> None:
        """Close any open store connection and cancel the timer. Idempotent."""
        with self._state_lock:
            if self._state is not SchedulerState.RUNNING:
                return
            self._state = SchedulerState.STOPPED

        logger.info("Stopping statistics extractor")
        self._stop_event.set()
        self.gate.close_if_open()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self._unregister_shutdown_hook()
        logger.info("Stopped statistics extractor")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the scheduler is stopped or ``timeout`` elapses.

        Returns True once stopped. Never blocks when not running.
        """
        if self._state is not SchedulerState.RUNNING:
            return True
        return self._stop_event.wait(timeout)
