# src/datamart_extractor/extraction/cycle.py
# One full extraction pass over every configured entry.

"""
ExtractionCycle walks the configured entries in order while holding the
store connection:

    Idle -> ConnectionAcquired -> PerEntry -> Closing -> Idle

- disabled entries are skipped
- pattern entries expand to zero or more live objects
- registry problems skip the entry or attribute and the pass continues
- a PersistenceError ends the pass; the connection is released and the
  error is re-raised
"""

import logging
from datetime import datetime
from typing import Optional, Sequence

from datamart_extractor.errors import PersistenceError
from datamart_extractor.extraction.exporter import RowExporter
from datamart_extractor.extraction.gate import ConnectionGate
from datamart_extractor.extraction.sampler import AttributeSampler
from datamart_extractor.models import BeanEntry, ExtractionOutcome, OutcomeStatus
from datamart_extractor.registry.base import RegistryConnection

logger = logging.getLogger(__name__)


class ExtractionCycle:
    """Runs extraction passes for a fixed list of entries."""

    def __init__(
        self,
        beans: Sequence[BeanEntry],
        registry: RegistryConnection,
        gate: ConnectionGate,
        sampler: Optional[AttributeSampler] = None,
        exporter: Optional[RowExporter] = None,
    ) -> None:
        self.beans = tuple(beans)
        self.registry = registry
        self.gate = gate
        self.sampler = sampler or AttributeSampler()
        self.exporter = exporter or RowExporter()
        self.last_outcome: Optional[ExtractionOutcome] = None

    def run(self) -> ExtractionOutcome:
        """
        Run one pass.

        Returns:
            ExtractionOutcome of a successful pass.

        Raises:
            PersistenceError: the store rejected a write; ``last_outcome``
                holds the partial counts.

        Any exception leaves ``last_outcome`` marked FAILED.
        """
        outcome = ExtractionOutcome()
        self.last_outcome = outcome
        conn = self.gate.acquire()
        try:
            self.exporter.init_schema(conn)
            for entry in self.beans:
                if not entry.enable:
                    outcome.skipped_entries += 1
                    continue
                captured_at = datetime.now()
                for instance in self.sampler.resolve(entry, self.registry):
                    values = self.sampler.read_attributes(instance, self.registry)
                    outcome.rows_written += self.exporter.write(
                        conn, instance, values, captured_at=captured_at
                    )
                    outcome.instances_written += 1
                outcome.entries_processed += 1
        except PersistenceError as e:
            outcome.status = OutcomeStatus.FAILED
            outcome.error = str(e)
            logger.error("Error while exporting to the store: %s", e, exc_info=e.__cause__ or e)
            raise
        except Exception as e:
            outcome.status = OutcomeStatus.FAILED
            outcome.error = str(e)
            raise
        finally:
            outcome.ended_at = datetime.now()
            self.gate.release()

        logger.info(
            "extraction complete: %d entries, %d objects, %d rows",
            outcome.entries_processed,
            outcome.instances_written,
            outcome.rows_written,
        )
        return outcome
