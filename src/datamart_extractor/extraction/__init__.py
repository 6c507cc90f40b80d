# src/datamart_extractor/extraction/__init__.py
# Extraction and persistence: gate, sampler, exporter, cycle and scheduler.

"""
The extraction subsystem samples registry attributes into the embedded store.

Components, leaves first:
- ConnectionGate: the single store connection behind one lock
- AttributeSampler: entry resolution and attribute reads
- RowExporter: one row per sampled attribute
- ExtractionCycle: one pass over all entries
- Scheduler: single run or fixed-rate repetition
"""

from datamart_extractor.extraction.cycle import ExtractionCycle
from datamart_extractor.extraction.exporter import RowExporter, decode_value, fetch_samples
from datamart_extractor.extraction.gate import ConnectionGate
from datamart_extractor.extraction.sampler import AttributeSampler
from datamart_extractor.extraction.scheduler import Scheduler, SchedulerState
from datamart_extractor.extraction.store import EmbeddedStore

__all__ = [
    "AttributeSampler",
    "ConnectionGate",
    "EmbeddedStore",
    "ExtractionCycle",
    "RowExporter",
    "Scheduler",
    "SchedulerState",
    "decode_value",
    "fetch_samples",
]
