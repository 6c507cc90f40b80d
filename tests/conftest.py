# tests/conftest.py
# Pytest configuration and fixtures for datamart-extractor tests.

"""
Shared pytest fixtures for testing the library.

Provides:
- A local registry populated with sample objects
- Configured entries (exact and pattern)
- Store, gate and settings bound to a temporary directory
"""

from datetime import datetime
from pathlib import Path

import pytest

from datamart_extractor.core.config import ENV_FOLDER, ENV_POLLING_RATE, ENV_URL, ExtractorSettings
from datamart_extractor.core.log_config import ENV_LOGGING_CONFIG
from datamart_extractor.extraction.gate import ConnectionGate
from datamart_extractor.extraction.store import EmbeddedStore
from datamart_extractor.models import AttributeSpec, BeanEntry
from datamart_extractor.registry.local import LocalRegistry


class CacheStats:
    """Sample managed object exposing typed attributes."""

    def __init__(self, hits: int, ratio: float) -> None:
        self._hits = hits
        self._ratio = ratio

    @property
    def HitCount(self) -> int:
        return self._hits

    @property
    def HitRatio(self) -> float:
        return self._ratio

    @property
    def Enabled(self) -> bool:
        return True

    @property
    def Region(self) -> str:
        return "eu-west"

    @property
    def Usage(self) -> dict:
        return {"used": self._hits * 2, "max": 1000}

    @property
    def Broken(self) -> int:
        raise RuntimeError("sensor offline")


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep settings overrides from the outer environment out of tests."""
    for name in (ENV_URL, ENV_POLLING_RATE, ENV_FOLDER, ENV_LOGGING_CONFIG):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def local_registry() -> LocalRegistry:
    """Create a registry with two caches and a server object."""
    registry = LocalRegistry()
    registry.register("app:type=Cache,name=users", CacheStats(hits=10, ratio=0.5))
    registry.register("app:type=Cache,name=orders", CacheStats(hits=7, ratio=0.25))
    registry.register("app:type=Server", {"Requests": 42, "Healthy": True, "Version": "1.2"})
    return registry


@pytest.fixture
def cache_attributes() -> list[AttributeSpec]:
    return [
        AttributeSpec(name="HitCount"),
        AttributeSpec(name="HitRatio"),
        AttributeSpec(name="Enabled"),
    ]


@pytest.fixture
def server_entry() -> BeanEntry:
    """Non-pattern entry for the server object."""
    return BeanEntry(
        name="app:type=Server",
        alias="server",
        attributes=[AttributeSpec(name="Requests"), AttributeSpec(name="Healthy")],
    )


@pytest.fixture
def cache_pattern_entry(cache_attributes) -> BeanEntry:
    """Pattern entry matching every cache."""
    return BeanEntry(
        name="app:type=Cache,*",
        alias="caches",
        pattern=True,
        attributes=cache_attributes,
    )


@pytest.fixture
def store(tmp_path: Path) -> EmbeddedStore:
    """Create a store writing into a temporary directory."""
    return EmbeddedStore(tmp_path / "stats", created_at=datetime(2026, 10, 19, 14, 30, 12))


@pytest.fixture
def gate(store: EmbeddedStore) -> ConnectionGate:
    return ConnectionGate(store)


@pytest.fixture
def settings(tmp_path: Path, server_entry, cache_pattern_entry) -> ExtractorSettings:
    """Single-run settings with one exact and one pattern entry."""
    return ExtractorSettings(
        folder_location=tmp_path / "stats",
        polling_rate=0,
        beans=[server_entry, cache_pattern_entry],
    )


# Markers for special test categories
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "slow: tests that take significant time")
