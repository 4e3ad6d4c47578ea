"""
Shared pytest fixtures for kvstash tests.

This module provides:
- A controllable clock so TTL tests don't sleep
- File- and memory-backed caches wired to that clock
- Shared-store cleanup for test isolation
"""

from pathlib import Path

import pytest

from kvstash.backends.filesystem import FileBackend
from kvstash.backends.memory import MemoryBackend, create_store, reset_shared_store
from kvstash.cache import Cache


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test without an explicit marker as a unit test."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Clock
# =============================================================================


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# Backends and caches
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_shared_store():
    """Give every test a fresh process-wide memory store."""
    reset_shared_store()
    yield
    reset_shared_store()


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def file_backend(cache_dir: Path, clock: FakeClock) -> FileBackend:
    return FileBackend(cache_dir, clock=clock)


@pytest.fixture
def memory_backend(clock: FakeClock) -> MemoryBackend:
    return MemoryBackend(create_store(clock))


@pytest.fixture
def file_cache(file_backend: FileBackend, clock: FakeClock) -> Cache:
    return Cache(file_backend, clock=clock)


@pytest.fixture
def memory_cache(memory_backend: MemoryBackend, clock: FakeClock) -> Cache:
    return Cache(memory_backend, clock=clock)


@pytest.fixture(params=["file", "memory"])
def cache(request: pytest.FixtureRequest) -> Cache:
    """The same cache contract, once per backend."""
    return request.getfixturevalue(f"{request.param}_cache")
