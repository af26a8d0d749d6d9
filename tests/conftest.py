"""Central test fixtures - rover domain wiring."""

import os

import pytest
from ulid import ULID

from sequencer import (
    Dispatcher,
    DispatcherSettings,
    FlagStore,
    InMemoryAggregateRepository,
    RecordStore,
)
from tests.fixtures.rover import Coordinate, Grid, Rover, build_rover_dispatcher


@pytest.fixture(autouse=True)
def clear_sequencer_environment(monkeypatch):
    """Keep SEQUENCER_* variables from the shell out of DispatcherSettings."""
    for name in list(os.environ):
        if name.startswith("SEQUENCER_"):
            monkeypatch.delenv(name)


@pytest.fixture
def aggregate_id() -> ULID:
    """Generate a unique aggregate ID."""
    return ULID()


@pytest.fixture
def repository() -> InMemoryAggregateRepository[Rover]:
    """Create an in-memory repository for rovers."""
    return InMemoryAggregateRepository()


@pytest.fixture
def path() -> RecordStore[str]:
    """Create the path read model."""
    return RecordStore()


@pytest.fixture
def obstacles() -> FlagStore[Coordinate]:
    """Create the obstacle read model."""
    return FlagStore()


@pytest.fixture
def settings() -> DispatcherSettings:
    return DispatcherSettings()


@pytest.fixture
def rover_dispatcher(repository, path, obstacles, settings) -> Dispatcher:
    """Create a dispatcher wired with the rover domain."""
    return build_rover_dispatcher(repository, path, obstacles, settings)


@pytest.fixture
def open_grid() -> Grid:
    """A 4x4 grid without obstacles."""
    return Grid(width=4, height=4)


@pytest.fixture
def blocked_grid() -> Grid:
    """A 4x4 grid with one obstacle at (2, 2)."""
    return Grid(width=4, height=4, obstacles=frozenset({Coordinate(x=2, y=2)}))
