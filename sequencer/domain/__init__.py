"""Domain primitives for the dispatch core.

This module contains the building blocks that domain modules extend:

- Command: Base class for command variants
- Event: Base class for event variants
- Aggregate: Base class for immutable aggregate state
- Transition / Rejection: Result of a pure state transition function
"""

from .aggregate import Aggregate, Rejection, Transition
from .command import Command
from .event import Event, utc_now
from .exceptions import (
    AggregateAlreadyExists,
    AggregateNotFound,
    CommandRejected,
    ConfigurationError,
    DrainLimitExceeded,
    SequencerError,
)

__all__ = [
    "Aggregate",
    "Command",
    "Event",
    "Rejection",
    "Transition",
    "utc_now",
    "SequencerError",
    "ConfigurationError",
    "AggregateNotFound",
    "AggregateAlreadyExists",
    "CommandRejected",
    "DrainLimitExceeded",
]
