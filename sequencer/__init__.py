"""Sequencer - a single-process command/event dispatch core.

This module provides the public API: domain primitives, the dispatcher
and its builder, the aggregate repository and read-model stores.
"""

from .builder import DispatcherBuilder
from .config import DispatcherSettings
from .dispatcher import Dispatcher
from .domain import (
    Aggregate,
    AggregateAlreadyExists,
    AggregateNotFound,
    Command,
    CommandRejected,
    ConfigurationError,
    DrainLimitExceeded,
    Event,
    Rejection,
    SequencerError,
    Transition,
)
from .handlers import ApplyTransition, CreateAggregate
from .middleware import LoggingMiddleware, Middleware
from .registry import HandlerRegistry, PolicyRegistry, ProjectionRegistry
from .repository import AggregateRepository, InMemoryAggregateRepository
from .routing import handles_command, projects_event, reacts_to_event
from .stores import FlagStore, RecordStore

__all__ = [
    # Dispatch
    "Dispatcher",
    "DispatcherBuilder",
    "DispatcherSettings",
    "HandlerRegistry",
    "PolicyRegistry",
    "ProjectionRegistry",
    # Domain primitives
    "Aggregate",
    "Command",
    "Event",
    "Rejection",
    "Transition",
    # Handlers and storage
    "ApplyTransition",
    "CreateAggregate",
    "AggregateRepository",
    "InMemoryAggregateRepository",
    "RecordStore",
    "FlagStore",
    # Middleware
    "Middleware",
    "LoggingMiddleware",
    # Decorators
    "handles_command",
    "reacts_to_event",
    "projects_event",
    # Errors
    "SequencerError",
    "ConfigurationError",
    "AggregateNotFound",
    "AggregateAlreadyExists",
    "CommandRejected",
    "DrainLimitExceeded",
]
