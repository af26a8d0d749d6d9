"""Command middleware.

Middleware wraps command handlers to provide cross-cutting concerns like
logging or validation. Middleware is applied in registration order: the
first registered middleware is the outermost wrapper.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from functools import reduce
from typing import Any

from .domain import Command, Event

LOGGER = logging.getLogger(__name__)

Handler = Callable[[Command], Event | None]


class Middleware(ABC):
    """Abstract base class for command middleware.

    Middleware components follow the chain of responsibility pattern:
    each receives the command and the next handler, and decides whether
    and how to call it.

    Examples:
        >>> class RequireCorrelation(Middleware):
        ...     def handle(self, command: Command, next: Handler) -> Event | None:
        ...         if command.correlation_id is None:
        ...             raise ValueError("correlation_id required")
        ...         return next(command)
    """

    @abstractmethod
    def handle(self, command: Command, next: Handler) -> Event | None:
        """Process the command and optionally invoke the next handler.

        Args:
            command: The command to process.
            next: The next handler in the middleware chain.

        Returns:
            The event produced further down the chain, if any.
        """
        ...


def build_chain(handler: Handler, middleware: list[Middleware]) -> Handler:
    """Wrap a handler with middleware, first middleware outermost."""
    return reduce(
        lambda next, mw: lambda cmd, n=next, m=mw: m.handle(cmd, n),
        reversed(middleware),
        handler,
    )


class LoggingMiddleware(Middleware):
    """Middleware that logs command execution with correlation tracking.

    Logs each command received at the specified logging level with the
    command type and correlation/causation IDs. Command data is NOT
    logged to avoid exposing sensitive information.

    Attributes:
        level: The numeric logging level (e.g., logging.INFO,
            logging.DEBUG).
    """

    def __init__(self, level: str):
        """Initialize the logging middleware.

        Args:
            level: String representation of the log level (e.g.,
                "INFO", "DEBUG"). Case-insensitive.
        """
        self.level = getattr(logging, level.upper())

    def handle(self, command: Command, next: Handler) -> Event | None:
        extra: dict[str, Any] = {
            "command_type": type(command).__name__,
            "aggregate_id": str(command.aggregate_id),
            "command_id": str(command.command_id),
        }
        if command.correlation_id is not None:
            extra["correlation_id"] = str(command.correlation_id)
        if command.causation_id is not None:
            extra["causation_id"] = str(command.causation_id)

        LOGGER.log(self.level, "Received Command", extra=extra)
        return next(command)
