"""Exceptions raised by the dispatch core."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ulid import ULID

    from .aggregate import Rejection
    from .command import Command


class SequencerError(Exception):
    """Base class for all errors raised by the dispatch core."""

    pass


class ConfigurationError(SequencerError):
    """Raised when the handler/policy/projection wiring is invalid.

    This covers a command variant without a handler, a second handler for
    the same variant, and registrations for types outside the declared
    closed set of commands or events. It is always raised before any state
    is mutated for the command concerned.
    """

    pass


class AggregateNotFound(SequencerError, LookupError):
    """Raised when no aggregate was ever saved under the requested id."""

    def __init__(self, aggregate_id: "ULID"):
        super().__init__(f"No aggregate saved with id {aggregate_id}")
        self.aggregate_id = aggregate_id


class AggregateAlreadyExists(SequencerError):
    """Raised when a creation command targets an id already in use."""

    def __init__(self, aggregate_id: "ULID"):
        super().__init__(f"Aggregate {aggregate_id} already exists")
        self.aggregate_id = aggregate_id


class CommandRejected(SequencerError):
    """Raised when the domain refuses a command and rejections are fatal."""

    def __init__(self, command: "Command", rejection: "Rejection"):
        super().__init__(f"{type(command).__name__} rejected: {rejection.reason}")
        self.command = command
        self.rejection = rejection


class DrainLimitExceeded(SequencerError):
    """Raised when one run() processes more commands than allowed."""

    def __init__(self, limit: int):
        super().__init__(
            f"Processed {limit} commands without emptying the queue; "
            "a policy cycle may be re-issuing commands"
        )
        self.limit = limit
