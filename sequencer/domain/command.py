"""Command base class for the write side.

Commands represent decisions submitted to the dispatcher. Each concrete
subclass is one variant of a closed set and is routed by its exact type.
"""

from pydantic import BaseModel, ConfigDict, Field
from ulid import ULID


class Command(BaseModel):
    """Base class for all commands in the system.

    Commands are immutable. They are routed to exactly one handler based
    on their concrete class, never on a base class. Every command names
    the aggregate it targets; a creation command generates a fresh
    aggregate_id by declaring a ``default_factory``.

    Attributes:
        aggregate_id: ID of the aggregate this command targets.
        command_id: Unique identifier for this command instance.
        correlation_id: Optional ID tracing the whole logical operation.
        causation_id: Optional ID of what caused this command (for
            policy-issued commands, the triggering event's id).

    Examples:
        A creation command that picks its own id:

        >>> class OpenLedger(Command):
        ...     aggregate_id: ULID = Field(default_factory=ULID)
        ...     owner: str

        A command addressing an existing aggregate:

        >>> class CloseLedger(Command):
        ...     pass
        >>>
        >>> CloseLedger(aggregate_id=ledger_id)
    """

    model_config = ConfigDict(frozen=True)

    aggregate_id: ULID
    command_id: ULID = Field(default_factory=ULID)
    correlation_id: ULID | None = None
    causation_id: ULID | None = None
