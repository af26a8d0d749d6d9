from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from ulid import ULID


def utc_now() -> datetime:
    """Get the current UTC timestamp.

    Returns:
        Current datetime with UTC timezone information
    """
    return datetime.now(tz=timezone.utc)


class Event(BaseModel):
    """Immutable record of a state transition of an aggregate.

    Each concrete subclass is one variant of a closed set of events and
    is routed to policies and projections by its exact type. Events are:

    - **Immutable**: Once created, events cannot be modified
    - **Ordered**: ``sequence_number`` is the aggregate version the event produced
    - **Timestamped**: All events record when they occurred (UTC)
    - **Traceable**: correlation/causation IDs link events to commands

    Domain transition functions create events with only ``aggregate_id``
    and their own payload fields. The aggregate handlers stamp
    ``sequence_number`` and the dispatcher stamps the tracing IDs.

    Examples:
        >>> class LedgerClosed(Event):
        ...     reason: str
        >>>
        >>> LedgerClosed(aggregate_id=ledger_id, reason="year end")
    """

    model_config = ConfigDict(frozen=True)

    id: ULID = Field(
        default_factory=ULID,
        description="Unique identifier for this event instance",
    )
    aggregate_id: ULID = Field(description="ID of the aggregate that produced this event")
    sequence_number: int = Field(
        default=0,
        description="Aggregate version produced by this event (0 until stamped)",
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC timezone)",
    )
    correlation_id: ULID | None = Field(
        default=None,
        description="Correlation ID for tracing the entire logical operation",
    )
    causation_id: ULID | None = Field(
        default=None,
        description="ID of the command that directly caused this event",
    )
