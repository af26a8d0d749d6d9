from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from ulid import ULID

from .event import Event

S = TypeVar("S", bound="Aggregate")


class Aggregate(BaseModel):
    """Base class for aggregate state.

    An aggregate is the unit of consistency that commands mutate and
    events record changes to. Here the aggregate is a plain immutable
    value: behaviour lives in pure transition functions of the shape
    ``(state, command) -> Transition`` and the repository stores whole
    values. A new state is produced with ``model_copy(update=...)``.

    Attributes:
        id: Unique identifier of this aggregate. Never reused.
        version: Incremented by the aggregate handlers on every change.
            Kept for optimistic concurrency checks; the in-memory
            repository does not enforce it.

    Examples:
        >>> class Ledger(Aggregate):
        ...     balance: int = 0
        >>>
        >>> def deposit(state: Ledger, cmd: Deposit) -> Transition[Ledger]:
        ...     if cmd.amount <= 0:
        ...         return Transition.rejected(state, "amount must be positive")
        ...     new_state = state.model_copy(update={"balance": state.balance + cmd.amount})
        ...     return Transition.accepted(
        ...         new_state, Deposited(aggregate_id=state.id, amount=cmd.amount)
        ...     )
    """

    model_config = ConfigDict(frozen=True)

    id: ULID
    version: int = 0

    def changed_since(self, version: int) -> bool:
        """Check if the aggregate has changed since a specific version."""
        return self.version > version


@dataclass(frozen=True)
class Rejection:
    """A command refused by the domain, with a human readable reason."""

    reason: str


@dataclass(frozen=True)
class Transition(Generic[S]):
    """Outcome of applying a command to an aggregate state.

    Attributes:
        state: The state after the command. Equal to the input state
            when nothing changed.
        event: The event recording the change, if any.
        failure: Set when the domain refused the command. A rejected
            transition never carries an event.
    """

    state: S
    event: Event | None = None
    failure: Rejection | None = None

    def __post_init__(self) -> None:
        if self.failure is not None and self.event is not None:
            raise ValueError("A rejected transition cannot carry an event")

    @classmethod
    def accepted(cls, state: S, event: Event | None = None) -> "Transition[S]":
        return cls(state=state, event=event)

    @classmethod
    def rejected(cls, state: S, reason: str) -> "Transition[S]":
        return cls(state=state, failure=Rejection(reason))

    @classmethod
    def unchanged(cls, state: S) -> "Transition[S]":
        return cls(state=state)

    @property
    def is_rejected(self) -> bool:
        return self.failure is not None
