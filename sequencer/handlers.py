"""Command handlers that drive aggregates through pure transitions.

Both handlers follow the same shape: obtain the current state, call a
domain function that returns a ``Transition``, save the new state and
return the event. A rejected transition saves nothing and raises
``CommandRejected``; the dispatcher decides whether that is fatal.
Repository writes are not rolled back if a later step fails.
"""

from collections.abc import Callable
from typing import Generic, TypeVar

from .domain import Aggregate, Command, Event, Transition
from .domain.exceptions import AggregateAlreadyExists, CommandRejected
from .repository import AggregateRepository

A = TypeVar("A", bound=Aggregate)
C = TypeVar("C", bound=Command)


class CreateAggregate(Generic[A, C]):
    """Handle a creation command by building and saving a fresh aggregate.

    The factory receives the command and returns the initial state (its
    ``id`` must be ``command.aggregate_id``) together with the creation
    event. The state is saved at version 1.

    Example:
        >>> def open_ledger(cmd: OpenLedger) -> Transition[Ledger]:
        ...     ledger = Ledger(id=cmd.aggregate_id, owner=cmd.owner)
        ...     return Transition.accepted(
        ...         ledger, LedgerOpened(aggregate_id=ledger.id, owner=cmd.owner)
        ...     )
        >>>
        >>> builder.register_handler(OpenLedger, CreateAggregate(repository, open_ledger))
    """

    __slots__ = ("repository", "factory")

    def __init__(
        self,
        repository: AggregateRepository[A],
        factory: Callable[[C], Transition[A]],
    ):
        self.repository = repository
        self.factory = factory

    def __call__(self, command: C) -> Event | None:
        if self.repository.exists(command.aggregate_id):
            raise AggregateAlreadyExists(command.aggregate_id)

        transition = self.factory(command)
        if transition.failure is not None:
            raise CommandRejected(command, transition.failure)

        _check_identity(command, transition)
        return _commit(self.repository, transition, version=1)


class ApplyTransition(Generic[A, C]):
    """Handle a command by loading, transitioning and saving an aggregate.

    The aggregate is only saved when the transition changed the state or
    emitted an event; in that case the version is incremented by one and
    the event is stamped with it.

    Example:
        >>> builder.register_handler(Deposit, ApplyTransition(repository, deposit))
    """

    __slots__ = ("repository", "transition")

    def __init__(
        self,
        repository: AggregateRepository[A],
        transition: Callable[[A, C], Transition[A]],
    ):
        self.repository = repository
        self.transition = transition

    def __call__(self, command: C) -> Event | None:
        state = self.repository.get_by_id(command.aggregate_id)
        transition = self.transition(state, command)

        if transition.failure is not None:
            raise CommandRejected(command, transition.failure)

        if transition.event is None and transition.state == state:
            return None

        _check_identity(command, transition)
        return _commit(self.repository, transition, version=state.version + 1)


def _check_identity(command: Command, transition: Transition[A]) -> None:
    # The saved state must belong to the aggregate the command addressed
    if transition.state.id != command.aggregate_id:
        raise ValueError(
            f"{type(command).__name__} produced aggregate {transition.state.id}, "
            f"expected {command.aggregate_id}"
        )


def _commit(
    repository: AggregateRepository[A], transition: Transition[A], version: int
) -> Event | None:
    repository.save(transition.state.model_copy(update={"version": version}))
    if transition.event is None:
        return None
    return transition.event.model_copy(update={"sequence_number": version})
