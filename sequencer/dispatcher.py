"""The sequential command dispatcher.

The dispatcher owns a FIFO queue of pending commands. ``run()`` drains it
one command at a time, and each command goes through its full cycle

    handler -> event -> policies -> projections

before the next command is looked at. Commands issued by policies are
appended to the tail of the same queue, so they run after everything
that was already pending.
"""

import logging
from collections import deque
from collections.abc import Iterable
from typing import Any

from .config import DispatcherSettings
from .domain import Command, Event
from .domain.exceptions import CommandRejected, ConfigurationError, DrainLimitExceeded
from .middleware import Middleware, build_chain
from .registry import HandlerRegistry, PolicyRegistry, ProjectionRegistry

LOGGER = logging.getLogger(__name__)


class Dispatcher:
    """Drains a queue of commands through handlers, policies and projections.

    The dispatcher is Idle while its queue is empty and Draining while
    ``run()`` works through it. There is no externally visible partial
    state: ``run()`` either returns with an empty queue or propagates the
    first error, leaving the effects of already processed commands in
    place and the rest of the queue pending. The failing command itself
    has been consumed; calling ``run()`` again continues with the next one.

    Single-threaded: nothing in the cycle suspends, and two
    command cycles never interleave.

    Examples:
        >>> dispatcher = (
        ...     DispatcherBuilder(LedgerCommand, LedgerEvent)
        ...     .register_handler(OpenLedger, CreateAggregate(repository, open_ledger))
        ...     .register_handler(Deposit, ApplyTransition(repository, deposit))
        ...     .register_projection(Deposited, deposits.on_deposit)
        ...     .build()
        ... )
        >>> dispatcher.submit([open_cmd, Deposit(aggregate_id=open_cmd.aggregate_id, amount=5)])
        >>> dispatcher.run()
        2
    """

    __slots__ = ("handlers", "policies", "projections", "middleware", "settings", "_queue")

    def __init__(
        self,
        handlers: HandlerRegistry,
        policies: PolicyRegistry,
        projections: ProjectionRegistry,
        middleware: list[Middleware] | None = None,
        settings: DispatcherSettings | None = None,
    ):
        self.handlers = handlers
        self.policies = policies
        self.projections = projections
        self.middleware = list(middleware or [])
        self.settings = settings if settings is not None else DispatcherSettings()
        self._queue: deque[Command] = deque()

    @property
    def pending(self) -> tuple[Command, ...]:
        """Snapshot of the queued commands, head first."""
        return tuple(self._queue)

    @property
    def is_idle(self) -> bool:
        return not self._queue

    def submit(self, commands: Iterable[Command]) -> None:
        """Append commands to the tail of the queue without draining it.

        Raises:
            TypeError: If any item is not a Command. Nothing is enqueued.
        """
        batch = list(commands)
        for command in batch:
            if not isinstance(command, Command):
                raise TypeError(f"Expected a Command, got {type(command).__name__}")
        self._queue.extend(batch)

    def run(self) -> int:
        """Drain the queue until it is empty.

        Returns:
            The number of commands processed.

        Raises:
            ConfigurationError: If a command has no registered handler, or a
                handler emits an event outside the declared event set.
            DrainLimitExceeded: If ``max_commands_per_run`` is set and the
                queue is still not empty after that many commands.
            CommandRejected: If the domain refuses a command and
                ``fail_on_rejection`` is set.
        """
        limit = self.settings.max_commands_per_run
        processed = 0
        while self._queue:
            if limit is not None and processed >= limit:
                raise DrainLimitExceeded(limit)
            command = self._queue.popleft()
            self._process(command)
            processed += 1

        if processed:
            LOGGER.debug("Command queue drained", extra={"processed": processed})
        return processed

    def _process(self, command: Command) -> None:
        # Resolve first so an unregistered variant fails before any handler runs
        handler = self.handlers.resolve(type(command))
        LOGGER.debug("Processing command", extra=_log_extra(command))

        try:
            event = build_chain(handler, self.middleware)(command)
        except CommandRejected as error:
            if self.settings.fail_on_rejection:
                raise
            LOGGER.warning(
                "Command rejected",
                extra={**_log_extra(command), "reason": error.rejection.reason},
            )
            return

        if event is None:
            return
        if not isinstance(event, Event):
            raise TypeError(
                f"Handler for {type(command).__name__} returned "
                f"{type(event).__name__}, expected an Event or None"
            )
        if type(event) not in self.policies.variants:
            raise ConfigurationError(
                f"Handler for {type(command).__name__} emitted undeclared "
                f"event type {type(event).__name__}"
            )

        event = _caused_by(event, command)

        for policy in self.policies.for_event(type(event)):
            follow_up = policy(event)
            if follow_up is None:
                continue
            if not isinstance(follow_up, Command):
                raise TypeError(
                    f"Policy for {type(event).__name__} returned "
                    f"{type(follow_up).__name__}, expected a Command or None"
                )
            self._queue.append(_issued_by(follow_up, command, event))

        for projection in self.projections.for_event(type(event)):
            projection(event)


def _correlation_of(command: Command) -> Any:
    return command.correlation_id if command.correlation_id is not None else command.command_id


def _caused_by(event: Event, command: Command) -> Event:
    update: dict[str, Any] = {}
    if event.causation_id is None:
        update["causation_id"] = command.command_id
    if event.correlation_id is None:
        update["correlation_id"] = _correlation_of(command)
    return event.model_copy(update=update) if update else event


def _issued_by(follow_up: Command, command: Command, event: Event) -> Command:
    update: dict[str, Any] = {}
    if follow_up.causation_id is None:
        update["causation_id"] = event.id
    if follow_up.correlation_id is None:
        update["correlation_id"] = _correlation_of(command)
    return follow_up.model_copy(update=update) if update else follow_up


def _log_extra(command: Command) -> dict[str, Any]:
    extra = {
        "command_type": type(command).__name__,
        "aggregate_id": str(command.aggregate_id),
        "command_id": str(command.command_id),
    }
    if command.correlation_id is not None:
        extra["correlation_id"] = str(command.correlation_id)
    return extra
