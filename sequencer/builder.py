from typing import Any

from typing_extensions import Self

from .config import DispatcherSettings
from .dispatcher import Dispatcher
from .domain import Command, Event
from .domain.exceptions import ConfigurationError
from .middleware import LoggingMiddleware, Middleware
from .registry import (
    CommandHandler,
    HandlerRegistry,
    Policy,
    PolicyRegistry,
    Projection,
    ProjectionRegistry,
)
from .routing import handles_command, projects_event, reacts_to_event


class DispatcherBuilder:
    """Fluent wiring for a dispatcher.

    The builder collects handlers, policies, projections and middleware
    against a declared closed set of command and event variants, then
    validates everything at once in ``build()``: every command variant
    needs exactly one handler, and nothing may be registered for a type
    outside the declared sets.

    Policies and projections run in the order they were registered,
    whether they were registered one by one or collected from an object's
    decorated methods.

    Examples:
        Explicit wiring:

        >>> dispatcher = (
        ...     DispatcherBuilder(OpenLedger | Deposit, LedgerOpened | Deposited)
        ...     .register_handler(OpenLedger, CreateAggregate(repository, open_ledger))
        ...     .register_handler(Deposit, ApplyTransition(repository, deposit))
        ...     .register_projection(Deposited, totals.on_deposit)
        ...     .build()
        ... )

        Collecting decorated methods:

        >>> dispatcher = (
        ...     DispatcherBuilder(LedgerCommand, LedgerEvent)
        ...     .register_handlers(LedgerHandlers(repository))
        ...     .register_policies(OverdraftPolicies())
        ...     .register_projections(BalanceProjection(store))
        ...     .build()
        ... )
    """

    def __init__(self, command_types: Any, event_types: Any):
        """Initialize the builder.

        Args:
            command_types: The closed set of command variants, as a
                union (``A | B``) or an iterable of classes.
            event_types: The closed set of event variants, in the same
                form.
        """
        self.command_types = command_types
        self.event_types = event_types
        self._handlers: dict[type[Command], CommandHandler] = {}
        self._policies: list[tuple[type[Event], Policy]] = []
        self._projections: list[tuple[type[Event], Projection]] = []
        self._middleware: list[Middleware] = []
        self._settings: DispatcherSettings | None = None

    def register_handler(self, command_type: type[Command], handler: CommandHandler) -> Self:
        """Register the handler for one command variant.

        Raises:
            ConfigurationError: If the variant already has a handler.
        """
        if command_type in self._handlers:
            raise ConfigurationError(
                f"A handler is already registered for {command_type.__name__}"
            )
        self._handlers[command_type] = handler
        return self

    def register_handlers(self, instance: object) -> Self:
        """Register every @handles_command method of an object."""
        for command_type, handler in handles_command.collect(instance):
            self.register_handler(command_type, handler)
        return self

    def register_policy(self, event_type: type[Event], policy: Policy) -> Self:
        self._policies.append((event_type, policy))
        return self

    def register_policies(self, instance: object) -> Self:
        """Register every @reacts_to_event method of an object."""
        for event_type, policy in reacts_to_event.collect(instance):
            self.register_policy(event_type, policy)
        return self

    def register_projection(self, event_type: type[Event], projection: Projection) -> Self:
        self._projections.append((event_type, projection))
        return self

    def register_projections(self, instance: object) -> Self:
        """Register every @projects_event method of an object."""
        for event_type, projection in projects_event.collect(instance):
            self.register_projection(event_type, projection)
        return self

    def add_middleware(self, middleware: Middleware) -> Self:
        self._middleware.append(middleware)
        return self

    def with_settings(self, settings: DispatcherSettings) -> Self:
        self._settings = settings
        return self

    def build(self) -> Dispatcher:
        """Validate the wiring and create the dispatcher.

        Raises:
            ConfigurationError: If a command variant has no handler or a
                registration names a type outside the declared sets.
        """
        settings = self._settings if self._settings is not None else DispatcherSettings()

        middleware = list(self._middleware)
        if settings.log_commands:
            middleware.insert(0, LoggingMiddleware(settings.log_level))

        return Dispatcher(
            handlers=HandlerRegistry(self.command_types, self._handlers),
            policies=PolicyRegistry(self.event_types, self._policies),
            projections=ProjectionRegistry(self.event_types, self._projections),
            middleware=middleware,
            settings=settings,
        )
