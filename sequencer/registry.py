"""Routing tables from command/event variants to their handlers.

Each table is built once, from an explicit closed set of variants, and
validated at construction time. Lookups are exact-type dictionary hits:
a subclass of a registered variant is not routed to its parent's entry.
"""

import types
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Union, get_args, get_origin

from .domain import Command, Event
from .domain.exceptions import ConfigurationError

CommandHandler = Callable[[Command], Event | None]
Policy = Callable[[Event], Command | None]
Projection = Callable[[Event], None]


def variants_of(closed_set: Any, base_type: type) -> tuple[type, ...]:
    """Expand a closed set of message classes into a tuple of variants.

    Args:
        closed_set: A ``Union``/``X | Y`` of classes, a single class, or an
            iterable of classes.
        base_type: The class every variant must derive from.

    Returns:
        The variants in declaration order, without duplicates.

    Raises:
        ConfigurationError: If the set is empty or contains anything that
            is not a subclass of ``base_type``.
    """
    if get_origin(closed_set) in (Union, types.UnionType):
        members: Iterable[Any] = get_args(closed_set)
    elif isinstance(closed_set, type):
        members = (closed_set,)
    else:
        members = closed_set

    variants = tuple(dict.fromkeys(members))
    if not variants:
        raise ConfigurationError(f"No {base_type.__name__} variants declared")
    for variant in variants:
        if not (isinstance(variant, type) and issubclass(variant, base_type)):
            raise ConfigurationError(
                f"{variant!r} is not a {base_type.__name__} subclass"
            )
    return variants


class HandlerRegistry:
    """Maps each command variant to exactly one handler.

    Examples:
        >>> registry = HandlerRegistry(
        ...     OpenLedger | CloseLedger,
        ...     {OpenLedger: open_ledger, CloseLedger: close_ledger},
        ... )
        >>> registry.resolve(CloseLedger) is close_ledger
        True
    """

    __slots__ = ("variants", "_handlers")

    def __init__(self, command_types: Any, handlers: Mapping[type[Command], CommandHandler]):
        self.variants = variants_of(command_types, Command)

        unknown = [t for t in handlers if t not in self.variants]
        if unknown:
            raise ConfigurationError(
                "Handlers registered for undeclared command types: "
                + ", ".join(_name(t) for t in unknown)
            )

        missing = [t for t in self.variants if t not in handlers]
        if missing:
            raise ConfigurationError(
                "No handler registered for command types: "
                + ", ".join(_name(t) for t in missing)
            )

        self._handlers: dict[type[Command], CommandHandler] = dict(handlers)

    def resolve(self, command_type: type[Command]) -> CommandHandler:
        """Get the handler for a command type.

        Raises:
            ConfigurationError: If the type is not a declared variant.
        """
        try:
            return self._handlers[command_type]
        except KeyError:
            raise ConfigurationError(
                f"No handler registered for command type {_name(command_type)}"
            ) from None


class EventFanout:
    """Maps each event variant to an ordered tuple of callables.

    Event variants may have any number of entries, including none.
    """

    __slots__ = ("variants", "_entries")

    kind = "listener"

    def __init__(
        self,
        event_types: Any,
        entries: Iterable[tuple[type[Event], Callable[[Event], Any]]] = (),
    ):
        self.variants = variants_of(event_types, Event)

        table: dict[type[Event], list[Callable[[Event], Any]]] = {}
        for event_type, entry in entries:
            if event_type not in self.variants:
                raise ConfigurationError(
                    f"{self.kind.capitalize()} registered for undeclared "
                    f"event type {_name(event_type)}"
                )
            table.setdefault(event_type, []).append(entry)

        self._entries = {event_type: tuple(found) for event_type, found in table.items()}

    def for_event(self, event_type: type[Event]) -> tuple[Callable[[Event], Any], ...]:
        """Get the entries for an event type in registration order."""
        return self._entries.get(event_type, ())

    def __len__(self) -> int:
        return sum(len(found) for found in self._entries.values())


class PolicyRegistry(EventFanout):
    """Maps each event variant to its ordered policies."""

    __slots__ = ()

    kind = "policy"

    def for_event(self, event_type: type[Event]) -> tuple[Policy, ...]:
        return super().for_event(event_type)


class ProjectionRegistry(EventFanout):
    """Maps each event variant to its ordered projections."""

    __slots__ = ()

    kind = "projection"

    def for_event(self, event_type: type[Event]) -> tuple[Projection, ...]:
        return super().for_event(event_type)


def _name(message_type: Any) -> str:
    return getattr(message_type, "__name__", repr(message_type))
