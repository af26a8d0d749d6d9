import inspect
from collections.abc import Callable
from typing import Any, TypeVar, get_type_hints

T = TypeVar("T")


def extract_message_type(func: Callable[..., Any], param_index: int = 1) -> type:
    """Extract the message type from a handler's parameter annotation.

    Args:
        func: The handler function or method to inspect.
        param_index: Index of the parameter to extract
            (0=self, 1=first arg, etc.)

    Returns:
        The annotated class of that parameter.

    Raises:
        ValueError: If the parameter is missing or lacks a type annotation.
    """
    func_name = getattr(func, "__name__", repr(func))
    params = list(inspect.signature(func).parameters.values())

    if len(params) <= param_index:
        raise ValueError(f"Handler {func_name} must have at least {param_index + 1} parameters")

    param = params[param_index]
    if param.annotation is inspect.Parameter.empty:
        raise ValueError(
            f"Handler {func_name} parameter '{param.name}' must have a type annotation"
        )

    annotation = param.annotation
    # Resolve string annotations (from __future__ import annotations)
    if isinstance(annotation, str):
        annotation = get_type_hints(func).get(param.name, annotation)

    if not isinstance(annotation, type):
        raise ValueError(
            f"Handler {func_name} parameter '{param.name}' must be annotated "
            f"with a single class, got {annotation!r}"
        )
    return annotation


class HandlerDecorator:
    """Base class for handler decorators.

    Marks a method as a handler and records the message type taken from
    the annotation of its first parameter after ``self``.
    """

    def __init__(self, marker_attr: str, type_attr: str):
        """Initialize the decorator.

        Args:
            marker_attr: Attribute name to mark decorated methods
                (e.g., '_is_command_handler').
            type_attr: Attribute name to store the message type
                (e.g., '_handles_command_type').
        """
        self.marker_attr = marker_attr
        self.type_attr = type_attr

    def __call__(self, func: Callable[..., T]) -> Callable[..., T]:
        message_type = extract_message_type(func, param_index=1)
        setattr(func, self.type_attr, message_type)
        setattr(func, self.marker_attr, True)
        return func

    def collect(self, instance: object) -> list[tuple[type, Callable[..., Any]]]:
        """Collect the decorated methods of an object as bound callables.

        Methods are returned in definition order, base classes first.
        A method overridden in a subclass is collected once, from the
        subclass.

        Args:
            instance: The object whose class is scanned.

        Returns:
            A list of (message_type, bound_method) pairs.
        """
        seen: set[str] = set()
        found: list[tuple[str, type]] = []
        for klass in type(instance).__mro__:
            for name, value in klass.__dict__.items():
                if name in seen:
                    continue
                seen.add(name)
                if getattr(value, self.marker_attr, False):
                    found.append((name, getattr(value, self.type_attr)))

        # __mro__ runs subclass first; registration order is base first
        ordered = sorted(found, key=lambda item: _definition_rank(type(instance), item[0]))
        return [(message_type, getattr(instance, name)) for name, message_type in ordered]


def _definition_rank(cls: type, name: str) -> tuple[int, int]:
    mro = list(reversed(cls.__mro__))
    for depth, klass in enumerate(mro):
        if name in klass.__dict__:
            return (depth, list(klass.__dict__).index(name))
    return (len(mro), 0)


# Create decorator instances
handles_command = HandlerDecorator("_is_command_handler", "_handles_command_type")
reacts_to_event = HandlerDecorator("_is_policy", "_reacts_to_event_type")
projects_event = HandlerDecorator("_is_projection", "_projects_event_type")

handles_command.__doc__ = """Decorator marking a method as a command handler.

The command type is taken from the method's type annotation. The method
returns the resulting event, or None for a no-op.

Example:
    >>> class LedgerHandlers:
    ...     @handles_command
    ...     def close(self, cmd: CloseLedger) -> LedgerClosed | None:
    ...         ...
"""

reacts_to_event.__doc__ = """Decorator marking a method as a policy.

The event type is taken from the method's type annotation. The method
returns a follow-up command, or None.

Example:
    >>> class OverdraftPolicies:
    ...     @reacts_to_event
    ...     def freeze(self, event: BalanceWentNegative) -> FreezeLedger:
    ...         return FreezeLedger(aggregate_id=event.aggregate_id)
"""

projects_event.__doc__ = """Decorator marking a method as a projection.

The event type is taken from the method's type annotation. The method
updates its own read model and returns nothing.

Example:
    >>> class BalanceProjection:
    ...     @projects_event
    ...     def on_deposit(self, event: Deposited) -> None:
    ...         self.totals.append(event.amount)
"""
