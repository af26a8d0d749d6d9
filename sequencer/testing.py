"""Given/when/then helpers for testing pure transition functions."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from types import TracebackType
from typing import Generic, TypeVar

from typing_extensions import Self

from .domain import Aggregate, Command, Event, Rejection, Transition

S = TypeVar("S", bound=Aggregate)


class Result(Generic[S]):
    def __init__(self, state: S | None, events: list[Event], rejections: list[Rejection]):
        self.state = state
        self.events = events
        self.rejections = rejections

    def contains_event_of_type(self, event_type: type[Event]) -> bool:
        return any(type(event) is event_type for event in self.events)

    def contains_event(self, expected: Event) -> bool:
        # ids and timestamps are generated, so compare the payload only
        return any(_payload(event) == _payload(expected) for event in self.events)


class Expectation(ABC):
    @abstractmethod
    def was_met(self, result: Result) -> bool:
        pass

    @abstractmethod
    def describe(self) -> str:
        pass

    def assert_met(self, result: Result) -> None:
        if not self.was_met(result):
            raise AssertionError(f"Expectation not met: {self.describe()}")


class ContainsEventOfExactPayload(Expectation):
    def __init__(self, event: Event):
        self.event = event

    def was_met(self, result: Result) -> bool:
        return result.contains_event(self.event)

    def describe(self) -> str:
        return f"should contain event {self.event!r}"


class ContainsEventOfExactType(Expectation):
    def __init__(self, event_type: type[Event]):
        self.event_type = event_type

    def was_met(self, result: Result) -> bool:
        return result.contains_event_of_type(self.event_type)

    def describe(self) -> str:
        return f"should contain event of type {self.event_type.__name__}"


class DoesNotHaveEvents(Expectation):
    def was_met(self, result: Result) -> bool:
        return len(result.events) == 0

    def describe(self) -> str:
        return "should not emit any events"


class WasRejected(Expectation):
    def __init__(self, reason: str | None = None):
        self.reason = reason

    def was_met(self, result: Result) -> bool:
        if self.reason is None:
            return bool(result.rejections)
        return any(rejection.reason == self.reason for rejection in result.rejections)

    def describe(self) -> str:
        if self.reason is None:
            return "should reject a command"
        return f"should reject a command with reason {self.reason!r}"


class StateMatches(Expectation):
    def __init__(self, predicate: Callable[[S], bool]):
        self.predicate = predicate

    def was_met(self, result: Result) -> bool:
        return result.state is not None and self.predicate(result.state)

    def describe(self) -> str:
        return "should match state with predicate"


class TransitionScenario(Generic[S]):
    """A scenario for testing a transition function without a dispatcher.

    - Given a starting state
    - When a list of commands are applied in order
    - Then a list of expectations are met

    Commands are folded through the transition function; a rejected
    command leaves the state unchanged, as the aggregate handlers do.
    The expectations are checked when the ``with`` block exits.

    Example:
        >>> with TransitionScenario(deposit) as scenario:
        ...     scenario.given(Ledger(id=ledger_id)).when(
        ...         Deposit(aggregate_id=ledger_id, amount=5)
        ...     ).should_emit(Deposited).should_have_state(lambda s: s.balance == 5)
    """

    def __init__(self, transition: Callable[[S, Command], Transition[S]]):
        self.transition = transition
        self.state: S | None = None
        self.commands: list[Command] = []
        self.expectations: list[Expectation] = []

    def given(self, state: S) -> Self:
        self.state = state
        return self

    def when(self, *commands: Command) -> Self:
        self.commands.extend(commands)
        return self

    def should_emit(self, *event_or_event_types: type[Event] | Event) -> Self:
        for e in event_or_event_types:
            if isinstance(e, Event):
                self.expectations.append(ContainsEventOfExactPayload(e))
            else:
                self.expectations.append(ContainsEventOfExactType(e))
        return self

    def should_emit_nothing(self) -> Self:
        self.expectations.append(DoesNotHaveEvents())
        return self

    def should_reject(self, reason: str | None = None) -> Self:
        self.expectations.append(WasRejected(reason))
        return self

    def should_have_state(self, predicate: Callable[[S], bool]) -> Self:
        self.expectations.append(StateMatches(predicate))
        return self

    def perform_actions(self) -> Result[S]:
        if self.state is None:
            raise ValueError("TransitionScenario needs a starting state; call given()")

        state = self.state
        events: list[Event] = []
        rejections: list[Rejection] = []
        for command in self.commands:
            transition = self.transition(state, command)
            if transition.failure is not None:
                rejections.append(transition.failure)
                continue
            state = transition.state
            if transition.event is not None:
                events.append(transition.event)
        return Result(state, events, rejections)

    def execute_scenario(self) -> None:
        result = self.perform_actions()
        for expectation in self.expectations:
            expectation.assert_met(result)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.execute_scenario()


_GENERATED_FIELDS = {"id", "timestamp", "sequence_number", "correlation_id", "causation_id"}


def _payload(event: Event) -> tuple[type, dict]:
    return type(event), event.model_dump(exclude=_GENERATED_FIELDS)
