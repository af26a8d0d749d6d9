"""Aggregate storage by identifier."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from ulid import ULID

from .domain import Aggregate
from .domain.exceptions import AggregateNotFound

A = TypeVar("A", bound=Aggregate)


class AggregateRepository(ABC, Generic[A]):
    """A mechanism for loading and saving aggregates by id.

    Saving replaces the stored value wholesale and is last-write-wins: the
    version field is carried along but not checked. Handlers own the
    repository exclusively for the duration of one command; projections
    may read from it but never write.

    Example:
        >>> repository = AggregateRepository.in_memory()
        >>> repository.save(ledger)
        >>> repository.get_by_id(ledger.id) == ledger
        True
    """

    @staticmethod
    def in_memory() -> "AggregateRepository":
        """Create an in-memory repository for development/testing."""
        return InMemoryAggregateRepository()

    @abstractmethod
    def get_by_id(self, aggregate_id: ULID) -> A:
        """Load the latest saved state of an aggregate.

        Raises:
            AggregateNotFound: If nothing was ever saved under this id.
        """
        ...

    @abstractmethod
    def save(self, aggregate: A) -> None:
        """Store the aggregate, replacing any previous value for its id."""
        ...

    @abstractmethod
    def exists(self, aggregate_id: ULID) -> bool: ...

    @abstractmethod
    def list_ids(self) -> list[ULID]:
        """Get the ids of all saved aggregates in first-save order."""
        ...


class InMemoryAggregateRepository(AggregateRepository[A]):
    """Dict-backed repository. State lives as long as the instance."""

    __slots__ = ("_aggregates",)

    def __init__(self) -> None:
        self._aggregates: dict[ULID, A] = {}

    def get_by_id(self, aggregate_id: ULID) -> A:
        try:
            return self._aggregates[aggregate_id]
        except KeyError:
            raise AggregateNotFound(aggregate_id) from None

    def save(self, aggregate: A) -> None:
        self._aggregates[aggregate.id] = aggregate

    def exists(self, aggregate_id: ULID) -> bool:
        return aggregate_id in self._aggregates

    def list_ids(self) -> list[ULID]:
        return list(self._aggregates)

    def __len__(self) -> int:
        return len(self._aggregates)
