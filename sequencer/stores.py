"""In-memory read-model stores for projections.

Stores are ordinary objects: create them once per session, hand them to
the projections that write them, and query them directly afterwards.
"""

from collections.abc import Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class RecordStore(Generic[T]):
    """Append-only sequence of records.

    Example:
        >>> path = RecordStore[str]()
        >>> path.append("0:0:North")
        >>> path.records()
        ['0:0:North']
    """

    __slots__ = ("_records",)

    def __init__(self) -> None:
        self._records: list[T] = []

    def append(self, record: T) -> None:
        self._records.append(record)

    def records(self) -> list[T]:
        """Get a copy of all records in insertion order."""
        return list(self._records)

    def last(self) -> T | None:
        return self._records[-1] if self._records else None

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._records))


class FlagStore(Generic[T]):
    """Set of flagged values; flagging the same value twice keeps one entry.

    ``flagged()`` returns values in the order they were first flagged.
    """

    __slots__ = ("_flags",)

    def __init__(self) -> None:
        # dict keeps first-flagged order
        self._flags: dict[T, None] = {}

    def flag(self, value: T) -> bool:
        """Flag a value.

        Returns:
            True if newly flagged, False if it was already flagged
        """
        if value in self._flags:
            return False
        self._flags[value] = None
        return True

    def is_flagged(self, value: T) -> bool:
        return value in self._flags

    def flagged(self) -> list[T]:
        return list(self._flags)

    def __contains__(self, value: object) -> bool:
        return value in self._flags

    def __len__(self) -> int:
        return len(self._flags)
