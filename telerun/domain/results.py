from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Generic, Iterable, Sequence, Tuple, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class NoData:
    """Nothing exists for the query; presenters show a "nothing here" message."""


@dataclass(frozen=True)
class Rows(Generic[T]):
    """A non-empty result set."""

    items: Tuple[T, ...]

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


NO_DATA = NoData()

QueryResult = Union[NoData, Rows[T]]


def rows_or_no_data(items: Iterable[T]) -> QueryResult[T]:
    """Wrap `items` as `Rows`, or return `NO_DATA` when there are none."""

    collected: Sequence[T] = tuple(items)
    if not collected:
        return NO_DATA
    return Rows(collected)


class MutationOutcome(enum.Enum):
    """Result of an ownership-gated edit or delete."""

    APPLIED = "applied"
    NO_MATCH = "no_match"

    @classmethod
    def from_rowcount(cls, rowcount: int) -> "MutationOutcome":
        return cls.APPLIED if rowcount > 0 else cls.NO_MATCH
