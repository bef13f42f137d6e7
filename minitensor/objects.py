"""Identity counters and the base class of graph objects."""

from __future__ import annotations

from abc import ABC, abstractmethod
from itertools import count

_guids = count(1)
_fuids = count(1)


def next_guid() -> int:
    """A fresh globally unique id."""
    return next(_guids)


def next_fuid() -> int:
    """A fresh family id; copies of an object keep theirs."""
    return next(_fuids)


class GraphObject(ABC):
    """An object with a globally unique id; copies get a new id."""

    def __init__(self) -> None:
        self.guid = next_guid()

    @abstractmethod
    def __str__(self) -> str:
        """Human-readable description."""

    def print(self) -> None:
        """Write the description to standard output."""
        print(str(self))

    def __copy__(self):
        clone = self.__class__.__new__(self.__class__)
        clone.__dict__.update(self.__dict__)
        clone.guid = next_guid()
        return clone