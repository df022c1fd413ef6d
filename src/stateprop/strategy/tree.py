"""Shrinkable value trees.

A value tree holds one generated value together with the state needed to
simplify it step by step and to undo the most recent step. Trees are driven
by a shrink loop that calls ``simplify()`` while the current value still
reproduces a failure and ``complicate()`` when the last simplification went
too far.

Contract shared by every tree:
    - ``current()`` is pure and cheap; callers may invoke it repeatedly.
    - ``simplify()`` returns True only if ``current()`` changed to a
      strictly simpler value.
    - ``complicate()`` called right after a successful ``simplify()``
      restores the exact previous value and returns True.
    - Once ``simplify()`` returns False without an intervening successful
      ``complicate()``, it keeps returning False.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol

__all__ = [
    "IntegerTree",
    "JustTree",
    "MapTree",
    "SampledTree",
    "TupleTree",
    "ValueTree",
]


# pylint: disable=unnecessary-ellipsis
class ValueTree[T](Protocol):
    """Protocol for a locally shrinkable generated value."""

    def current(self) -> T:
        """Return the value in its present shrink state."""
        ...

    def simplify(self) -> bool:
        """Attempt one simplification step; True if the value changed."""
        ...

    def complicate(self) -> bool:
        """Undo the most recent simplification; True if the value changed."""
        ...


class JustTree[T]:
    """Tree for a constant. Never shrinks."""

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        self._value = value

    def current(self) -> T:
        return self._value

    def simplify(self) -> bool:
        return False

    def complicate(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"JustTree({self._value!r})"


class IntegerTree:
    """Binary search from a generated integer toward an origin.

    The search works on the distance from ``origin``. ``hi`` is the distance
    of the last value the caller kept, ``lo`` the smallest distance not yet
    ruled out. ``simplify()`` proposes the midpoint; ``complicate()`` rules
    the proposal out and returns to ``hi``.

    Step budget: at most ``distance.bit_length() + 1`` successful
    ``simplify()`` calls when every proposal is kept, and at most that many
    simplify/complicate pairs when every proposal is rejected.

    Example:
        >>> tree = IntegerTree(100, origin=0)
        >>> tree.simplify(), tree.current()
        (True, 50)
        >>> tree.complicate(), tree.current()
        (True, 100)
        >>> tree.simplify(), tree.current()
        (True, 75)
    """

    __slots__ = ("_curr", "_hi", "_lo", "_origin", "_sign")

    def __init__(self, value: int, origin: int = 0) -> None:
        self._origin = origin
        self._sign = 1 if value >= origin else -1
        self._lo = 0
        self._hi = abs(value - origin)
        self._curr = self._hi

    def current(self) -> int:
        return self._origin + self._sign * self._curr

    def simplify(self) -> bool:
        # The caller only simplifies from a value it decided to keep.
        self._hi = self._curr
        if self._lo >= self._hi:
            return False
        self._curr = self._lo + (self._hi - self._lo) // 2
        return True

    def complicate(self) -> bool:
        if self._curr == self._hi:
            return False
        self._lo = self._curr + 1
        self._curr = self._hi
        return True

    def __repr__(self) -> str:
        return f"IntegerTree(current={self.current()}, origin={self._origin})"


class SampledTree[T]:
    """Choice from a fixed sequence, shrinking toward its first element."""

    __slots__ = ("_choices", "_index")

    def __init__(self, choices: Sequence[T], index: int) -> None:
        self._choices = choices
        self._index = IntegerTree(index, origin=0)

    def current(self) -> T:
        return self._choices[self._index.current()]

    def simplify(self) -> bool:
        return self._index.simplify()

    def complicate(self) -> bool:
        return self._index.complicate()


class TupleTree:
    """Fixed-size tuple of trees, shrinking its members left to right.

    Mirrors the sequence-level element phase: each member is simplified
    until it refuses, then the next member is tried. ``complicate()`` is
    forwarded to the member changed last.
    """

    __slots__ = ("_elements", "_index", "_last")

    def __init__(self, elements: Sequence[ValueTree[object]]) -> None:
        self._elements = tuple(elements)
        self._index = 0
        self._last: int | None = None

    def current(self) -> tuple[object, ...]:
        return tuple(element.current() for element in self._elements)

    def simplify(self) -> bool:
        while self._index < len(self._elements):
            if self._elements[self._index].simplify():
                self._last = self._index
                return True
            self._index += 1
        return False

    def complicate(self) -> bool:
        if self._last is None:
            return False
        if self._elements[self._last].complicate():
            return True
        self._last = None
        return False


class MapTree[S, T]:
    """Tree whose value is a function of another tree's value."""

    __slots__ = ("_fn", "_source")

    def __init__(self, source: ValueTree[S], fn: Callable[[S], T]) -> None:
        self._source = source
        self._fn = fn

    def current(self) -> T:
        return self._fn(self._source.current())

    def simplify(self) -> bool:
        return self._source.simplify()

    def complicate(self) -> bool:
        return self._source.complicate()
