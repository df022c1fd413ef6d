"""Leaf strategies for command arguments.

A strategy draws one value tree from a ``random.Random``. Models use them in
``commands()`` to describe how each command shape is generated:

    >>> from stateprop.strategy import builds, integers, just
    >>> def commands(self):
    ...     return [
    ...         (3, builds(Set, key=integers(0, 9), value=integers())),
    ...         (1, builds(Get, key=integers(0, 9))),
    ...         (1, just(Flush())),
    ...     ]

Every draw goes through the ``rng`` argument only, so a seeded generator
reproduces the same trees.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from random import Random

from .tree import IntegerTree, JustTree, MapTree, SampledTree, TupleTree, ValueTree

__all__ = [
    "Strategy",
    "booleans",
    "builds",
    "integers",
    "just",
    "one_of",
    "sampled_from",
    "tuples",
]

# Bounds used by integers() when a side is left open.
_DEFAULT_MIN_INT: int = -(2**63)
_DEFAULT_MAX_INT: int = 2**63 - 1


class Strategy[T]:
    """Base class for value generators.

    Subclasses implement ``new_tree``; everything else is derived from it.
    """

    __slots__ = ()

    def new_tree(self, rng: Random) -> ValueTree[T]:
        """Draw a fresh value tree using ``rng``."""
        raise NotImplementedError

    def map[U](self, fn: Callable[[T], U]) -> Strategy[U]:
        """Return a strategy producing ``fn(value)`` for each drawn value.

        Shrinking happens on the underlying value; ``fn`` is re-applied to
        every candidate.
        """
        return _Mapped(self, fn)

    def example(self, rng: Random | None = None) -> T:
        """Draw a single value, mostly useful in doctests and the REPL."""
        return self.new_tree(rng or Random()).current()


class _Just[T](Strategy[T]):
    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        self._value = value

    def new_tree(self, rng: Random) -> ValueTree[T]:
        return JustTree(self._value)

    def __repr__(self) -> str:
        return f"just({self._value!r})"


class _Integers(Strategy[int]):
    __slots__ = ("_max", "_min", "_origin")

    def __init__(self, min_value: int, max_value: int) -> None:
        self._min = min_value
        self._max = max_value
        # Shrink toward zero when it is in range, otherwise toward the bound closest to it.
        self._origin = min(max(0, min_value), max_value)

    def new_tree(self, rng: Random) -> ValueTree[int]:
        return IntegerTree(rng.randint(self._min, self._max), origin=self._origin)

    def __repr__(self) -> str:
        return f"integers({self._min}, {self._max})"


class _Sampled[T](Strategy[T]):
    __slots__ = ("_choices",)

    def __init__(self, choices: Sequence[T]) -> None:
        self._choices = choices

    def new_tree(self, rng: Random) -> ValueTree[T]:
        return SampledTree(self._choices, rng.randrange(len(self._choices)))

    def __repr__(self) -> str:
        return f"sampled_from({list(self._choices)!r})"


class _Tuples(Strategy[tuple[object, ...]]):
    __slots__ = ("_strategies",)

    def __init__(self, strategies: Sequence[Strategy[object]]) -> None:
        self._strategies = tuple(strategies)

    def new_tree(self, rng: Random) -> ValueTree[tuple[object, ...]]:
        return TupleTree([strategy.new_tree(rng) for strategy in self._strategies])


class _Mapped[S, T](Strategy[T]):
    __slots__ = ("_fn", "_source")

    def __init__(self, source: Strategy[S], fn: Callable[[S], T]) -> None:
        self._source = source
        self._fn = fn

    def new_tree(self, rng: Random) -> ValueTree[T]:
        return MapTree(self._source.new_tree(rng), self._fn)


class _OneOf[T](Strategy[T]):
    __slots__ = ("_branches",)

    def __init__(self, branches: Sequence[Strategy[T]]) -> None:
        self._branches = tuple(branches)

    def new_tree(self, rng: Random) -> ValueTree[T]:
        # Shrinking stays inside the chosen branch.
        return self._branches[rng.randrange(len(self._branches))].new_tree(rng)


def just[T](value: T) -> Strategy[T]:
    """Always produce ``value``."""
    return _Just(value)


def integers(min_value: int | None = None, max_value: int | None = None) -> Strategy[int]:
    """Uniform integers in ``[min_value, max_value]``, shrinking toward zero.

    Open bounds default to the signed 64-bit range.

    Raises:
        ValueError: If min_value > max_value
    """
    low = _DEFAULT_MIN_INT if min_value is None else min_value
    high = _DEFAULT_MAX_INT if max_value is None else max_value
    if low > high:
        msg = f"min_value ({low}) must be <= max_value ({high})"
        raise ValueError(msg)
    return _Integers(low, high)


def booleans() -> Strategy[bool]:
    """True or False, shrinking toward False."""
    return _Sampled((False, True))


def sampled_from[T](choices: Sequence[T]) -> Strategy[T]:
    """Uniform choice from ``choices``, shrinking toward the first element.

    Raises:
        ValueError: If choices is empty
    """
    if len(choices) == 0:
        msg = "sampled_from() requires at least one choice"
        raise ValueError(msg)
    return _Sampled(tuple(choices))


def tuples(*strategies: Strategy[object]) -> Strategy[tuple[object, ...]]:
    """Tuple of one value from each strategy."""
    return _Tuples(strategies)


def builds[T](
    target: Callable[..., T], *args: Strategy[object], **kwargs: Strategy[object]
) -> Strategy[T]:
    """Call ``target`` with values drawn from the given strategies.

    Positional strategies are drawn first, then keyword strategies in the
    order given. Shrinking follows the same order.
    """
    names = tuple(kwargs)
    parts = _Tuples([*args, *kwargs.values()])
    split = len(args)

    def _build(values: tuple[object, ...]) -> T:
        return target(*values[:split], **dict(zip(names, values[split:], strict=True)))

    return parts.map(_build)


def one_of[T](*strategies: Strategy[T]) -> Strategy[T]:
    """Value from one uniformly chosen strategy.

    Raises:
        ValueError: If no strategies are given
    """
    if not strategies:
        msg = "one_of() requires at least one strategy"
        raise ValueError(msg)
    return _OneOf(strategies)
