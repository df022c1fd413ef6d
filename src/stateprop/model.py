"""Capability contracts consumed by the engine.

A test author supplies two objects:

- a ``StateMachine``: the reference model approximating correct behavior,
- a ``SystemUnderTest``: an adapter around the real system.

Both are Protocols (structural typing) rather than ABCs so that existing
classes can be used without inheriting from anything in this package.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol

from stateprop.strategy import Strategy

__all__ = [
    "StateMachine",
    "SutFactory",
    "SystemUnderTest",
    "WeightedCommand",
]

type WeightedCommand[C] = tuple[int, Strategy[C]]


# pylint: disable=unnecessary-ellipsis
class StateMachine[C, R](Protocol):
    """Reference model of the system under test.

    The engine clones the model with ``copy.deepcopy`` whenever it needs an
    independent instance (one while generating, one per executed sequence),
    so models must be deep-copyable.

    Type Parameters:
        C: Command type accepted by the model
        R: Result type produced by the system under test

    Example:
        >>> class CounterModel:
        ...     def __init__(self) -> None:
        ...         self.value = 0
        ...     def reset(self) -> None:
        ...         self.value = 0
        ...     def commands(self):
        ...         options = [(3, just(Inc()))]
        ...         if self.value > 0:
        ...             options.append((1, just(Dec())))
        ...         return options
        ...     def postcondition(self, cmd, result) -> None:
        ...         expected = self.value + (1 if isinstance(cmd, Inc) else -1)
        ...         if result != expected:
        ...             raise PostconditionError(cmd, expected, result)
        ...     def next_state(self, cmd) -> None:
        ...         self.value += 1 if isinstance(cmd, Inc) else -1
    """

    def reset(self) -> None:
        """Return to the canonical initial state.

        Must not have side effects outside the model.
        """
        ...

    def commands(self) -> Sequence[WeightedCommand[C]]:
        """Commands that are legal in the current state.

        Returns:
            (weight, strategy) pairs. Weights are positive integers that
            bias sampling, e.g. (3, writes) and (1, reads) draws writes
            three times as often.
        """
        ...

    def postcondition(self, cmd: C, result: R) -> None:
        """Check ``result`` against what the current state predicts for ``cmd``.

        Called before ``next_state(cmd)``, so the model still reflects the
        state the command was applied to.

        Raises:
            PostconditionError: If the result is inconsistent with the model
        """
        ...

    def next_state(self, cmd: C) -> None:
        """Advance the model as if ``cmd`` had been applied."""
        ...


class SystemUnderTest[C, R](Protocol):
    """Adapter around the real system.

    Any exception raised by ``run`` fails the trial and is reported as a
    SystemUnderTestError attributed to the command. The engine applies no
    timeout; an adapter that may block should enforce its own.
    """

    def run(self, cmd: C) -> R:
        """Apply ``cmd`` to the system and return its observable result."""
        ...


type SutFactory[C, R] = Callable[[], SystemUnderTest[C, R]]
