"""Materialized command sequences and their replay against a system.

A CommandSequence is what the harness executes and what it reports: the
commands in order plus a model instance that is reset before every replay.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

from stateprop.diagnostics import ExecutionError, SystemUnderTestError
from stateprop.model import StateMachine, SystemUnderTest

__all__ = ["CommandSequence"]

logger = logging.getLogger(__name__)


class CommandSequence[C, R]:
    """Ordered commands paired with the model that checks them.

    Iterating yields the commands in execution order. ``str()`` renders one
    command per line for failure reports.

    Attributes:
        commands: The commands, in execution order
        model: Model replayed alongside the system under test
    """

    __slots__ = ("commands", "model")

    def __init__(self, commands: Sequence[C], model: StateMachine[C, R]) -> None:
        self.commands: tuple[C, ...] = tuple(commands)
        self.model = model

    def run(self, sut: SystemUnderTest[C, R]) -> None:
        """Replay every command against ``sut`` and check it against the model.

        For each command in order: run it on the system, check the model's
        postcondition against the result, then advance the model. Stops at
        the first failure because later commands were chosen assuming the
        earlier ones succeeded.

        Args:
            sut: Fresh system under test

        Raises:
            SystemUnderTestError: If the system raised; the original
                exception is chained as ``__cause__``
            PostconditionError: If the model rejected a result
        """
        self.model.reset()
        for position, cmd in enumerate(self.commands):
            try:
                result = sut.run(cmd)
            except SystemUnderTestError as exc:
                exc.locate(position, cmd)
                raise
            except Exception as exc:
                raise SystemUnderTestError.wrap(exc, cmd, position) from exc

            try:
                self.model.postcondition(cmd, result)
            except ExecutionError as exc:
                exc.locate(position)
                raise

            self.model.next_state(cmd)
        logger.debug("Sequence of %d command(s) passed", len(self.commands))

    def __len__(self) -> int:
        return len(self.commands)

    def __iter__(self) -> Iterator[C]:
        return iter(self.commands)

    def __getitem__(self, index: int) -> C:
        return self.commands[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CommandSequence):
            return NotImplemented
        return self.commands == other.commands

    def __hash__(self) -> int:
        return hash(self.commands)

    def __repr__(self) -> str:
        return f"CommandSequence({list(self.commands)!r})"

    def __str__(self) -> str:
        return "\n".join(f"#{index} {cmd!r}" for index, cmd in enumerate(self.commands))
