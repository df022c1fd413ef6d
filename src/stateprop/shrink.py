"""Sequence-level shrink search.

CommandSequenceTree owns the value trees of one generated sequence and walks
a greedy, two-phase search over smaller candidates:

1. Delete phase. Commands are excluded one position at a time, front to
   back. A deletion the caller rejects (the candidate stopped failing) is
   undone by ``complicate()`` and the cursor moves on regardless, so every
   position is tried exactly once.
2. Element phase (only with ``shrink_commands=True``). Each surviving
   command's own value tree is simplified until it refuses, then the next
   surviving position is tried.

Positions are never renumbered: exclusion flips a flag, so the remembered
step always refers to the same element. Elements are never regenerated.

Caveat for test authors: survivors are replayed without checking that the
model would still have offered them after the deleted commands. Any failure
of the shorter sequence counts as reproducing the original one, which can
surface a different root cause. The harness reports both errors when that
happens.

Python 3.13+.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from stateprop.constants import DEFAULT_MIN_SHRINK_SIZE
from stateprop.model import StateMachine
from stateprop.sequence import CommandSequence
from stateprop.strategy import ValueTree

__all__ = ["CommandSequenceTree", "Phase", "ShrinkStep"]

logger = logging.getLogger(__name__)


class Phase(StrEnum):
    """Which kind of reduction a shrink step performs."""

    DELETE = "delete"
    SHRINK_ELEMENT = "shrink_element"


@dataclass(frozen=True, slots=True)
class ShrinkStep:
    """A phase together with the element position it applies to."""

    phase: Phase
    index: int


class CommandSequenceTree[C, R]:
    """Shrinkable generated command sequence.

    Attributes:
        min_size: Fewest included commands the delete phase leaves behind
        shrink_commands: Whether the element phase runs at all

    Example:
        >>> tree = CommandSequenceTree(elements, model)
        >>> failing = tree.current()
        >>> while tree.simplify():
        ...     if still_fails(tree.current()):
        ...         continue
        ...     tree.complicate()
    """

    __slots__ = (
        "_elements",
        "_included",
        "_last",
        "_model",
        "_step",
        "min_size",
        "shrink_commands",
    )

    def __init__(
        self,
        elements: Sequence[ValueTree[C]],
        model: StateMachine[C, R],
        *,
        min_size: int = DEFAULT_MIN_SHRINK_SIZE,
        shrink_commands: bool = False,
    ) -> None:
        """Initialize the search at the start of the delete phase.

        Args:
            elements: One value tree per generated command, in order
            model: Model paired with every materialized sequence
            min_size: Shrink floor (default: 1)
            shrink_commands: Enable the element phase (default: False)

        Raises:
            ValueError: If min_size is less than 1
        """
        if min_size < 1:
            msg = "min_size must be at least 1"
            raise ValueError(msg)
        self._elements = list(elements)
        self._included = [True] * len(self._elements)
        self._model = model
        self._step = ShrinkStep(Phase.DELETE, 0)
        self._last: ShrinkStep | None = None
        self.min_size = min_size
        self.shrink_commands = shrink_commands

    @property
    def num_elements(self) -> int:
        """Number of generated commands, included or not."""
        return len(self._elements)

    @property
    def num_included(self) -> int:
        """Number of commands the current candidate contains."""
        return sum(self._included)

    @property
    def included(self) -> tuple[bool, ...]:
        """Inclusion flag per generated position."""
        return tuple(self._included)

    @property
    def step(self) -> ShrinkStep:
        """Where the next ``simplify()`` starts."""
        return self._step

    @property
    def last_step(self) -> ShrinkStep | None:
        """The step ``complicate()`` would undo, if any."""
        return self._last

    def current(self) -> CommandSequence[C, R]:
        """Materialize the included commands with a freshly reset model."""
        commands = [
            element.current()
            for element, included in zip(self._elements, self._included, strict=True)
            if included
        ]
        model = copy.deepcopy(self._model)
        model.reset()
        return CommandSequence(commands, model)

    def simplify(self) -> bool:
        """Attempt one reduction step.

        Returns:
            True if the candidate changed; False once the search is exhausted
        """
        if self._step.phase is Phase.DELETE:
            index = self._step.index
            if index >= len(self._elements) or self.num_included <= self.min_size:
                if not self.shrink_commands:
                    logger.debug("Delete phase finished; element shrinking disabled")
                    return False
                self._step = ShrinkStep(Phase.SHRINK_ELEMENT, 0)
            else:
                self._included[index] = False
                self._last = self._step
                self._step = ShrinkStep(Phase.DELETE, index + 1)
                logger.debug("Deleted command at position %d", index)
                return True

        index = self._step.index
        while index < len(self._elements):
            if self._included[index] and self._elements[index].simplify():
                self._step = ShrinkStep(Phase.SHRINK_ELEMENT, index)
                self._last = self._step
                logger.debug("Simplified command at position %d", index)
                return True
            index += 1
        self._step = ShrinkStep(Phase.SHRINK_ELEMENT, index)
        return False

    def complicate(self) -> bool:
        """Undo the most recently accepted ``simplify()`` step.

        Returns:
            True if the candidate changed back. A deletion is always fully
            undone. An element step keeps being undoable while the element
            itself reports progress.
        """
        last = self._last
        if last is None:
            return False
        if last.phase is Phase.DELETE:
            self._included[last.index] = True
            self._last = None
            logger.debug("Restored command at position %d", last.index)
            return True
        if self._elements[last.index].complicate():
            return True
        self._last = None
        return False
