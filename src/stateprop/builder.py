"""Generation of candidate command sequences.

The builder drives a private clone of the model: it asks the clone which
commands are legal, draws one, advances the clone with the drawn value and
repeats until the sequence reaches its randomly chosen length. The clone
only steers generation; the sequence tree gets its own reset copy.

Python 3.13+.
"""

from __future__ import annotations

import copy
import logging
from random import Random

from stateprop.config import PlanConfig
from stateprop.constants import (
    DEFAULT_MAX_SEQUENCE_SIZE,
    DEFAULT_MIN_SEQUENCE_SIZE,
    DEFAULT_MIN_SHRINK_SIZE,
)
from stateprop.generation import select_command
from stateprop.model import StateMachine
from stateprop.sequence import CommandSequence
from stateprop.shrink import CommandSequenceTree
from stateprop.strategy import Strategy, ValueTree

__all__ = ["CommandSequenceStrategy", "command_sequence"]

logger = logging.getLogger(__name__)


class CommandSequenceStrategy[C, R](Strategy[CommandSequence[C, R]]):
    """Strategy producing shrinkable command sequences for one model.

    Attributes:
        model: Template model; never mutated, only cloned
        min_size: Minimum generated length
        max_size: Maximum generated length
        min_shrink_size: Shrink floor handed to every tree
        shrink_commands: Whether trees run their element phase
    """

    __slots__ = ("max_size", "min_shrink_size", "min_size", "model", "shrink_commands")

    def __init__(
        self,
        model: StateMachine[C, R],
        *,
        min_size: int = DEFAULT_MIN_SEQUENCE_SIZE,
        max_size: int = DEFAULT_MAX_SEQUENCE_SIZE,
        min_shrink_size: int = DEFAULT_MIN_SHRINK_SIZE,
        shrink_commands: bool = False,
    ) -> None:
        """Initialize the strategy.

        Raises:
            ValueError: If min_size is less than 1 or exceeds max_size
        """
        if min_size < 1:
            msg = "min_size must be at least 1"
            raise ValueError(msg)
        if max_size < min_size:
            msg = f"max_size ({max_size}) must be >= min_size ({min_size})"
            raise ValueError(msg)
        self.model = model
        self.min_size = min_size
        self.max_size = max_size
        self.min_shrink_size = min_shrink_size
        self.shrink_commands = shrink_commands

    @classmethod
    def from_config(
        cls, model: StateMachine[C, R], config: PlanConfig
    ) -> CommandSequenceStrategy[C, R]:
        """Build a strategy from the sequence fields of ``config``."""
        return cls(
            model,
            min_size=config.min_sequence_size,
            max_size=config.max_sequence_size,
            min_shrink_size=config.min_shrink_size,
            shrink_commands=config.shrink_commands,
        )

    def new_tree(self, rng: Random) -> CommandSequenceTree[C, R]:
        """Generate one candidate sequence.

        Args:
            rng: Random source for the length, every command choice and
                every command's arguments

        Returns:
            A tree positioned at the full generated sequence

        Raises:
            GenerationError: If the model offers a malformed command list
                at any point during generation
        """
        size = rng.randint(self.min_size, self.max_size)

        model = copy.deepcopy(self.model)
        model.reset()
        elements: list[ValueTree[C]] = []
        while len(elements) < size:
            element = select_command(model.commands(), rng)
            model.next_state(element.current())
            elements.append(element)
        model.reset()

        logger.debug("Generated sequence of %d command(s)", size)
        return CommandSequenceTree(
            elements,
            model,
            min_size=self.min_shrink_size,
            shrink_commands=self.shrink_commands,
        )


def command_sequence[C, R](
    model: StateMachine[C, R],
    min_size: int = DEFAULT_MIN_SEQUENCE_SIZE,
    max_size: int = DEFAULT_MAX_SEQUENCE_SIZE,
    *,
    shrink_commands: bool = False,
) -> CommandSequenceStrategy[C, R]:
    """Strategy for sequences of ``min_size``..``max_size`` commands of ``model``.

    Example:
        >>> strategy = command_sequence(CounterModel(), 5, 5)
        >>> len(strategy.new_tree(Random(0)).current())
        5
    """
    return CommandSequenceStrategy(
        model, min_size=min_size, max_size=max_size, shrink_commands=shrink_commands
    )
