"""Weighted, state-conditioned command selection.

Turns the ``(weight, strategy)`` list a model returns for its current state
into one drawn value tree. The only source of randomness is the ``Random``
instance passed in, so a seeded generator always selects the same commands.

Python 3.13+.
"""

from __future__ import annotations

import bisect
import itertools
import logging
from collections.abc import Sequence
from random import Random

from stateprop.diagnostics import ErrorTemplate, GenerationError
from stateprop.model import WeightedCommand
from stateprop.strategy import ValueTree

__all__ = ["cumulative_weights", "select_command", "validate_weights"]

logger = logging.getLogger(__name__)


def validate_weights(weighted: Sequence[WeightedCommand[object]]) -> list[int]:
    """Check a commands() result and return its weights.

    Args:
        weighted: (weight, strategy) pairs offered by a model

    Returns:
        The weights, in order

    Raises:
        GenerationError: If the list is empty, a weight is not an int
            (bool is rejected), or a weight is zero or negative
    """
    if not weighted:
        raise GenerationError(ErrorTemplate.no_commands())

    weights: list[int] = []
    for index, (weight, _strategy) in enumerate(weighted):
        if isinstance(weight, bool) or not isinstance(weight, int):
            raise GenerationError(ErrorTemplate.invalid_weight(index, weight))
        if weight <= 0:
            raise GenerationError(ErrorTemplate.non_positive_weight(index, weight))
        weights.append(weight)
    return weights


def cumulative_weights(weights: Sequence[int]) -> list[int]:
    """Running totals of ``weights``.

    Example:
        >>> cumulative_weights([1, 3, 1])
        [1, 4, 5]
    """
    return list(itertools.accumulate(weights))


def select_command[C](weighted: Sequence[WeightedCommand[C]], rng: Random) -> ValueTree[C]:
    """Draw one command tree from a weighted list.

    Entry ``i`` is chosen with probability ``weights[i] / sum(weights)``.

    Args:
        weighted: (weight, strategy) pairs offered by a model
        rng: Random source owned by the caller

    Returns:
        The value tree produced by the chosen strategy

    Raises:
        GenerationError: If the weights are malformed
    """
    totals = cumulative_weights(validate_weights(weighted))
    ticket = rng.randrange(totals[-1])
    choice = bisect.bisect_right(totals, ticket)
    _weight, strategy = weighted[choice]
    logger.debug("Selected command shape %d of %d (%r)", choice, len(weighted), strategy)
    return strategy.new_tree(rng)
