"""Tests for weighted command selection and sequence generation.

Covers:
- Weight validation and the diagnostics it raises
- Convergence of sampled frequencies to the configured weights
- State-conditioned generation through the model clone
- Sequence length bounds and seeded determinism
"""

from __future__ import annotations

import math
from collections import Counter as Tally
from random import Random

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from stateprop import CommandSequenceStrategy, GenerationError, PlanConfig, command_sequence
from stateprop.diagnostics import DiagnosticCode
from stateprop.generation import cumulative_weights, select_command, validate_weights
from stateprop.strategy import just
from tests.models import (
    BrokenWeightsModel,
    CacheModel,
    CounterModel,
    Flush,
    WeightedModel,
)
from tests.strategies import bad_weight_tables, weight_tables


def sample_frequencies(weights: list[int], draws: int, seed: int) -> list[float]:
    """Draw ``draws`` commands from ``weights`` and return observed frequencies."""
    rng = Random(seed)
    offered = WeightedModel(weights).commands()
    tally = Tally(select_command(offered, rng).current() for _ in range(draws))
    return [tally[index] / draws for index in range(len(weights))]


class TestValidateWeights:
    """Malformed commands() results are rejected."""

    def test_valid_weights_returned(self) -> None:
        """A well-formed list yields its weights in order."""
        assert validate_weights([(2, just("a")), (5, just("b"))]) == [2, 5]

    def test_empty_list(self) -> None:
        """No commands at all is a generation error."""
        with pytest.raises(GenerationError) as exc_info:
            validate_weights([])
        assert exc_info.value.diagnostic is not None
        assert exc_info.value.diagnostic.code is DiagnosticCode.NO_COMMANDS

    @pytest.mark.parametrize("weight", [0, -1, -100])
    def test_non_positive_weight(self, weight: int) -> None:
        """Zero and negative weights are generation errors."""
        with pytest.raises(GenerationError) as exc_info:
            validate_weights([(1, just("a")), (weight, just("b"))])
        assert exc_info.value.diagnostic is not None
        assert exc_info.value.diagnostic.code is DiagnosticCode.NON_POSITIVE_WEIGHT
        assert "index 1" in str(exc_info.value)

    @pytest.mark.parametrize("weight", [True, 1.0, "3", None])
    def test_non_integer_weight(self, weight: object) -> None:
        """Weights must be real ints; bool does not count."""
        with pytest.raises(GenerationError) as exc_info:
            validate_weights([(weight, just("a"))])  # type: ignore[list-item]
        assert exc_info.value.diagnostic is not None
        assert exc_info.value.diagnostic.code is DiagnosticCode.INVALID_WEIGHT

    @given(table=bad_weight_tables())
    def test_any_bad_entry_rejected(self, table: list[object]) -> None:
        """One malformed entry anywhere in the list is enough."""
        with pytest.raises(GenerationError):
            validate_weights([(weight, just(index)) for index, weight in enumerate(table)])  # type: ignore[misc]


class TestSelectCommand:
    """Weighted sampling."""

    def test_cumulative_weights(self) -> None:
        """Running totals of the weights."""
        assert cumulative_weights([1, 3, 1]) == [1, 4, 5]

    def test_single_command_always_chosen(self) -> None:
        """With one entry the choice is forced."""
        rng = Random(0)
        assert {select_command([(7, just("only"))], rng).current() for _ in range(50)} == {
            "only"
        }

    def test_frequencies_converge(self) -> None:
        """Observed frequencies match weight / total within 0.02 over 20000 draws."""
        weights = [1, 3, 1]
        observed = sample_frequencies(weights, draws=20_000, seed=20240101)
        for weight, frequency in zip(weights, observed, strict=True):
            assert abs(frequency - weight / sum(weights)) < 0.02

    @settings(max_examples=15, deadline=None)
    @given(weights=weight_tables(), seed=st.integers(0, 2**32))
    def test_frequencies_converge_for_any_table(self, weights: list[int], seed: int) -> None:
        """Every entry is sampled proportionally to its weight."""
        draws = 4_000
        observed = sample_frequencies(weights, draws=draws, seed=seed)
        total = sum(weights)
        for weight, frequency in zip(weights, observed, strict=True):
            p = weight / total
            tolerance = 6 * math.sqrt(p * (1 - p) / draws) + 1e-9
            assert abs(frequency - p) <= tolerance

    def test_same_seed_same_choices(self) -> None:
        """Selection depends only on the Random passed in."""
        assert sample_frequencies([2, 5, 1], 500, seed=7) == sample_frequencies(
            [2, 5, 1], 500, seed=7
        )


class TestCommandSequenceStrategy:
    """Sequence generation driven by the model."""

    @given(size=st.integers(1, 60), seed=st.integers(0, 2**32))
    def test_fixed_size_generates_exactly_n(self, size: int, seed: int) -> None:
        """min == max == N always yields N commands."""
        strategy = command_sequence(CounterModel(), size, size)
        assert len(strategy.new_tree(Random(seed)).current()) == size

    @given(
        bounds=st.tuples(st.integers(1, 30), st.integers(0, 30)),
        seed=st.integers(0, 2**32),
    )
    def test_length_within_bounds(self, bounds: tuple[int, int], seed: int) -> None:
        """Generated lengths respect [min_size, max_size]."""
        low, extra = bounds
        strategy = command_sequence(CounterModel(), low, low + extra)
        assert low <= len(strategy.new_tree(Random(seed)).current()) <= low + extra

    def test_invalid_bounds_rejected(self) -> None:
        """Bounds are validated when the strategy is built."""
        with pytest.raises(ValueError, match="min_size"):
            command_sequence(CounterModel(), 0, 5)
        with pytest.raises(ValueError, match="max_size"):
            command_sequence(CounterModel(), 5, 4)

    def test_from_config(self) -> None:
        """from_config() copies the sequence fields of a PlanConfig."""
        config = PlanConfig(
            min_sequence_size=2, max_sequence_size=9, min_shrink_size=2, shrink_commands=True
        )
        strategy = CommandSequenceStrategy.from_config(CounterModel(), config)
        assert (strategy.min_size, strategy.max_size) == (2, 9)
        assert strategy.min_shrink_size == 2
        assert strategy.shrink_commands is True

    @given(seed=st.integers(0, 2**32))
    def test_commands_respect_model_state(self, seed: int) -> None:
        """Flush is only generated while the modeled cache holds entries."""
        model = CacheModel(3)
        sequence = command_sequence(model, 40, 40).new_tree(Random(seed)).current()
        replay = CacheModel(3)
        for cmd in sequence:
            if isinstance(cmd, Flush):
                assert replay.entries
            replay.next_state(cmd)

    def test_template_model_not_mutated(self) -> None:
        """Generation works on a clone of the model."""
        model = CacheModel(3)
        command_sequence(model, 50, 50).new_tree(Random(1))
        assert model.entries == {}
        assert model.next_index == 0

    @given(seed=st.integers(0, 2**64 - 1))
    def test_same_seed_same_sequence(self, seed: int) -> None:
        """A seed fixes the length and every command."""
        strategy = command_sequence(CacheModel(4), 1, 30)
        assert strategy.new_tree(Random(seed)).current() == strategy.new_tree(
            Random(seed)
        ).current()

    def test_bad_weights_abort_generation(self) -> None:
        """A malformed distribution raises GenerationError out of new_tree()."""
        strategy = command_sequence(BrokenWeightsModel([1, 0], after=3), 10, 10)
        with pytest.raises(GenerationError, match="must be positive"):
            strategy.new_tree(Random(0))

    def test_bad_weights_after_max_size_unseen(self) -> None:
        """A model that only breaks after max_size commands generates fine."""
        strategy = command_sequence(BrokenWeightsModel([0], after=5), 5, 5)
        assert list(strategy.new_tree(Random(0)).current()) == ["ok"] * 5
