"""Run configuration for stateful plan execution.

Provides a single frozen dataclass holding every knob the harness, the
sequence builder and the shrink search read. The configuration is passed
explicitly at construction; nothing in the engine reads process-wide state.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from stateprop.constants import (
    DEFAULT_CASES,
    DEFAULT_MAX_SEQUENCE_SIZE,
    DEFAULT_MAX_SHRINK_ITERS,
    DEFAULT_MIN_SEQUENCE_SIZE,
    DEFAULT_MIN_SHRINK_SIZE,
    DEFAULT_WORKERS,
    SEED_BITS,
)

__all__ = ["PlanConfig"]


@dataclass(frozen=True, slots=True)
class PlanConfig:
    """Immutable configuration for a stateful test run.

    All fields have sensible defaults; ``PlanConfig()`` with no arguments
    produces a usable configuration.

    Attributes:
        min_sequence_size: Minimum number of commands in a generated
            sequence (default: 1).
        max_sequence_size: Maximum number of commands in a generated
            sequence (default: 100).
        shrink_commands: Once no further command can be deleted, also try
            to simplify the arguments of the surviving commands
            (default: False).
        seed: Master seed. ``None`` draws a fresh seed from the operating
            system for every run; the drawn seed is reported on the outcome.
        cases: Number of independent trials (default: 256).
        max_shrink_iters: Maximum candidate executions while minimizing one
            failure (default: 4096). Zero disables shrinking.
        min_shrink_size: Fewest commands a shrunk counterexample may keep
            (default: 1). Independent of ``min_sequence_size`` so that a
            fixed-length plan can still shrink.
        workers: Threads used to run trials (default: 1). Results do not
            depend on this value.

    Example:
        >>> config = PlanConfig(min_sequence_size=5, max_sequence_size=5)
        >>> config.cases
        256
        >>> config.with_seed(7).seed
        7
    """

    min_sequence_size: int = DEFAULT_MIN_SEQUENCE_SIZE
    max_sequence_size: int = DEFAULT_MAX_SEQUENCE_SIZE
    shrink_commands: bool = False
    seed: int | None = None
    cases: int = DEFAULT_CASES
    max_shrink_iters: int = DEFAULT_MAX_SHRINK_ITERS
    min_shrink_size: int = DEFAULT_MIN_SHRINK_SIZE
    workers: int = DEFAULT_WORKERS

    def __post_init__(self) -> None:
        """Validate configuration values at construction time.

        Raises:
            ValueError: If a size bound is not positive, the bounds are
                inverted, cases or workers is not positive, the shrink
                budget is negative, or the seed is outside 0..2**64-1.
        """
        if self.min_sequence_size < 1:
            msg = "min_sequence_size must be at least 1"
            raise ValueError(msg)
        if self.max_sequence_size < self.min_sequence_size:
            msg = (
                f"max_sequence_size ({self.max_sequence_size}) must be >= "
                f"min_sequence_size ({self.min_sequence_size})"
            )
            raise ValueError(msg)
        if self.min_shrink_size < 1:
            msg = "min_shrink_size must be at least 1"
            raise ValueError(msg)
        if self.cases <= 0:
            msg = "cases must be positive"
            raise ValueError(msg)
        if self.max_shrink_iters < 0:
            msg = "max_shrink_iters must not be negative"
            raise ValueError(msg)
        if self.workers <= 0:
            msg = "workers must be positive"
            raise ValueError(msg)
        if self.seed is not None and not 0 <= self.seed < 2**SEED_BITS:
            msg = f"seed must be in range 0..2**{SEED_BITS}-1, got {self.seed}"
            raise ValueError(msg)

    def with_seed(self, seed: int) -> PlanConfig:
        """Return a copy of this configuration pinned to ``seed``."""
        return replace(self, seed=seed)
