"""Shared constants for stateprop.

Centralized defaults used by configuration, generation and shrinking.
Placing them here avoids circular imports between the config module and
the engine modules that fall back to the same values.

Constants are grouped by domain:
- Sequence limits: bounds on generated command sequences
- Run limits: number of trials and shrink budget
- Randomness: seed width

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Sequence limits
    "DEFAULT_MIN_SEQUENCE_SIZE",
    "DEFAULT_MAX_SEQUENCE_SIZE",
    "DEFAULT_MIN_SHRINK_SIZE",
    # Run limits
    "DEFAULT_CASES",
    "DEFAULT_MAX_SHRINK_ITERS",
    "DEFAULT_WORKERS",
    # Randomness
    "SEED_BITS",
]

# ============================================================================
# SEQUENCE LIMITS
# ============================================================================

# Smallest number of commands a generated sequence may hold.
DEFAULT_MIN_SEQUENCE_SIZE: int = 1

# Largest number of commands a generated sequence may hold.
DEFAULT_MAX_SEQUENCE_SIZE: int = 100

# Floor for the delete phase of shrinking. A counterexample always keeps at
# least this many commands, independent of the generation bounds above.
DEFAULT_MIN_SHRINK_SIZE: int = 1

# ============================================================================
# RUN LIMITS
# ============================================================================

# Independent trials per plan execution.
DEFAULT_CASES: int = 256

# Upper bound on candidate executions while minimizing one failure.
# Every step either removes a command or runs one element-local shrink, so
# the budget only matters for very long sequences with wide value ranges.
DEFAULT_MAX_SHRINK_ITERS: int = 4096

# Trials run on the calling thread unless a larger pool is requested.
DEFAULT_WORKERS: int = 1

# ============================================================================
# RANDOMNESS
# ============================================================================

# Width of master and per-trial seeds.
SEED_BITS: int = 64
