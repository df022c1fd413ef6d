"""Diagnostic codes and data structures.

Defines error codes and structured diagnostic messages.
Python 3.13+. Zero external dependencies.
"""

from dataclasses import dataclass
from enum import Enum, StrEnum
from typing import Literal

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "ErrorCategory",
]


class ErrorCategory(StrEnum):
    """Error categorization for stateful test failures.

    Inherits from ``StrEnum`` so that log aggregation and JSON output
    receive plain strings (``"generation"``, ``"postcondition"``, ...).

    Categories:
        GENERATION: The model produced an unusable command distribution
        SYSTEM: The system under test raised while executing a command
        POSTCONDITION: Model and system under test disagree on a result
    """

    GENERATION = "generation"
    SYSTEM = "system"
    POSTCONDITION = "postcondition"


class DiagnosticCode(Enum):
    """Error codes with unique identifiers.

    Organized by category:
        1000-1999: Generation errors (weight distribution, sequence bounds)
        2000-2999: Execution errors (system under test, postconditions)
        3000-3999: Run errors (counterexample reports)
    """

    # Generation errors (1000-1999)
    NO_COMMANDS = 1001
    INVALID_WEIGHT = 1002
    NON_POSITIVE_WEIGHT = 1003

    # Execution errors (2000-2999)
    SYSTEM_FAILURE = 2001
    POSTCONDITION_FAILED = 2002

    # Run errors (3000-3999)
    COUNTEREXAMPLE_FOUND = 3001
    GENERATION_ABORTED = 3002


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Structured diagnostic message.

    Inspired by Rust compiler diagnostics. Carries enough context to explain
    a failing command without holding on to the command object itself.

    Attributes:
        code: Unique error code
        message: Human-readable error description
        hint: Suggestion for fixing the error
        command: ``repr()`` of the offending command, if any
        position: Index of the offending command in the executed sequence
        expected: Model-predicted result (postcondition failures)
        actual: Observed result (postcondition failures)
        seed: Seed that regenerates the failing trial
        severity: Error severity level
    """

    code: DiagnosticCode
    message: str
    hint: str | None = None
    command: str | None = None
    position: int | None = None
    expected: str | None = None
    actual: str | None = None
    seed: int | None = None
    severity: Literal["error", "warning"] = "error"

    def __str__(self) -> str:
        """Return human-readable error description."""
        return self.message

    def format_error(self) -> str:
        """Format diagnostic like Rust compiler.

        Example output:
            error[POSTCONDITION_FAILED]: Postcondition does not hold
              --> command #3: Get(key=1)
              = expected: Some(5)
              = actual: None
              = help: Check the model's next_state for this command

        Returns:
            Formatted error message
        """
        from .formatter import DiagnosticFormatter  # noqa: PLC0415 - circular

        return DiagnosticFormatter().format(self)
