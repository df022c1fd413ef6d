"""Stateful testing exception hierarchy with structured diagnostics.

All exceptions optionally store a Diagnostic object for rich error
information. Execution errors additionally remember the command they are
attributed to and its position in the executed sequence.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, ClassVar

from .codes import Diagnostic, ErrorCategory
from .templates import ErrorTemplate

if TYPE_CHECKING:
    from stateprop.runner import TestOutcome

__all__ = [
    "ExecutionError",
    "GenerationError",
    "PostconditionError",
    "StatefulError",
    "StatefulTestFailure",
    "SystemUnderTestError",
]


class StatefulError(Exception):
    """Base exception for all stateprop errors.

    Attributes:
        diagnostic: Structured diagnostic information (optional)
    """

    category: ClassVar[ErrorCategory | None] = None

    def __init__(self, message: str | Diagnostic) -> None:
        """Initialize StatefulError.

        Args:
            message: Error message string OR Diagnostic object
        """
        if isinstance(message, Diagnostic):
            self.diagnostic: Diagnostic | None = message
            super().__init__(message.message)
        else:
            self.diagnostic = None
            super().__init__(message)


class GenerationError(StatefulError):
    """Model produced a malformed command distribution.

    Raised for an empty commands() list or a weight that is not a positive
    integer. Aborts the sequence being built; there is nothing to shrink.
    """

    category = ErrorCategory.GENERATION


class ExecutionError(StatefulError):
    """Failure while replaying a sequence against the system under test.

    Both subclasses count as a failing trial and trigger shrinking.

    Attributes:
        command: The command being executed when the failure occurred
        position: Index of that command in the executed sequence
    """

    def __init__(
        self,
        message: str | Diagnostic,
        *,
        command: object = None,
        position: int | None = None,
    ) -> None:
        """Initialize ExecutionError.

        Args:
            message: Error message string OR Diagnostic object
            command: The offending command
            position: Index of the offending command
        """
        super().__init__(message)
        self.command = command
        self.position = position

    def locate(self, position: int, command: object = None) -> None:
        """Attribute this error to ``position`` in the executed sequence.

        ``command`` fills in the offending command only when the error was
        raised without one.
        """
        self.position = position
        if command is not None and self.command is None:
            self.command = command
            if self.diagnostic is not None:
                self.diagnostic = replace(self.diagnostic, command=_render(command))
        if self.diagnostic is not None:
            self.diagnostic = replace(self.diagnostic, position=position)

    def kind(self) -> tuple[str, ...]:
        """Coarse identity of the failure.

        Ignores the command, its position and the rendered values, so a
        counterexample whose arguments were shrunk keeps the same kind.
        """
        return (type(self).__name__,)


class SystemUnderTestError(ExecutionError):
    """The system under test raised while executing a command.

    The original exception is available as ``source`` and as ``__cause__``
    when raised by the sequence runner.

    Example:
        >>> try:
        ...     sut.run(cmd)
        ... except Exception as exc:
        ...     raise SystemUnderTestError.wrap(exc, cmd, 3) from exc
    """

    category = ErrorCategory.SYSTEM

    def __init__(
        self,
        message: str | Diagnostic,
        *,
        source: BaseException | None = None,
        command: object = None,
        position: int | None = None,
    ) -> None:
        """Initialize SystemUnderTestError.

        Args:
            message: Error message string OR Diagnostic object
            source: The exception raised by the system under test
            command: The offending command
            position: Index of the offending command
        """
        super().__init__(message, command=command, position=position)
        self.source = source

    @classmethod
    def wrap(
        cls, source: BaseException, command: object, position: int | None = None
    ) -> SystemUnderTestError:
        """Build an error attributed to ``command`` from a raw SUT exception."""
        diagnostic = ErrorTemplate.system_failure(repr(command), position, source)
        return cls(diagnostic, source=source, command=command, position=position)

    def kind(self) -> tuple[str, ...]:
        """Coarse identity of the failure, including the wrapped exception type."""
        if self.source is None:
            return super().kind()
        return (type(self).__name__, type(self.source).__name__)


class PostconditionError(ExecutionError):
    """Model and system under test disagree on the result of a command.

    Raised by a model's ``postcondition()``. Accepts arbitrary objects for
    the command and both results; they are rendered with ``repr()`` unless
    already strings.

    Attributes:
        expected: Model-predicted result, rendered
        actual: Observed result, rendered

    Example:
        >>> raise PostconditionError(cmd, expected=Some(5), actual=None)
    """

    category = ErrorCategory.POSTCONDITION

    def __init__(
        self,
        command: object,
        expected: object,
        actual: object,
        *,
        position: int | None = None,
    ) -> None:
        """Initialize PostconditionError.

        Args:
            command: The command whose result was checked
            expected: Model-predicted result
            actual: Observed result
            position: Index of the command in the sequence
        """
        self.expected = _render(expected)
        self.actual = _render(actual)
        diagnostic = ErrorTemplate.postcondition_failed(
            _render(command), self.expected, self.actual, position
        )
        super().__init__(diagnostic, command=command, position=position)

    def kind(self) -> tuple[str, ...]:
        """Coarse identity of the failure, including the command type.

        Uses the type rather than the value, so shrunk arguments keep the
        same kind while a move from one command to another does not.
        """
        return (type(self).__name__, type(self.command).__name__)


class StatefulTestFailure(AssertionError):
    """A stateful plan failed or could not be generated.

    Subclasses AssertionError so pytest reports it as a test failure rather
    than an error.

    Attributes:
        outcome: The full TestOutcome, including the counterexample and seed
    """

    def __init__(self, outcome: TestOutcome) -> None:
        """Initialize StatefulTestFailure.

        Args:
            outcome: The failed or aborted outcome
        """
        from .formatter import format_outcome  # noqa: PLC0415 - circular

        super().__init__(format_outcome(outcome))
        self.outcome = outcome


def _render(value: object) -> str:
    """Render a command or result for diagnostics."""
    return value if isinstance(value, str) else repr(value)
