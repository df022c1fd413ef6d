"""Error message templates.

Centralized error message templates for testable, consistent error messages.
Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic, DiagnosticCode

__all__ = ["ErrorTemplate"]


class ErrorTemplate:
    """Centralized error message templates.

    All error messages are created here. NO f-strings in exception constructors!
    Keeps raise sites short and every message testable in one place.
    """

    @staticmethod
    def no_commands() -> Diagnostic:
        """Model offered no commands for the current state.

        Returns:
            Diagnostic for NO_COMMANDS
        """
        return Diagnostic(
            code=DiagnosticCode.NO_COMMANDS,
            message="Model returned no commands for the current state",
            hint="commands() must offer at least one (weight, strategy) pair in every state",
        )

    @staticmethod
    def invalid_weight(index: int, weight: object) -> Diagnostic:
        """Weight is not an integer.

        Args:
            index: Position of the entry in the commands() list
            weight: The offending weight

        Returns:
            Diagnostic for INVALID_WEIGHT
        """
        msg = f"Command weight at index {index} must be an int, got {type(weight).__name__}"
        return Diagnostic(
            code=DiagnosticCode.INVALID_WEIGHT,
            message=msg,
            hint="Weights are positive integers, e.g. (3, strategy)",
        )

    @staticmethod
    def non_positive_weight(index: int, weight: int) -> Diagnostic:
        """Weight is zero or negative.

        Args:
            index: Position of the entry in the commands() list
            weight: The offending weight

        Returns:
            Diagnostic for NON_POSITIVE_WEIGHT
        """
        msg = f"Command weight at index {index} must be positive, got {weight}"
        return Diagnostic(
            code=DiagnosticCode.NON_POSITIVE_WEIGHT,
            message=msg,
            hint="Leave a command out of commands() instead of giving it weight 0",
        )

    @staticmethod
    def system_failure(command: str, position: int | None, cause: BaseException) -> Diagnostic:
        """System under test raised while executing a command.

        Args:
            command: repr() of the command being executed
            position: Index of the command in the sequence
            cause: The exception raised by the system under test

        Returns:
            Diagnostic for SYSTEM_FAILURE
        """
        msg = f"System under test failed: {type(cause).__name__}: {cause}"
        return Diagnostic(
            code=DiagnosticCode.SYSTEM_FAILURE,
            message=msg,
            command=command,
            position=position,
        )

    @staticmethod
    def postcondition_failed(
        command: str, expected: str, actual: str, position: int | None
    ) -> Diagnostic:
        """Model and system under test disagree.

        Args:
            command: repr() of the command being executed
            expected: Model-predicted result
            actual: Observed result
            position: Index of the command in the sequence

        Returns:
            Diagnostic for POSTCONDITION_FAILED
        """
        msg = (
            f"Postcondition does not hold. Command: {command}. "
            f"Expected result: {expected}. Actual result: {actual}"
        )
        return Diagnostic(
            code=DiagnosticCode.POSTCONDITION_FAILED,
            message=msg,
            command=command,
            position=position,
            expected=expected,
            actual=actual,
        )

    @staticmethod
    def counterexample_found(length: int, seed: int, error: str) -> Diagnostic:
        """Minimal failing sequence located.

        Args:
            length: Number of commands in the counterexample
            seed: Seed of the failing trial
            error: Message of the triggering error

        Returns:
            Diagnostic for COUNTEREXAMPLE_FOUND
        """
        msg = f"Found minimal failing case of {length} command(s): {error}"
        return Diagnostic(
            code=DiagnosticCode.COUNTEREXAMPLE_FOUND,
            message=msg,
            seed=seed,
            hint=f"Reproduce with replay_plan(..., seed={seed})",
        )

    @staticmethod
    def generation_aborted(seed: int, error: str) -> Diagnostic:
        """Sequence generation could not complete.

        Args:
            seed: Seed of the aborted trial
            error: Message of the generation error

        Returns:
            Diagnostic for GENERATION_ABORTED
        """
        msg = f"Command generation aborted: {error}"
        return Diagnostic(
            code=DiagnosticCode.GENERATION_ABORTED,
            message=msg,
            seed=seed,
        )
