"""Rendering of diagnostics and run outcomes.

DiagnosticFormatter turns one Diagnostic into text in one of three styles;
format_outcome builds the multi-line counterexample report printed by
StatefulTestFailure. Command and result reprs are author-controlled, so
every rendered field has its control characters escaped first.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from .codes import Diagnostic

if TYPE_CHECKING:
    from stateprop.runner import TestOutcome

__all__ = [
    "DiagnosticFormatter",
    "OutputFormat",
    "format_outcome",
]

# Control characters are escaped so a command repr cannot forge log lines.
_CONTROL_ESCAPES = {code: f"\\x{code:02x}" for code in range(0x20) if code != 0x09}
_CONTROL_ESCAPES[0x7F] = "\\x7f"

_ANSI_SEVERITY = {"error": "\033[1;31m", "warning": "\033[1;33m"}
_ANSI_RESET = "\033[0m"

# Result fields shown under a postcondition failure, in report order.
_RESULT_FIELDS = ("expected", "actual")


class OutputFormat(StrEnum):
    """Text styles understood by DiagnosticFormatter."""

    RUST = "rust"  # multi-line, compiler style (default)
    SIMPLE = "simple"  # CODE: message
    JSON = "json"  # one JSON object per diagnostic


@dataclass(frozen=True, slots=True)
class DiagnosticFormatter:
    """Renders diagnostics as text.

    Attributes:
        output_format: Which style to produce
        sanitize: Truncate long fields to ``max_content_length``
        color: Color the severity with ANSI escapes
        max_content_length: Field length limit used when sanitizing

    Example:
        >>> print(DiagnosticFormatter().format(ErrorTemplate.no_commands()))
        error[NO_COMMANDS]: Model returned no commands for the current state
          = help: commands() must offer at least one (weight, strategy) pair in every state

        >>> simple = DiagnosticFormatter(output_format=OutputFormat.SIMPLE)
        >>> print(simple.format(ErrorTemplate.no_commands()))
        NO_COMMANDS: Model returned no commands for the current state
    """

    output_format: OutputFormat = OutputFormat.RUST
    sanitize: bool = False
    color: bool = False
    max_content_length: int = 100

    def format(self, diagnostic: Diagnostic) -> str:
        """Render ``diagnostic`` in the configured style."""
        match self.output_format:
            case OutputFormat.SIMPLE:
                return f"{diagnostic.code.name}: {self._clean(diagnostic.message)}"
            case OutputFormat.JSON:
                return self._to_json(diagnostic)
            case _:
                return self._to_rust(diagnostic)

    def format_all(self, diagnostics: Iterable[Diagnostic]) -> str:
        """Render several diagnostics, separated by a blank line."""
        return "\n\n".join(map(self.format, diagnostics))

    def _to_rust(self, diagnostic: Diagnostic) -> str:
        """Compiler-style block.

        Example output:
            error[POSTCONDITION_FAILED]: Postcondition does not hold. ...
              --> command #2: Get(key=1)
              = expected: 5
              = actual: None
        """
        severity = "warning" if diagnostic.severity == "warning" else "error"
        if self.color:
            severity = f"{_ANSI_SEVERITY[severity]}{severity}{_ANSI_RESET}"

        lines = [f"{severity}[{diagnostic.code.name}]: {self._clean(diagnostic.message)}"]
        if diagnostic.command is not None:
            where = "command" if diagnostic.position is None else f"command #{diagnostic.position}"
            lines.append(f"  --> {where}: {self._clean(diagnostic.command)}")
        for name in _RESULT_FIELDS:
            value = getattr(diagnostic, name)
            if value is not None:
                lines.append(f"  = {name}: {self._clean(value)}")
        if diagnostic.seed is not None:
            lines.append(f"  = seed: {diagnostic.seed}")
        if diagnostic.hint:
            lines.append(f"  = help: {self._clean(diagnostic.hint)}")
        return "\n".join(lines)

    def _to_json(self, diagnostic: Diagnostic) -> str:
        """Single JSON object; absent fields are omitted.

        Example output:
            {"code": "NO_COMMANDS", "code_value": 1001, "message": "...", "severity": "error"}
        """
        data: dict[str, str | int] = {
            "code": diagnostic.code.name,
            "code_value": diagnostic.code.value,
            "message": self._truncate(diagnostic.message),
            "severity": diagnostic.severity,
        }
        for name in ("command", "position", "expected", "actual", "seed", "hint"):
            value = getattr(diagnostic, name)
            if value is None or value == "":
                continue
            data[name] = self._truncate(value) if isinstance(value, str) else value
        return json.dumps(data, ensure_ascii=False)

    def _clean(self, text: str) -> str:
        """Escape control characters, then truncate if sanitizing."""
        return self._truncate(text.translate(_CONTROL_ESCAPES))

    def _truncate(self, text: str) -> str:
        if not self.sanitize or len(text) <= self.max_content_length:
            return text
        return f"{text[: self.max_content_length]}..."


def format_outcome(outcome: TestOutcome, formatter: DiagnosticFormatter | None = None) -> str:
    """Render a run outcome as a multi-line report.

    Passed runs render as a single summary line. Failed runs list every
    retained command in order, followed by the triggering error. When
    shrinking settled on a different failure than the one first observed,
    both are shown.

    Args:
        outcome: Outcome returned by the harness
        formatter: Formatter for the embedded diagnostics (default: RUST style)

    Returns:
        Report text without a trailing newline
    """
    from stateprop.runner import Status  # noqa: PLC0415 - circular

    formatter = formatter or DiagnosticFormatter()

    if outcome.status is Status.PASSED:
        return f"Passed {outcome.cases_run} case(s) (seed: {outcome.seed})"

    if outcome.status is Status.ABORTED:
        header = f"Generation aborted in case {outcome.cases_run} (seed: {outcome.seed})"
        lines = [header, _describe(outcome.error, formatter)]
        if outcome.trial_seed is not None:
            lines.append(f"  = trial seed: {outcome.trial_seed}")
        return "\n".join(lines)

    counterexample = outcome.counterexample
    length = 0 if counterexample is None else len(counterexample)
    lines = [
        f"Found minimal failing case: {length} command(s) "
        f"(original: {outcome.original_length}, "
        f"shrink iterations: {outcome.shrink_iterations}, seed: {outcome.seed})"
    ]
    if counterexample is not None:
        lines.extend(
            f"  #{index} {formatter._clean(repr(command))}"  # noqa: SLF001 - same module
            for index, command in enumerate(counterexample)
        )
    lines.append(_describe(outcome.error, formatter))
    if outcome.failure_changed:
        lines.append("note: shrinking accepted a different failure than the original:")
        lines.append(_describe(outcome.original_error, formatter))
    summary = outcome.diagnostic
    if summary is not None and summary.hint:
        lines.append(f"help: {summary.hint}")
    return "\n".join(lines)


def _describe(error: BaseException | None, formatter: DiagnosticFormatter) -> str:
    """Format an error through its diagnostic when it has one."""
    if error is None:
        return "error: <none>"
    diagnostic = getattr(error, "diagnostic", None)
    if isinstance(diagnostic, Diagnostic):
        return formatter.format(diagnostic)
    return f"error: {type(error).__name__}: {error}"
