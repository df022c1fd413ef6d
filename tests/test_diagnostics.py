"""Tests for diagnostic codes, templates, error hierarchy and formatting."""

from __future__ import annotations

import json

import pytest

from stateprop import PlanConfig, execute_plan
from stateprop.diagnostics import (
    Diagnostic,
    DiagnosticCode,
    DiagnosticFormatter,
    ErrorCategory,
    ErrorTemplate,
    ExecutionError,
    GenerationError,
    OutputFormat,
    PostconditionError,
    StatefulError,
    StatefulTestFailure,
    SystemUnderTestError,
    format_outcome,
)
from tests.models import Add, BrokenWeightsModel, Counter, CounterModel, EchoSystem, Read


class TestErrorHierarchy:
    """Exception classes and their categories."""

    def test_categories(self) -> None:
        """Each concrete error reports its category."""
        assert GenerationError.category is ErrorCategory.GENERATION
        assert SystemUnderTestError.category is ErrorCategory.SYSTEM
        assert PostconditionError.category is ErrorCategory.POSTCONDITION

    def test_execution_errors_share_base(self) -> None:
        """Both execution failures derive from ExecutionError and StatefulError."""
        assert issubclass(PostconditionError, ExecutionError)
        assert issubclass(SystemUnderTestError, ExecutionError)
        assert issubclass(ExecutionError, StatefulError)
        assert not issubclass(GenerationError, ExecutionError)

    def test_plain_message(self) -> None:
        """A string message leaves the diagnostic unset."""
        error = StatefulError("boom")
        assert str(error) == "boom"
        assert error.diagnostic is None

    def test_diagnostic_message(self) -> None:
        """A Diagnostic message is stored and used as str()."""
        diagnostic = ErrorTemplate.no_commands()
        error = GenerationError(diagnostic)
        assert error.diagnostic is diagnostic
        assert str(error) == diagnostic.message

    def test_failure_is_assertion_error(self) -> None:
        """pytest reports StatefulTestFailure as a failed assertion."""
        assert issubclass(StatefulTestFailure, AssertionError)


class TestPostconditionError:
    """PostconditionError rendering and location."""

    def test_message_format(self) -> None:
        """The message names the command and both results."""
        error = PostconditionError("Get(key=1)", "Some(5)", "None")
        assert str(error) == (
            "Postcondition does not hold. Command: Get(key=1). "
            "Expected result: Some(5). Actual result: None"
        )

    def test_non_string_values_use_repr(self) -> None:
        """Arbitrary objects are rendered with repr()."""
        error = PostconditionError(("get", 1), 5, None)
        assert error.expected == "5"
        assert error.actual == "None"
        assert error.diagnostic is not None
        assert error.diagnostic.command == "('get', 1)"

    def test_command_object_kept(self) -> None:
        """The original command object stays available."""
        command = ("get", 1)
        assert PostconditionError(command, 1, 2).command is command

    def test_locate_updates_diagnostic(self) -> None:
        """locate() sets the position on the error and its diagnostic."""
        error = PostconditionError("cmd", 1, 2)
        error.locate(4)
        assert error.position == 4
        assert error.diagnostic is not None
        assert error.diagnostic.position == 4

    def test_kind_ignores_values(self) -> None:
        """Two postcondition failures with different values share a kind."""
        assert PostconditionError("a", 1, 2).kind() == PostconditionError("b", 3, 4).kind()

    def test_kind_includes_command_type(self) -> None:
        """Failures on different command types have different kinds."""
        add = PostconditionError(Add(3), 3, 4)
        assert add.kind() == ("PostconditionError", "Add")
        assert add.kind() == PostconditionError(Add(900), 900, 901).kind()
        assert add.kind() != PostconditionError(Read(), 0, 1).kind()

    def test_locate_keeps_existing_command(self) -> None:
        """locate() only fills in a command the error was raised without."""
        error = PostconditionError(Add(1), 1, 2)
        error.locate(0, Read())
        assert error.command == Add(1)
        assert error.diagnostic is not None
        assert error.diagnostic.command == "Add(amount=1)"


class TestSystemUnderTestError:
    """Wrapping of exceptions raised by the system under test."""

    def test_wrap(self) -> None:
        """wrap() keeps the source, command and position."""
        source = KeyError("missing")
        error = SystemUnderTestError.wrap(source, "Get(1)", 2)
        assert error.source is source
        assert error.command == "Get(1)"
        assert error.position == 2
        assert error.diagnostic is not None
        assert error.diagnostic.code is DiagnosticCode.SYSTEM_FAILURE
        assert "KeyError" in str(error)

    def test_kind_includes_source_type(self) -> None:
        """The wrapped exception type distinguishes kinds."""
        a = SystemUnderTestError.wrap(KeyError(), "x")
        b = SystemUnderTestError.wrap(ValueError(), "x")
        assert a.kind() != b.kind()
        assert a.kind() == ("SystemUnderTestError", "KeyError")

    def test_kind_without_source(self) -> None:
        """A hand-raised error without source has the base kind."""
        assert SystemUnderTestError("down").kind() == ("SystemUnderTestError",)


class TestTemplates:
    """ErrorTemplate factories."""

    def test_weight_templates(self) -> None:
        """Weight templates carry their codes and the offending index."""
        invalid = ErrorTemplate.invalid_weight(2, 1.5)
        assert invalid.code is DiagnosticCode.INVALID_WEIGHT
        assert "index 2" in invalid.message
        assert "float" in invalid.message

        negative = ErrorTemplate.non_positive_weight(0, -3)
        assert negative.code is DiagnosticCode.NON_POSITIVE_WEIGHT
        assert "-3" in negative.message

    def test_counterexample_found_hint(self) -> None:
        """The summary hint tells how to replay the trial."""
        diagnostic = ErrorTemplate.counterexample_found(3, 99, "bad")
        assert diagnostic.seed == 99
        assert diagnostic.hint is not None
        assert "seed=99" in diagnostic.hint

    def test_generation_aborted(self) -> None:
        """Aborted generation keeps the seed."""
        diagnostic = ErrorTemplate.generation_aborted(5, "no commands")
        assert diagnostic.code is DiagnosticCode.GENERATION_ABORTED
        assert diagnostic.seed == 5

    def test_code_ranges(self) -> None:
        """Codes are grouped by range."""
        assert 1000 <= DiagnosticCode.NO_COMMANDS.value < 2000
        assert 2000 <= DiagnosticCode.POSTCONDITION_FAILED.value < 3000
        assert 3000 <= DiagnosticCode.COUNTEREXAMPLE_FOUND.value < 4000


class TestDiagnosticFormatter:
    """DiagnosticFormatter output styles."""

    @pytest.fixture
    def diagnostic(self) -> Diagnostic:
        return ErrorTemplate.postcondition_failed("Get(key=1)", "5", "None", 2)

    def test_rust_format(self, diagnostic: Diagnostic) -> None:
        """RUST style lists location, expected and actual."""
        text = DiagnosticFormatter().format(diagnostic)
        lines = text.splitlines()
        assert lines[0].startswith("error[POSTCONDITION_FAILED]: Postcondition does not hold.")
        assert "  --> command #2: Get(key=1)" in lines
        assert "  = expected: 5" in lines
        assert "  = actual: None" in lines

    def test_rust_format_hint(self) -> None:
        """Hints are rendered as help lines."""
        text = DiagnosticFormatter().format(ErrorTemplate.no_commands())
        assert "  = help: commands() must offer" in text

    def test_simple_format(self, diagnostic: Diagnostic) -> None:
        """SIMPLE style is a single line."""
        text = DiagnosticFormatter(output_format=OutputFormat.SIMPLE).format(diagnostic)
        assert "\n" not in text
        assert text.startswith("POSTCONDITION_FAILED: ")

    def test_json_format(self, diagnostic: Diagnostic) -> None:
        """JSON style is machine-readable."""
        text = DiagnosticFormatter(output_format=OutputFormat.JSON).format(diagnostic)
        data = json.loads(text)
        assert data["code"] == "POSTCONDITION_FAILED"
        assert data["code_value"] == DiagnosticCode.POSTCONDITION_FAILED.value
        assert data["position"] == 2
        assert data["expected"] == "5"
        assert data["actual"] == "None"

    def test_control_characters_escaped(self) -> None:
        """A command repr cannot inject extra lines into the report."""
        diagnostic = ErrorTemplate.postcondition_failed("a\nerror[FAKE]: b", "1", "2", 0)
        text = DiagnosticFormatter().format(diagnostic)
        assert "\nerror[FAKE]" not in text
        assert "\\x0a" in text

    def test_sanitize_truncates(self) -> None:
        """sanitize=True truncates long content."""
        diagnostic = ErrorTemplate.postcondition_failed("x" * 500, "1", "2", 0)
        formatter = DiagnosticFormatter(sanitize=True, max_content_length=20)
        text = formatter.format(diagnostic)
        assert "x" * 21 not in text
        assert "..." in text

    def test_color(self, diagnostic: Diagnostic) -> None:
        """color=True wraps the severity in ANSI codes."""
        text = DiagnosticFormatter(color=True).format(diagnostic)
        assert text.startswith("\033[1;31merror\033[0m")

    def test_format_all(self) -> None:
        """format_all separates diagnostics by blank lines."""
        formatter = DiagnosticFormatter(output_format=OutputFormat.SIMPLE)
        text = formatter.format_all([ErrorTemplate.no_commands(), ErrorTemplate.no_commands()])
        assert text.count("\n\n") == 1

    def test_format_error_shortcut(self, diagnostic: Diagnostic) -> None:
        """Diagnostic.format_error() uses the default formatter."""
        assert diagnostic.format_error() == DiagnosticFormatter().format(diagnostic)


class TestFormatOutcome:
    """Counterexample reports."""

    def test_passed_report(self) -> None:
        """A passing run renders one summary line."""
        outcome = execute_plan(CounterModel(), Counter, PlanConfig(seed=3, cases=5))
        assert format_outcome(outcome) == "Passed 5 case(s) (seed: 3)"
        assert outcome.diagnostic is None

    def test_failed_report_lists_commands(self) -> None:
        """A failing run lists each command of the counterexample and the error."""
        config = PlanConfig(seed=11, cases=64, shrink_commands=True)
        outcome = execute_plan(CounterModel(), lambda: Counter(off_by_one_from=500), config)
        report = str(outcome)
        lines = report.splitlines()
        assert lines[0].startswith("Found minimal failing case: 1 command(s)")
        assert lines[1] == "  #0 Add(amount=500)"
        assert "error[POSTCONDITION_FAILED]" in report
        assert f"replay_plan(..., seed={outcome.trial_seed})" in report

    def test_aborted_report(self) -> None:
        """An aborted run shows the generation error and the trial seed."""
        outcome = execute_plan(BrokenWeightsModel([0]), EchoSystem, PlanConfig(seed=1))
        report = str(outcome)
        assert report.startswith("Generation aborted in case 1 (seed: 1)")
        assert "NON_POSITIVE_WEIGHT" in report
        assert f"trial seed: {outcome.trial_seed}" in report
        assert outcome.diagnostic is not None
        assert outcome.diagnostic.code is DiagnosticCode.GENERATION_ABORTED

    def test_failure_message_wraps_report(self) -> None:
        """StatefulTestFailure carries the full report and the outcome."""
        outcome = execute_plan(BrokenWeightsModel([]), EchoSystem, PlanConfig(seed=1))
        failure = StatefulTestFailure(outcome)
        assert failure.outcome is outcome
        assert str(failure) == format_outcome(outcome)
