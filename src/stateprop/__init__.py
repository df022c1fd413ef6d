"""stateprop - model-based stateful property testing.

Generates random command sequences from a reference model, runs them against
a real system under test, checks every result against the model and shrinks
failing sequences to a minimal counterexample.

Public API:
    execute_plan - Run a plan and return a TestOutcome
    check_plan - Run a plan and raise StatefulTestFailure on failure
    replay_plan - Rerun one failing trial from its reported seed
    PlanConfig - Run configuration (sequence sizes, cases, seed, shrinking)
    TestRunner - Harness behind the functions above
    StateMachine - Protocol for reference models
    SystemUnderTest - Protocol for system adapters
    CommandSequence - Printable, replayable command sequence

Exceptions:
    StatefulError - Base exception class
    GenerationError - Malformed command weights from a model
    PostconditionError - Model and system disagree on a result
    SystemUnderTestError - System raised while executing a command
    StatefulTestFailure - Raised by check_plan / raise_for_failure

Submodules:
    stateprop.strategy - Leaf strategies for command arguments
    stateprop.shrink - Sequence-level shrink search
    stateprop.diagnostics - Error codes, templates and formatting
"""

from .builder import CommandSequenceStrategy, command_sequence
from .config import PlanConfig
from .diagnostics import (
    GenerationError,
    PostconditionError,
    StatefulError,
    StatefulTestFailure,
    SystemUnderTestError,
)
from .model import StateMachine, SystemUnderTest
from .runner import Status, TestOutcome, TestRunner, check_plan, execute_plan, replay_plan
from .sequence import CommandSequence

# Version information - Auto-populated from package metadata
# SINGLE SOURCE OF TRUTH: pyproject.toml [project] version
try:
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as _get_version
except ImportError as e:
    raise RuntimeError("importlib.metadata unavailable - Python version too old? " + str(e)) from e

try:
    __version__ = _get_version("stateprop")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "CommandSequence",
    "CommandSequenceStrategy",
    "GenerationError",
    "PlanConfig",
    "PostconditionError",
    "StateMachine",
    "StatefulError",
    "StatefulTestFailure",
    "Status",
    "SystemUnderTest",
    "SystemUnderTestError",
    "TestOutcome",
    "TestRunner",
    "__version__",
    "check_plan",
    "command_sequence",
    "execute_plan",
    "replay_plan",
]
