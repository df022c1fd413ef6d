"""Diagnostic system for stateful test failures.

Provides structured error diagnostics with codes, command attribution,
expected/actual results and reproduction seeds.
Inspired by Rust compiler diagnostics.

Python 3.13+. Zero external dependencies.
"""

from .codes import Diagnostic, DiagnosticCode, ErrorCategory
from .errors import (
    ExecutionError,
    GenerationError,
    PostconditionError,
    StatefulError,
    StatefulTestFailure,
    SystemUnderTestError,
)
from .formatter import DiagnosticFormatter, OutputFormat, format_outcome
from .templates import ErrorTemplate

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticFormatter",
    "ErrorCategory",
    "ErrorTemplate",
    "ExecutionError",
    "GenerationError",
    "OutputFormat",
    "PostconditionError",
    "StatefulError",
    "StatefulTestFailure",
    "SystemUnderTestError",
    "format_outcome",
]
