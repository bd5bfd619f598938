"""Rust-style colored diagnostic rendering and the MathScript error hierarchy."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mathscript.source import Span


class Severity(Enum):
    ERROR = "error"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",  # bold red
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    span: Span
    message: str
    style: str = "primary"  # "primary" or "secondary"


@dataclass
class Diagnostic:
    """A single diagnostic message with optional labels and notes."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class DiagnosticRenderer:
    """Renders diagnostics in Rust-style format with colors."""

    def __init__(self, *, color: bool = True) -> None:
        self.color = color
        self._file_cache: dict[str, list[str]] = {}

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def register(self, filename: str, source: str) -> None:
        """Make in-memory source text available under ``filename``."""
        self._file_cache[filename] = source.splitlines()

    def _get_source_line(self, filename: str, line_num: int) -> str | None:
        """Load and cache source file, return the 1-indexed line."""
        if filename not in self._file_cache:
            try:
                path = Path(filename)
                if path.is_file():
                    self._file_cache[filename] = path.read_text().splitlines()
                else:
                    self._file_cache[filename] = []
            except OSError:
                self._file_cache[filename] = []
        lines = self._file_cache[filename]
        if 1 <= line_num <= len(lines):
            return lines[line_num - 1]
        return None

    def render(self, diag: Diagnostic) -> str:
        lines: list[str] = []
        sev = diag.severity
        color = _COLORS[sev]

        # Header: error[E302]: message
        lines.append(
            f"{self._c(color)}{sev.value}[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        )

        for label in diag.labels:
            span = label.span
            loc = f"{span.file}:{span.start_line}:{span.start_col}"
            lines.append(
                f"  {self._c(_BLUE)}-->{self._c(_RESET)} {loc}"
            )
            gutter = f"{span.start_line:>4}"
            lines.append(f"  {self._c(_BLUE)}   |{self._c(_RESET)}")

            source_line = self._get_source_line(span.file, span.start_line)
            if source_line is not None:
                lines.append(
                    f"  {self._c(_BLUE)}{gutter} |{self._c(_RESET)} {source_line}"
                )

            if span.start_line == span.end_line:
                caret_len = max(1, span.end_col - span.start_col + 1)
                padding = " " * (span.start_col - 1)
                carets = "^" * caret_len
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)} "
                    f"{padding}{self._c(color)}{carets}{self._c(_RESET)}"
                )

            if label.message:
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)}   "
                    f"{self._c(color)}{label.message}{self._c(_RESET)}"
                )

        for note in diag.notes:
            lines.append(f"  {self._c(_BLUE)}={self._c(_RESET)} note: {note}")

        return "\n".join(lines)


# ── Exceptions ───────────────────────────────────────────────────


class MathScriptError(Exception):
    """Base class for every error raised while lexing, parsing or evaluating."""

    code = "E000"

    def __init__(self, message: str, span: Span | None = None,
                 notes: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.span = span
        self.notes = notes or []

    def to_diagnostic(self) -> Diagnostic:
        labels = []
        if self.span is not None:
            labels.append(DiagnosticLabel(span=self.span, message=""))
        return Diagnostic(
            severity=Severity.ERROR,
            code=self.code,
            message=self.message,
            labels=labels,
            notes=list(self.notes),
        )


class UnexpectedSymbolError(MathScriptError):
    """The lexer met a character that starts no token."""

    code = "E100"

    def __init__(self, symbol: str, position: int, span: Span | None = None) -> None:
        super().__init__(f"unexpected symbol {symbol!r} at {position}", span)
        self.symbol = symbol
        self.position = position


class ParseError(MathScriptError):
    """Syntax error: the token stream does not match the grammar."""

    code = "E200"


class EvaluationError(MathScriptError):
    """Runtime failure while evaluating an AST."""

    code = "E300"


class UndeclaredVariableError(EvaluationError):
    code = "E301"

    def __init__(self, name: str, span: Span | None = None) -> None:
        super().__init__(f"variable '{name}' not declared", span)
        self.name = name


class UnsupportedOperationError(EvaluationError):
    code = "E302"

    def __init__(self, left: str, right: str, op: str, span: Span | None = None) -> None:
        if right:
            message = f"unsupported operation '{op}' between {left} and {right}"
        else:
            message = f"unsupported operation '{op}' on {left}"
        super().__init__(message, span)
        self.left = left
        self.right = right
        self.op = op


class DimensionMismatchError(EvaluationError):
    code = "E303"

    def __init__(self, left: tuple[int, int], right: tuple[int, int] | None, op: str,
                 span: Span | None = None, reason: str = "",
                 notes: list[str] | None = None) -> None:
        if reason:
            message = reason
        elif right is None:
            message = f"unsupported dimensions for '{op}': {left[0]} x {left[1]}"
        else:
            message = (
                f"unsupported dimensions for '{op}': "
                f"{left[0]} x {left[1]} and {right[0]} x {right[1]}"
            )
        super().__init__(message, span, notes)
        self.left = left
        self.right = right
        self.op = op


class UndefinedFunctionError(EvaluationError):
    code = "E304"

    def __init__(self, name: str, span: Span | None = None) -> None:
        super().__init__(f"function '{name}' not defined", span)
        self.name = name


class ArityMismatchError(EvaluationError):
    code = "E305"

    def __init__(self, name: str, expected: int, got: int, span: Span | None = None) -> None:
        plural = "" if expected == 1 else "s"
        super().__init__(
            f"'{name}' expects {expected} argument{plural}, got {got}", span,
        )
        self.name = name
        self.expected = expected
        self.got = got


class DivisionByZeroError(EvaluationError):
    code = "E306"

    def __init__(self, op: str = "/", span: Span | None = None) -> None:
        super().__init__(f"division by zero in '{op}'", span)
        self.op = op


class ArgumentError(EvaluationError):
    """A builtin received an argument of the wrong kind or domain."""

    code = "E307"
