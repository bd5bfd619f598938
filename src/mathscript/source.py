"""Span tracking for diagnostics."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Span:
    """A range within a source text."""

    file: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    def __str__(self) -> str:
        return f"{self.file}:{self.start_line}:{self.start_col}"

    def to(self, end: Span) -> Span:
        """Build a span from the start of this one to the end of ``end``."""
        return Span(
            self.file,
            self.start_line, self.start_col,
            end.end_line, end.end_col,
        )
