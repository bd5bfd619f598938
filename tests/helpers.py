"""Shared test helpers for the MathScript test suite."""

from __future__ import annotations

import pytest

from mathscript.builtins import global_scope
from mathscript.errors import MathScriptError
from mathscript.interpreter import run
from mathscript.symbols import Scope
from mathscript.values import Boolean, Matrix, Number, Value


def values(source: str, scope: Scope | None = None) -> list[Value]:
    """Run source and return every top-level result value."""
    return list(run(source, scope if scope is not None else global_scope()).values)


def last(source: str, scope: Scope | None = None) -> Value:
    """Run source and return the last top-level result value."""
    result = values(source, scope)
    assert result, f"no result for {source!r}"
    return result[-1]


def number(source: str) -> float:
    """Run source, asserting the last result is a plain Number."""
    value = last(source)
    assert isinstance(value, Number) and not isinstance(value, Boolean), value
    return float(value.value)


def boolean(source: str) -> bool:
    value = last(source)
    assert isinstance(value, Boolean), value
    return bool(value.value)


def matrix(source: str) -> list[list[float]]:
    value = last(source)
    assert isinstance(value, Matrix), value
    return [list(row) for row in value.rows]


def fails(source: str, error: type[MathScriptError]) -> MathScriptError:
    """Run source, asserting it raises ``error``. Returns the exception."""
    with pytest.raises(error) as excinfo:
        run(source)
    return excinfo.value
