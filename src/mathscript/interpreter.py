"""Tree-walking evaluator for MathScript ASTs."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum, auto

from mathscript.ast_nodes import (
    Assignment,
    BinaryOp,
    Compound,
    Empty,
    FunctionCall,
    FunctionDefinition,
    Literal,
    MatrixLiteral,
    Node,
    TernaryOp,
    UnaryOp,
    Variable,
)
from mathscript.builtins import global_scope
from mathscript.errors import EvaluationError, MathScriptError
from mathscript.parser import parse
from mathscript.symbols import FunctionDef, Scope
from mathscript.values import (
    BINARY_OPERATIONS,
    Boolean,
    Matrix,
    Number,
    Value,
    logical_not,
    negate,
)

logger = logging.getLogger(__name__)

# Returned by interpret() when evaluation fails or yields no number.
SENTINEL = -1.0

# Python frame budget while parsing and evaluating. A level of user
# recursion costs around fifteen frames.
RECURSION_LIMIT = 20_000


@contextmanager
def deep_recursion(limit: int = RECURSION_LIMIT) -> Iterator[None]:
    """Raise the interpreter recursion limit to at least ``limit`` for a block."""
    previous = sys.getrecursionlimit()
    if previous >= limit:
        yield
        return
    sys.setrecursionlimit(limit)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


class ResultKind(Enum):
    NONE = auto()
    SINGLE = auto()
    COMPOUND = auto()


@dataclass(frozen=True)
class Result:
    """Outcome of evaluating a node: no value, one value, or a sequence."""

    kind: ResultKind
    values: tuple[Value, ...] = ()

    @classmethod
    def none(cls) -> Result:
        return cls(ResultKind.NONE)

    @classmethod
    def single(cls, value: Value) -> Result:
        return cls(ResultKind.SINGLE, (value,))

    @classmethod
    def compound(cls, values: Iterable[Value]) -> Result:
        return cls(ResultKind.COMPOUND, tuple(values))

    @property
    def value(self) -> Value:
        if self.kind != ResultKind.SINGLE:
            raise EvaluationError(f"expected a single value, got {self.kind.name.lower()}")
        return self.values[0]


class Interpreter:
    """Evaluates AST nodes against a chain of scopes."""

    def __init__(self, scope: Scope | None = None) -> None:
        self.global_scope = scope if scope is not None else global_scope()

    def evaluate(self, node: Node, scope: Scope | None = None) -> Result:
        with deep_recursion():
            return self._eval(node, scope if scope is not None else self.global_scope)

    def _eval(self, node: Node, scope: Scope) -> Result:
        try:
            return self._dispatch(node, scope)
        except MathScriptError as exc:
            # The innermost node sets the span; outer frames leave it alone.
            if exc.span is None:
                exc.span = node.span
            raise

    def _value(self, node: Node, scope: Scope) -> Value:
        result = self._eval(node, scope)
        if result.kind != ResultKind.SINGLE:
            raise EvaluationError("expression does not produce a value", node.span)
        return result.values[0]

    def _dispatch(self, node: Node, scope: Scope) -> Result:
        if isinstance(node, Literal):
            return Result.single(node.value)

        if isinstance(node, Variable):
            return Result.single(scope.find_variable(node.name, node.span))

        if isinstance(node, BinaryOp):
            left = self._value(node.left, scope)
            right = self._value(node.right, scope)
            return Result.single(BINARY_OPERATIONS[node.op](left, right))

        if isinstance(node, UnaryOp):
            return Result.single(self._unary(node.op, self._value(node.operand, scope)))

        if isinstance(node, TernaryOp):
            condition = self._value(node.condition, scope)
            if not isinstance(condition, Boolean):
                raise EvaluationError(
                    f"condition must be a Boolean, got {condition.kind}",
                    node.condition.span,
                )
            branch = node.then if condition.value else node.otherwise
            return Result.single(self._value(branch, scope))

        if isinstance(node, MatrixLiteral):
            return Result.single(self._matrix(node, scope))

        if isinstance(node, FunctionCall):
            args = [self._value(arg, scope) for arg in node.args]
            return Result.single(
                scope.call_function(node.name, args, self._call_body, node.span)
            )

        if isinstance(node, Assignment):
            value = self._value(node.value, scope)
            scope.assign_variable(node.target.name, value)
            return Result.single(value)

        if isinstance(node, Compound):
            values: list[Value] = []
            for child in node.children:
                values.extend(self._eval(child, scope).values)
            return Result.compound(values)

        if isinstance(node, FunctionDefinition):
            scope.define_function(FunctionDef(
                node.name, tuple(p.name for p in node.params), node.body, node.span,
            ))
            return Result.none()

        if isinstance(node, Empty):
            return Result.none()

        raise TypeError(f"cannot evaluate {type(node).__name__}")

    @staticmethod
    def _unary(op: str, operand: Value) -> Value:
        if op == "-":
            return negate(operand)
        if op == "!":
            return logical_not(operand)
        return operand

    def _matrix(self, node: MatrixLiteral, scope: Scope) -> Matrix:
        rows = []
        for row in node.rows:
            cells = []
            for element in row:
                cell = self._value(element, scope)
                if not isinstance(cell, Number):
                    raise EvaluationError(
                        f"matrix elements must be numbers, got {cell.kind}",
                        element.span,
                    )
                cells.append(float(cell.value))
            rows.append(cells)
        return Matrix.from_rows(rows)

    def _call_body(self, body: Compound, frame: Scope) -> Value:
        values = self._eval(body, frame).values
        if not values:
            raise EvaluationError(f"function '{frame.name}' didn't return anything",
                                  body.span)
        return values[-1]


# ── Convenience API ──────────────────────────────────────────────


def evaluate(node: Node, scope: Scope | None = None) -> Result:
    """Evaluate ``node`` in ``scope`` (a fresh global scope by default)."""
    return Interpreter(scope).evaluate(node)


def run(source: str, scope: Scope | None = None, filename: str = "<input>") -> Result:
    """Parse and evaluate a whole program."""
    with deep_recursion():
        return evaluate(parse(source, filename), scope)


def interpret(source: str) -> float:
    """Run ``source`` and return its last numeric result.

    Booleans count as 0 or 1. Returns ``SENTINEL`` (-1.0) if anything fails,
    running out of stack included, or no top-level statement produced a number.
    """
    try:
        result = run(source)
    except MathScriptError as exc:
        logger.warning("interpret failed: [%s] %s", exc.code, exc.message)
        return SENTINEL
    except RecursionError:
        logger.warning("interpret failed: maximum recursion depth exceeded")
        return SENTINEL

    for value in reversed(result.values):
        if isinstance(value, Number):
            return float(value.value)
    logger.warning("interpret produced no numeric result")
    return SENTINEL
