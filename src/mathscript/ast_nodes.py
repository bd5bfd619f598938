"""AST node definitions for the MathScript language."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from mathscript.source import Span
from mathscript.values import Unit, Value

# Spans never take part in node equality, so trees built by hand in tests
# compare equal to parsed ones.


@dataclass(frozen=True)
class Empty:
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Literal:
    value: Value
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Variable:
    name: str
    unit: Unit | None = None
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class UnaryOp:
    op: str
    operand: Node
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class BinaryOp:
    left: Node
    op: str
    right: Node
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class TernaryOp:
    condition: Node
    then: Node
    otherwise: Node
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class MatrixLiteral:
    rows: list[list[Node]]
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class FunctionCall:
    name: str
    args: list[Node]
    span: Span | None = field(default=None, compare=False, repr=False)


# ── Statements ───────────────────────────────────────────────────


@dataclass(frozen=True)
class Assignment:
    target: Variable
    value: Node
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Compound:
    children: list[Node]
    span: Span | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class FunctionDefinition:
    name: str
    params: list[Variable]
    body: Compound
    span: Span | None = field(default=None, compare=False, repr=False)


Node = Union[
    Empty, Literal, Variable, UnaryOp, BinaryOp, TernaryOp, MatrixLiteral,
    FunctionCall, Assignment, Compound, FunctionDefinition,
]
