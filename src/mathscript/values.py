"""Runtime values and the operator dispatch over value kinds.

Values are immutable: every operation returns a new value. A Boolean is a
Number whose value is 0 or 1, so any rule written for ``Number()`` also
accepts a Boolean operand.
"""

from __future__ import annotations

import math
import operator
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

from mathscript.errors import (
    DimensionMismatchError,
    DivisionByZeroError,
    EvaluationError,
    UnsupportedOperationError,
)


class Unit(Enum):
    M = "m"
    CM = "cm"
    MM = "mm"
    KM = "km"


UNITS: dict[str, Unit] = {unit.value: unit for unit in Unit}


@dataclass(frozen=True)
class Number:
    value: float
    unit: Unit | None = None

    kind: ClassVar[str] = "Number"


@dataclass(frozen=True)
class Boolean(Number):
    value: bool = False

    kind: ClassVar[str] = "Boolean"


@dataclass(frozen=True)
class Matrix:
    rows: tuple[tuple[float, ...], ...]
    row_count: int
    col_count: int

    kind: ClassVar[str] = "Matrix"

    def __post_init__(self) -> None:
        if len(self.rows) != self.row_count or any(
            len(row) != self.col_count for row in self.rows
        ):
            raise DimensionMismatchError(
                (self.row_count, self.col_count), None, "[]",
                reason="matrix rows must all have the same number of columns",
            )

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> Matrix:
        """Build a matrix, taking the dimensions from the rows themselves."""
        frozen = tuple(tuple(float(x) for x in row) for row in rows)
        col_count = len(frozen[0]) if frozen else 0
        return cls(frozen, len(frozen), col_count)

    @classmethod
    def identity(cls, size: int) -> Matrix:
        return cls.from_rows(
            [[1.0 if i == j else 0.0 for j in range(size)] for i in range(size)]
        )

    @property
    def dims(self) -> tuple[int, int]:
        return (self.row_count, self.col_count)

    @property
    def is_square(self) -> bool:
        return self.row_count == self.col_count

    def map(self, fn: Callable[[float], float]) -> Matrix:
        return Matrix(
            tuple(tuple(fn(x) for x in row) for row in self.rows),
            self.row_count, self.col_count,
        )

    def transpose(self) -> Matrix:
        return Matrix(
            tuple(zip(*self.rows)) if self.rows else (),
            self.col_count, self.row_count,
        )


Value = Union[Number, Boolean, Matrix]


# ── Helpers ──────────────────────────────────────────────────────


def _num(value: Number) -> float:
    return float(value.value)


def _elementwise(left: Matrix, right: Matrix, fn: Callable[[float, float], float],
                 op: str) -> Matrix:
    if left.dims != right.dims:
        raise DimensionMismatchError(left.dims, right.dims, op)
    return Matrix(
        tuple(
            tuple(fn(a, b) for a, b in zip(lrow, rrow))
            for lrow, rrow in zip(left.rows, right.rows)
        ),
        left.row_count, left.col_count,
    )


def _matmul(left: Matrix, right: Matrix) -> Matrix:
    if left.col_count != right.row_count:
        raise DimensionMismatchError(
            left.dims, right.dims, "*",
            notes=[f"the left operand has {left.col_count} columns but the right "
                   f"operand has {right.row_count} rows"],
        )
    columns = list(zip(*right.rows))
    return Matrix(
        tuple(
            tuple(math.fsum(a * b for a, b in zip(row, col)) for col in columns)
            for row in left.rows
        ),
        left.row_count, right.col_count,
    )


def _unsupported(left: Value, right: Value, op: str) -> UnsupportedOperationError:
    return UnsupportedOperationError(left.kind, right.kind, op)


# ── Arithmetic ───────────────────────────────────────────────────


def add(left: Value, right: Value) -> Value:
    match left, right:
        case Matrix(), Matrix():
            return _elementwise(left, right, operator.add, "+")
        case Matrix(), Number():
            scalar = _num(right)
            return left.map(lambda x: x + scalar)
        case Number(), Matrix():
            return add(right, left)
        case Number(), Number():
            return Number(_num(left) + _num(right))
    raise _unsupported(left, right, "+")


def subtract(left: Value, right: Value) -> Value:
    match left, right:
        case Matrix(), Matrix():
            return _elementwise(left, right, operator.sub, "-")
        case Matrix(), Number():
            scalar = _num(right)
            return left.map(lambda x: x - scalar)
        case Number(), Matrix():
            scalar = _num(left)
            return right.map(lambda x: scalar - x)
        case Number(), Number():
            return Number(_num(left) - _num(right))
    raise _unsupported(left, right, "-")


def multiply(left: Value, right: Value) -> Value:
    match left, right:
        case Matrix(), Matrix():
            return _matmul(left, right)
        case Matrix(), Number():
            scalar = _num(right)
            return left.map(lambda x: x * scalar)
        case Number(), Matrix():
            return multiply(right, left)
        case Number(), Number():
            return Number(_num(left) * _num(right))
    raise _unsupported(left, right, "*")


def divide(left: Value, right: Value) -> Value:
    match left, right:
        case Number(), Number():
            divisor = _num(right)
            if divisor == 0:
                raise DivisionByZeroError("/")
            return Number(_num(left) / divisor)
    raise _unsupported(left, right, "/")


def modulo(left: Value, right: Value) -> Value:
    match left, right:
        case Number(), Number():
            divisor = _num(right)
            if divisor == 0:
                raise DivisionByZeroError("%")
            return Number(math.fmod(_num(left), divisor))
    raise _unsupported(left, right, "%")


def power(left: Value, right: Value) -> Value:
    match left, right:
        case Matrix(), Number():
            return _matrix_power(left, _num(right))
        case Number(), Number():
            try:
                return Number(math.pow(_num(left), _num(right)))
            except ValueError:
                raise EvaluationError(
                    f"math domain error in '^' for {_num(left):g} ^ {_num(right):g}"
                ) from None
            except OverflowError:
                raise EvaluationError("numeric overflow in '^'") from None
    raise _unsupported(left, right, "^")


def _matrix_power(base: Matrix, exponent: float) -> Matrix:
    if not base.is_square:
        raise DimensionMismatchError(
            base.dims, None, "^", reason="matrix must be square to take a power",
        )
    if exponent < 0 or not exponent.is_integer():
        raise EvaluationError(
            f"matrix power needs a non-negative integer exponent, got {exponent:g}"
        )
    result = Matrix.identity(base.row_count)
    for _ in range(int(exponent)):
        result = _matmul(result, base)
    return result


def negate(value: Value) -> Value:
    return multiply(value, Number(-1.0))


# ── Comparison and equality ──────────────────────────────────────


def _comparison(op: str, fn: Callable[[float, float], bool]) -> Callable[[Value, Value], Value]:
    def compare(left: Value, right: Value) -> Value:
        match left, right:
            case Number(), Number():
                return Boolean(fn(_num(left), _num(right)))
        raise _unsupported(left, right, op)

    return compare


less = _comparison("<", operator.lt)
less_equal = _comparison("<=", operator.le)
greater = _comparison(">", operator.gt)
greater_equal = _comparison(">=", operator.ge)


def equals(left: Value, right: Value) -> bool:
    """Value equality; values of different shapes are unequal, never an error."""
    match left, right:
        case Matrix(), Matrix():
            return left.dims == right.dims and left.rows == right.rows
        case Number(), Number():
            return _num(left) == _num(right)
    return False


def equal(left: Value, right: Value) -> Value:
    return Boolean(equals(left, right))


def not_equal(left: Value, right: Value) -> Value:
    return Boolean(not equals(left, right))


# ── Logic ────────────────────────────────────────────────────────


def _logical(op: str, fn: Callable[[bool, bool], bool]) -> Callable[[Value, Value], Value]:
    def combine(left: Value, right: Value) -> Value:
        match left, right:
            case Boolean(), Boolean():
                return Boolean(fn(left.value, right.value))
        raise _unsupported(left, right, op)

    return combine


logical_and = _logical("&&", lambda a, b: a and b)
logical_or = _logical("||", lambda a, b: a or b)
bit_and = _logical("&", operator.and_)
bit_or = _logical("|", operator.or_)


def logical_not(value: Value) -> Value:
    match value:
        case Boolean():
            return Boolean(not value.value)
    raise UnsupportedOperationError(value.kind, "", "!")


BINARY_OPERATIONS: dict[str, Callable[[Value, Value], Value]] = {
    "+": add,
    "-": subtract,
    "*": multiply,
    "/": divide,
    "%": modulo,
    "^": power,
    "<": less,
    "<=": less_equal,
    ">": greater,
    ">=": greater_equal,
    "==": equal,
    "!=": not_equal,
    "&&": logical_and,
    "||": logical_or,
    "&": bit_and,
    "|": bit_or,
}


# ── Display ──────────────────────────────────────────────────────


def _format_float(x: float, precision: int) -> str:
    text = f"{x:.{precision}g}"
    return "0" if text == "-0" else text


def format_value(value: Value, precision: int = 6) -> str:
    """Render a value the way the CLI prints results."""
    match value:
        case Boolean():
            return "true" if value.value else "false"
        case Number():
            text = _format_float(_num(value), precision)
            return f"{text} {value.unit.value}" if value.unit else text
        case Matrix():
            rows = "; ".join(
                " ".join(_format_float(x, precision) for x in row)
                for row in value.rows
            )
            return f"[{rows}]"
    raise TypeError(f"not a MathScript value: {value!r}")
