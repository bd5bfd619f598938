"""Native functions available in every global scope."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from mathscript.errors import ArgumentError, DimensionMismatchError
from mathscript.symbols import Builtin, Scope
from mathscript.values import Matrix, Number, Value

logger = logging.getLogger(__name__)

# Pivots smaller than this are treated as zero.
_EPSILON = 1e-12


def _matrix_arg(name: str, args: Sequence[Value]) -> Matrix:
    (value,) = args
    if not isinstance(value, Matrix):
        raise ArgumentError(f"'{name}' expects a Matrix, got {value.kind}")
    return value


def _number_arg(name: str, args: Sequence[Value]) -> float:
    (value,) = args
    if not isinstance(value, Number):
        raise ArgumentError(f"'{name}' expects a Number, got {value.kind}")
    return float(value.value)


def transpose(args: Sequence[Value]) -> Value:
    return _matrix_arg("transpose", args).transpose()


def determinant(args: Sequence[Value]) -> Value:
    """Determinant by Gaussian elimination with partial pivoting."""
    matrix = _matrix_arg("det", args)
    if not matrix.is_square:
        raise DimensionMismatchError(
            matrix.dims, None, "det",
            reason=f"determinant needs a square matrix, got "
                   f"{matrix.row_count} x {matrix.col_count}",
        )

    rows = [list(row) for row in matrix.rows]
    size = matrix.row_count
    det = 1.0
    for col in range(size):
        pivot = max(range(col, size), key=lambda r: abs(rows[r][col]))
        if abs(rows[pivot][col]) < _EPSILON:
            return Number(0.0)
        if pivot != col:
            rows[col], rows[pivot] = rows[pivot], rows[col]
            det = -det
        det *= rows[col][col]
        for r in range(col + 1, size):
            factor = rows[r][col] / rows[col][col]
            for c in range(col, size):
                rows[r][c] -= factor * rows[col][c]
    return Number(det)


def _clean(rows: list[list[float]]) -> Matrix:
    # Clear rounding noise like -0.0 and 1e-17.
    return Matrix.from_rows(
        [[0.0 if abs(x) < _EPSILON else x for x in row] for row in rows]
    )


def rref(args: Sequence[Value]) -> Value:
    """Reduced row-echelon form."""
    matrix = _matrix_arg("rref", args)
    rows = [list(row) for row in matrix.rows]
    row_count, col_count = matrix.dims

    lead = 0
    for k in range(row_count):
        if lead >= col_count:
            break
        i = k
        while abs(rows[i][lead]) < _EPSILON:
            i += 1
            if i == row_count:
                i = k
                lead += 1
                if lead == col_count:
                    return _clean(rows)
        rows[i], rows[k] = rows[k], rows[i]

        pivot = rows[k][lead]
        rows[k] = [x / pivot for x in rows[k]]
        for r in range(row_count):
            if r != k:
                factor = rows[r][lead]
                rows[r] = [a - factor * b for a, b in zip(rows[r], rows[k])]
        lead += 1

    return _clean(rows)


def sqrt(args: Sequence[Value]) -> Value:
    x = _number_arg("sqrt", args)
    if x < 0:
        raise ArgumentError(f"'sqrt' expects a non-negative Number, got {x:g}")
    return Number(math.sqrt(x))


BUILTINS: tuple[Builtin, ...] = (
    Builtin("transpose", 1, transpose),
    Builtin("trans", 1, transpose),
    Builtin("det", 1, determinant),
    Builtin("determinant", 1, determinant),
    Builtin("rref", 1, rref),
    Builtin("sqrt", 1, sqrt),
)


def install(scope: Scope) -> Scope:
    for builtin in BUILTINS:
        scope.define_function(builtin)
    logger.debug("registered %d builtins", len(BUILTINS))
    return scope


def global_scope() -> Scope:
    """A fresh global scope with every builtin registered."""
    return install(Scope(name="global"))
