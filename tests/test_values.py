"""Tests for MathScript values and operator dispatch."""

from __future__ import annotations

import pytest

from mathscript.errors import (
    DimensionMismatchError,
    DivisionByZeroError,
    EvaluationError,
    UnsupportedOperationError,
)
from mathscript.values import (
    BINARY_OPERATIONS,
    Boolean,
    Matrix,
    Number,
    Unit,
    add,
    divide,
    equal,
    equals,
    format_value,
    logical_not,
    modulo,
    multiply,
    negate,
    power,
    subtract,
)


def m(*rows) -> Matrix:
    return Matrix.from_rows(rows)


class TestMatrix:
    def test_dimensions(self):
        assert m([1, 2, 3], [4, 5, 6]).dims == (2, 3)

    def test_ragged_rejected(self):
        with pytest.raises(DimensionMismatchError):
            Matrix(((1.0, 2.0), (3.0,)), 2, 2)

    def test_identity(self):
        assert Matrix.identity(2) == m([1, 0], [0, 1])

    def test_transpose(self):
        assert m([1, 2, 3]).transpose() == m([1], [2], [3])


class TestArithmetic:
    def test_numbers(self):
        assert add(Number(2), Number(3)) == Number(5)
        assert subtract(Number(2), Number(3)) == Number(-1)
        assert multiply(Number(2), Number(3)) == Number(6)
        assert divide(Number(7), Number(2)) == Number(3.5)
        assert power(Number(2), Number(10)) == Number(1024)

    def test_modulo_uses_fmod(self):
        assert modulo(Number(7), Number(3)) == Number(1)
        assert modulo(Number(-7), Number(3)) == Number(-1)

    def test_division_by_zero(self):
        with pytest.raises(DivisionByZeroError):
            divide(Number(1), Number(0))
        with pytest.raises(DivisionByZeroError):
            modulo(Number(1), Number(0))

    def test_units_are_dropped(self):
        assert add(Number(1, Unit.M), Number(2, Unit.M)) == Number(3)

    def test_boolean_is_a_number(self):
        assert add(Boolean(True), Number(1)) == Number(2)

    def test_power_domain_error(self):
        with pytest.raises(EvaluationError, match="domain"):
            power(Number(-8), Number(0.5))

    def test_negate(self):
        assert negate(Number(4)) == Number(-4)
        assert negate(m([1, -2])) == m([-1, 2])


class TestMatrixArithmetic:
    def test_elementwise_add(self):
        assert add(m([1, 2]), m([3, 4])) == m([4, 6])

    def test_add_dimension_mismatch(self):
        with pytest.raises(DimensionMismatchError):
            add(m([1, 2]), m([1, 2, 3]))

    def test_scalar_broadcast(self):
        assert add(Number(1), m([1, 2])) == m([2, 3])
        assert subtract(m([5, 6]), Number(1)) == m([4, 5])
        assert subtract(Number(10), m([1, 2])) == m([9, 8])
        assert multiply(Number(2), m([1, 2])) == m([2, 4])

    def test_product_dimensions(self):
        product = multiply(m([1, 2, 3], [4, 5, 6]), m([1], [1], [1]))
        assert product.dims == (2, 1)
        assert product == m([6], [15])

    def test_product_mismatch(self):
        with pytest.raises(DimensionMismatchError) as excinfo:
            multiply(m([1, 2]), m([1, 2]))
        assert excinfo.value.left == (1, 2)
        assert excinfo.value.right == (1, 2)
        assert excinfo.value.op == "*"
        assert excinfo.value.notes == [
            "the left operand has 2 columns but the right operand has 1 rows",
        ]

    def test_power(self):
        assert power(m([1, 1], [0, 1]), Number(3)) == m([1, 3], [0, 1])

    def test_power_zero_is_identity(self):
        assert power(m([2, 3], [4, 5]), Number(0)) == Matrix.identity(2)

    def test_power_needs_square(self):
        with pytest.raises(DimensionMismatchError):
            power(m([1, 2]), Number(2))

    def test_power_needs_non_negative_integer(self):
        with pytest.raises(EvaluationError):
            power(m([1]), Number(1.5))
        with pytest.raises(EvaluationError):
            power(m([1]), Number(-1))

    def test_matrix_division_unsupported(self):
        with pytest.raises(UnsupportedOperationError) as excinfo:
            divide(m([1]), Number(2))
        assert (excinfo.value.left, excinfo.value.right, excinfo.value.op) == (
            "Matrix", "Number", "/",
        )

    def test_operands_unchanged(self):
        left = m([1, 2])
        add(left, Number(1))
        assert left == m([1, 2])


class TestComparison:
    def test_ordering(self):
        ops = BINARY_OPERATIONS
        assert ops["<"](Number(1), Number(2)) == Boolean(True)
        assert ops["<="](Number(2), Number(2)) == Boolean(True)
        assert ops[">"](Number(1), Number(2)) == Boolean(False)
        assert ops[">="](Number(1), Number(2)) == Boolean(False)

    def test_ordering_matrix_unsupported(self):
        with pytest.raises(UnsupportedOperationError):
            BINARY_OPERATIONS["<"](m([1]), Number(1))

    def test_matrix_equality(self):
        assert equals(m([1, 2], [3, 4]), m([1, 2], [3, 4]))
        assert not equals(m([1, 2]), m([1, 2, 3]))
        assert not equals(m([1, 2]), m([1, 3]))

    def test_mixed_kinds_are_unequal(self):
        assert equal(m([1]), Number(1)) == Boolean(False)
        assert BINARY_OPERATIONS["!="](m([1]), Number(1)) == Boolean(True)


class TestLogic:
    def test_and_or(self):
        t, f = Boolean(True), Boolean(False)
        assert BINARY_OPERATIONS["&&"](t, f) == f
        assert BINARY_OPERATIONS["||"](t, f) == t
        assert BINARY_OPERATIONS["&"](t, t) == t
        assert BINARY_OPERATIONS["|"](f, f) == f

    def test_logic_needs_booleans(self):
        with pytest.raises(UnsupportedOperationError):
            BINARY_OPERATIONS["&&"](Number(1), Boolean(True))

    def test_not(self):
        assert logical_not(Boolean(False)) == Boolean(True)
        with pytest.raises(UnsupportedOperationError, match="on Number"):
            logical_not(Number(1))


class TestFormat:
    def test_number(self):
        assert format_value(Number(3.5)) == "3.5"
        assert format_value(Number(1024)) == "1024"

    def test_precision(self):
        assert format_value(Number(1 / 3), precision=3) == "0.333"

    def test_unit(self):
        assert format_value(Number(3, Unit.M)) == "3 m"

    def test_boolean(self):
        assert format_value(Boolean(True)) == "true"

    def test_matrix(self):
        assert format_value(m([1, 2], [3, 4])) == "[1 2; 3 4]"

    def test_negative_zero(self):
        assert format_value(Number(-0.0)) == "0"
