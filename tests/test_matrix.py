"""Tests for the dense matrix engine."""

import random

import numpy as np
import pytest

from scratchnet.errors import DivisionByZeroError, IndexOutOfRangeError, ShapeMismatchError
from scratchnet.matrix import RANDOM_HIGH, RANDOM_LOW, Matrix


def assert_matrix_close(actual, expected, tol=1e-9):
    assert actual.shape() == expected.shape()
    for got_row, want_row in zip(actual.to_list(), expected.to_list()):
        assert got_row == pytest.approx(want_row, abs=tol)


def random_matrix(rows, columns, seed):
    return Matrix(rows, columns, rng=random.Random(seed))


class TestConstruction:
    def test_fill_value(self):
        m = Matrix(2, 3, 1.5)
        assert m.shape() == (2, 3)
        assert m.to_list() == [[1.5, 1.5, 1.5], [1.5, 1.5, 1.5]]

    def test_random_fill_range(self):
        m = random_matrix(20, 20, seed=1)
        values = [v for row in m.to_list() for v in row]
        assert all(RANDOM_LOW <= v < RANDOM_HIGH for v in values)
        # A 400-sample uniform draw should cover both halves of the range
        assert min(values) < 0 < max(values)

    def test_random_fill_is_reproducible_with_rng(self):
        assert random_matrix(3, 3, seed=7) == random_matrix(3, 3, seed=7)

    def test_zero_fill_is_not_random(self):
        assert Matrix(2, 2, 0).to_list() == [[0.0, 0.0], [0.0, 0.0]]

    @pytest.mark.parametrize("rows,columns", [(0, 1), (1, 0), (-1, 3)])
    def test_rejects_non_positive_dimensions(self, rows, columns):
        with pytest.raises(ValueError):
            Matrix(rows, columns, 0.0)

    def test_from_rows_rejects_ragged_rows(self):
        with pytest.raises(ValueError, match="Row 1"):
            Matrix.from_rows([[1, 2], [3]])

    def test_column(self):
        m = Matrix.column([1, 2, 3])
        assert m.shape() == (3, 1)
        assert m.get(2, 0) == 3.0


class TestElementAccess:
    def test_get_and_set(self):
        m = Matrix(2, 2, 0.0)
        m.set(1, 0, 4.0)
        assert m.get(1, 0) == 4.0
        assert m.get(0, 1) == 0.0

    @pytest.mark.parametrize("row,column", [(2, 0), (0, 2), (-1, 0), (0, -1)])
    def test_get_out_of_range(self, row, column):
        m = Matrix(2, 2, 0.0)
        with pytest.raises(IndexOutOfRangeError):
            m.get(row, column)

    def test_set_out_of_range(self):
        m = Matrix(1, 1, 0.0)
        with pytest.raises(IndexOutOfRangeError):
            m.set(1, 0, 1.0)

    def test_index_error_is_an_index_error(self):
        with pytest.raises(IndexError):
            Matrix(1, 1, 0.0).get(5, 5)


class TestMultiply:
    def test_known_product(self):
        a = Matrix.from_rows([[1, 2, 3], [4, 5, 6]])
        b = Matrix.from_rows([[7, 8], [9, 10], [11, 12]])
        assert a.multiply(b).to_list() == [[58.0, 64.0], [139.0, 154.0]]

    def test_result_shape(self):
        assert random_matrix(3, 4, 1).multiply(random_matrix(4, 2, 2)).shape() == (3, 2)

    def test_matches_numpy(self):
        a = random_matrix(5, 3, 3)
        b = random_matrix(3, 4, 4)
        expected = np.array(a.to_list()) @ np.array(b.to_list())
        assert_matrix_close(a.multiply(b), Matrix.from_rows(expected.tolist()))

    def test_associativity(self):
        a = random_matrix(2, 3, 5)
        b = random_matrix(3, 4, 6)
        c = random_matrix(4, 2, 7)
        assert_matrix_close(a.multiply(b).multiply(c), a.multiply(b.multiply(c)), tol=1e-9)

    def test_inner_dimension_mismatch(self):
        with pytest.raises(ShapeMismatchError) as exc_info:
            Matrix(2, 3, 1.0).multiply(Matrix(2, 3, 1.0))
        assert exc_info.value.operation == "multiply"
        assert exc_info.value.left == (2, 3)
        assert exc_info.value.right == (2, 3)

    def test_operands_unchanged(self):
        a = Matrix.from_rows([[1, 2]])
        b = Matrix.from_rows([[3], [4]])
        a.multiply(b)
        assert a.to_list() == [[1.0, 2.0]]
        assert b.to_list() == [[3.0], [4.0]]


class TestElementwise:
    def test_add_then_subtract_round_trips(self):
        a = random_matrix(3, 3, 8)
        b = random_matrix(3, 3, 9)
        assert_matrix_close(a.add(b).subtract(b), a, tol=1e-12)

    def test_hadamard_values(self):
        a = Matrix.from_rows([[1, 2], [3, 4]])
        b = Matrix.from_rows([[5, 6], [7, 8]])
        assert a.hadamard(b).to_list() == [[5.0, 12.0], [21.0, 32.0]]

    def test_hadamard_commutes(self):
        a = random_matrix(2, 5, 10)
        b = random_matrix(2, 5, 11)
        assert a.hadamard(b) == b.hadamard(a)

    @pytest.mark.parametrize("operation", ["add", "subtract", "hadamard"])
    def test_shape_mismatch(self, operation):
        a = Matrix(2, 2, 1.0)
        b = Matrix(2, 1, 1.0)
        with pytest.raises(ShapeMismatchError) as exc_info:
            getattr(a, operation)(b)
        assert exc_info.value.operation == operation

    def test_shape_mismatch_is_a_value_error(self):
        with pytest.raises(ValueError):
            Matrix(1, 2, 0.0).add(Matrix(2, 1, 0.0))


class TestInPlace:
    def test_scalar_multiply(self):
        m = Matrix.from_rows([[1, -2]])
        m.scalar_multiply(3)
        assert m.to_list() == [[3.0, -6.0]]

    def test_scalar_divide(self):
        m = Matrix.from_rows([[3, -6]])
        m.scalar_divide(3)
        assert m.to_list() == [[1.0, -2.0]]

    def test_scalar_divide_by_zero(self):
        m = Matrix(1, 1, 1.0)
        with pytest.raises(DivisionByZeroError):
            m.scalar_divide(0)
        assert m.to_list() == [[1.0]]

    def test_transpose(self):
        m = Matrix.from_rows([[1, 2, 3], [4, 5, 6]])
        m.transpose()
        assert m.shape() == (3, 2)
        assert m.to_list() == [[1.0, 4.0], [2.0, 5.0], [3.0, 6.0]]

    def test_double_transpose_is_identity(self):
        m = random_matrix(3, 5, 12)
        original = m.copy()
        m.transpose()
        m.transpose()
        assert m == original

    def test_apply(self):
        m = Matrix.from_rows([[1, 2], [3, 4]])
        m.apply(lambda v: v * v)
        assert m.to_list() == [[1.0, 4.0], [9.0, 16.0]]

    def test_clone_from_replaces_shape_and_data(self):
        target = Matrix(1, 1, 0.0)
        source = Matrix.from_rows([[1, 2], [3, 4], [5, 6]])
        target.clone_from(source)
        assert target.shape() == (3, 2)
        assert target == source

    def test_clone_does_not_alias(self):
        source = Matrix.from_rows([[1, 2]])
        clone = Matrix(1, 1, 0.0)
        clone.clone_from(source)
        clone.set(0, 0, 9.0)
        clone.transpose()
        assert source.to_list() == [[1.0, 2.0]]

    def test_copy_is_independent(self):
        m = Matrix.from_rows([[1, 2]])
        c = m.copy()
        c.scalar_multiply(0)
        assert m.to_list() == [[1.0, 2.0]]
