"""Dense matrix engine.

A small, dependency-free 2-D container of floats with exactly the algebra the
network engine needs. Operations that produce a differently shaped or combined
value return a new ``Matrix``; ``scalar_multiply``, ``scalar_divide``,
``transpose``, ``apply`` and ``clone_from`` replace the callee's own storage.
"""

import random
from collections.abc import Callable, Iterable, Sequence
from typing import Optional

from .errors import DivisionByZeroError, IndexOutOfRangeError, ShapeMismatchError

# Entries of a randomised matrix are drawn from [RANDOM_LOW, RANDOM_HIGH)
RANDOM_LOW = -5.0
RANDOM_HIGH = 5.0


class Matrix:
    """Row-major grid of floats with a fixed number of rows and columns."""

    __slots__ = ("_data", "_rows", "_columns")

    def __init__(
        self,
        rows: int,
        columns: int,
        fill: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ):
        if rows < 1 or columns < 1:
            raise ValueError(f"Matrix dimensions must be positive, got ({rows}, {columns})")
        self._rows = rows
        self._columns = columns
        value = 0.0 if fill is None else float(fill)
        self._data = [[value] * columns for _ in range(rows)]
        if fill is None:
            self.randomise(rng)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> "Matrix":
        """Build a matrix from a non-empty sequence of equal-length rows."""
        if not rows or not rows[0]:
            raise ValueError("Matrix requires at least one row and one column")
        width = len(rows[0])
        for index, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(f"Row {index} has {len(row)} entries, expected {width}")
        result = cls(len(rows), width, 0.0)
        result._data = [[float(v) for v in row] for row in rows]
        return result

    @classmethod
    def column(cls, values: Iterable[float]) -> "Matrix":
        """Build a single-column matrix from a flat sequence of values."""
        return cls.from_rows([[v] for v in values])

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    def shape(self) -> tuple[int, int]:
        """Return (rows, columns)."""
        return (self._rows, self._columns)

    def _check_index(self, row: int, column: int) -> None:
        if not (0 <= row < self._rows and 0 <= column < self._columns):
            raise IndexOutOfRangeError(
                f"Index ({row}, {column}) out of range for matrix of shape {self.shape()}"
            )

    def get(self, row: int, column: int) -> float:
        self._check_index(row, column)
        return self._data[row][column]

    def set(self, row: int, column: int, value: float) -> None:
        self._check_index(row, column)
        self._data[row][column] = float(value)

    def randomise(self, rng: Optional[random.Random] = None) -> None:
        """Overwrite every entry with an independent uniform draw."""
        draw = (rng or random).random
        span = RANDOM_HIGH - RANDOM_LOW
        for row in self._data:
            for c in range(self._columns):
                row[c] = RANDOM_LOW + span * draw()

    def _require_same_shape(self, other: "Matrix", operation: str) -> None:
        if self.shape() != other.shape():
            raise ShapeMismatchError(operation, self.shape(), other.shape())

    def _row_product(self, row: int, other: "Matrix") -> list[float]:
        """Compute one row of ``self · other``."""
        left = self._data[row]
        right = other._data
        inner = self._columns
        result = []
        for j in range(other._columns):
            total = 0.0
            for k in range(inner):
                total += left[k] * right[k][j]
            result.append(total)
        return result

    def multiply(self, other: "Matrix") -> "Matrix":
        """Standard matrix product; requires ``self.columns == other.rows``."""
        if self._columns != other._rows:
            raise ShapeMismatchError(
                "multiply",
                self.shape(),
                other.shape(),
                f"Cannot multiply {self.shape()} by {other.shape()}: "
                f"{self._columns} columns != {other._rows} rows",
            )
        result = Matrix(self._rows, other._columns, 0.0)
        # Each output row depends only on one row of self, so rows can be computed independently
        result._data = [self._row_product(i, other) for i in range(self._rows)]
        return result

    def _elementwise(self, other: "Matrix", operation: str, f: Callable[[float, float], float]) -> "Matrix":
        self._require_same_shape(other, operation)
        result = Matrix(self._rows, self._columns, 0.0)
        result._data = [
            [f(a, b) for a, b in zip(left, right)] for left, right in zip(self._data, other._data)
        ]
        return result

    def add(self, other: "Matrix") -> "Matrix":
        return self._elementwise(other, "add", lambda a, b: a + b)

    def subtract(self, other: "Matrix") -> "Matrix":
        return self._elementwise(other, "subtract", lambda a, b: a - b)

    def hadamard(self, other: "Matrix") -> "Matrix":
        """Elementwise product of two equal-shaped matrices."""
        return self._elementwise(other, "hadamard", lambda a, b: a * b)

    def scalar_multiply(self, k: float) -> None:
        self.apply(lambda v: v * k)

    def scalar_divide(self, k: float) -> None:
        if k == 0:
            raise DivisionByZeroError(f"Cannot divide matrix of shape {self.shape()} by zero")
        self.apply(lambda v: v / k)

    def transpose(self) -> None:
        """Replace this matrix's contents with its transpose."""
        self._data = [list(column) for column in zip(*self._data)]
        self._rows, self._columns = self._columns, self._rows

    def apply(self, f: Callable[[float], float]) -> None:
        """Map ``f`` over every entry in place."""
        self._data = [[f(v) for v in row] for row in self._data]

    def clone_from(self, other: "Matrix") -> None:
        """Replace this matrix's shape and data with a deep copy of ``other``."""
        self._data = [list(row) for row in other._data]
        self._rows, self._columns = other._rows, other._columns

    def copy(self) -> "Matrix":
        result = Matrix(self._rows, self._columns, 0.0)
        result.clone_from(self)
        return result

    def to_list(self) -> list[list[float]]:
        return [list(row) for row in self._data]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Matrix({self._rows}x{self._columns}, {self._data!r})"
