"""Exception types raised by scratchnet."""

from typing import Optional


class ScratchNetError(Exception):
    """Base class for all scratchnet errors"""


class ShapeMismatchError(ScratchNetError, ValueError):
    """Raised when two matrices have incompatible shapes for an operation"""

    def __init__(
        self,
        operation: str,
        left: tuple[int, int],
        right: tuple[int, int],
        message: Optional[str] = None,
    ):
        self.operation = operation
        self.left = left
        self.right = right
        if message is None:
            message = f"Cannot {operation} matrices of shape {left} and {right}"
        super().__init__(message)


class IndexOutOfRangeError(ScratchNetError, IndexError):
    """Raised when an element or sample index is outside its container"""


class DivisionByZeroError(ScratchNetError, ZeroDivisionError):
    """Raised when a matrix is divided by a zero scalar"""


class DatasetFormatError(ScratchNetError, ValueError):
    """Raised when an IDX file is malformed or its contents disagree"""
