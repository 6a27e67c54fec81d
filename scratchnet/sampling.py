"""Strategies for choosing which sample each training iteration uses."""

import random
from collections.abc import Iterator, Sequence
from enum import Enum
from typing import Optional

from .errors import IndexOutOfRangeError


class SampleOrder(Enum):
    """How training walks through the dataset"""

    SEQUENTIAL = "sequential"  # 0, 1, 2, ... wrapping around
    SHUFFLED = "shuffled"  # fresh permutation for every pass
    FIXED = "fixed"  # the same index every iteration


def iter_sample_indices(
    dataset_size: int,
    iterations: int,
    order: SampleOrder = SampleOrder.SEQUENTIAL,
    index: int = 0,
    indices: Optional[Sequence[int]] = None,
    seed: Optional[int] = None,
) -> Iterator[int]:
    """
    Yield exactly ``iterations`` sample indices.

    Args:
        dataset_size: Number of samples available
        iterations: Number of indices to produce
        order: Strategy used when ``indices`` is not given
        index: Sample used by ``SampleOrder.FIXED``
        indices: Explicit indices, cycled; overrides ``order``
        seed: Seed for ``SampleOrder.SHUFFLED``
    """
    if dataset_size < 1:
        raise ValueError("dataset_size must be positive")
    if iterations < 0:
        raise ValueError("iterations must be non-negative")

    if indices is not None:
        chosen = list(indices)
        if not chosen:
            raise ValueError("indices must not be empty")
        for i in chosen:
            _check(i, dataset_size)
        for step in range(iterations):
            yield chosen[step % len(chosen)]
        return

    if order is SampleOrder.FIXED:
        _check(index, dataset_size)
        for _ in range(iterations):
            yield index
    elif order is SampleOrder.SEQUENTIAL:
        for step in range(iterations):
            yield step % dataset_size
    elif order is SampleOrder.SHUFFLED:
        rng = random.Random(seed)
        permutation: list[int] = []
        for _ in range(iterations):
            if not permutation:
                permutation = list(range(dataset_size))
                rng.shuffle(permutation)
            yield permutation.pop()
    else:
        raise ValueError(f"Unknown sample order: {order!r}")


def _check(index: int, dataset_size: int) -> None:
    if not 0 <= index < dataset_size:
        raise IndexOutOfRangeError(f"Sample index {index} out of range for dataset of {dataset_size} samples")
