"""Logistic nonlinearity and its derivative.

Both functions are written so that ``math.exp`` is only ever called on a
non-positive argument, which keeps them finite for any finite input.
"""

import math


def sigmoid(x: float) -> float:
    """Logistic function ``1 / (1 + e^-x)``."""
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    e = math.exp(x)
    return e / (1.0 + e)


def sigmoid_prime(x: float) -> float:
    """Derivative of the logistic function, ``e^-x / (1 + e^-x)^2``."""
    # The derivative is even, so evaluate it on -|x|
    e = math.exp(-abs(x))
    return e / ((1.0 + e) * (1.0 + e))
