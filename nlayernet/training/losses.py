"""Error metric used as the convergence signal."""

from __future__ import annotations

import numpy as np

from ..core.types import Array


def half_squared_error(expected: Array, actual: Array) -> float:
    """Return ``0.5 * sum((expected - actual) ** 2)`` over the output units."""

    diff = np.asarray(expected, dtype=np.float64) - np.asarray(actual, dtype=np.float64)
    return float(0.5 * np.dot(diff, diff))


__all__ = ["half_squared_error"]
