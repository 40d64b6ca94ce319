"""Lazy lattice random-walk rule, shared by Agent.move and the movement pass.

One axis of one step:
    positive: coord' = (coord + step) mod bound       (wraps at the far edge)
    negative: coord' = max(coord - step, 0) mod bound  (sticks at 0)

Draw layout: one row of four bits per moving agent,
(x_direction, x_step, y_direction, y_step); direction 1 = positive.
"""

from __future__ import annotations

from typing import Union

import numpy as np

IntOrArray = Union[int, np.ndarray]

# Columns of a draw row
X_DIRECTION, X_STEP, Y_DIRECTION, Y_STEP = range(4)


def lazy_step(
    coord: IntOrArray,
    bound: int,
    positive: Union[bool, np.ndarray],
    step: IntOrArray,
) -> IntOrArray:
    """Apply one axis of the walk. Works on scalars or arrays.

    Args:
        coord: Current coordinate(s), in [0, bound).
        bound: Grid extent on this axis.
        positive: Direction(s); True/1 = positive.
        step: Step size(s), 0 or 1.

    Returns:
        New coordinate(s), in [0, bound).
    """
    forward = (coord + step) % bound
    backward = np.maximum(coord - step, 0) % bound
    result = np.where(positive, forward, backward)
    if np.ndim(result) == 0:
        return int(result)
    return result


def draw_moves(n: int, rng: np.random.Generator) -> np.ndarray:
    """Draw the (n, 4) block of direction/step bits for n moving agents."""
    return rng.integers(0, 2, size=(n, 4))
