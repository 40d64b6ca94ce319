"""Agent movement via a lazy lattice random walk.

Each tick every non-dead agent moves independently on each axis:
    direction ~ Bernoulli(0.5)      (1 = positive, 0 = negative)
    step      ~ Uniform{0, 1}
    positive: coord' = (coord + step) mod bound      (wraps at the far edge)
    negative: coord' = max(coord - step, 0) mod bound (sticks at 0)

So an agent moves at most one cell per axis per tick and may stay put.
The walk is memoryless. The two edges are asymmetric: the far edge wraps
to 0, the near edge saturates.

The pass is the vectorised form of calling Agent.move on every agent in
ascending index: one (n_live, 4) draw block per tick, row r holding the
four bits the r-th live agent would draw itself. Dead agents draw nothing.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .lattice import X_DIRECTION, X_STEP, Y_DIRECTION, Y_STEP, draw_moves, lazy_step
from .spatial import SpatialIndex
from .types import Compartment

__all__ = ['draw_moves', 'lazy_step', 'move_agents', 'move_all']


def move_agents(
    agents: np.ndarray,
    grid_size: Tuple[int, int],
    rng: np.random.Generator,
) -> int:
    """Move all non-dead agents one step (in-place).

    Returns:
        Number of agents that moved (were eligible to move).
    """
    live_idx = np.flatnonzero(agents['compartment'] != Compartment.DEAD)
    n_live = len(live_idx)
    if n_live == 0:
        return 0

    draws = draw_moves(n_live, rng)
    width, height = grid_size
    agents['x'][live_idx] = lazy_step(
        agents['x'][live_idx], width, draws[:, X_DIRECTION] == 1, draws[:, X_STEP]
    )
    agents['y'][live_idx] = lazy_step(
        agents['y'][live_idx], height, draws[:, Y_DIRECTION] == 1, draws[:, Y_STEP]
    )
    return n_live


def move_all(
    agents: np.ndarray,
    index: SpatialIndex,
    grid_size: Tuple[int, int],
    rng: np.random.Generator,
) -> None:
    """Movement pass: move every agent, then rebuild the spatial index.

    Dead agents keep their position but are re-registered in the index.
    """
    move_agents(agents, grid_size, rng)
    index.rebuild(agents)
