"""Spatial occupancy index: which agents share a grid cell.

Contacts happen only between agents in the same cell, so the transition
pass needs, for an infectious agent at (x, y), the ordered list of every
agent at (x, y). The index maps cell → agent ids in insertion order.

The index is never patched incrementally: after each movement pass it is
cleared and rebuilt from the agent array in ascending agent index, so every
agent (dead ones included) appears exactly once.

A running occupancy tally (agent-ticks hosted per cell) is kept alongside,
for looking at where on the grid contacts concentrate.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterator, List, Tuple

import numpy as np

Cell = Tuple[int, int]


class SpatialIndex:
    """Mapping from grid cell to the agents occupying it this tick."""

    def __init__(self, grid_size: Tuple[int, int]):
        """
        Args:
            grid_size: (width, height) of the grid.
        """
        self.grid_size = (int(grid_size[0]), int(grid_size[1]))
        self._cells: Dict[Cell, List[int]] = defaultdict(list)
        self._n_indexed = 0
        self.occupancy = np.zeros(self.grid_size, dtype=np.int64)

    def __len__(self) -> int:
        """Number of indexed agents."""
        return self._n_indexed

    def __contains__(self, cell: Cell) -> bool:
        return cell in self._cells

    def __repr__(self) -> str:
        return (
            f"SpatialIndex(grid_size={self.grid_size}, agents={len(self)}, "
            f"occupied_cells={self.occupied_cells})"
        )

    @property
    def occupied_cells(self) -> int:
        """Number of distinct non-empty cells."""
        return len(self._cells)

    def cells(self) -> Iterator[Cell]:
        return iter(self._cells)

    def occupants(self, cell: Cell) -> Tuple[int, ...]:
        """Agent ids at `cell` in insertion order (empty tuple if none)."""
        return tuple(self._cells.get(cell, ()))

    def clear(self) -> None:
        self._cells.clear()
        self._n_indexed = 0

    def insert(self, cell: Cell, agent_id: int) -> None:
        """Append `agent_id` to `cell`'s occupancy list."""
        self._cells[cell].append(agent_id)
        self._n_indexed += 1

    def rebuild(self, agents: np.ndarray) -> None:
        """Clear and re-register every agent at its current position.

        Agents are inserted in ascending index, so each cell's list is sorted.
        Also adds this tick's occupancy to the running tally.
        """
        self.clear()
        xs = agents['x']
        ys = agents['y']
        for i, cell in enumerate(zip(xs.tolist(), ys.tolist())):
            self.insert(cell, i)
        np.add.at(self.occupancy, (xs, ys), 1)

    def reset_occupancy(self) -> None:
        self.occupancy[:] = 0
