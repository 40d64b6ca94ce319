"""Core data types for grid-SIRD.

This module is the SINGLE SOURCE OF TRUTH for:
  - AGENT_DTYPE: NumPy structured array dtype for individual agents
  - Compartment enumeration (S, I, R, D)
  - Agent: a row view exposing the per-agent state transitions
  - Inter-module value objects (AggregateCounts, TransitionEvents)

All modules import these types from here. No other module defines agent fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import NamedTuple, Tuple

import numpy as np

from .lattice import draw_moves, lazy_step


# ═══════════════════════════════════════════════════════════════════════
# ENUMERATIONS
# ═══════════════════════════════════════════════════════════════════════

class Compartment(IntEnum):
    """SIRD compartments.

    S → I  (contact with an infectious agent in the same cell)
    I → R  (infectious window elapsed, survived the death draw)
    I → D  (infectious window elapsed, lost the death draw)

    R and D are absorbing: no re-infection, no resurrection.
    """
    SUSCEPTIBLE = 0
    INFECTED    = 1
    RECOVERED   = 2
    DEAD        = 3


N_COMPARTMENTS = len(Compartment)


# ═══════════════════════════════════════════════════════════════════════
# AGENT_DTYPE — Canonical structured array for individual agents
# ═══════════════════════════════════════════════════════════════════════

AGENT_DTYPE = np.dtype([
    ('x',           np.int64),   # grid column, 0 <= x < width
    ('y',           np.int64),   # grid row, 0 <= y < height
    ('compartment', np.int8),    # Compartment enum (0=S..3=D)
    ('tick',        np.int64),   # tick at which the current compartment was entered
])


def allocate_agents(n: int) -> np.ndarray:
    """Allocate a zeroed agent array.

    Zeroed rows are susceptible agents at (0, 0) that entered S at tick 0.

    Args:
        n: Number of agents.

    Returns:
        Structured array of shape (n,) with AGENT_DTYPE.
    """
    return np.zeros(n, dtype=AGENT_DTYPE)


# ═══════════════════════════════════════════════════════════════════════
# AGENT VIEW
# ═══════════════════════════════════════════════════════════════════════

class Agent:
    """Mutable view of one row of an agent array.

    Identity is the row index; the view holds no state of its own, so any
    change made through it is visible to every other reader of the array.
    """

    __slots__ = ('_agents', 'index')

    def __init__(self, agents: np.ndarray, index: int):
        if not 0 <= index < len(agents):
            raise IndexError(
                f"Agent index {index} out of range for population of {len(agents)}"
            )
        self._agents = agents
        self.index = int(index)

    def __repr__(self) -> str:
        return (
            f"Agent(index={self.index}, position={self.position}, "
            f"compartment={self.compartment.name}, "
            f"last_transition_tick={self.last_transition_tick})"
        )

    @property
    def position(self) -> Tuple[int, int]:
        row = self._agents[self.index]
        return int(row['x']), int(row['y'])

    @property
    def compartment(self) -> Compartment:
        return Compartment(int(self._agents['compartment'][self.index]))

    @property
    def last_transition_tick(self) -> int:
        return int(self._agents['tick'][self.index])

    def _enter(self, compartment: Compartment, tick: int) -> None:
        self._agents['compartment'][self.index] = compartment
        self._agents['tick'][self.index] = tick

    def infect(self, tick: int) -> None:
        """S → I at `tick`.

        Raises:
            ValueError: If the agent is not susceptible.
        """
        if self.compartment != Compartment.SUSCEPTIBLE:
            raise ValueError(
                f"Only susceptible agents can be infected; agent {self.index} "
                f"is {self.compartment.name}"
            )
        self._enter(Compartment.INFECTED, tick)

    def recover(self, tick: int) -> None:
        self._enter(Compartment.RECOVERED, tick)

    def die(self, tick: int) -> None:
        self._enter(Compartment.DEAD, tick)

    def move(self, grid_bounds: Tuple[int, int], rng: np.random.Generator) -> None:
        """Take one lazy random-walk step (no-op for dead agents).

        Draws one row of four bits from `rng`: (x_direction, x_step,
        y_direction, y_step), each uniform over {0, 1}.
        """
        if self.compartment == Compartment.DEAD:
            return
        x_dir, x_step, y_dir, y_step = draw_moves(1, rng)[0]
        width, height = grid_bounds
        x, y = self.position
        self._agents['x'][self.index] = lazy_step(x, width, bool(x_dir), int(x_step))
        self._agents['y'][self.index] = lazy_step(y, height, bool(y_dir), int(y_step))


# ═══════════════════════════════════════════════════════════════════════
# INTER-MODULE VALUE OBJECTS
# ═══════════════════════════════════════════════════════════════════════

class AggregateCounts(NamedTuple):
    """Population census for one tick. Fields always sum to N."""
    susceptible: int
    infected: int
    recovered: int
    dead: int

    @property
    def total(self) -> int:
        return self.susceptible + self.infected + self.recovered + self.dead

    def as_dict(self) -> dict:
        return dict(self._asdict())


@dataclass
class TransitionEvents:
    """Transitions produced by one transition pass."""
    infections: int = 0
    recoveries: int = 0
    deaths: int = 0

    @property
    def removals(self) -> int:
        """Agents that left the infected compartment this tick."""
        return self.recoveries + self.deaths
