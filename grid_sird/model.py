"""Simulation engine: population setup, the per-tick update, the run loop.

Tick protocol (tick t → t+1):
  1. tick += 1
  2. Transition pass (spread, recovery, death) against the current index
  3. Movement pass; spatial index cleared and rebuilt from new positions
  4. Census appended to the time series

States:
  RUNNING     infected > 0
  TERMINATED  infected == 0

Termination is guaranteed for any finite population: R and D are
absorbing, so each agent is infected at most once and at most N
infection events can ever happen.

A Simulation exclusively owns its agent array, spatial index and RNG;
nothing is module-global.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

import numpy as np

from .config import SimulationConfig, validate_simulation
from .movement import move_all
from .rng import create_rng
from .spatial import SpatialIndex
from .stats import StatisticsRecorder, count_compartments
from .transition import update_compartments
from .types import Agent, AggregateCounts, Compartment, allocate_agents

logger = logging.getLogger(__name__)


class SimulationState(Enum):
    RUNNING = 'running'
    TERMINATED = 'terminated'


class SimulationTerminated(RuntimeError):
    """step() was called on a simulation with no infected agents left."""


def initialize_population(
    config: SimulationConfig,
    rng: np.random.Generator,
) -> np.ndarray:
    """Seed the population at tick 0.

    Positions are uniform over the grid (all x drawn, then all y).
    The first k agents start INFECTED, the rest SUSCEPTIBLE.
    """
    agents = allocate_agents(config.n_agents)
    agents['x'] = rng.integers(0, config.width, size=config.n_agents)
    agents['y'] = rng.integers(0, config.height, size=config.n_agents)
    agents['compartment'] = Compartment.SUSCEPTIBLE
    agents['compartment'][:config.initial_infected] = Compartment.INFECTED
    agents['tick'] = 0
    return agents


class Simulation:
    """One SIRD run on a W × H grid."""

    def __init__(
        self,
        config: SimulationConfig,
        rng: Optional[np.random.Generator] = None,
    ):
        """Build a ready-to-run simulation.

        Args:
            config: Simulation parameters; validated here.
            rng: Random source. If None, one is created from config.seed.

        Raises:
            ConfigurationError: If any parameter is invalid.
        """
        validate_simulation(config)
        self.config = config
        self.rng = rng if rng is not None else create_rng(config.seed)
        self.tick = 0

        self._agents = initialize_population(config, self.rng)
        self.index = SpatialIndex(config.grid_size)
        self.index.rebuild(self._agents)

        self.recorder = StatisticsRecorder()
        self._counts = count_compartments(self._agents)
        self.recorder.record(self._counts)

        logger.debug(
            "Initialized %d agents (%d infected) on %dx%d grid",
            config.n_agents, config.initial_infected,
            config.width, config.height,
        )

    @classmethod
    def initialize(
        cls,
        config: SimulationConfig,
        rng: Optional[np.random.Generator] = None,
    ) -> 'Simulation':
        return cls(config, rng=rng)

    # ── State ──────────────────────────────────────────────────────────

    @property
    def state(self) -> SimulationState:
        if self._counts.infected > 0:
            return SimulationState.RUNNING
        return SimulationState.TERMINATED

    @property
    def agents(self) -> np.ndarray:
        """Read-only copy of the agent array."""
        view = self._agents.copy()
        view.flags.writeable = False
        return view

    def agent(self, index: int) -> Agent:
        """Live view of agent `index`. Mutations bypass the tick protocol."""
        return Agent(self._agents, index)

    def get_statistics(self) -> AggregateCounts:
        """Census at the current tick."""
        return self._counts

    @property
    def series(self) -> List[AggregateCounts]:
        return list(self.recorder.series)

    # ── Dynamics ───────────────────────────────────────────────────────

    def step(self) -> AggregateCounts:
        """Advance one tick.

        Raises:
            SimulationTerminated: If no infected agents remain.
        """
        if self.state is SimulationState.TERMINATED:
            raise SimulationTerminated(
                f"Simulation terminated at tick {self.tick}; nothing to step"
            )

        self.tick += 1
        events = update_compartments(
            self._agents, self.index, self.tick,
            self.config.duration, self.config.p_death, self.rng,
        )
        move_all(self._agents, self.index, self.config.grid_size, self.rng)

        self._counts = count_compartments(self._agents)
        self.recorder.record(self._counts, events)

        logger.debug(
            "tick %d: S=%d I=%d R=%d D=%d (+%d infected, %d recovered, %d died)",
            self.tick, *self._counts,
            events.infections, events.recoveries, events.deaths,
        )
        return self._counts

    def run(self, max_ticks: Optional[int] = None) -> List[AggregateCounts]:
        """Step until no infected agents remain.

        Args:
            max_ticks: Optional bound on the total tick count; overrides
                config.max_ticks. The run stops early (with a warning log)
                if it is reached while agents are still infected.

        Returns:
            Full time series, initial snapshot included
            (length = ticks elapsed + 1).
        """
        limit = max_ticks if max_ticks is not None else self.config.max_ticks
        while self.state is SimulationState.RUNNING:
            if limit is not None and self.tick >= limit:
                logger.warning(
                    "Stopped at tick %d with %d agents still infected "
                    "(max_ticks=%d)",
                    self.tick, self._counts.infected, limit,
                )
                break
            self.step()

        logger.info(
            "Run finished after %d ticks: S=%d I=%d R=%d D=%d",
            self.tick, *self._counts,
        )
        return self.series


# ═══════════════════════════════════════════════════════════════════════
# FUNCTIONAL FRONT END
# ═══════════════════════════════════════════════════════════════════════

def initialize(
    n: int,
    initial_infected: int,
    duration: int,
    p_death: float,
    width: int,
    height: int,
    *,
    seed: Optional[int] = None,
    max_ticks: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Simulation:
    """Construct a ready-to-run simulation.

    Raises:
        ConfigurationError: If any parameter is invalid.
    """
    config = SimulationConfig(
        n_agents=n,
        initial_infected=initial_infected,
        duration=duration,
        p_death=p_death,
        width=width,
        height=height,
        seed=seed,
        max_ticks=max_ticks,
    )
    return Simulation(config, rng=rng)


def run(simulation: Simulation) -> List[AggregateCounts]:
    """Run `simulation` to termination and return its time series."""
    return simulation.run()


def get_statistics(simulation: Simulation) -> AggregateCounts:
    return simulation.get_statistics()
