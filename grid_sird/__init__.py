"""grid-SIRD: agent-based SIRD epidemic on a discrete 2D grid.

A population of mobile agents takes a lazy random walk on a W × H grid.
Infection spreads between agents sharing a cell; after a fixed infectious
period each infected agent dies with probability p_death or recovers.

  - Per-agent compartment model: Susceptible → Infected → Recovered | Dead
  - Cell-level spatial index rebuilt every tick
  - Seedable NumPy RNG; a seed reproduces a run exactly
  - Infectious-period sweeps (fraction ever infected vs. duration)
"""

from .config import ConfigurationError, SimulationConfig
from .model import Simulation, get_statistics, initialize, run
from .types import AggregateCounts, Compartment

__version__ = "0.1.0"

__all__ = [
    'AggregateCounts',
    'Compartment',
    'ConfigurationError',
    'Simulation',
    'SimulationConfig',
    'get_statistics',
    'initialize',
    'run',
]
