"""Compartment transitions for one tick: spread, recovery, death.

For every infected agent, in ascending agent index:
  1. Infected this very tick (tick == entry tick) → skip.
  2. tick - entry tick > duration → one Bernoulli(p_death) draw:
     success → DEAD, failure → RECOVERED.
  3. Otherwise → every SUSCEPTIBLE agent in the same cell becomes INFECTED,
     in the cell's occupancy order.

Visibility policy: updates are applied immediately (no snapshot). This is
equivalent to reading pre-tick compartments, because an agent infected
earlier in the pass carries this tick as its entry tick and is skipped by
rule 1, and a recovering or dying agent changes only its own row. Only the
order of the death draws depends on iteration order.

The pass reads positions through the spatial index, so it must run before
the movement pass of the same tick.
"""

from __future__ import annotations

import numpy as np

from .spatial import SpatialIndex
from .types import Agent, Compartment, TransitionEvents


def update_compartments(
    agents: np.ndarray,
    index: SpatialIndex,
    tick: int,
    duration: int,
    p_death: float,
    rng: np.random.Generator,
) -> TransitionEvents:
    """Apply one transition pass over the whole population (in-place).

    Args:
        agents: Structured array with AGENT_DTYPE fields.
        index: Spatial index built from the agents' current positions.
        tick: Current tick (already incremented for this step).
        duration: Infectious duration D in ticks.
        p_death: Probability of death when the infectious window ends.
        rng: NumPy random generator.

    Returns:
        TransitionEvents tally for this pass.
    """
    events = TransitionEvents()
    compartment = agents['compartment']

    # Infected set is fixed before the pass; agents infected during it wait.
    for i in np.flatnonzero(compartment == Compartment.INFECTED).tolist():
        agent = Agent(agents, i)
        entered = agent.last_transition_tick
        if entered == tick:
            continue

        if tick - entered > duration:
            if rng.random() < p_death:
                agent.die(tick)
                events.deaths += 1
            else:
                agent.recover(tick)
                events.recoveries += 1
            continue

        for j in index.occupants(agent.position):
            if compartment[j] == Compartment.SUSCEPTIBLE:
                Agent(agents, j).infect(tick)
                events.infections += 1

    return events
