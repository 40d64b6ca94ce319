"""Per-tick compartment census and the run's time series."""

from __future__ import annotations

from typing import Dict, List, Optional

import numpy as np

from .types import N_COMPARTMENTS, AggregateCounts, TransitionEvents


def count_compartments(agents: np.ndarray) -> AggregateCounts:
    """Count agents per compartment. Fields sum to len(agents)."""
    counts = np.bincount(agents['compartment'], minlength=N_COMPARTMENTS)
    return AggregateCounts(*(int(c) for c in counts[:N_COMPARTMENTS]))


class StatisticsRecorder:
    """Accumulates one AggregateCounts per tick, starting at tick 0.

    Also keeps the per-tick number of new infections (incidence), which
    cannot be recovered from the counts alone once deaths and recoveries
    overlap with new infections in the same tick.
    """

    def __init__(self) -> None:
        self.series: List[AggregateCounts] = []
        self.incidence: List[int] = []

    def __len__(self) -> int:
        return len(self.series)

    def record(
        self,
        counts: AggregateCounts,
        events: Optional[TransitionEvents] = None,
    ) -> None:
        self.series.append(counts)
        self.incidence.append(events.infections if events is not None else 0)

    @property
    def latest(self) -> AggregateCounts:
        if not self.series:
            raise IndexError("No statistics recorded yet")
        return self.series[-1]

    def to_arrays(self) -> Dict[str, np.ndarray]:
        """Struct-of-arrays view of the series, one int array per field."""
        table = np.array(self.series, dtype=np.int64).reshape(-1, N_COMPARTMENTS)
        arrays = {'tick': np.arange(len(self.series), dtype=np.int64)}
        for col, name in enumerate(AggregateCounts._fields):
            arrays[name] = table[:, col]
        return arrays

    # ── Summaries ──────────────────────────────────────────────────────

    @property
    def peak_infected(self) -> int:
        return max((c.infected for c in self.series), default=0)

    @property
    def peak_tick(self) -> int:
        """First tick at which the infected count peaked."""
        if not self.series:
            return 0
        return int(np.argmax([c.infected for c in self.series]))

    @property
    def final_size(self) -> int:
        """Agents ever infected (N minus final susceptibles)."""
        if not self.series:
            return 0
        last = self.latest
        return last.total - last.susceptible

    @property
    def attack_rate(self) -> float:
        """Fraction of the population ever infected."""
        if not self.series or self.latest.total == 0:
            return 0.0
        return self.final_size / self.latest.total
