"""Tests for grid_sird.experiments — replicates and the infectious-period sweep."""

import numpy as np
import pytest

from grid_sird import experiments
from grid_sird.config import ConfigurationError, SimulationConfig, SweepSection
from grid_sird.experiments import (
    SweepResult,
    fraction_infected,
    infectious_period_sweep,
    repeated_runs,
)
from grid_sird.rng import create_rng


@pytest.fixture
def config():
    return SimulationConfig(n_agents=40, initial_infected=2, duration=4,
                            p_death=0.1, width=6, height=6)


class TestFractionInfected:
    def test_in_unit_interval(self, config):
        frac = fraction_infected(config, rng=create_rng(0))
        assert 2 / 40 <= frac <= 1.0

    def test_everyone_infected_from_start(self):
        config = SimulationConfig(n_agents=10, initial_infected=10, duration=2,
                                  p_death=0.5, width=3, height=3)
        assert fraction_infected(config, rng=create_rng(0)) == 1.0

    def test_reproducible(self, config):
        assert (fraction_infected(config, rng=create_rng(5))
                == fraction_infected(config, rng=create_rng(5)))


class TestRepeatedRuns:
    def test_count_and_termination(self, config):
        results = repeated_runs(config, runs=3, master_seed=1)
        assert len(results) == 3
        for series in results:
            assert series[0] == (38, 2, 0, 0)
            assert series[-1].infected == 0

    def test_reproducible(self, config):
        assert repeated_runs(config, 2, master_seed=4) == repeated_runs(config, 2, master_seed=4)

    def test_invalid_runs(self, config):
        with pytest.raises(ConfigurationError):
            repeated_runs(config, 0)


class TestInfectiousPeriodSweep:
    def test_shapes(self, config):
        result = infectious_period_sweep(config, durations=[1, 3, 8], runs=2,
                                         master_seed=0)
        assert isinstance(result, SweepResult)
        np.testing.assert_array_equal(result.durations, [1, 3, 8])
        assert result.mean_fraction.shape == (3,)
        assert result.std_fraction.shape == (3,)
        assert result.fractions.shape == (3, 2)
        assert np.all((result.fractions >= 0.0) & (result.fractions <= 1.0))
        np.testing.assert_allclose(result.mean_fraction, result.fractions.mean(axis=1))

    def test_reproducible(self, config):
        a = infectious_period_sweep(config, durations=[2, 5], runs=2, master_seed=3)
        b = infectious_period_sweep(config, durations=[2, 5], runs=2, master_seed=3)
        np.testing.assert_array_equal(a.fractions, b.fractions)

    def test_uses_sweep_section(self, config):
        sweep = SweepSection(durations=[0, 2], runs=3, seed=8)
        result = infectious_period_sweep(config, sweep=sweep)
        np.testing.assert_array_equal(result.durations, [0, 2])
        assert result.fractions.shape == (2, 3)

    def test_omitted_seed_uses_sweep_seed(self, config):
        sweep = SweepSection(durations=[1, 4], runs=2, seed=8)
        implicit = infectious_period_sweep(config, sweep=sweep)
        explicit = infectious_period_sweep(config, sweep=sweep, master_seed=8)
        np.testing.assert_array_equal(implicit.fractions, explicit.fractions)

    def test_explicit_none_seed_draws_entropy(self, config, monkeypatch):
        seen = []
        real_spawn = experiments.spawn_rngs

        def recording_spawn(seed, n):
            seen.append(seed)
            return real_spawn(seed, n)

        monkeypatch.setattr(experiments, "spawn_rngs", recording_spawn)
        sweep = SweepSection(durations=[1], runs=2, seed=8)
        result = infectious_period_sweep(config, sweep=sweep, master_seed=None)
        assert seen == [None]
        assert result.fractions.shape == (1, 2)

    def test_longer_window_infects_more(self):
        """Crowded grid: a long infectious window reaches most of the population."""
        config = SimulationConfig(n_agents=200, initial_infected=5, duration=1,
                                  p_death=0.0, width=5, height=5)
        result = infectious_period_sweep(config, durations=[0, 20], runs=3,
                                         master_seed=11)
        assert result.mean_fraction[1] > result.mean_fraction[0]
        assert result.mean_fraction[1] > 0.9

    def test_rejects_empty_durations(self, config):
        with pytest.raises(ConfigurationError):
            infectious_period_sweep(config, durations=[], runs=2)

    def test_rejects_invalid_duration(self, config):
        with pytest.raises(ConfigurationError):
            infectious_period_sweep(config, durations=[-1], runs=1)
