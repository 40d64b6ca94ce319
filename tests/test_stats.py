"""Tests for grid_sird.stats — census and time-series recorder."""

import numpy as np
import pytest

from grid_sird.stats import StatisticsRecorder, count_compartments
from grid_sird.types import AggregateCounts, Compartment, TransitionEvents, allocate_agents


class TestCountCompartments:
    def test_counts(self):
        agents = allocate_agents(10)
        agents['compartment'][:3] = Compartment.INFECTED
        agents['compartment'][3:5] = Compartment.RECOVERED
        agents['compartment'][9] = Compartment.DEAD
        counts = count_compartments(agents)
        assert counts == AggregateCounts(4, 3, 2, 1)
        assert counts.total == 10

    def test_returns_python_ints(self):
        counts = count_compartments(allocate_agents(3))
        assert all(type(c) is int for c in counts)

    def test_empty_population(self):
        assert count_compartments(allocate_agents(0)) == (0, 0, 0, 0)


@pytest.fixture
def recorder():
    rec = StatisticsRecorder()
    rec.record(AggregateCounts(8, 2, 0, 0))
    rec.record(AggregateCounts(5, 5, 0, 0), TransitionEvents(infections=3))
    rec.record(AggregateCounts(3, 5, 1, 1), TransitionEvents(infections=2, recoveries=1, deaths=1))
    rec.record(AggregateCounts(3, 0, 5, 2), TransitionEvents(recoveries=4, deaths=1))
    return rec


class TestStatisticsRecorder:
    def test_len_and_latest(self, recorder):
        assert len(recorder) == 4
        assert recorder.latest == (3, 0, 5, 2)

    def test_latest_empty_raises(self):
        with pytest.raises(IndexError):
            StatisticsRecorder().latest

    def test_incidence(self, recorder):
        assert recorder.incidence == [0, 3, 2, 0]

    def test_to_arrays(self, recorder):
        arrays = recorder.to_arrays()
        assert set(arrays) == {'tick', 'susceptible', 'infected', 'recovered', 'dead'}
        np.testing.assert_array_equal(arrays['tick'], [0, 1, 2, 3])
        np.testing.assert_array_equal(arrays['susceptible'], [8, 5, 3, 3])
        np.testing.assert_array_equal(arrays['infected'], [2, 5, 5, 0])
        np.testing.assert_array_equal(arrays['recovered'], [0, 0, 1, 5])
        np.testing.assert_array_equal(arrays['dead'], [0, 0, 1, 2])

    def test_to_arrays_empty(self):
        arrays = StatisticsRecorder().to_arrays()
        assert len(arrays['tick']) == 0
        assert len(arrays['infected']) == 0

    def test_peak(self, recorder):
        assert recorder.peak_infected == 5
        assert recorder.peak_tick == 1   # first of the tied maxima

    def test_final_size_and_attack_rate(self, recorder):
        assert recorder.final_size == 7
        assert recorder.attack_rate == pytest.approx(0.7)

    def test_summaries_when_empty(self):
        rec = StatisticsRecorder()
        assert rec.peak_infected == 0
        assert rec.peak_tick == 0
        assert rec.final_size == 0
        assert rec.attack_rate == 0.0

    def test_attack_rate_zero_population(self):
        rec = StatisticsRecorder()
        rec.record(AggregateCounts(0, 0, 0, 0))
        assert rec.attack_rate == 0.0
