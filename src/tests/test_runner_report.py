"""
===============================================================================
CROSSBENCH - Runner and Report Test Suite
===============================================================================
Tests for the trial policies of BenchmarkRunner (fixed, adaptive, warm-up),
the TimingStats reduction, and the report printer: sorted fixed-width
tables, trial summaries, DataFrame export and result files.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pandas as pd
import pytest

from crossbench.core.config import RunnerConfig
from crossbench.performance.report import (
    format_table, format_trial, minimum_ms, save_results, sort_results,
    to_dataframe,
)
from crossbench.performance.runner import BenchmarkRunner, TimingStats


class Counter:
    """Callable that counts its invocations."""

    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.calls


def make_stats(*samples):
    return TimingStats.from_samples(list(samples))


# =============================================================================
# TimingStats
# =============================================================================

class TestTimingStats:

    def test_from_samples(self):
        stats = make_stats(0.003, 0.001, 0.002)
        assert stats.min == 0.001
        assert stats.max == 0.003
        assert stats.median == 0.002
        assert stats.mean == pytest.approx(0.002)
        assert stats.num_runs == 3
        assert stats.minimum_ms == pytest.approx(1.0)

    def test_single_sample_has_zero_std(self):
        assert make_stats(0.5).std == 0.0

    def test_no_samples_raises(self):
        with pytest.raises(ValueError):
            TimingStats.from_samples([])

    def test_to_dict_keys(self):
        keys = set(make_stats(0.1, 0.2).to_dict())
        assert keys == {"min", "max", "mean", "median", "std", "total", "num_runs"}


# =============================================================================
# BenchmarkRunner
# =============================================================================

class TestFixedPolicy:

    def test_exact_trial_count(self):
        thunk = Counter()
        stats = BenchmarkRunner(num_runs=5, warmup=0).run(thunk)
        assert stats.num_runs == 5
        assert thunk.calls == 5

    def test_warmup_calls_excluded(self):
        thunk = Counter()
        stats = BenchmarkRunner(num_runs=5, warmup=2).run(thunk)
        assert thunk.calls == 7
        assert stats.num_runs == 5
        assert len(stats.samples) == 5

    def test_times_are_non_negative(self):
        stats = BenchmarkRunner(num_runs=20).run(lambda: sum(range(100)))
        assert stats.min >= 0.0
        assert all(s >= 0.0 for s in stats.samples)
        assert stats.min <= stats.median <= stats.max


class TestAdaptivePolicy:

    def test_stops_at_max_runs(self):
        thunk = Counter()
        runner = BenchmarkRunner(max_seconds=60.0, max_runs=4, warmup=0)
        assert runner.adaptive
        assert runner.run(thunk).num_runs == 4

    def test_min_runs_honoured_when_budget_exhausted(self):
        runner = BenchmarkRunner(max_seconds=1e-9, min_runs=3, warmup=0)
        assert runner.run(lambda: sum(range(1000))).num_runs == 3

    def test_budget_limits_sample_count(self):
        runner = BenchmarkRunner(max_seconds=0.05, max_runs=10_000_000, warmup=0)
        stats = runner.run(lambda: sum(range(10_000)))
        assert stats.num_runs < 10_000_000
        assert stats.total >= 0.05


class TestRunnerValidation:

    @pytest.mark.parametrize("kwargs", [
        {"num_runs": 0},
        {"max_seconds": 0.0},
        {"min_runs": 0},
        {"min_runs": 5, "max_runs": 2},
        {"warmup": -1},
    ])
    def test_invalid_policy_raises(self, kwargs):
        with pytest.raises(ValueError):
            BenchmarkRunner(**kwargs)

    def test_from_config(self):
        runner = BenchmarkRunner.from_config(RunnerConfig(num_runs=3, warmup=0))
        assert runner.num_runs == 3
        assert runner.warmup == 0


class TestRunAll:

    def test_results_in_insertion_order(self):
        runner = BenchmarkRunner(num_runs=2)
        results = runner.run_all({"b": Counter(), "a": Counter(), "c": Counter()})
        assert list(results) == ["b", "a", "c"]
        assert all(isinstance(s, TimingStats) for s in results.values())

    def test_larger_input_is_not_faster(self):
        """A pure-Python loop over 1000x the data has a larger minimum."""
        small = np.random.default_rng(0).random(100)
        large = np.random.default_rng(0).random(100_000)

        def loop(x):
            s = 0.0
            for v in x:
                s += v
            return s

        runner = BenchmarkRunner(num_runs=3)
        assert runner.run(lambda: loop(small)).min < runner.run(lambda: loop(large)).min

    def test_time_function_returns_dict(self):
        stats = BenchmarkRunner.time_function(sorted, [3, 1, 2], num_runs=7)
        assert stats["num_runs"] == 7
        assert stats["min"] >= 0.0


# =============================================================================
# Report printer
# =============================================================================

class TestFormatTable:

    def test_rows_sorted_ascending(self):
        table = format_table({"slow": 3.0, "fast": 1.0, "medium": 2.0})
        names = [line.split(".")[0] for line in table.splitlines()]
        assert names == ["fast", "medium", "slow"]

    def test_fixed_width_padding(self):
        line = format_table({"C -O3": 1.23456789})
        assert line == "C -O3" + "." * 20 + "." * 5 + "1.2346"
        assert len(line) == 25 + 11

    def test_title_line(self):
        table = format_table({"a": 1.0}, title="Column sum results")
        assert table.splitlines()[0] == "Column sum results"

    def test_ties_keep_insertion_order(self):
        mapping = {"b": 1.0, "a": 1.0, "c": 0.5}
        assert [name for name, _ in sort_results(mapping)] == ["c", "b", "a"]

    def test_repeatable(self):
        mapping = {"x": 2.0, "y": 2.0, "z": 1.0, "w": 3.0}
        assert format_table(mapping) == format_table(mapping)

    def test_empty_mapping(self):
        assert format_table({}) == ""

    def test_minimum_ms(self):
        assert minimum_ms({"a": make_stats(0.002, 0.004)}) == {"a": pytest.approx(2.0)}


class TestFormatTrial:

    def test_contains_statistics(self):
        text = format_trial("Python ternary", make_stats(0.001, 0.003))
        assert text.splitlines()[0] == "Trial: Python ternary"
        assert "samples:          2" in text
        assert "minimum time:     1.0000 ms" in text
        assert "maximum time:     3.0000 ms" in text


class TestResultFiles:

    @pytest.fixture
    def sections(self):
        return {
            "Column sum results": {
                "numpy sum": make_stats(0.002, 0.003),
                "C -Ofast": make_stats(0.001, 0.002),
            },
            "Row sum results": {
                "numpy sum": make_stats(0.004),
            },
        }

    def test_to_dataframe(self, sections):
        df = to_dataframe(sections)
        assert isinstance(df, pd.DataFrame)
        assert list(df.index.names) == ["section", "variant"]
        assert len(df) == 3
        column = df.loc["Column sum results"]
        assert list(column.index) == ["C -Ofast", "numpy sum"]
        assert column.loc["C -Ofast", "min_ms"] == pytest.approx(1.0)
        assert column.loc["numpy sum", "num_runs"] == 2

    def test_save_results(self, sections, tmp_path):
        written = save_results(sections, str(tmp_path), prefix="sum_")
        names = sorted(os.path.basename(p) for p in written)
        assert names == ["sum_column_sum_results.png", "sum_results.csv",
                         "sum_row_sum_results.png"]
        for path in written:
            assert os.path.getsize(path) > 0
        df = pd.read_csv(tmp_path / "sum_results.csv", index_col=[0, 1])
        assert len(df) == 3
