"""
runner.py - Timing harness for benchmark variants

Each variant arrives as a zero-argument thunk already bound to the shared
input buffer. The runner calls it repeatedly, records the wall-clock time of
every call with ``time.perf_counter`` and reduces the samples to summary
statistics. The headline figure is the **minimum**: scheduling noise,
interrupts and cache pollution only ever add time, so the fastest observed
trial is the best estimate of the algorithm's own cost.

Two trial policies are supported:

    fixed     - exactly ``num_runs`` timed calls
    adaptive  - keep calling until ``max_seconds`` of wall time has been
                spent or ``max_runs`` samples exist, never fewer than
                ``min_runs``

In both cases the first ``warmup`` calls are executed but not recorded, so
one-time costs (page faults on a fresh buffer, lazy symbol resolution,
instruction-cache warm-up) do not count against a variant.
"""

from __future__ import annotations

import logging
import statistics
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from crossbench.core.constants import (
    DEFAULT_MAX_RUNS, DEFAULT_MAX_SECONDS, DEFAULT_MIN_RUNS, DEFAULT_WARMUP,
    SEC2MS,
)

logger = logging.getLogger(__name__)


@dataclass
class TimingStats:
    """Summary of the timed trials of one variant. All times in seconds."""
    min: float
    max: float
    mean: float
    median: float
    std: float
    total: float
    num_runs: int
    samples: List[float] = field(default_factory=list, repr=False)

    @classmethod
    def from_samples(cls, samples: List[float]) -> "TimingStats":
        if not samples:
            raise ValueError("At least one timing sample is required")
        return cls(
            min=min(samples),
            max=max(samples),
            mean=statistics.mean(samples),
            median=statistics.median(samples),
            std=statistics.stdev(samples) if len(samples) > 1 else 0.0,
            total=sum(samples),
            num_runs=len(samples),
            samples=list(samples),
        )

    @property
    def minimum_ms(self) -> float:
        """Headline statistic in milliseconds."""
        return self.min * SEC2MS

    def to_dict(self) -> Dict[str, float]:
        return {
            "min": self.min,
            "max": self.max,
            "mean": self.mean,
            "median": self.median,
            "std": self.std,
            "total": self.total,
            "num_runs": self.num_runs,
        }


class BenchmarkRunner:
    """
    Repeatedly executes thunks and collects per-trial timings.

    Parameters
    ----------
    num_runs : int, optional
        Fixed number of timed trials. ``None`` selects the adaptive policy.
    max_seconds : float
        Wall-time budget of the adaptive policy (timed trials only).
    min_runs, max_runs : int
        Bounds on the adaptive sample count.
    warmup : int
        Untimed calls made before sampling starts.
    """

    def __init__(
        self,
        num_runs: Optional[int] = None,
        max_seconds: float = DEFAULT_MAX_SECONDS,
        min_runs: int = DEFAULT_MIN_RUNS,
        max_runs: int = DEFAULT_MAX_RUNS,
        warmup: int = DEFAULT_WARMUP,
    ):
        if num_runs is not None and num_runs < 1:
            raise ValueError(f"num_runs must be at least 1, got {num_runs}")
        if max_seconds <= 0:
            raise ValueError(f"max_seconds must be positive, got {max_seconds}")
        if min_runs < 1:
            raise ValueError(f"min_runs must be at least 1, got {min_runs}")
        if max_runs < min_runs:
            raise ValueError(f"max_runs ({max_runs}) is below min_runs ({min_runs})")
        if warmup < 0:
            raise ValueError(f"warmup must be non-negative, got {warmup}")

        self.num_runs = num_runs
        self.max_seconds = max_seconds
        self.min_runs = min_runs
        self.max_runs = max_runs
        self.warmup = warmup

    @classmethod
    def from_config(cls, runner_config) -> "BenchmarkRunner":
        """Build a runner from a :class:`crossbench.core.config.RunnerConfig`."""
        return cls(
            num_runs=runner_config.num_runs,
            max_seconds=runner_config.max_seconds,
            min_runs=runner_config.min_runs,
            max_runs=runner_config.max_runs,
            warmup=runner_config.warmup,
        )

    @property
    def adaptive(self) -> bool:
        return self.num_runs is None

    def _keep_going(self, n_samples: int, elapsed: float) -> bool:
        if not self.adaptive:
            return n_samples < self.num_runs
        if n_samples < self.min_runs:
            return True
        return n_samples < self.max_runs and elapsed < self.max_seconds

    def run(self, thunk: Callable[[], Any], name: str = "") -> TimingStats:
        """
        Time *thunk* under the configured policy.

        Return values are discarded; correctness is checked separately
        before timing starts.
        """
        for _ in range(self.warmup):
            thunk()

        samples: List[float] = []
        elapsed = 0.0
        while self._keep_going(len(samples), elapsed):
            t0 = time.perf_counter()
            thunk()
            t1 = time.perf_counter()
            samples.append(t1 - t0)
            elapsed += t1 - t0

        stats = TimingStats.from_samples(samples)
        logger.debug("%s: %d trials, min %.4f ms", name or "thunk",
                     stats.num_runs, stats.minimum_ms)
        return stats

    def run_all(self, thunks: Dict[str, Callable[[], Any]]) -> Dict[str, TimingStats]:
        """Time every thunk in order and return ``{name: TimingStats}``."""
        results: Dict[str, TimingStats] = {}
        for name, thunk in thunks.items():
            logger.info("Benchmarking %s", name)
            results[name] = self.run(thunk, name=name)
        return results

    @staticmethod
    def time_function(func: Callable, *args, num_runs: int = 100, **kwargs) -> Dict[str, float]:
        """
        Time *func* over *num_runs* invocations and return descriptive statistics.

        Returns
        -------
        dict with keys: min, max, mean, median, std, total, num_runs
            All times are in **seconds**.
        """
        runner = BenchmarkRunner(num_runs=num_runs, warmup=0)
        return runner.run(lambda: func(*args, **kwargs)).to_dict()
