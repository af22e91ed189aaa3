"""
base.py - Shared plumbing of the benchmark scenarios

Every scenario follows the same linear pipeline per report section:

    buffer -> equivalence check -> BenchmarkRunner (once per variant)
           -> sorted console table

Each section collects its timings into a freshly built mapping, so a second
section can never report a stale entry from the first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np

from crossbench.core.constants import DEFAULT_REL_TOL
from crossbench.performance.report import format_table, format_trial, minimum_ms
from crossbench.performance.runner import BenchmarkRunner, TimingStats
from crossbench.variants import EquivalenceReport, VariantSet

logger = logging.getLogger(__name__)


@dataclass
class ScenarioResult:
    """Everything one scenario measured, keyed by report section title."""
    name: str
    sections: Dict[str, Dict[str, TimingStats]] = field(default_factory=dict)
    equivalence: Dict[str, EquivalenceReport] = field(default_factory=dict)

    def table(self, section: str) -> str:
        return format_table(minimum_ms(self.sections[section]), title=section)


def run_section(
    result: ScenarioResult,
    title: str,
    variants: VariantSet,
    buffer: np.ndarray,
    runner: BenchmarkRunner,
    reference: Optional[str] = None,
    rel_tol: float = DEFAULT_REL_TOL,
    show_trials: bool = False,
) -> Dict[str, TimingStats]:
    """
    Check, time and print one report section, storing it in *result*.

    Returns
    -------
    dict
        ``{variant name: TimingStats}`` for this section only.
    """
    logger.info("%s: %d variants on %d elements", title, len(variants), buffer.size)

    report = variants.check_equivalence(buffer, reference=reference, rel_tol=rel_tol)
    result.equivalence[title] = report
    print()
    for line in report.lines():
        print(line)

    timings = runner.run_all(variants.bind(buffer))
    result.sections[title] = timings

    if show_trials:
        for name, stats in timings.items():
            print()
            print(format_trial(name, stats))
    print()
    print(result.table(title))
    return timings
