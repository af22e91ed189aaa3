"""
report.py - Console tables, trial summaries and result files

The console table is the primary output: one row per variant, sorted
ascending by its minimum time in milliseconds, with the name padded on the
right and the value padded on the left by a fill character:

    C -Ofast......................1.2345
    numpy sum.....................2.9876
    Python user-defined.........812.0012

Sorting is stable, so variants with equal times keep their insertion order
and the same mapping always prints the same table.

For offline analysis the collected statistics can also be turned into a
pandas DataFrame, written to CSV and plotted as bar charts.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, List, Mapping, Optional

import numpy as np
import pandas as pd
import matplotlib

matplotlib.use("Agg")  # Non-interactive backend for server / CI environments
import matplotlib.pyplot as plt

from crossbench.core.constants import (
    REPORT_DIGITS, REPORT_FILL, REPORT_NAME_WIDTH, REPORT_VALUE_WIDTH, SEC2MS,
)
from crossbench.performance.runner import TimingStats

logger = logging.getLogger(__name__)

Sections = Mapping[str, Mapping[str, TimingStats]]


# ---------------------------------------------------------------------------
# Console output
# ---------------------------------------------------------------------------

def minimum_ms(results: Mapping[str, TimingStats]) -> Dict[str, float]:
    """Reduce ``{variant: TimingStats}`` to ``{variant: minimum in ms}``."""
    return {name: stats.minimum_ms for name, stats in results.items()}


def sort_results(mapping: Mapping[str, float]) -> List[tuple]:
    """Rows ascending by value; ties keep insertion order."""
    return sorted(mapping.items(), key=lambda item: item[1])


def format_table(
    mapping: Mapping[str, float],
    title: Optional[str] = None,
    name_width: int = REPORT_NAME_WIDTH,
    value_width: int = REPORT_VALUE_WIDTH,
    digits: int = REPORT_DIGITS,
    fill: str = REPORT_FILL,
) -> str:
    """
    Render ``{name: value}`` as a fixed-width table sorted by value.

    Parameters
    ----------
    mapping : mapping of str -> float
        Statistic per variant (milliseconds by convention).
    title : str, optional
        Heading line printed above the rows.

    Returns
    -------
    str
        The table, one row per line, without a trailing newline.
    """
    lines = [title] if title else []
    for name, value in sort_results(mapping):
        lines.append(
            str(name).ljust(name_width, fill)
            + str(round(float(value), digits)).rjust(value_width, fill)
        )
    return "\n".join(lines)


def print_table(mapping: Mapping[str, float], title: Optional[str] = None, **kwargs) -> None:
    print(format_table(mapping, title=title, **kwargs))


def format_trial(name: str, stats: TimingStats, digits: int = REPORT_DIGITS) -> str:
    """Multi-line summary of all trials of one variant."""
    def ms(seconds: float) -> str:
        return f"{seconds * SEC2MS:.{digits}f} ms"

    return "\n".join([
        f"Trial: {name}",
        f"  samples:          {stats.num_runs}",
        f"  minimum time:     {ms(stats.min)}",
        f"  median time:      {ms(stats.median)}",
        f"  mean time:        {ms(stats.mean)} (+/- {ms(stats.std)})",
        f"  maximum time:     {ms(stats.max)}",
    ])


def print_trial(name: str, stats: TimingStats) -> None:
    print(format_trial(name, stats))


# ---------------------------------------------------------------------------
# Tabular / file output
# ---------------------------------------------------------------------------

def to_dataframe(sections: Sections) -> pd.DataFrame:
    """
    Flatten ``{section: {variant: TimingStats}}`` into a DataFrame.

    The index is (section, variant); columns are min/median/mean/max/std in
    milliseconds plus the trial count. Rows within a section are sorted by
    ``min_ms``.
    """
    rows = []
    for section, results in sections.items():
        for variant, _ in sort_results(
            {name: s.min for name, s in results.items()}
        ):
            s = results[variant]
            rows.append({
                "section": section,
                "variant": variant,
                "min_ms": s.min * SEC2MS,
                "median_ms": s.median * SEC2MS,
                "mean_ms": s.mean * SEC2MS,
                "max_ms": s.max * SEC2MS,
                "std_ms": s.std * SEC2MS,
                "num_runs": s.num_runs,
            })
    columns = ["section", "variant", "min_ms", "median_ms", "mean_ms",
               "max_ms", "std_ms", "num_runs"]
    return pd.DataFrame(rows, columns=columns).set_index(["section", "variant"])


def _slug(text: str) -> str:
    return "".join(c if c.isalnum() else "_" for c in text.lower()).strip("_")


def save_results(sections: Sections, output_dir: str, prefix: str = "") -> List[str]:
    """
    Write ``<prefix>results.csv`` and one bar chart per section.

    Returns
    -------
    list of str
        Paths of every file written.
    """
    os.makedirs(output_dir, exist_ok=True)
    written: List[str] = []

    df = to_dataframe(sections)
    csv_path = os.path.join(output_dir, f"{prefix}results.csv")
    df.to_csv(csv_path)
    written.append(csv_path)

    for section in sections:
        if section not in df.index.get_level_values(0):
            continue
        sub = df.loc[section]
        fig, ax = plt.subplots(figsize=(8, 0.5 * len(sub) + 1.5))
        y = np.arange(len(sub))
        ax.barh(y, sub["min_ms"], color="steelblue", edgecolor="black")
        ax.set_yticks(y)
        ax.set_yticklabels(sub.index)
        ax.invert_yaxis()
        ax.set_xlabel("Minimum time (ms)")
        ax.set_title(section)
        plt.tight_layout()
        png_path = os.path.join(output_dir, f"{prefix}{_slug(section)}.png")
        fig.savefig(png_path, dpi=150)
        plt.close(fig)
        written.append(png_path)

    logger.info("Results written to %s", os.path.abspath(output_dir))
    return written
