"""
variants.py - Named implementations of one computation

A VariantSet groups every implementation of a single quantity (a sum, a
branch count, ...) under a human-readable name. Pure-Python functions,
numpy calls and ForeignCallables are wrapped the same way, so the runner
and the equivalence check never need to know which language does the work.

All variants of a set must agree on their result for the same input. A
disagreement is a bug in the benchmark itself, so it is logged and shown in
the console output, but it does not stop the run.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional

import numpy as np

from crossbench.core.constants import DEFAULT_ABS_TOL, DEFAULT_REL_TOL

logger = logging.getLogger(__name__)

KINDS = ("python", "numpy", "native")


@dataclass(frozen=True)
class Variant:
    """One named way of computing a quantity from the shared buffer."""
    name: str
    func: Callable[[np.ndarray], Any]
    kind: str = "python"

    def __call__(self, buffer: np.ndarray) -> Any:
        return self.func(buffer)


@dataclass
class EquivalenceReport:
    """Outcome of evaluating every variant once on the same buffer."""
    reference: str
    reference_value: Any
    values: Dict[str, Any] = field(default_factory=dict)
    matches: Dict[str, bool] = field(default_factory=dict)

    @property
    def all_match(self) -> bool:
        return all(self.matches.values())

    @property
    def mismatches(self) -> List[str]:
        return [name for name, ok in self.matches.items() if not ok]

    def lines(self) -> List[str]:
        """One ``Is X similar to Y? <bool>`` line per non-reference variant."""
        return [
            f"Is {name} similar to {self.reference}? {ok}"
            for name, ok in self.matches.items()
            if name != self.reference
        ]


def results_agree(a: Any, b: Any, rel_tol: float = DEFAULT_REL_TOL,
                  abs_tol: float = DEFAULT_ABS_TOL) -> bool:
    """Integers must match exactly; floats within the given tolerances."""
    if isinstance(a, (int, np.integer)) and isinstance(b, (int, np.integer)):
        return int(a) == int(b)
    return math.isclose(float(a), float(b), rel_tol=rel_tol, abs_tol=abs_tol)


class VariantSet:
    """
    Ordered collection of variants of a single quantity.

    Parameters
    ----------
    quantity : str
        What every member computes, e.g. ``"sum"``.
    """

    def __init__(self, quantity: str):
        self.quantity = quantity
        self._variants: Dict[str, Variant] = {}

    def add(self, name: str, func: Callable[[np.ndarray], Any], kind: str = "python") -> Variant:
        """Register a variant. Names must be unique within the set."""
        if name in self._variants:
            raise ValueError(f"Duplicate variant name: {name!r}")
        if kind not in KINDS:
            raise ValueError(f"Unknown variant kind: {kind}. Valid: {list(KINDS)}")
        variant = Variant(name, func, kind)
        self._variants[name] = variant
        return variant

    def __iter__(self) -> Iterator[Variant]:
        return iter(self._variants.values())

    def __len__(self) -> int:
        return len(self._variants)

    def __contains__(self, name: str) -> bool:
        return name in self._variants

    def __getitem__(self, name: str) -> Variant:
        return self._variants[name]

    @property
    def names(self) -> List[str]:
        return list(self._variants)

    def bind(self, buffer: np.ndarray) -> Dict[str, Callable[[], Any]]:
        """Zero-argument thunks, each calling one variant on *buffer*."""
        return {v.name: (lambda v=v: v.func(buffer)) for v in self}

    def evaluate(self, buffer: np.ndarray) -> Dict[str, Any]:
        return {v.name: v(buffer) for v in self}

    def check_equivalence(
        self,
        buffer: np.ndarray,
        reference: Optional[str] = None,
        rel_tol: float = DEFAULT_REL_TOL,
        abs_tol: float = DEFAULT_ABS_TOL,
    ) -> EquivalenceReport:
        """
        Compare every variant's result with the reference variant.

        Parameters
        ----------
        reference : str, optional
            Name of the reference variant; defaults to the first one added.

        Returns
        -------
        EquivalenceReport
            Mismatches are logged as warnings, never raised.
        """
        if not self._variants:
            raise ValueError(f"Variant set {self.quantity!r} is empty")
        reference = reference or self.names[0]
        if reference not in self._variants:
            raise KeyError(f"Unknown reference variant: {reference}")

        values = self.evaluate(buffer)
        ref_value = values[reference]
        report = EquivalenceReport(reference=reference, reference_value=ref_value,
                                   values=values)
        for name, value in values.items():
            ok = results_agree(value, ref_value, rel_tol=rel_tol, abs_tol=abs_tol)
            report.matches[name] = ok
            if not ok:
                logger.warning("%s: %s returned %r, %s returned %r",
                               self.quantity, name, value, reference, ref_value)
        return report
