"""
Shared input buffers for the benchmark scenarios.

Every variant in one report section reads the same buffer, so comparisons
are made on identical data. Buffers are C-contiguous float64 arrays (the
layout the ctypes bridge passes by address) and are frozen read-only once
generated.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)

SHAPES = (None, "column", "row")


class InputGenerator:
    """
    Produces fixed-size arrays of uniform random values in [0, 1).

    Parameters
    ----------
    seed : int, optional
        Seed for ``numpy.random.default_rng``; ``None`` draws fresh entropy.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def uniform(self, n: int, shape: Optional[str] = None) -> np.ndarray:
        """
        Generate *n* uniformly distributed float64 values.

        Parameters
        ----------
        n : int
            Number of elements (0 yields an empty buffer).
        shape : {None, "column", "row"}
            ``None`` -> (n,), ``"column"`` -> (n, 1), ``"row"`` -> (1, n).

        Returns
        -------
        np.ndarray
            Read-only, C-contiguous float64 array.
        """
        if n < 0:
            raise ValueError(f"Input length must be non-negative, got {n}")
        if shape not in SHAPES:
            raise ValueError(f"Unknown shape {shape!r}. Valid: {list(SHAPES)}")

        data = self._rng.random(n, dtype=np.float64)
        if shape == "column":
            data = data.reshape(n, 1)
        elif shape == "row":
            data = data.reshape(1, n)

        data = np.ascontiguousarray(data)
        data.flags.writeable = False
        logger.debug("Generated %s buffer of %d elements", shape or "flat", n)
        return data
