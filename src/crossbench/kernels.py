"""
kernels.py - Interpreted and vectorised implementations of the benchmarked
computations

Three quantities are benchmarked, each implemented several ways:

    sum           - sum of all elements
    branch count  - +1 for every element below the threshold, -1 otherwise
    parity count  - walk indices 1..N, +1 on odd, -1 on even (data unused)

The pure-Python versions deliberately use explicit loops so the interpreter
does the per-element work. The numpy versions push the same work into
compiled inner loops. Native C counterparts live in native/templates/.

Every function takes the shared buffer and returns a Python scalar; on an
empty buffer sums return 0.0 and counts return 0.
"""

import numpy as np

from crossbench.core.constants import BRANCH_THRESHOLD


# =============================================================================
# SUM
# =============================================================================

def python_builtin_sum(X):
    """Built-in ``sum`` over the element iterator."""
    return float(sum(X.flat, 0.0))


def python_loop_sum(X):
    """Hand-written accumulation loop."""
    s = 0.0
    for a in X.flat:
        s += a
    return float(s)


def numpy_sum(X):
    """Pairwise summation in numpy's C loop."""
    return float(np.sum(X))


def numpy_einsum(X):
    """Full contraction via einsum, which dispatches to SIMD kernels."""
    return float(np.einsum("i->", X.ravel()))


# =============================================================================
# BRANCH COUNT
# =============================================================================

def python_ternary(V, threshold=BRANCH_THRESHOLD):
    ret = 0
    for v in V.flat:
        ret = ret + 1 if v < threshold else ret - 1
    return ret


def python_conditional(V, threshold=BRANCH_THRESHOLD):
    ret = 0
    for v in V.flat:
        if v < threshold:
            ret += 1
        else:
            ret -= 1
    return ret


def numpy_where(V, threshold=BRANCH_THRESHOLD):
    """Branch-free select and reduce."""
    return int(np.where(V < threshold, 1, -1).sum())


# =============================================================================
# PARITY COUNT (loop bound)
# =============================================================================

def python_length_bound(X):
    """Loop bound re-evaluated with ``len()`` on every pass."""
    s = 0
    i = 1
    while i <= len(X):
        s = s + 1 if (i % 2) > 0 else s - 1
        i += 1
    return s


def python_declared_bound(X):
    """Loop bound read once into a local before the loop."""
    s = 0
    N = len(X)
    i = 1
    while i <= N:
        s = s + 1 if (i % 2) > 0 else s - 1
        i += 1
    return s


def numpy_parity(X):
    """Vectorised parity walk over the index range 1..N."""
    i = np.arange(1, len(X) + 1)
    return int(np.where(i % 2 > 0, 1, -1).sum())
