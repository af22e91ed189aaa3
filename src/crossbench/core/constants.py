"""
===============================================================================
CROSSBENCH - Defaults and Unit Conversions
===============================================================================
Central repository for the default values used throughout the benchmark
harness. Times are measured in seconds internally and reported in
milliseconds.
===============================================================================
"""

import platform
import sys


# =============================================================================
# UNIT CONVERSIONS
# =============================================================================
SEC2MS = 1.0e3
SEC2US = 1.0e6
SEC2NS = 1.0e9

# =============================================================================
# INPUT DATA
# =============================================================================
DEFAULT_SIZE = 10 ** 7                 # elements per input buffer
BRANCH_THRESHOLD = 0.5                 # split point of the +1/-1 count

# =============================================================================
# BENCHMARK RUNNER
# =============================================================================
DEFAULT_MAX_SECONDS = 5.0              # adaptive time budget per variant [s]
DEFAULT_MIN_RUNS = 1
DEFAULT_MAX_RUNS = 10_000
DEFAULT_WARMUP = 1                     # first call excluded from statistics

# =============================================================================
# EQUIVALENCE CHECK
# =============================================================================
DEFAULT_REL_TOL = 1.0e-9
DEFAULT_ABS_TOL = 0.0

# =============================================================================
# NATIVE TOOLCHAIN
# =============================================================================
COMPILER_CANDIDATES = ("gcc", "cc", "clang")
BASE_FLAGS = ("-fPIC", "-shared", "-xc")
X86_FLAGS = ("-msse3",)
X86_MACHINES = ("x86_64", "amd64", "i386", "i686")

# Optimisation levels compared by the summation scenario.
OPT_LEVELS = {
    "C no flags": (),
    "C -O3": ("-O3",),
    "C -Ofast": ("-Ofast",),
}

TEMPLATE_HEADER_PREFIX = "crossbench-template:"

# =============================================================================
# REPORT LAYOUT
# =============================================================================
REPORT_NAME_WIDTH = 25
REPORT_VALUE_WIDTH = 11
REPORT_DIGITS = 4
REPORT_FILL = "."


def shared_library_suffix() -> str:
    """
    File suffix of a dynamically loadable library on this platform.

    Returns:
        '.dll' on Windows, '.dylib' on macOS, '.so' elsewhere
    """
    if sys.platform.startswith("win"):
        return ".dll"
    if sys.platform == "darwin":
        return ".dylib"
    return ".so"


def default_base_flags() -> tuple:
    """Compiler flags shared by every build; SSE3 is only requested on x86."""
    if platform.machine().lower() in X86_MACHINES:
        return BASE_FLAGS + X86_FLAGS
    return BASE_FLAGS
