#!/usr/bin/env python3
"""
===============================================================================
CROSSBENCH - MAIN ENTRY POINT
===============================================================================
Runs the cross-language micro-benchmarks: pure Python vs numpy vs C compiled
at run time and called through ctypes.

USAGE:
    crossbench                        # All scenarios
    crossbench sum                    # Column / row summation only
    crossbench branch loop-bound      # Several scenarios, in registry order
    crossbench --size 100000          # Smaller buffers for a quick run
    crossbench --num-runs 10          # Fixed trial count instead of a budget
    crossbench --no-native            # Skip the C variants
    crossbench --output-dir results   # Also write CSV and bar charts

OUTPUTS:
    stdout                 - Equivalence checks and sorted timing tables (ms)
    <output-dir>/*.csv     - Timing statistics per scenario and section
    <output-dir>/*.png     - Minimum-time bar chart per section

DEPENDENCIES:
    numpy, pandas, matplotlib, pyyaml, and a C compiler (gcc / cc / clang)
===============================================================================
"""

import argparse
import logging
import sys
import time
from datetime import datetime
from typing import List, Optional

from crossbench.core.config import BenchConfig, load_config, validate_config
from crossbench.core.inputs import InputGenerator
from crossbench.native.compiler import NativeCompiler
from crossbench.native.errors import BindingError, BuildError
from crossbench.performance.report import save_results
from crossbench.performance.runner import BenchmarkRunner
from crossbench.scenarios import SCENARIOS

logger = logging.getLogger("crossbench")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure root logging for a command-line run."""
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT,
                        handlers=[logging.StreamHandler(sys.stderr)])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crossbench",
        description="Micro-benchmarks: Python vs numpy vs run-time compiled C",
    )
    parser.add_argument("scenarios", nargs="*", metavar="SCENARIO",
                        help=f"Scenarios to run (default: all of {', '.join(SCENARIOS)})")
    parser.add_argument("--config", type=str, default=None,
                        help="Path to benchmark config YAML")
    parser.add_argument("--size", type=int, default=None,
                        help="Elements per input buffer (overrides every scenario)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed for the input buffers")
    parser.add_argument("--num-runs", type=int, default=None,
                        help="Fixed number of timed trials per variant")
    parser.add_argument("--max-seconds", type=float, default=None,
                        help="Time budget per variant for the adaptive policy")
    parser.add_argument("--cc", type=str, default=None,
                        help="C compiler executable")
    parser.add_argument("--no-native", action="store_true",
                        help="Skip the compiled C variants")
    parser.add_argument("--output-dir", type=str, default=None,
                        help="Write CSV results and plots to this directory")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    group.add_argument("-q", "--quiet", action="store_true", help="Warnings only")
    return parser


def apply_overrides(config: BenchConfig, args: argparse.Namespace) -> BenchConfig:
    """Layer command-line flags over the loaded configuration."""
    if args.size is not None:
        config.size = args.size
        config.sizes = {}
    if args.seed is not None:
        config.seed = args.seed
    if args.num_runs is not None:
        config.runner.num_runs = args.num_runs
    if args.max_seconds is not None:
        config.runner.max_seconds = args.max_seconds
    if args.cc is not None:
        config.compiler.cc = args.cc
    if args.output_dir is not None:
        config.output_dir = args.output_dir
    validate_config(config)
    return config


def run_benchmarks(config: BenchConfig, names: List[str], native: bool = True) -> dict:
    """
    Run the named scenarios in registry order.

    Returns
    -------
    dict mapping scenario name -> ScenarioResult
    """
    runner = BenchmarkRunner.from_config(config.runner)
    generator = InputGenerator(config.seed)
    results = {}

    compiler = None
    if native:
        compiler = NativeCompiler(cc=config.compiler.cc,
                                  base_flags=config.compiler.base_flags)
        logger.info("Using C compiler: %s", compiler.cc)
    try:
        for name in SCENARIOS:
            if name not in names:
                continue
            print("\n" + "=" * 60)
            print(f"  Scenario: {name}")
            print("=" * 60)
            results[name] = SCENARIOS[name](config, runner, compiler, generator)

            if config.output_dir:
                save_results(results[name].sections, config.output_dir,
                             prefix=f"{name}_")
    finally:
        if compiler is not None:
            compiler.close()
    return results


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    unknown = [n for n in args.scenarios if n not in SCENARIOS]
    if unknown:
        parser.error(f"unknown scenario(s): {', '.join(unknown)}")
    setup_logging(verbose=args.verbose, quiet=args.quiet)

    names = args.scenarios or list(SCENARIOS)

    try:
        config = apply_overrides(load_config(args.config), args)
    except (OSError, ValueError) as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    print("=" * 60)
    print("  CROSSBENCH")
    print(f"  Start time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"  Scenarios : {', '.join(n for n in SCENARIOS if n in names)}")
    print(f"  Seed      : {config.seed}")
    print("=" * 60)

    start = time.time()
    try:
        run_benchmarks(config, names, native=not args.no_native)
    except BuildError as e:
        logger.error("Native build failed: %s", e)
        if e.cmd:
            logger.error("Command: %s", " ".join(e.cmd))
        return 1
    except BindingError as e:
        logger.error("Native binding failed: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.warning("Benchmark interrupted by user")
        return 130

    print("\n" + "=" * 60)
    print(f"  Total wall time: {time.time() - start:.1f} seconds")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
