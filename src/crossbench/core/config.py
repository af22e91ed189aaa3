"""
===============================================================================
CROSSBENCH - Configuration Loading
===============================================================================
Benchmark settings come from a YAML file (config/crossbench.yaml by default)
layered over the defaults in core.constants. Command-line flags are applied
on top of the loaded configuration by main.py.
===============================================================================
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from crossbench.core.constants import (
    DEFAULT_MAX_RUNS, DEFAULT_MAX_SECONDS, DEFAULT_MIN_RUNS, DEFAULT_REL_TOL,
    DEFAULT_SIZE, DEFAULT_WARMUP, OPT_LEVELS,
)

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "crossbench.yaml"


@dataclass
class RunnerConfig:
    """Trial policy handed to BenchmarkRunner."""
    num_runs: Optional[int] = None
    max_seconds: float = DEFAULT_MAX_SECONDS
    min_runs: int = DEFAULT_MIN_RUNS
    max_runs: int = DEFAULT_MAX_RUNS
    warmup: int = DEFAULT_WARMUP


@dataclass
class CompilerConfig:
    """Native toolchain settings handed to NativeCompiler."""
    cc: Optional[str] = None
    base_flags: Optional[List[str]] = None
    opt_levels: Dict[str, Tuple[str, ...]] = field(
        default_factory=lambda: dict(OPT_LEVELS)
    )


@dataclass
class BenchConfig:
    """Top-level benchmark configuration."""
    size: int = DEFAULT_SIZE
    seed: Optional[int] = None
    rel_tol: float = DEFAULT_REL_TOL
    runner: RunnerConfig = field(default_factory=RunnerConfig)
    compiler: CompilerConfig = field(default_factory=CompilerConfig)
    sizes: Dict[str, int] = field(default_factory=dict)
    output_dir: Optional[str] = None

    def size_for(self, scenario: str) -> int:
        """Input length for *scenario*, honouring per-scenario overrides."""
        return int(self.sizes.get(scenario, self.size))


def _check_keys(section: str, data: Dict[str, Any], allowed) -> None:
    unknown = sorted(set(data) - set(allowed))
    if unknown:
        raise ValueError(f"Unknown {section} config key(s): {unknown}")


def _field_names(cls) -> List[str]:
    return [f.name for f in fields(cls)]


def config_from_dict(data: Optional[Dict[str, Any]]) -> BenchConfig:
    """
    Build a BenchConfig from a parsed YAML mapping.

    Args:
        data: Mapping as returned by yaml.safe_load (None means all defaults)

    Returns:
        Populated BenchConfig

    Raises:
        ValueError: On unknown keys, wrong types or out-of-range values
    """
    data = dict(data or {})
    _check_keys("top-level", data, _field_names(BenchConfig))

    runner_data = dict(data.pop("runner", None) or {})
    _check_keys("runner", runner_data, _field_names(RunnerConfig))
    compiler_data = dict(data.pop("compiler", None) or {})
    _check_keys("compiler", compiler_data, _field_names(CompilerConfig))

    if compiler_data.get("opt_levels") is not None:
        compiler_data["opt_levels"] = {
            str(name): tuple(flags or ())
            for name, flags in compiler_data["opt_levels"].items()
        }
    else:
        compiler_data.pop("opt_levels", None)

    sizes = {str(k): v for k, v in (data.pop("sizes", None) or {}).items()}
    top = {k: v for k, v in data.items() if v is not None or k in ("seed", "output_dir")}

    config = BenchConfig(
        runner=RunnerConfig(**{k: v for k, v in runner_data.items()
                               if v is not None or k == "num_runs"}),
        compiler=CompilerConfig(**compiler_data),
        sizes=sizes,
        **top,
    )
    validate_config(config)
    return config


def _check_number(name: str, value: Any, kind=int, optional: bool = False) -> None:
    if value is None and optional:
        return
    allowed = (int,) if kind is int else (int, float)
    if isinstance(value, bool) or not isinstance(value, allowed):
        raise ValueError(f"{name} must be {'an integer' if kind is int else 'a number'}, "
                         f"got {value!r}")


def validate_config(config: BenchConfig) -> None:
    """Raise ValueError if any setting has the wrong type or is out of range."""
    runner = config.runner
    _check_number("size", config.size)
    _check_number("seed", config.seed, optional=True)
    _check_number("rel_tol", config.rel_tol, kind=float)
    for name, n in config.sizes.items():
        _check_number(f"sizes[{name!r}]", n)
    _check_number("runner.num_runs", runner.num_runs, optional=True)
    _check_number("runner.max_seconds", runner.max_seconds, kind=float)
    _check_number("runner.min_runs", runner.min_runs)
    _check_number("runner.max_runs", runner.max_runs)
    _check_number("runner.warmup", runner.warmup)

    if config.size < 0:
        raise ValueError(f"size must be non-negative, got {config.size}")
    for name, n in config.sizes.items():
        if n < 0:
            raise ValueError(f"sizes[{name!r}] must be non-negative, got {n}")
    if config.rel_tol < 0:
        raise ValueError(f"rel_tol must be non-negative, got {config.rel_tol}")
    if runner.num_runs is not None and runner.num_runs < 1:
        raise ValueError("runner.num_runs must be at least 1")
    if runner.max_seconds <= 0:
        raise ValueError("runner.max_seconds must be positive")
    if runner.min_runs < 1:
        raise ValueError("runner.min_runs must be at least 1")
    if runner.max_runs < runner.min_runs:
        raise ValueError(f"runner.max_runs ({runner.max_runs}) is below "
                         f"runner.min_runs ({runner.min_runs})")
    if runner.warmup < 0:
        raise ValueError("runner.warmup must be non-negative")


def load_config(config_path: Optional[str] = None) -> BenchConfig:
    """
    Load benchmark configuration from a YAML file.

    Args:
        config_path: Path to YAML config. Defaults to config/crossbench.yaml;
            when that default file is absent the built-in defaults are used.

    Returns:
        BenchConfig with the CC environment variable applied when the file
        leaves compiler.cc unset
    """
    if config_path is None and not DEFAULT_CONFIG_PATH.exists():
        logger.debug("No config file at %s, using defaults", DEFAULT_CONFIG_PATH)
        config = BenchConfig()
    else:
        path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
        logger.info("Loading configuration from: %s", path)
        with open(path, "r") as f:
            config = config_from_dict(yaml.safe_load(f))

    if config.compiler.cc is None and os.environ.get("CC"):
        config.compiler.cc = os.environ["CC"]
    return config
