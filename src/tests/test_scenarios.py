"""
===============================================================================
CROSSBENCH - Scenario and Command-Line Test Suite
===============================================================================
End-to-end runs of the sum, branch and loop-bound scenarios on small
buffers, with and without the compiled C variants, plus the command-line
entry point.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import shutil

import pytest

from crossbench.core.config import BenchConfig
from crossbench.core.inputs import InputGenerator
from crossbench.main import build_parser, main
from crossbench.native.compiler import NativeCompiler
from crossbench.performance.runner import BenchmarkRunner, TimingStats
from crossbench.scenarios import SCENARIOS, branch_bench, loop_bound_bench, sum_bench

HAVE_CC = any(shutil.which(cc) for cc in ("gcc", "cc", "clang"))
requires_cc = pytest.mark.skipif(not HAVE_CC, reason="no C compiler on PATH")


@pytest.fixture
def config():
    return BenchConfig(size=2001, seed=3)


@pytest.fixture
def runner():
    return BenchmarkRunner(num_runs=2, warmup=1)


@pytest.fixture
def compiler():
    with NativeCompiler() as cc:
        yield cc


# =============================================================================
# Registry
# =============================================================================

def test_registry_order():
    assert list(SCENARIOS) == ["sum", "branch", "loop-bound"]


# =============================================================================
# Interpreted and numpy variants only
# =============================================================================

class TestScenariosWithoutNative:

    def test_sum_sections_are_separate(self, config, runner, capsys):
        result = sum_bench.run(config, runner, compiler=None)
        assert list(result.sections) == ["Column sum results", "Row sum results"]
        column = result.sections["Column sum results"]
        row = result.sections["Row sum results"]
        assert column is not row
        assert list(column) == ["Python built-in", "Python user-defined",
                                "numpy sum", "numpy einsum"]
        assert all(isinstance(s, TimingStats) and s.min >= 0 for s in column.values())
        assert all(report.all_match for report in result.equivalence.values())

        out = capsys.readouterr().out
        assert "Column sum results" in out
        assert "Row sum results" in out
        assert "Is Python built-in similar to numpy sum? True" in out

    def test_branch(self, config, runner, capsys):
        result = branch_bench.run(config, runner)
        timings = result.sections[branch_bench.TITLE]
        assert set(timings) == {"Python ternary", "Python if/else", "numpy where"}
        assert result.equivalence[branch_bench.TITLE].all_match
        out = capsys.readouterr().out
        assert "Trial: Python ternary" in out

    def test_loop_bound(self, config, runner):
        result = loop_bound_bench.run(config, runner)
        report = result.equivalence[loop_bound_bench.TITLE]
        assert report.all_match
        assert report.reference_value == 1  # 2001 is odd

    def test_empty_input(self, runner):
        config = BenchConfig(size=0, seed=1)
        result = sum_bench.run(config, runner)
        for report in result.equivalence.values():
            assert all(value == 0.0 for value in report.values.values())
        result = branch_bench.run(config, runner)
        assert all(v == 0 for v in result.equivalence[branch_bench.TITLE].values.values())

    def test_per_scenario_size(self, runner):
        config = BenchConfig(size=10, sizes={"loop-bound": 4})
        result = loop_bound_bench.run(config, runner, generator=InputGenerator(0))
        assert result.equivalence[loop_bound_bench.TITLE].reference_value == 0


# =============================================================================
# With compiled C variants
# =============================================================================

@requires_cc
class TestScenariosWithNative:

    def test_sum_binds_each_level_to_its_own_artifact(self, config, runner, compiler):
        result = sum_bench.run(config, runner, compiler)
        column = result.sections["Column sum results"]
        for label in ("C no flags", "C -O3", "C -Ofast"):
            assert label in column
        assert all(report.all_match for report in result.equivalence.values())

        sum_artifacts = [a for a in compiler.artifacts if a.symbol == "c_sum"]
        assert [a.flags for a in sum_artifacts] == [(), ("-O3",), ("-Ofast",)]
        assert len({a.path for a in sum_artifacts}) == 3

        variants = sum_bench.build_variants(compiler)
        assert variants["C -O3"].func.artifact.flags == ("-O3",)
        assert variants["C -Ofast"].func.artifact.flags == ("-Ofast",)

    def test_branch(self, config, runner, compiler):
        result = branch_bench.run(config, runner, compiler)
        timings = result.sections[branch_bench.TITLE]
        assert {"C ternary", "C if/else"} <= set(timings)
        assert result.equivalence[branch_bench.TITLE].all_match

    def test_loop_bound(self, config, runner, compiler):
        result = loop_bound_bench.run(config, runner, compiler)
        timings = result.sections[loop_bound_bench.TITLE]
        assert {"C declared bound", "C length() bound"} <= set(timings)
        assert result.equivalence[loop_bound_bench.TITLE].all_match


# =============================================================================
# Command line
# =============================================================================

class TestMain:

    def test_parser_defaults(self):
        args = build_parser().parse_args([])
        assert args.scenarios == []
        assert not args.no_native

    def test_unknown_scenario_exits(self):
        with pytest.raises(SystemExit):
            main(["matmul"])

    def test_run_without_native(self, capsys, tmp_path):
        out_dir = tmp_path / "results"
        code = main(["sum", "branch", "--no-native", "--size", "500",
                     "--num-runs", "2", "--seed", "4", "--output-dir", str(out_dir)])
        assert code == 0
        out = capsys.readouterr().out
        assert "Scenario: sum" in out
        assert "Scenario: branch" in out
        assert "Scenario: loop-bound" not in out
        assert (out_dir / "sum_results.csv").exists()
        assert (out_dir / "branch_results.csv").exists()

    def test_bad_config_returns_error(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("unknown_key: 1\n")
        assert main(["--config", str(path), "--no-native"]) == 2

    @pytest.mark.parametrize("text", [
        "runner:\n  min_runs: 0\n",
        "runner:\n  min_runs: 5\n  max_runs: 2\n",
        "size: abc\n",
    ])
    def test_invalid_config_values_return_error(self, tmp_path, text):
        path = tmp_path / "bad.yaml"
        path.write_text(text)
        assert main(["sum", "--config", str(path), "--no-native", "--size", "10"]) == 2

    def test_missing_compiler_returns_error(self, monkeypatch):
        monkeypatch.setattr(shutil, "which", lambda name: None)
        assert main(["sum", "--size", "10", "--num-runs", "1"]) == 1

    @requires_cc
    def test_run_all_with_native(self, capsys):
        code = main(["--size", "300", "--num-runs", "1", "--seed", "1"])
        assert code == 0
        out = capsys.readouterr().out
        assert "C -Ofast" in out
        assert "C ternary" in out
        assert "C declared bound" in out
