"""
===============================================================================
CROSSBENCH - Benchmark Scenarios
===============================================================================
Each scenario module exposes NAME and run(config, runner, compiler,
generator) -> ScenarioResult.

Submodules:
    sum_bench        -- Column and row sums: C at three optimisation levels,
                        Python built-in and hand loop, numpy
    branch_bench     -- Ternary expression vs if/else, Python / numpy / C
    loop_bound_bench -- len() loop bound vs cached local, Python / numpy / C
    base             -- ScenarioResult and the per-section pipeline
===============================================================================
"""

from crossbench.scenarios import branch_bench, loop_bound_bench, sum_bench

SCENARIOS = {
    sum_bench.NAME: sum_bench.run,
    branch_bench.NAME: branch_bench.run,
    loop_bound_bench.NAME: loop_bound_bench.run,
}
