"""
===============================================================================
CROSSBENCH - Core Module
===============================================================================
Configuration, defaults and the shared input data of every benchmark.

Submodules:
    constants -- Default sizes, runner policy, toolchain flags, report layout
    config    -- YAML configuration loading into BenchConfig dataclasses
    inputs    -- InputGenerator producing the shared read-only buffers
===============================================================================
"""
