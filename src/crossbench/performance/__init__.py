"""
performance - Timing and reporting for the cross-language micro-benchmarks

    runner  - BenchmarkRunner: warm-up, fixed or adaptive trial policy, and
              TimingStats with the minimum as headline statistic.

    report  - Sorted fixed-width console tables, per-variant trial
              summaries, and pandas / matplotlib result files.
"""
