"""
crossbench - Cross-language micro-benchmarks for small loop constructs

Compares the runtime cost of trivial computations (array summation, ternary
vs if/else branching, loop-bound caching) written as pure-Python loops, as
numpy calls, and as C snippets compiled at run time with the system compiler
and called in-process through ctypes.

    core         - Configuration, defaults, shared input buffers
    native       - C source templates, NativeCompiler, ForeignCallable
    kernels      - Pure-Python and numpy implementations
    variants     - VariantSet and the result equivalence check
    performance  - BenchmarkRunner and the report printer
    scenarios    - The sum, branch and loop-bound benchmarks
"""

__version__ = "0.1.0"
