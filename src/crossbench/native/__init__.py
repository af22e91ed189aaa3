"""
===============================================================================
CROSSBENCH - Native Module
===============================================================================
Run-time compiled C, called in-process through ctypes.

Submodules:
    sources  -- Versioned C source templates shipped under templates/
    compiler -- NativeCompiler (system toolchain) and CompiledArtifact
    foreign  -- ForeignCallable binding (size_t n, double *X) -> scalar
    errors   -- BuildError and BindingError
===============================================================================
"""
