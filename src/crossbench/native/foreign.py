"""
foreign.py - Calling compiled C functions on numpy buffers

A ForeignCallable binds one exported symbol of a CompiledArtifact with the
C signature

    <restype> f(size_t n, double *X)

and passes a numpy buffer by address: no element is copied on the way in.
Buffers that would need a copy (wrong dtype, non-contiguous) are rejected.
"""

from __future__ import annotations

import ctypes
import logging
from typing import Optional, Union

import numpy as np

from crossbench.native.compiler import CompiledArtifact
from crossbench.native.errors import BindingError

logger = logging.getLogger(__name__)

DOUBLE_BUFFER = np.ctypeslib.ndpointer(dtype=np.float64, flags="C_CONTIGUOUS")

_INTEGER_TYPES = (
    ctypes.c_int, ctypes.c_long, ctypes.c_longlong,
    ctypes.c_int32, ctypes.c_int64, ctypes.c_size_t,
)


class ForeignCallable:
    """
    An in-process call across the ctypes bridge, shaped ``buffer -> scalar``.

    The symbol is resolved eagerly, so a missing export fails at
    construction rather than in the middle of a timing loop.
    """

    def __init__(self, artifact: CompiledArtifact, symbol: Optional[str] = None):
        self.artifact = artifact
        self.symbol = symbol or artifact.symbol
        lib = artifact.load()
        try:
            func = getattr(lib, self.symbol)
        except AttributeError as exc:
            raise BindingError(
                f"Symbol {self.symbol!r} not exported by {artifact.path.name}"
            ) from exc
        func.argtypes = (ctypes.c_size_t, DOUBLE_BUFFER)
        func.restype = artifact.restype
        self._func = func
        self._returns_int = artifact.restype in _INTEGER_TYPES
        logger.debug("Bound %s from %s", self.symbol, artifact.path.name)

    @staticmethod
    def check_buffer(buffer: np.ndarray) -> None:
        """Raise TypeError unless *buffer* can be passed without a copy."""
        if not isinstance(buffer, np.ndarray):
            raise TypeError(f"Expected a numpy array, got {type(buffer).__name__}")
        if buffer.dtype != np.float64:
            raise TypeError(f"Expected float64 data, got {buffer.dtype}")
        if not buffer.flags["C_CONTIGUOUS"]:
            raise TypeError("Buffer must be C-contiguous to cross the bridge")

    def __call__(self, buffer: np.ndarray) -> Union[float, int]:
        if self.artifact.closed:
            raise BindingError(f"{self.symbol}: artifact has been released")
        self.check_buffer(buffer)
        result = self._func(buffer.size, buffer)
        return int(result) if self._returns_int else float(result)

    def __repr__(self) -> str:
        return f"ForeignCallable({self.symbol!r}, {self.artifact!r})"
