"""
compiler.py - Run-time compilation of C snippets into loadable libraries

The source text is piped to the system compiler on stdin (``-xc -``) and the
shared library is written to a uniquely named file inside a temporary
directory owned by the compiler instance:

    cc -fPIC -shared -xc [-msse3] <opt flags> -o <workdir>/<symbol>-<id>.so -

Every call to :meth:`NativeCompiler.build` produces a fresh artifact. Nothing
is cached across calls, because comparing the same source under different
flag sets is the point of the exercise.

Artifacts own their loaded library handle and are released explicitly,
either one by one or all together when the compiler is closed.
"""

from __future__ import annotations

import ctypes
import logging
import os
import shutil
import subprocess
import sys
import tempfile
import uuid
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple, Union

from crossbench.core.constants import (
    COMPILER_CANDIDATES, default_base_flags, shared_library_suffix,
)
from crossbench.native.errors import BindingError, BuildError
from crossbench.native.sources import SourceTemplate

logger = logging.getLogger(__name__)


def find_compiler(preferred: Optional[str] = None) -> str:
    """
    Locate a C compiler executable.

    A named *preferred* compiler is used or rejected, never substituted.
    Otherwise the search order is ``$CC``, then gcc / cc / clang on PATH.

    Raises:
        BuildError: If the named compiler or every candidate is missing
    """
    if preferred:
        path = shutil.which(preferred)
        if path is None:
            raise BuildError(f"Requested C compiler not found: {preferred}")
        return path

    candidates: List[str] = []
    if os.environ.get("CC"):
        candidates.append(os.environ["CC"])
    candidates.extend(COMPILER_CANDIDATES)

    for name in candidates:
        path = shutil.which(name)
        if path is not None:
            return path
    raise BuildError(f"No C compiler found (tried {candidates})")


def _unload(handle: int) -> None:
    """Drop a library handle obtained from ctypes.CDLL."""
    import _ctypes

    if sys.platform.startswith("win"):
        free = getattr(_ctypes, "FreeLibrary", None)
    else:
        free = getattr(_ctypes, "dlclose", None)
    if free is not None:
        free(handle)


class CompiledArtifact:
    """
    A shared library built from one source snippet with one flag set.

    The artifact owns the library file and, once :meth:`load` has been
    called, the loaded ``ctypes.CDLL`` handle. :meth:`release` unloads the
    library and deletes the file; after that the artifact cannot be used.
    """

    def __init__(
        self,
        path: Union[str, Path],
        symbol: str,
        restype: Any = ctypes.c_double,
        flags: Sequence[str] = (),
        template: Optional[str] = None,
        version: Optional[int] = None,
    ):
        self.path = Path(path)
        self.symbol = symbol
        self.restype = restype
        self.flags: Tuple[str, ...] = tuple(flags)
        self.template = template
        self.version = version
        self._lib: Optional[ctypes.CDLL] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def loaded(self) -> bool:
        return self._lib is not None

    def load(self) -> ctypes.CDLL:
        """Load the library (once) and return the handle."""
        if self._closed:
            raise BindingError(f"Artifact {self.path.name} has been released")
        if self._lib is None:
            if not self.path.exists():
                raise BindingError(f"Compiled artifact not found: {self.path}")
            try:
                self._lib = ctypes.CDLL(str(self.path))
            except OSError as exc:
                raise BindingError(f"Cannot load {self.path}: {exc}") from exc
            logger.debug("Loaded %s", self.path)
        return self._lib

    def release(self) -> None:
        """Unload the library and delete its file. Safe to call twice."""
        if self._closed:
            return
        if self._lib is not None:
            handle = self._lib._handle
            self._lib = None
            _unload(handle)
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        self._closed = True
        logger.debug("Released %s", self.path)

    def __enter__(self) -> "CompiledArtifact":
        return self

    def __exit__(self, *exc) -> None:
        self.release()

    def __repr__(self) -> str:
        flags = " ".join(self.flags) or "no flags"
        state = "released" if self._closed else ("loaded" if self.loaded else "built")
        return f"CompiledArtifact({self.symbol!r}, {flags}, {state})"


class NativeCompiler:
    """
    Blocking wrapper around the system C compiler.

    Parameters
    ----------
    cc : str, optional
        Compiler executable. Resolved with :func:`find_compiler`.
    base_flags : sequence of str, optional
        Flags used for every build. Defaults to ``-fPIC -shared -xc``
        (plus ``-msse3`` on x86).
    workdir : path, optional
        Directory for artifacts. A private temporary directory is created
        (and removed on :meth:`close`) when omitted.
    """

    def __init__(
        self,
        cc: Optional[str] = None,
        base_flags: Optional[Sequence[str]] = None,
        workdir: Optional[Union[str, Path]] = None,
    ):
        self.cc = find_compiler(cc)
        self.base_flags: Tuple[str, ...] = (
            tuple(base_flags) if base_flags is not None else default_base_flags()
        )
        self._owns_workdir = workdir is None
        if workdir is None:
            self.workdir = Path(tempfile.mkdtemp(prefix="crossbench-"))
        else:
            self.workdir = Path(workdir)
            self.workdir.mkdir(parents=True, exist_ok=True)
        self.artifacts: List[CompiledArtifact] = []

    def command(self, output: Path, opt_flags: Sequence[str] = ()) -> List[str]:
        """The compiler command line that reads source from stdin."""
        return [self.cc, *self.base_flags, *opt_flags, "-o", str(output), "-"]

    def build(
        self,
        source: Union[SourceTemplate, str],
        opt_flags: Sequence[str] = (),
        symbol: Optional[str] = None,
        restype: Any = None,
    ) -> CompiledArtifact:
        """
        Compile *source* into a new shared library.

        Parameters
        ----------
        source : SourceTemplate or str
            A loaded template, or raw C source text (then *symbol* is required).
        opt_flags : sequence of str
            Optimisation flags for this build, e.g. ``("-O3",)``.
        symbol : str, optional
            Exported function name; defaults to the template's symbol.
        restype : ctypes type, optional
            Return type of the export; defaults to the template's, else double.

        Returns
        -------
        CompiledArtifact

        Raises
        ------
        BuildError
            Nonzero compiler exit status, or no output file produced.
        """
        template_name = None
        version = None
        if isinstance(source, SourceTemplate):
            text = source.text
            symbol = symbol or source.symbol
            restype = restype or source.restype
            template_name = source.name
            version = source.version
        else:
            text = source
            if not symbol:
                raise ValueError("symbol is required when building raw source text")
            restype = restype or ctypes.c_double

        output = self.workdir / f"{symbol}-{uuid.uuid4().hex[:12]}{shared_library_suffix()}"
        cmd = self.command(output, opt_flags)
        logger.debug("Compiling: %s", " ".join(cmd))

        try:
            proc = subprocess.run(cmd, input=text, capture_output=True, text=True)
        except OSError as exc:
            raise BuildError(f"Cannot run compiler {self.cc}: {exc}", cmd=cmd) from exc

        if proc.returncode != 0:
            raise BuildError(
                f"Compilation of {symbol} failed",
                cmd=cmd, returncode=proc.returncode, stderr=proc.stderr,
            )
        if not output.exists():
            raise BuildError(
                f"Compiler produced no artifact for {symbol}",
                cmd=cmd, returncode=proc.returncode, stderr=proc.stderr,
            )

        artifact = CompiledArtifact(
            output, symbol, restype=restype, flags=opt_flags,
            template=template_name, version=version,
        )
        self.artifacts.append(artifact)
        logger.info("Built %s [%s] -> %s", symbol,
                    " ".join(opt_flags) or "no flags", output.name)
        return artifact

    def close(self) -> None:
        """Release every artifact built here and remove the private workdir."""
        for artifact in self.artifacts:
            artifact.release()
        self.artifacts.clear()
        if self._owns_workdir:
            shutil.rmtree(self.workdir, ignore_errors=True)

    def __enter__(self) -> "NativeCompiler":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
