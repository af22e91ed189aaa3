"""Failures of the native build and call path. Both are fatal to a run."""

from typing import Optional, Sequence


class BuildError(RuntimeError):
    """The C toolchain failed or produced no shared library."""

    def __init__(
        self,
        message: str,
        cmd: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        self.cmd = list(cmd) if cmd is not None else None
        self.returncode = returncode
        self.stderr = stderr
        detail = message
        if returncode is not None:
            detail += f" (exit status {returncode})"
        if stderr.strip():
            detail += "\n" + stderr.strip()
        super().__init__(detail)


class BindingError(RuntimeError):
    """A compiled artifact could not be loaded, or its symbol is missing."""
