"""
C source templates shipped as package resources.

Each template lives in ``crossbench/native/templates/<name>.c`` and starts
with a header line ``/* crossbench-template: <name> v<N> */``. The header
version must match the registry entry below, so a snippet edited without a
version bump is caught at load time.

Every template exports one function with the signature

    <restype> <symbol>(size_t n, double *X)
"""

from __future__ import annotations

import ctypes
import re
from dataclasses import dataclass
from importlib import resources
from typing import Any, Dict, Tuple

from crossbench.core.constants import TEMPLATE_HEADER_PREFIX

_HEADER_RE = re.compile(
    r"^/\*\s*" + re.escape(TEMPLATE_HEADER_PREFIX) + r"\s*(?P<name>\w+)\s+v(?P<version>\d+)\s*\*/"
)


@dataclass(frozen=True)
class SourceTemplate:
    """A versioned C snippet plus the calling signature of its export."""
    name: str
    version: int
    symbol: str
    restype: Any
    text: str


# name -> (version, exported symbol, ctypes return type)
REGISTRY: Dict[str, Tuple[int, str, Any]] = {
    "c_sum": (1, "c_sum", ctypes.c_double),
    "c_conditional": (1, "c_conditional", ctypes.c_longlong),
    "c_ternary": (1, "c_ternary", ctypes.c_longlong),
    "c_parity_length": (1, "c_parity_length", ctypes.c_longlong),
    "c_parity_declared": (1, "c_parity_declared", ctypes.c_longlong),
}


def parse_header(text: str) -> Tuple[str, int]:
    """
    Extract (name, version) from the first line of a template.

    Raises:
        ValueError: If the header line is missing or malformed
    """
    first_line = text.lstrip().splitlines()[0] if text.strip() else ""
    match = _HEADER_RE.match(first_line)
    if match is None:
        raise ValueError(f"Missing template header in: {first_line!r}")
    return match.group("name"), int(match.group("version"))


def load_template(name: str) -> SourceTemplate:
    """
    Read the template *name* from the package resources.

    Raises:
        KeyError: If *name* is not a registered template
        ValueError: If the file header disagrees with the registry
    """
    if name not in REGISTRY:
        raise KeyError(f"Unknown template: {name}. Valid: {sorted(REGISTRY)}")
    version, symbol, restype = REGISTRY[name]

    text = (
        resources.files("crossbench.native")
        .joinpath("templates")
        .joinpath(f"{name}.c")
        .read_text(encoding="utf-8")
    )
    header_name, header_version = parse_header(text)
    if header_name != name or header_version != version:
        raise ValueError(
            f"Template header {header_name} v{header_version} does not match "
            f"registry entry {name} v{version}"
        )
    return SourceTemplate(name=name, version=version, symbol=symbol,
                          restype=restype, text=text)


def available_templates() -> list:
    return sorted(REGISTRY)
