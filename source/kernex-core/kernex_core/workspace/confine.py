"""Path confinement for untrusted, boundary-relative paths."""

from __future__ import annotations

import os
from pathlib import Path

from kernex_core.errors import PathTraversalError

_SEPARATORS = tuple(sep for sep in (os.sep, os.altsep) if sep)


def normalize_boundary(boundary: Path | str) -> Path:
    """Return the absolute, lexically normalized form of a boundary."""
    return Path(os.path.normpath(os.path.abspath(boundary)))


def confine(boundary: Path | str, relative: str) -> Path:
    """Resolve an untrusted relative path inside a boundary directory.

    The path is joined onto the boundary and normalized lexically
    (no symlink resolution, no I/O) before the containment check, so
    ``..`` segments are judged on the canonical result rather than the
    raw string. Absolute forms never override the boundary: they are
    treated as relative to it.

    Args:
        boundary: Trusted absolute directory.
        relative: Untrusted path supplied by a caller.

    Returns:
        Absolute path equal to the boundary or one of its descendants.

    Raises:
        PathTraversalError: If the canonical path falls outside the boundary.
    """
    if "\x00" in relative:
        raise PathTraversalError("Invalid path")

    base = normalize_boundary(boundary)

    # Strip one leading separator from client input
    if relative.startswith(_SEPARATORS):
        relative = relative[1:]

    # Whatever remains is still relative to the boundary
    remainder = relative.lstrip("".join(_SEPARATORS))
    if not remainder:
        return base

    joined = str(base).rstrip("".join(_SEPARATORS)) + os.sep + remainder
    candidate = Path(os.path.normpath(joined))

    if candidate != base and not candidate.is_relative_to(base):
        raise PathTraversalError()

    return candidate


def relative_path(boundary: Path | str, path: Path | str) -> str:
    """Return ``path`` relative to ``boundary`` with POSIX separators.

    The boundary itself maps to an empty string.
    """
    base = normalize_boundary(boundary)
    target = Path(os.path.normpath(os.path.abspath(path)))
    if target == base:
        return ""
    return target.relative_to(base).as_posix()
