"""Per-user session root resolution for the gateway."""

from __future__ import annotations

import logging
from pathlib import Path

from kernex_core.credentials.record import CredentialRecord
from kernex_core.errors import PathTraversalError
from kernex_core.workspace.confine import confine, normalize_boundary

logger = logging.getLogger(__name__)


class SessionRootResolver:
    """Maps a credential record to the directory its session is confined to.

    Args:
        boundary: Workspace directory every session root lives under.
        strict: When True, a home directory that escapes the boundary
            raises instead of falling back to the boundary itself.
    """

    def __init__(self, boundary: Path | str, strict: bool = False) -> None:
        self.boundary = normalize_boundary(boundary)
        self.strict = strict

    def resolve_root(self, record: CredentialRecord) -> Path:
        """Return the confined, existing root directory for ``record``.

        Raises:
            PathTraversalError: In strict mode, when ``root_dir`` escapes
                the boundary.
            OSError: If the directory cannot be created.
        """
        try:
            root = confine(self.boundary, record.root_dir or "")
        except PathTraversalError:
            if self.strict:
                logger.warning(
                    f"Rejected home directory for {record.username}: escapes workspace"
                )
                raise
            logger.warning(
                f"Home directory for {record.username} escapes workspace, "
                f"using workspace root"
            )
            root = self.boundary

        root.mkdir(parents=True, exist_ok=True)
        return root
