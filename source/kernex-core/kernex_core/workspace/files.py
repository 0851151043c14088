"""Confined file operations backing the HTTP project browser."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Literal

from kernex_core.errors import (
    ConflictError,
    IOFailureError,
    NotFoundError,
    PathTraversalError,
)
from kernex_core.workspace.confine import confine, normalize_boundary, relative_path
from kernex_core.workspace.tree import FileNode, build_tree, is_excluded

logger = logging.getLogger(__name__)


class ProjectFiles:
    """File browser operations restricted to one project directory.

    Every path argument is untrusted and goes through :func:`confine`
    before any filesystem access. Symlinks are honoured only while their
    target stays inside the project.
    """

    def __init__(self, boundary: Path | str) -> None:
        """Initialize the browser.

        Args:
            boundary: Project directory all operations are confined to.
        """
        self.boundary = normalize_boundary(boundary)

    def _check_real(self, path: Path) -> None:
        real = Path(os.path.realpath(path))
        root = Path(os.path.realpath(self.boundary))
        if real != root and not real.is_relative_to(root):
            raise PathTraversalError("Path resolves outside project root")

    def _resolve(self, path: str, follow_links: bool = True) -> Path:
        resolved = confine(self.boundary, path)
        # Moving or unlinking acts on a link itself, not on its target
        self._check_real(resolved if follow_links else resolved.parent)
        return resolved

    def _resolve_entry(self, path: str, follow_links: bool = True) -> Path:
        """Resolve a path that must name an entry below the boundary."""
        resolved = self._resolve(path, follow_links)
        if resolved == self.boundary:
            raise PathTraversalError("Operation not allowed on project root")
        return resolved

    def relative(self, path: Path) -> str:
        """Return ``path`` relative to the project root."""
        return relative_path(self.boundary, path)

    def tree(self, path: str = "") -> list[FileNode]:
        """List the project tree, or the subtree at ``path``.

        Hidden entries (dotfiles, ``node_modules``) cannot be listed
        directly either.

        Raises:
            PathTraversalError: If ``path`` escapes the project.
            NotFoundError: If ``path`` is not an existing visible directory.
            IOFailureError: If a directory cannot be read.
        """
        resolved = self._resolve(path)
        rel = relative_path(self.boundary, resolved)
        hidden = any(is_excluded(part) for part in rel.split("/") if part)
        if hidden or not resolved.is_dir():
            raise NotFoundError(f"Directory not found: {path}")
        try:
            return build_tree(resolved, self.boundary)
        except OSError as e:
            logger.error(f"Failed to read tree {resolved}: {e}")
            raise IOFailureError("Failed to read directory tree") from e

    def read(self, path: str) -> str:
        """Read a UTF-8 text file."""
        resolved = self._resolve_entry(path)
        if not resolved.is_file():
            raise NotFoundError(f"File not found: {path}")
        try:
            return resolved.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {resolved}: {e}")
            raise IOFailureError("Failed to read file") from e

    def write(self, path: str, content: str) -> Path:
        """Write a UTF-8 text file, creating missing parent directories.

        Returns:
            The written path.
        """
        resolved = self._resolve_entry(path)
        try:
            resolved.parent.mkdir(parents=True, exist_ok=True)
            resolved.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to write {resolved}: {e}")
            raise IOFailureError("Failed to write file") from e
        logger.debug(f"Wrote file: {resolved}")
        return resolved

    def create(self, path: str, kind: Literal["file", "folder"] = "file") -> Path:
        """Create an empty file or a folder.

        Raises:
            ConflictError: If the target already exists.
        """
        resolved = self._resolve_entry(path)
        if resolved.exists() or resolved.is_symlink():
            raise ConflictError(f"Already exists: {path}")
        try:
            if kind == "folder":
                resolved.mkdir(parents=True)
            else:
                resolved.parent.mkdir(parents=True, exist_ok=True)
                resolved.touch(exist_ok=False)
        except FileExistsError as e:
            raise ConflictError(f"Already exists: {path}") from e
        except OSError as e:
            logger.error(f"Failed to create {resolved}: {e}")
            raise IOFailureError(f"Failed to create {kind}") from e
        logger.debug(f"Created {kind}: {resolved}")
        return resolved

    def rename(self, old_path: str, new_path: str) -> Path:
        """Move an entry to a new path inside the project.

        Raises:
            NotFoundError: If the source does not exist.
            ConflictError: If the destination already exists.
        """
        source = self._resolve_entry(old_path, follow_links=False)
        target = self._resolve_entry(new_path, follow_links=False)
        if not source.exists() and not source.is_symlink():
            raise NotFoundError(f"Not found: {old_path}")
        if target.exists() or target.is_symlink():
            raise ConflictError(f"Already exists: {new_path}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            source.rename(target)
        except OSError as e:
            logger.error(f"Failed to rename {source} to {target}: {e}")
            raise IOFailureError("Failed to rename") from e
        logger.debug(f"Renamed {source} -> {target}")
        return target

    def delete(self, path: str) -> bool:
        """Delete a file or a folder recursively.

        Returns:
            True if something was deleted, False if the path did not exist.
        """
        resolved = self._resolve_entry(path, follow_links=False)
        try:
            if resolved.is_dir() and not resolved.is_symlink():
                shutil.rmtree(resolved)
            elif resolved.exists() or resolved.is_symlink():
                resolved.unlink()
            else:
                return False
        except OSError as e:
            logger.error(f"Failed to delete {resolved}: {e}")
            raise IOFailureError("Failed to delete") from e
        logger.debug(f"Deleted: {resolved}")
        return True
