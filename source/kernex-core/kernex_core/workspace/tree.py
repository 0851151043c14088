"""Directory tree snapshots for the project file browser."""

from __future__ import annotations

import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Literal

from kernex_core.workspace.confine import relative_path

EXCLUDED_NAMES = frozenset({"node_modules"})

NodeType = Literal["file", "folder"]


@dataclass(frozen=True)
class FileNode:
    """One entry of a directory tree.

    Attributes:
        name: Entry name.
        path: Path relative to the tree's boundary, POSIX separators.
        type: ``"file"`` or ``"folder"``.
        children: Child nodes for folders, ``None`` for files.
    """

    name: str
    path: str
    type: NodeType
    children: tuple[FileNode, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        data = asdict(self)
        if self.children is not None:
            data["children"] = [child.to_dict() for child in self.children]
        return data


def is_excluded(name: str) -> bool:
    """Return True for names hidden from trees (dotfiles and node_modules)."""
    return name.startswith(".") or name in EXCLUDED_NAMES


def _sort_key(node: FileNode) -> tuple[int, str]:
    return (0 if node.type == "folder" else 1, node.name)


def build_tree(root: Path | str, boundary: Path | str | None = None) -> list[FileNode]:
    """Build a recursive snapshot of ``root``.

    Folders come before files, and each kind is ordered by name
    (case-sensitive code-point order). Symlinks are reported as files
    and never followed.

    Args:
        root: Directory to list.
        boundary: Directory node paths are made relative to. Defaults
            to ``root``.

    Returns:
        Top-level nodes of the tree.

    Raises:
        OSError: If any directory in the tree cannot be read.
    """
    root = Path(root)
    boundary = Path(boundary) if boundary is not None else root

    nodes: list[FileNode] = []
    with os.scandir(root) as entries:
        for entry in entries:
            if is_excluded(entry.name):
                continue

            entry_path = Path(entry.path)
            rel = relative_path(boundary, entry_path)
            if entry.is_dir(follow_symlinks=False):
                children = build_tree(entry_path, boundary)
                nodes.append(
                    FileNode(name=entry.name, path=rel, type="folder", children=tuple(children))
                )
            else:
                nodes.append(FileNode(name=entry.name, path=rel, type="file"))

    nodes.sort(key=_sort_key)
    return nodes
