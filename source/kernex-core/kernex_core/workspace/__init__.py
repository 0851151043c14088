"""Workspace sandbox: path confinement, tree snapshots, file operations."""

from kernex_core.workspace.confine import confine, normalize_boundary, relative_path
from kernex_core.workspace.tree import FileNode, build_tree, is_excluded
from kernex_core.workspace.files import ProjectFiles
from kernex_core.workspace.resolver import SessionRootResolver

__all__ = [
    "confine",
    "normalize_boundary",
    "relative_path",
    "FileNode",
    "build_tree",
    "is_excluded",
    "ProjectFiles",
    "SessionRootResolver",
]
