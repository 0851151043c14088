"""Tests for directory tree snapshots."""

import os

import pytest

from kernex_core.workspace.tree import FileNode, build_tree


def _names(nodes):
    return [n.name for n in nodes]


class TestBuildTree:
    """Tests for build_tree()."""

    def test_empty_directory(self, workspace):
        assert build_tree(workspace) == []

    def test_folders_before_files_code_point_order(self, workspace):
        (workspace / "b.txt").write_text("b")
        (workspace / "a.txt").write_text("a")
        (workspace / "A").mkdir()

        assert _names(build_tree(workspace)) == ["A", "a.txt", "b.txt"]

    def test_case_sensitive_order(self, workspace):
        for name in ["beta", "Alpha", "alpha", "Beta"]:
            (workspace / name).write_text("")

        assert _names(build_tree(workspace)) == ["Alpha", "Beta", "alpha", "beta"]

    def test_excludes_dotfiles_and_node_modules(self, workspace):
        (workspace / ".git").mkdir()
        (workspace / ".env").write_text("SECRET=1")
        (workspace / "node_modules").mkdir()
        (workspace / "src").mkdir()
        (workspace / "src" / "node_modules").mkdir()
        (workspace / "src" / ".hidden").write_text("")
        (workspace / "src" / "main.py").write_text("")

        tree = build_tree(workspace)

        assert _names(tree) == ["src"]
        assert _names(tree[0].children) == ["main.py"]

    def test_nested_paths_are_relative(self, workspace):
        (workspace / "docs" / "guides").mkdir(parents=True)
        (workspace / "docs" / "guides" / "intro.md").write_text("# Intro")

        tree = build_tree(workspace)

        docs = tree[0]
        assert docs == FileNode(
            name="docs",
            path="docs",
            type="folder",
            children=(
                FileNode(
                    name="guides",
                    path="docs/guides",
                    type="folder",
                    children=(FileNode(name="intro.md", path="docs/guides/intro.md", type="file"),),
                ),
            ),
        )

    def test_children_sorted_recursively(self, workspace):
        sub = workspace / "sub"
        sub.mkdir()
        (sub / "z.txt").write_text("")
        (sub / "m").mkdir()

        tree = build_tree(workspace)

        assert _names(tree[0].children) == ["m", "z.txt"]

    def test_subtree_paths_relative_to_boundary(self, workspace):
        (workspace / "pkg").mkdir()
        (workspace / "pkg" / "mod.py").write_text("")

        tree = build_tree(workspace / "pkg", workspace)

        assert tree == [FileNode(name="mod.py", path="pkg/mod.py", type="file")]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_directory_not_followed(self, workspace, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_text("secret")
        (workspace / "link").symlink_to(outside, target_is_directory=True)

        tree = build_tree(workspace)

        assert tree == [FileNode(name="link", path="link", type="file")]

    def test_missing_root_raises(self, workspace):
        with pytest.raises(OSError):
            build_tree(workspace / "missing")

    def test_unreadable_subdirectory_fails_whole_tree(self, workspace, monkeypatch):
        (workspace / "a").mkdir()
        (workspace / "a" / "ok.txt").write_text("")
        (workspace / "b" / "locked").mkdir(parents=True)
        real_scandir = os.scandir
        visited = []

        def scandir(path):
            visited.append(os.path.basename(os.fspath(path)))
            if visited[-1] == "locked":
                raise PermissionError(13, "Permission denied", os.fspath(path))
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", scandir)

        with pytest.raises(PermissionError):
            build_tree(workspace)
        assert "locked" in visited

    def test_to_dict(self, workspace):
        (workspace / "d").mkdir()
        (workspace / "d" / "f.txt").write_text("")

        data = [n.to_dict() for n in build_tree(workspace)]

        assert data == [
            {
                "name": "d",
                "path": "d",
                "type": "folder",
                "children": [
                    {"name": "f.txt", "path": "d/f.txt", "type": "file", "children": None}
                ],
            }
        ]
