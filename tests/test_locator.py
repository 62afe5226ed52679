"""
Tests for mirror discovery (repomirror.mirror.locator).

Discovery only looks at directory names; results are compared as sets
because walk order is not guaranteed.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from repomirror.mirror.errors import DiscoveryError
from repomirror.mirror.locator import find_mirrors, is_mirror_name


def _rel(root: Path, paths) -> set:
    return {p.relative_to(root).as_posix() for p in paths}


class TestIsMirrorName:

    @pytest.mark.parametrize("name", ["repo.git", "REPO.GIT", "Repo.Git", "a.b.git"])
    def test_mirror_names(self, name):
        assert is_mirror_name(name) is True

    @pytest.mark.parametrize("name", [".git", ".GIT", "repo", "repo.gitx", "git", "repo.git.log"])
    def test_non_mirror_names(self, name):
        assert is_mirror_name(name) is False


class TestFindMirrors:

    def test_empty_workspace(self, workspace):
        assert find_mirrors(workspace) == []

    def test_nested_mirrors(self, workspace, make_mirror):
        make_mirror(workspace, "github.com/pkg/errors.git")
        make_mirror(workspace, "github.com/blachniet/dotfiles.git")
        make_mirror(workspace, "local.git")

        found = find_mirrors(workspace)
        assert _rel(workspace, found) == {
            "github.com/pkg/errors.git",
            "github.com/blachniet/dotfiles.git",
            "local.git",
        }

    def test_does_not_descend_into_mirror(self, workspace, make_mirror):
        """repo.git/objects/pack.git must not qualify on its own."""
        make_mirror(workspace, "repo.git")
        (workspace / "repo.git" / "objects" / "pack.git").mkdir()

        assert _rel(workspace, find_mirrors(workspace)) == {"repo.git"}

    def test_working_copy_metadata_excluded(self, workspace):
        """A plain .git directory inside a checkout is not a mirror."""
        (workspace / "checkout" / ".git" / "objects").mkdir(parents=True)

        assert find_mirrors(workspace) == []

    def test_working_copy_sibling_mirror_found(self, workspace, make_mirror):
        (workspace / "checkout" / ".git").mkdir(parents=True)
        make_mirror(workspace, "checkout/vendored.git")

        assert _rel(workspace, find_mirrors(workspace)) == {"checkout/vendored.git"}

    def test_case_insensitive_suffix(self, workspace, make_mirror):
        make_mirror(workspace, "Upper.GIT")

        assert _rel(workspace, find_mirrors(workspace)) == {"Upper.GIT"}

    def test_files_ignored(self, workspace, make_mirror):
        make_mirror(workspace, "repo.git")
        (workspace / "repo.git.log").write_text("PUSH: Start\n")
        (workspace / "notes.git").write_text("a file, not a directory")

        assert _rel(workspace, find_mirrors(workspace)) == {"repo.git"}

    def test_results_are_under_root(self, workspace, make_mirror):
        make_mirror(workspace, "a/b.git")

        (found,) = find_mirrors(workspace)
        assert found == workspace / "a" / "b.git"

    def test_root_is_itself_a_mirror(self, tmp_path, make_mirror):
        mirror = make_mirror(tmp_path, "solo.git")

        assert find_mirrors(mirror) == [mirror]

    @pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges")
    def test_symlinks_not_followed(self, tmp_path, workspace, make_mirror):
        outside = tmp_path / "outside"
        make_mirror(outside, "elsewhere.git")
        os.symlink(outside, workspace / "link")

        assert find_mirrors(workspace) == []

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(DiscoveryError):
            find_mirrors(tmp_path / "does-not-exist")

    def test_root_is_a_file_raises(self, tmp_path):
        f = tmp_path / "file.txt"
        f.write_text("x")

        with pytest.raises(DiscoveryError):
            find_mirrors(f)

    @pytest.mark.skipif(
        sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
        reason="permission bits are not enforced",
    )
    def test_unreadable_subdirectory_skipped(self, workspace, make_mirror):
        make_mirror(workspace, "ok.git")
        locked = workspace / "locked"
        make_mirror(locked, "hidden.git")
        locked.chmod(0)
        try:
            assert _rel(workspace, find_mirrors(workspace)) == {"ok.git"}
        finally:
            locked.chmod(0o755)
