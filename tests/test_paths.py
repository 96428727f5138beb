"""Tests for sandboxed path resolution."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from filepeek.errors import SandboxViolation
from filepeek.utils.paths import resolve_path


@pytest.fixture
def root(tmp_path: Path) -> Path:
    base = Path(os.path.realpath(tmp_path)) / "root"
    (base / "subdir" / "nested" / "deep").mkdir(parents=True)
    (base / "test.txt").write_text("hello")
    (base / "subdir" / "file.md").write_text("# doc")
    (tmp_path / "secret.txt").write_text("top secret")
    return base


class TestResolveAccepts:
    """Paths that stay inside the root."""

    @pytest.mark.parametrize("request_path", ["", "/", "  /  ", ".", "./", "//"])
    def test_root_aliases(self, root: Path, request_path: str) -> None:
        """Empty, slash and dot paths resolve to the root itself."""
        resolved = resolve_path(root, request_path)

        assert resolved.path == root
        assert resolved.relative == ""
        assert resolved.display == "/"

    def test_none_is_root(self, root: Path) -> None:
        """None is treated as the empty path."""
        assert resolve_path(root, None).path == root

    def test_simple_file(self, root: Path) -> None:
        """A leading slash is root-relative."""
        resolved = resolve_path(root, "/test.txt")

        assert resolved.path == root / "test.txt"
        assert resolved.relative == "test.txt"
        assert resolved.display == "/test.txt"

    def test_relative_without_slash(self, root: Path) -> None:
        """Paths without a leading slash are also root-relative."""
        assert resolve_path(root, "subdir/file.md").path == root / "subdir" / "file.md"

    def test_nested_with_trailing_slash(self, root: Path) -> None:
        """Trailing slashes are accepted."""
        resolved = resolve_path(root, "/subdir/nested/deep/")

        assert resolved.path == root / "subdir" / "nested" / "deep"
        assert resolved.relative == "subdir/nested/deep"

    def test_dot_dot_inside_root(self, root: Path) -> None:
        """.. segments that stay inside the root are normalized."""
        resolved = resolve_path(root, "/subdir/../test.txt")

        assert resolved.path == root / "test.txt"
        assert resolved.relative == "test.txt"

    def test_repeated_separators(self, root: Path) -> None:
        """Repeated separators collapse."""
        assert resolve_path(root, "subdir//nested///deep").relative == "subdir/nested/deep"

    def test_surrounding_whitespace_trimmed(self, root: Path) -> None:
        """Whitespace around the path is ignored."""
        assert resolve_path(root, "  /test.txt  ").relative == "test.txt"

    def test_absolute_looking_path_is_root_relative(self, root: Path) -> None:
        """/etc/passwd addresses root/etc/passwd, never the host file."""
        resolved = resolve_path(root, "/etc/passwd")

        assert resolved.path == root / "etc" / "passwd"

    def test_missing_path_still_resolves(self, root: Path) -> None:
        """Resolution is independent of existence."""
        assert resolve_path(root, "/nope/missing.txt").path == root / "nope" / "missing.txt"

    def test_internal_symlink_allowed(self, root: Path) -> None:
        """A symlink that stays inside the root is followed."""
        (root / "alias").symlink_to(root / "subdir", target_is_directory=True)

        resolved = resolve_path(root, "/alias/file.md")

        assert resolved.path == root / "subdir" / "file.md"


class TestResolveRejects:
    """Paths that escape the root."""

    @pytest.mark.parametrize(
        "request_path",
        [
            "..",
            "../",
            "../secret.txt",
            "/../secret.txt",
            "a/../../b",
            "subdir/../../secret.txt",
            "/subdir/nested/../../../secret.txt",
            "../root2",
            "./../",
        ],
    )
    def test_traversal(self, root: Path, request_path: str) -> None:
        """.. segments that climb above the root raise SandboxViolation."""
        with pytest.raises(SandboxViolation):
            resolve_path(root, request_path)

    def test_null_byte(self, root: Path) -> None:
        """Null bytes are rejected."""
        with pytest.raises(SandboxViolation):
            resolve_path(root, "test.txt\0.md")

    def test_symlink_escape(self, root: Path, tmp_path: Path) -> None:
        """A link pointing outside the root is rejected after canonicalization."""
        (root / "escape").symlink_to(tmp_path / "secret.txt")

        with pytest.raises(SandboxViolation):
            resolve_path(root, "/escape")

    def test_symlinked_directory_escape(self, root: Path, tmp_path: Path) -> None:
        """A directory link pointing outside the root is rejected for children too."""
        (root / "up").symlink_to(tmp_path, target_is_directory=True)

        with pytest.raises(SandboxViolation):
            resolve_path(root, "/up/secret.txt")

    def test_sibling_with_common_prefix(self, root: Path, tmp_path: Path) -> None:
        """root2 must not pass as being inside root."""
        (tmp_path / "root2").mkdir()

        with pytest.raises(SandboxViolation):
            resolve_path(root, "../root2/file")

    def test_error_does_not_leak_path(self, root: Path) -> None:
        """The error message never contains the resolved absolute path."""
        with pytest.raises(SandboxViolation) as excinfo:
            resolve_path(root, "../secret.txt")

        assert str(root.parent) not in str(excinfo.value)
        assert excinfo.value.code == "ACCESS_DENIED"

    def test_violation_is_logged(self, root: Path, caplog: pytest.LogCaptureFixture) -> None:
        """Violations are logged as warnings with the request path."""
        with caplog.at_level(logging.WARNING, logger="filepeek.utils.paths"):
            with pytest.raises(SandboxViolation):
                resolve_path(root, "../secret.txt")

        assert "../secret.txt" in caplog.text


class TestResolveProperty:
    """Every accepted path stays under the root."""

    @pytest.mark.parametrize(
        "request_path",
        ["a", "a/b", "a/./b", "a/b/..", "a/../b/../c", "x/y/z/../../w", "/./a/", "...", "..a", "a.."],
    )
    def test_results_are_prefixed_by_root(self, root: Path, request_path: str) -> None:
        """Resolved paths equal the root or start with root + separator."""
        resolved = resolve_path(root, request_path)

        assert resolved.path == root or str(resolved.path).startswith(str(root) + os.sep)
