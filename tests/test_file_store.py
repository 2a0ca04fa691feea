"""
Tests for tfbump/infra/file_store.py discovery and persistence.
"""
import os
import stat

import pytest

from tfbump.infra.file_store import find_files, read_text, write_text


@pytest.fixture
def tree(tmp_path):
    """A small Terraform tree with excluded and hidden directories."""
    (tmp_path / "main.tf").write_text("a")
    (tmp_path / "README.md").write_text("b")
    (tmp_path / "modules" / "vpc").mkdir(parents=True)
    (tmp_path / "modules" / "vpc" / "vpc.tf").write_text("c")
    (tmp_path / "modules" / "vpc" / "vpc.tf.json").write_text("d")
    (tmp_path / ".terraform" / "modules" / "x").mkdir(parents=True)
    (tmp_path / ".terraform" / "modules" / "x" / "x.tf").write_text("e")
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "hooks.tf").write_text("f")
    (tmp_path / ".hidden").mkdir()
    (tmp_path / ".hidden" / "h.tf").write_text("g")
    (tmp_path / "cache").mkdir()
    (tmp_path / "cache" / "c.tf").write_text("h")
    return tmp_path


class TestFindFiles:
    """Tests for find_files."""

    def test_finds_tf_files_outside_excluded_dirs(self, tree):
        found = find_files(tree)
        assert found == sorted([
            tree / "cache" / "c.tf",
            tree / "main.tf",
            tree / "modules" / "vpc" / "vpc.tf",
        ])

    def test_hidden_directories_can_be_included(self, tree):
        found = find_files(tree, skip_hidden=False)
        assert tree / ".hidden" / "h.tf" in found
        assert tree / ".git" / "hooks.tf" not in found
        assert tree / ".terraform" / "modules" / "x" / "x.tf" not in found

    def test_custom_exclusions(self, tree):
        found = find_files(tree, exclude_directories=[".git", ".terraform", "cache"])
        assert tree / "cache" / "c.tf" not in found

    def test_custom_extension(self, tree):
        assert find_files(tree, extension=".md") == [tree / "README.md"]

    def test_accepts_string_root(self, tree):
        assert find_files(str(tree)) == find_files(tree)

    def test_missing_root_yields_nothing(self, tmp_path):
        assert find_files(tmp_path / "nope") == []


class TestReadWrite:
    """Tests for read_text and write_text."""

    def test_read_preserves_crlf(self, tmp_path):
        path = tmp_path / "main.tf"
        path.write_bytes(b'a = "1"\r\nb = "2"\r\n')
        assert read_text(path) == 'a = "1"\r\nb = "2"\r\n'

    def test_write_round_trips_bytes(self, tmp_path):
        path = tmp_path / "main.tf"
        path.write_bytes(b'old\n')
        write_text(path, 'new = "\xe9"\r\n')
        assert path.read_bytes() == 'new = "\xe9"\r\n'.encode('utf-8')

    def test_write_leaves_no_temp_files(self, tmp_path):
        path = tmp_path / "main.tf"
        path.write_text("old")
        write_text(path, "new")
        assert sorted(os.listdir(tmp_path)) == ["main.tf"]

    def test_write_keeps_permissions(self, tmp_path):
        path = tmp_path / "main.tf"
        path.write_text("old")
        os.chmod(path, 0o640)
        write_text(path, "new")
        assert stat.S_IMODE(path.stat().st_mode) == 0o640

    def test_read_rejects_invalid_utf8(self, tmp_path):
        path = tmp_path / "main.tf"
        path.write_bytes(b'\xff\xfe\x00')
        with pytest.raises(UnicodeDecodeError):
            read_text(path)
