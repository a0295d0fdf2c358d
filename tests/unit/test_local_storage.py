# SPDX-License-Identifier: MIT
"""Unit tests for LocalStorageBackend."""

import logging
import os
import pathlib
import stat

import pytest

from stor.config import Conf
from stor.exceptions import InvalidPathError, PathDoesNotExistError, SubstrateError, TooLargeError
from stor.storage.local import LocalStorageBackend
from stor.storage.protocol import LOCALDIR_TYPE, Meta
from stor.storage.tester import StorageTester

# ------------------------------------------------------------------
# Generic conformance
# ------------------------------------------------------------------


@pytest.mark.unit
class TestLocalStorageConformance(StorageTester):
    """Run the generic storage tests against a fresh base directory."""

    @pytest.fixture
    def storage(self, base_dir):
        return LocalStorageBackend(base_dir)


# ------------------------------------------------------------------
# Construction
# ------------------------------------------------------------------


@pytest.mark.unit
class TestConstruction:
    def test_absolute_base_dir(self, base_dir):
        backend = LocalStorageBackend(base_dir)
        assert backend.base_dir == base_dir.resolve()
        assert backend.type() == LOCALDIR_TYPE

    def test_relative_base_dir(self, tmp_path, monkeypatch):
        (tmp_path / "base").mkdir()
        monkeypatch.chdir(tmp_path)

        backend = LocalStorageBackend("base")

        assert backend.base_dir == (tmp_path / "base").resolve()
        assert backend.base_dir.is_absolute()

    def test_nonexistent_base_dir(self, tmp_path):
        with pytest.raises(RuntimeError, match="does not exist"):
            LocalStorageBackend(tmp_path / "_this_directory_doesnt_exist__")

    def test_file_as_base_dir(self, tmp_path):
        base_file = tmp_path / "base"
        base_file.write_bytes(b"test123")

        with pytest.raises(RuntimeError, match="not a directory"):
            LocalStorageBackend(base_file)

    def test_empty_base_dir(self):
        with pytest.raises(RuntimeError, match="requires a base directory"):
            LocalStorageBackend("")

    def test_from_conf(self, base_dir):
        backend = LocalStorageBackend.from_conf(Conf(type="LocalDir", path=str(base_dir)))
        assert backend.base_dir == base_dir.resolve()

    def test_from_conf_wrong_type(self, base_dir):
        with pytest.raises(RuntimeError, match="expected 'LocalDir'"):
            LocalStorageBackend.from_conf(Conf(type="Memory", path=str(base_dir)))


# ------------------------------------------------------------------
# Confinement
# ------------------------------------------------------------------


@pytest.mark.unit
class TestConfinement:
    def test_symlink_escaping_base_is_rejected(self, tmp_path, base_dir):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret").write_bytes(b"SECRET")
        (base_dir / "link").symlink_to(outside)

        backend = LocalStorageBackend(base_dir)

        with pytest.raises(InvalidPathError, match="escapes"):
            backend.load("link/secret", 100)
        with pytest.raises(InvalidPathError, match="escapes"):
            backend.save("link/new", b"BAD")
        assert not (outside / "new").exists()

    def test_symlink_inside_base_is_allowed(self, base_dir):
        (base_dir / "real").mkdir()
        (base_dir / "real" / "f").write_bytes(b"DATA")
        (base_dir / "alias").symlink_to(base_dir / "real")

        backend = LocalStorageBackend(base_dir)

        assert backend.load("alias/f", 100) == b"DATA"

    def test_sibling_directory_with_shared_prefix(self, tmp_path):
        base = tmp_path / "b"
        base.mkdir()
        sibling = tmp_path / "bc"
        sibling.mkdir()
        (sibling / "f").write_bytes(b"X")
        (base / "jump").symlink_to(sibling)

        backend = LocalStorageBackend(base)

        with pytest.raises(InvalidPathError):
            backend.exist("jump/f")

    def test_traversal_never_touches_filesystem(self, base_dir, mocker):
        backend = LocalStorageBackend(base_dir)
        path_stat = mocker.patch.object(pathlib.Path, "stat")

        with pytest.raises(InvalidPathError):
            backend.meta("../../etc/passwd")
        path_stat.assert_not_called()


# ------------------------------------------------------------------
# meta / list / exist
# ------------------------------------------------------------------


@pytest.mark.unit
class TestMetadata:
    def test_meta_reports_file_size(self, base_dir):
        (base_dir / "img.png").write_bytes(b"12345")

        assert LocalStorageBackend(base_dir).meta("img.png") == Meta(size=5)

    def test_list_reports_logical_paths(self, base_dir):
        (base_dir / "d1" / "sub").mkdir(parents=True)
        (base_dir / "d1" / "a").write_bytes(b"A")

        files, dirs = LocalStorageBackend(base_dir).list("d1/")

        assert files == ["d1/a"]
        assert dirs == ["d1/sub"]

    def test_list_file_is_empty(self, base_dir):
        (base_dir / "f").write_bytes(b"X")

        assert LocalStorageBackend(base_dir).list("f") == ([], [])

    def test_exist_directory(self, base_dir):
        (base_dir / "d").mkdir()

        assert LocalStorageBackend(base_dir).exist("d") is True

    def test_exist_stat_failure_is_substrate_error(self, base_dir, mocker):
        backend = LocalStorageBackend(base_dir)
        mocker.patch.object(pathlib.Path, "stat", side_effect=PermissionError("denied"))

        with pytest.raises(SubstrateError, match="denied") as exc_info:
            backend.exist("f")
        assert isinstance(exc_info.value.__cause__, PermissionError)

    def test_list_failure_is_substrate_error(self, base_dir, mocker):
        backend = LocalStorageBackend(base_dir)
        mocker.patch.object(pathlib.Path, "iterdir", side_effect=PermissionError("denied"))

        with pytest.raises(SubstrateError):
            backend.list("")


# ------------------------------------------------------------------
# load / save
# ------------------------------------------------------------------


@pytest.mark.unit
class TestLoadSave:
    def test_too_large_does_not_read(self, base_dir, mocker):
        (base_dir / "file1").write_bytes(b"test123")
        backend = LocalStorageBackend(base_dir)
        read_bytes = mocker.patch.object(pathlib.Path, "read_bytes")

        with pytest.raises(TooLargeError) as exc_info:
            backend.load("file1", 6)

        assert exc_info.value.what == "file1"
        read_bytes.assert_not_called()

    def test_load_directory_does_not_exist(self, base_dir):
        (base_dir / "d").mkdir()

        with pytest.raises(PathDoesNotExistError):
            LocalStorageBackend(base_dir).load("d", 100)

    def test_save_creates_parent_directories(self, base_dir):
        LocalStorageBackend(base_dir).save("d1/d2/f", b"data")

        assert (base_dir / "d1" / "d2" / "f").read_bytes() == b"data"

    def test_save_leaves_no_temp_files(self, base_dir):
        backend = LocalStorageBackend(base_dir)
        backend.save("d/f", b"one")
        backend.save("d/f", b"two")

        assert [p.name for p in (base_dir / "d").iterdir()] == ["f"]
        assert backend.load("d/f", 10) == b"two"

    def test_saved_file_mode_honours_umask(self, base_dir):
        old_umask = os.umask(0o022)
        try:
            LocalStorageBackend(base_dir).save("f", b"X")
        finally:
            os.umask(old_umask)

        assert stat.S_IMODE((base_dir / "f").stat().st_mode) == 0o640

    def test_overwrite_keeps_group_permissions(self, base_dir):
        old_umask = os.umask(0o002)
        try:
            backend = LocalStorageBackend(base_dir)
            backend.save("f", b"one")
            backend.save("f", b"two")
        finally:
            os.umask(old_umask)

        assert stat.S_IMODE((base_dir / "f").stat().st_mode) == 0o660

    def test_failed_save_keeps_previous_content(self, base_dir, mocker):
        backend = LocalStorageBackend(base_dir)
        backend.save("f", b"original")
        mocker.patch("stor.storage.local.os.replace", side_effect=OSError("disk full"))

        with pytest.raises(SubstrateError, match="disk full"):
            backend.save("f", b"replacement")

        assert (base_dir / "f").read_bytes() == b"original"
        assert [p.name for p in base_dir.iterdir()] == ["f"]

    def test_save_below_a_file_is_substrate_error(self, base_dir):
        backend = LocalStorageBackend(base_dir)
        backend.save("f", b"X")

        with pytest.raises(SubstrateError):
            backend.save("f/child", b"Y")

    def test_save_over_directory_is_substrate_error(self, base_dir):
        (base_dir / "d").mkdir()

        with pytest.raises(SubstrateError):
            LocalStorageBackend(base_dir).save("d", b"X")


# ------------------------------------------------------------------
# delete / pruning
# ------------------------------------------------------------------


@pytest.mark.unit
class TestDelete:
    def test_prunes_empty_ancestors_up_to_base(self, base_dir):
        backend = LocalStorageBackend(base_dir)
        backend.save("d1/d2/f", b"data")

        backend.delete("d1/d2/f")

        assert not (base_dir / "d1").exists()
        assert base_dir.is_dir()
        assert list(base_dir.iterdir()) == []

    def test_pruning_stops_at_non_empty_directory(self, base_dir):
        backend = LocalStorageBackend(base_dir)
        backend.save("d1/keep", b"1")
        backend.save("d1/d2/d3/f", b"2")

        backend.delete("d1/d2/d3/f")

        assert not (base_dir / "d1" / "d2").exists()
        assert (base_dir / "d1" / "keep").read_bytes() == b"1"

    def test_delete_through_symlinked_dir_prunes_real_dir(self, base_dir, caplog):
        (base_dir / "real").mkdir()
        (base_dir / "alias").symlink_to(base_dir / "real")
        backend = LocalStorageBackend(base_dir)
        backend.save("alias/f", b"DATA")

        with caplog.at_level(logging.WARNING, logger="stor"):
            backend.delete("alias/f")

        assert not (base_dir / "real").exists()
        assert base_dir.is_dir()
        assert "Could not remove" not in caplog.text

    def test_delete_top_level_file_keeps_base(self, base_dir):
        backend = LocalStorageBackend(base_dir)
        backend.save("f", b"1")

        backend.delete("f")

        assert base_dir.is_dir()

    def test_delete_directory_does_not_exist(self, base_dir):
        (base_dir / "d").mkdir()
        backend = LocalStorageBackend(base_dir)

        with pytest.raises(PathDoesNotExistError):
            backend.delete("d")
        assert (base_dir / "d").is_dir()

    def test_failed_prune_still_deletes(self, base_dir, mocker, caplog):
        backend = LocalStorageBackend(base_dir)
        backend.save("d1/f", b"1")
        mocker.patch.object(pathlib.Path, "rmdir", side_effect=OSError("busy"))

        with caplog.at_level(logging.WARNING, logger="stor"):
            backend.delete("d1/f")

        assert backend.exist("d1/f") is False
        assert "Could not remove empty directory" in caplog.text
