# SPDX-License-Identifier: MIT
"""Generic conformance tests for :class:`~stor.storage.protocol.Storage` backends.

Subclass :class:`StorageTester` in a test module and provide a ``storage``
fixture that returns a fresh, empty backend for every test::

    import pytest

    from stor.storage.tester import StorageTester


    class TestMyStorage(StorageTester):
        @pytest.fixture
        def storage(self, tmp_path):
            return MyStorage(tmp_path)

Requires the ``test`` extra (pytest).
"""

from __future__ import annotations

import pytest

from ..exceptions import InvalidPathError, PathDoesNotExistError, TooLargeError
from .protocol import Meta, Storage

MAX_SIZE = 1_000_000

STANDARD_FILES: dict[str, bytes] = {
    "file1": b"test123",
    "dir1/file2": b"test456",
    "dir1/file3": b"test789",
    "dir1/dir4/file5": b"test788909",
    "dir2/dir3/file4": b"test0123",
}

ESCAPING_PATHS = ["../file1", "..", "dir1/../../file1", "/file1"]


class StorageTester:
    """Behaviour every backend must share.  Not collected on its own."""

    @pytest.fixture
    def storage(self) -> Storage:
        raise NotImplementedError("Subclasses must provide a 'storage' fixture")

    @pytest.fixture
    def filled(self, storage: Storage) -> Storage:
        for path, content in STANDARD_FILES.items():
            storage.save(path, content)
        return storage

    # ------------------------------------------------------------------
    # Protocol conformance
    # ------------------------------------------------------------------

    def test_is_storage(self, storage):
        assert isinstance(storage, Storage)

    def test_type_is_str(self, storage):
        assert isinstance(storage.type(), str)
        assert storage.type()

    # ------------------------------------------------------------------
    # meta
    # ------------------------------------------------------------------

    def test_meta(self, filled):
        assert filled.meta("dir1/file3") == Meta(size=7)

    def test_meta_nonexistent(self, filled):
        with pytest.raises(PathDoesNotExistError):
            filled.meta("dir1/file1")

    def test_meta_directory_is_not_a_file(self, filled):
        with pytest.raises(PathDoesNotExistError):
            filled.meta("dir1")

    @pytest.mark.parametrize("path", ESCAPING_PATHS)
    def test_meta_escapes(self, filled, path):
        with pytest.raises(InvalidPathError):
            filled.meta(path)

    # ------------------------------------------------------------------
    # list
    # ------------------------------------------------------------------

    def test_list_root(self, filled):
        assert filled.list("") == (["file1"], ["dir1", "dir2"])

    def test_list_dot(self, filled):
        assert filled.list(".") == (["file1"], ["dir1", "dir2"])

    def test_list_dir(self, filled):
        assert filled.list("dir1") == (["dir1/file2", "dir1/file3"], ["dir1/dir4"])

    def test_list_unclean_path(self, filled):
        assert filled.list("dir1//") == (["dir1/file2", "dir1/file3"], ["dir1/dir4"])

    def test_list_nested_dir(self, filled):
        assert filled.list("dir2") == ([], ["dir2/dir3"])
        assert filled.list("dir2/dir3") == (["dir2/dir3/file4"], [])

    def test_list_nonexistent(self, filled):
        assert filled.list("nope") == ([], [])

    def test_list_empty_storage(self, storage):
        assert storage.list("") == ([], [])

    @pytest.mark.parametrize("path", ESCAPING_PATHS)
    def test_list_escapes(self, storage, path):
        with pytest.raises(InvalidPathError):
            storage.list(path)

    # ------------------------------------------------------------------
    # exist
    # ------------------------------------------------------------------

    def test_exist(self, filled):
        assert filled.exist("file1") is True
        assert filled.exist("dir1/dir4/file5") is True

    def test_exist_nonexistent(self, filled):
        assert filled.exist("dir1/file1") is False
        assert filled.exist("file1/below-a-file") is False

    @pytest.mark.parametrize("path", ESCAPING_PATHS)
    def test_exist_escapes(self, filled, path):
        with pytest.raises(InvalidPathError):
            filled.exist(path)

    # ------------------------------------------------------------------
    # load
    # ------------------------------------------------------------------

    def test_load(self, filled):
        assert filled.load("file1", MAX_SIZE) == b"test123"

    def test_load_in_dir(self, filled):
        assert filled.load("dir1/file2", MAX_SIZE) == b"test456"

    def test_load_too_large(self, filled):
        with pytest.raises(TooLargeError):
            filled.load("file1", 6)

    def test_load_exact_max_size(self, filled):
        assert filled.load("file1", 7) == b"test123"

    def test_load_nonexistent(self, filled):
        with pytest.raises(PathDoesNotExistError):
            filled.load("dir1/file1", MAX_SIZE)

    @pytest.mark.parametrize("path", ESCAPING_PATHS)
    def test_load_escapes(self, filled, path):
        with pytest.raises(InvalidPathError):
            filled.load(path, MAX_SIZE)

    # ------------------------------------------------------------------
    # save
    # ------------------------------------------------------------------

    def test_save(self, filled):
        filled.save("dir1/new-file.txt", b"my-data")
        assert filled.load("dir1/new-file.txt", MAX_SIZE) == b"my-data"

    def test_save_overwrite(self, filled):
        filled.save("file1", b"my-data")
        assert filled.load("file1", MAX_SIZE) == b"my-data"
        assert filled.meta("file1") == Meta(size=7)

    def test_save_empty_content(self, storage):
        storage.save("empty", b"")
        assert storage.load("empty", 0) == b""

    def test_save_unclean_path(self, storage):
        storage.save("./a//b/", b"x")
        assert storage.load("a/b", MAX_SIZE) == b"x"

    def test_save_does_not_alias_caller_buffer(self, storage):
        buf = bytearray(b"abc")
        storage.save("buf", buf)
        buf[0] = ord("z")
        assert storage.load("buf", MAX_SIZE) == b"abc"

    def test_save_root_rejected(self, storage):
        with pytest.raises(InvalidPathError):
            storage.save("", b"x")

    @pytest.mark.parametrize("path", ESCAPING_PATHS)
    def test_save_escapes(self, filled, path):
        with pytest.raises(InvalidPathError):
            filled.save(path, b"qwerty")

    # ------------------------------------------------------------------
    # delete
    # ------------------------------------------------------------------

    def test_delete(self, filled):
        filled.delete("dir1/file2")

        assert filled.exist("dir1/file2") is False
        with pytest.raises(PathDoesNotExistError):
            filled.load("dir1/file2", MAX_SIZE)
        assert filled.list("dir1") == (["dir1/file3"], ["dir1/dir4"])

    def test_delete_removes_empty_dirs(self, filled):
        filled.delete("dir2/dir3/file4")

        assert filled.list("") == (["file1"], ["dir1"])

    def test_delete_nonexistent(self, storage):
        with pytest.raises(PathDoesNotExistError):
            storage.delete("dir1/file1")

    def test_delete_all(self, filled):
        for path in STANDARD_FILES:
            filled.delete(path)

        assert filled.list("") == ([], [])

    @pytest.mark.parametrize("path", ESCAPING_PATHS)
    def test_delete_escapes(self, filled, path):
        with pytest.raises(InvalidPathError):
            filled.delete(path)
