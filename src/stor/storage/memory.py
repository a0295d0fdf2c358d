# SPDX-License-Identifier: MIT
"""In-memory storage backend.

Keeps every blob in a dict keyed by canonical path.  Useful as a cache or
for tests.  Not safe for concurrent mutation; callers sharing an instance
across threads must serialize access themselves.
"""

from __future__ import annotations

from ..config import Conf
from ..exceptions import InvalidPathError, PathDoesNotExistError, TooLargeError
from ..security import DELIMITER, clean_path
from .protocol import MEMORY_TYPE, Meta


class MemoryStorageBackend:
    """Volatile storage backed by a ``dict[str, bytes]``.

    Content is copied into immutable ``bytes`` on save, so neither the caller
    nor the backend can observe the other mutating a buffer afterwards.
    """

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    @classmethod
    def from_conf(cls, conf: Conf) -> MemoryStorageBackend:
        """Registry constructor.  The configuration has no effect."""
        return cls()

    def meta(self, path: str) -> Meta:
        clean = clean_path(path)
        try:
            data = self._data[clean]
        except KeyError:
            raise PathDoesNotExistError(clean) from None
        return Meta(size=len(data))

    def list(self, path: str) -> tuple[list[str], list[str]]:
        clean = clean_path(path)
        prefix = clean + DELIMITER if clean else ""

        files: list[str] = []
        dirs: set[str] = set()
        for key in self._data:
            if not key.startswith(prefix):
                continue
            name, sep, _ = key[len(prefix) :].partition(DELIMITER)
            if sep:
                dirs.add(prefix + name)
            else:
                files.append(key)
        return sorted(files), sorted(dirs)

    def exist(self, path: str) -> bool:
        return clean_path(path) in self._data

    def load(self, path: str, max_size: int) -> bytes:
        clean = clean_path(path)
        try:
            data = self._data[clean]
        except KeyError:
            raise PathDoesNotExistError(clean) from None
        if len(data) > max_size:
            raise TooLargeError(clean, max_size)
        return data

    def save(self, path: str, data: bytes) -> None:
        clean = clean_path(path)
        if not clean:
            raise InvalidPathError(path, "the storage root cannot hold content")
        self._data[clean] = bytes(data)

    def delete(self, path: str) -> None:
        clean = clean_path(path)
        try:
            del self._data[clean]
        except KeyError:
            raise PathDoesNotExistError(clean) from None

    def type(self) -> str:
        return MEMORY_TYPE
