# SPDX-License-Identifier: MIT
"""Storage backend protocol and shared types.

Defines the interface that all storage backends must implement.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

MAX_TYPE_LEN = 20
"""Maximum length of a storage type identifier."""

UNSPECIFIED_TYPE = ""
"""Storage type value meaning "no type chosen"."""

MEMORY_TYPE = "Memory"
LOCALDIR_TYPE = "LocalDir"
MOCK_TYPE = "Mock"


@dataclass(frozen=True)
class Meta:
    """Metadata about a stored file.

    ``size`` is ``None`` when the backend cannot tell.
    """

    size: int | None


@runtime_checkable
class Storage(Protocol):
    """Protocol for loading and saving blobs addressed by hierarchical paths.

    All paths are slash-separated (on every platform) and relative to the
    storage root.  Implementations run every path through
    :func:`stor.security.clean_path` before touching their substrate, so an
    invalid path never causes a partial state change.
    """

    def meta(self, path: str) -> Meta:
        """Return metadata about a file.

        Raises:
            PathDoesNotExistError: If no file exists at *path*.
            InvalidPathError: If *path* is invalid.
        """
        ...

    def list(self, path: str) -> tuple[list[str], list[str]]:
        """List the entries directly within a directory.

        Returns:
            ``(files, directories)``, both sorted and given as full paths
            from the storage root.  A missing directory lists as empty.

        Raises:
            InvalidPathError: If *path* is invalid.
        """
        ...

    def exist(self, path: str) -> bool:
        """Check whether *path* exists."""
        ...

    def load(self, path: str, max_size: int) -> bytes:
        """Return the full content of a file.

        Raises:
            PathDoesNotExistError: If no file exists at *path*.
            TooLargeError: If the file is larger than *max_size* bytes; no
                content is returned.
            InvalidPathError: If *path* is invalid.
        """
        ...

    def save(self, path: str, data: bytes) -> None:
        """Write *data* to *path*, replacing any existing content."""
        ...

    def delete(self, path: str) -> None:
        """Remove a file.

        Raises:
            PathDoesNotExistError: If no file exists at *path*.
            InvalidPathError: If *path* is invalid.
        """
        ...

    def type(self) -> str:
        """Return the registered storage type of this backend."""
        ...
