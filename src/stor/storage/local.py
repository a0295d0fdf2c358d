# SPDX-License-Identifier: MIT
"""Local filesystem storage backend.

Stores every blob as a file below a fixed base directory.  Storage paths are
sanitized with :func:`~stor.security.clean_path`, joined onto the base
directory, and checked again against the base directory (after resolving
symlinks) so that nothing outside it can be read or written.

There is no in-process locking.  Two race windows are accepted: between the
size check and the read in :meth:`LocalStorageBackend.load`, and between
creating parent directories and writing the file in
:meth:`LocalStorageBackend.save`.
"""

from __future__ import annotations

import logging
import os
import pathlib
import stat
import uuid

from ..config import Conf
from ..exceptions import InvalidPathError, PathDoesNotExistError, SubstrateError, TooLargeError
from ..security import DELIMITER, clean_path, escapes_dir, join_path
from .protocol import LOCALDIR_TYPE, Meta

logger = logging.getLogger("stor")


FILE_MODE = 0o660
"""Permissions for stored files, before the process umask is applied."""


def _write_atomic(path: pathlib.Path, data: bytes) -> None:
    """Write *data* to a temp file next to *path*, then rename it into place."""
    tmp = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
    fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0), FILE_MODE)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


class LocalStorageBackend:
    """Storage in a directory of the local filesystem.

    Args:
        base_dir: Existing directory that confines all storage paths.  It is
            made absolute (and symlink-free) once, at construction.

    Raises:
        RuntimeError: If *base_dir* is empty, cannot be resolved, does not
            exist, or is not a directory.
    """

    def __init__(self, base_dir: str | os.PathLike[str]) -> None:
        if not str(base_dir).strip():
            raise RuntimeError("LocalDir storage requires a base directory")

        try:
            path = pathlib.Path(base_dir).resolve()
        except (OSError, RuntimeError, ValueError) as e:
            raise RuntimeError(f"Invalid base dir '{base_dir}': {e}") from e

        if not path.exists():
            raise RuntimeError(f"Unable to use local dir {path}: it does not exist")
        if not path.is_dir():
            raise RuntimeError(f"Local dir {path} is not a directory")

        self._base_dir = path

    @classmethod
    def from_conf(cls, conf: Conf) -> LocalStorageBackend:
        """Registry constructor; ``conf.path`` is the base directory."""
        if conf.type and conf.type != LOCALDIR_TYPE:
            raise RuntimeError(f"Invalid storage type {conf.type!r}, expected {LOCALDIR_TYPE!r}")
        backend = cls(conf.path)
        logger.debug("LocalDir storage rooted at %s", backend.base_dir)
        return backend

    @property
    def base_dir(self) -> pathlib.Path:
        return self._base_dir

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resolve(self, path: str) -> tuple[str, pathlib.Path]:
        """Return ``(canonical path, absolute filesystem path)`` for *path*.

        The filesystem path is checked twice against the base directory: as
        joined, and with symlinks resolved.

        Raises:
            InvalidPathError: If *path* is invalid or escapes the base directory.
        """
        clean = clean_path(path)
        full = self._base_dir.joinpath(*clean.split(DELIMITER)) if clean else self._base_dir

        try:
            real = full.resolve()
        except (OSError, RuntimeError) as e:
            raise InvalidPathError(clean, f"cannot be resolved: {e}") from e

        if escapes_dir(full, self._base_dir) or escapes_dir(real, self._base_dir):
            raise InvalidPathError(clean, "escapes the base directory")
        return clean, full

    def _stat_file(self, clean: str, full: pathlib.Path) -> os.stat_result:
        """Stat a file; directories and missing entries do not exist as blobs."""
        try:
            st = full.stat()
        except (FileNotFoundError, NotADirectoryError):
            raise PathDoesNotExistError(clean) from None
        except OSError as e:
            raise SubstrateError(clean, e) from e
        if stat.S_ISDIR(st.st_mode):
            raise PathDoesNotExistError(clean)
        return st

    def _prune_empty_parents(self, full: pathlib.Path) -> None:
        """Remove directories left empty by a delete, stopping below the base.

        Walks the real (symlink-resolved) directory that held the file and its
        ancestors, one per path segment, and stops at the first non-empty one.
        """
        try:
            parent = full.parent.resolve()
        except (OSError, RuntimeError) as e:
            logger.warning("Could not resolve %s for pruning: %s", full.parent, e)
            return
        if escapes_dir(parent, self._base_dir):
            return

        relative = parent.relative_to(self._base_dir)
        for ancestor in [relative, *list(relative.parents)[:-1]]:
            directory = self._base_dir / ancestor
            if directory == self._base_dir or escapes_dir(directory, self._base_dir):
                break
            try:
                if any(directory.iterdir()):
                    break
                directory.rmdir()
            except OSError as e:
                logger.warning("Could not remove empty directory %s: %s", directory, e)
                break
            logger.debug("Removed empty directory %s", directory)

    # ------------------------------------------------------------------
    # Metadata / listing
    # ------------------------------------------------------------------

    def meta(self, path: str) -> Meta:
        clean, full = self._resolve(path)
        st = self._stat_file(clean, full)
        return Meta(size=st.st_size)

    def list(self, path: str) -> tuple[list[str], list[str]]:
        clean, full = self._resolve(path)
        files: list[str] = []
        dirs: list[str] = []
        try:
            for entry in full.iterdir():
                logical = join_path(clean, entry.name)
                if entry.is_dir():
                    dirs.append(logical)
                else:
                    files.append(logical)
        except (FileNotFoundError, NotADirectoryError):
            return [], []
        except OSError as e:
            raise SubstrateError(clean, e) from e
        return sorted(files), sorted(dirs)

    def exist(self, path: str) -> bool:
        clean, full = self._resolve(path)
        try:
            full.stat()
        except (FileNotFoundError, NotADirectoryError):
            return False
        except OSError as e:
            raise SubstrateError(clean, e) from e
        return True

    # ------------------------------------------------------------------
    # Byte-level I/O
    # ------------------------------------------------------------------

    def load(self, path: str, max_size: int) -> bytes:
        clean, full = self._resolve(path)
        st = self._stat_file(clean, full)
        if st.st_size > max_size:
            raise TooLargeError(clean, max_size)
        try:
            return full.read_bytes()
        except FileNotFoundError:
            raise PathDoesNotExistError(clean) from None
        except OSError as e:
            raise SubstrateError(clean, e) from e

    def save(self, path: str, data: bytes) -> None:
        clean, full = self._resolve(path)
        if not clean:
            raise InvalidPathError(path, "the storage root cannot hold content")
        try:
            full.parent.mkdir(parents=True, exist_ok=True)
            _write_atomic(full, data)
        except OSError as e:
            raise SubstrateError(clean, e) from e
        logger.debug("Saved %d bytes to %s", len(data), clean)

    def delete(self, path: str) -> None:
        clean, full = self._resolve(path)
        self._stat_file(clean, full)
        try:
            full.unlink()
        except FileNotFoundError:
            raise PathDoesNotExistError(clean) from None
        except OSError as e:
            raise SubstrateError(clean, e) from e
        logger.debug("Deleted %s", clean)
        self._prune_empty_parents(full)

    def type(self) -> str:
        return LOCALDIR_TYPE
