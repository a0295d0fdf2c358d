# SPDX-License-Identifier: MIT
"""Path sanitization and confinement checks.

Storage paths are always slash-separated, relative to the storage root, and
restricted to ``[A-Za-z0-9._-]`` plus ``/``.  :func:`clean_path` is the only
place that decides whether a caller-supplied path is acceptable; every
backend runs it before touching its substrate.
"""

from __future__ import annotations

import os
import posixpath
import string

from .exceptions import InvalidPathError

DELIMITER = "/"

VALID_BYTES = frozenset((string.ascii_letters + string.digits + "._-" + DELIMITER).encode("ascii"))

FORBIDDEN = ("..",)


def clean_path(file_path: str) -> str:
    """Validate and normalize a storage path.

    Checks run in a fixed order and the first failure wins:

    1. forbidden combinations (``..``) anywhere in the string
    2. absolute paths (leading ``/``)
    3. bytes outside :data:`VALID_BYTES`

    The surviving path is normalized: repeated separators, ``.`` segments
    and trailing separators are removed.  The storage root is ``""``.

    Args:
        file_path: Slash-separated path supplied by the caller.

    Returns:
        The canonical path.

    Raises:
        InvalidPathError: If any check fails.
    """
    for forbid in FORBIDDEN:
        if forbid in file_path:
            raise InvalidPathError(file_path, f"contains forbidden combination {forbid!r}")

    if file_path.startswith(DELIMITER):
        raise InvalidPathError(file_path, "absolute paths are not allowed")

    # surrogateescape maps undecodable bytes (\udc80-\udcff) back to the raw byte
    try:
        raw = file_path.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError as e:
        raise InvalidPathError(
            file_path,
            f"forbidden character {file_path[e.start]!r} at index {e.start}",
        ) from None

    for index, byte in enumerate(raw):
        if byte not in VALID_BYTES:
            raise InvalidPathError(
                file_path,
                f"forbidden byte 0x{byte:02x} ({chr(byte)!r}) at index {index}",
            )

    cleaned = posixpath.normpath(file_path) if file_path else ""
    if cleaned == ".":
        cleaned = ""
    return cleaned


def join_path(prefix: str, name: str) -> str:
    """Join a canonical prefix and an entry name into a storage path."""
    return f"{prefix}{DELIMITER}{name}" if prefix else name


def _with_trailing_sep(path: str) -> str:
    return path if path.endswith(os.sep) else path + os.sep


def escapes_dir(path: str | os.PathLike[str], base_dir: str | os.PathLike[str]) -> bool:
    """Return ``True`` if *path* is not *base_dir* or nested below it.

    Both sides are made absolute and compared with a trailing separator so a
    base of ``/a/b`` does not match the sibling ``/a/bc``.
    """
    try:
        abs_path = os.path.abspath(path)
        abs_base = os.path.abspath(base_dir)
    except (OSError, ValueError):
        return True
    return not _with_trailing_sep(abs_path).startswith(_with_trailing_sep(abs_base))
