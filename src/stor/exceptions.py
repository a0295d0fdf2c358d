# SPDX-License-Identifier: MIT
"""Exception hierarchy for stor.

Every storage failure carries an :class:`ErrorKind` so callers can classify
errors without looking at the rendered message.  Registry misconfiguration
is reported separately via :class:`TypeRegistrationError`, which is not a
:class:`StorageError` and is not meant to be caught.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable


class ErrorKind(enum.Enum):
    """Classification tag shared by all :class:`StorageError` subclasses."""

    INVALID_PATH = "invalid_path"
    PATH_DOES_NOT_EXIST = "path_does_not_exist"
    TOO_LARGE = "too_large"
    UNSPECIFIED_TYPE = "unspecified_type"
    UNREGISTERED_TYPE = "unregistered_type"
    SUBSTRATE = "substrate"


class StorageError(Exception):
    """Base class for recoverable storage errors."""

    kind: ErrorKind


class InvalidPathError(StorageError, ValueError):
    """A path failed sanitization or resolves outside the backend's confinement."""

    kind = ErrorKind.INVALID_PATH

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        msg = f"Invalid path {path!r}: {reason}" if reason else f"Invalid path {path!r}"
        super().__init__(msg)


class PathDoesNotExistError(StorageError):
    kind = ErrorKind.PATH_DOES_NOT_EXIST

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Path does not exist: {path!r}")


class TooLargeError(StorageError):
    """Stored content exceeds the size accepted by the caller."""

    kind = ErrorKind.TOO_LARGE

    def __init__(self, what: str, max_size: int | None = None) -> None:
        self.what = what
        self.max_size = max_size
        if max_size is None:
            msg = f"{what!r} is too large"
        else:
            msg = f"{what!r} is larger than {max_size} bytes"
        super().__init__(msg)


class UnspecifiedTypeError(StorageError):
    kind = ErrorKind.UNSPECIFIED_TYPE

    def __init__(self) -> None:
        super().__init__("Storage type is not specified")


class UnregisteredTypeError(StorageError):
    """The configuration names a storage type nobody registered."""

    kind = ErrorKind.UNREGISTERED_TYPE

    def __init__(self, type_name: str, registered: Iterable[str] = ()) -> None:
        self.type_name = type_name
        self.registered = tuple(registered)
        msg = f"Unregistered storage type: {type_name!r}"
        if self.registered:
            msg += f" (valid types are: {', '.join(self.registered)})"
        super().__init__(msg)


class SubstrateError(StorageError):
    """An underlying OS / filesystem failure that no other kind describes."""

    kind = ErrorKind.SUBSTRATE

    def __init__(self, path: str, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Storage operation on {path!r} failed: {cause}")


class TypeRegistrationError(RuntimeError):
    """Invalid or duplicate storage type registration.

    This is a programming error detected during application wiring and
    should abort startup rather than be handled.
    """


# ------------------------------------------------------------------
# Classification predicates
# ------------------------------------------------------------------


def _is_kind(err: BaseException | None, kind: ErrorKind) -> bool:
    return isinstance(err, StorageError) and err.kind is kind


def is_invalid_path_error(err: BaseException | None) -> bool:
    return _is_kind(err, ErrorKind.INVALID_PATH)


def is_path_does_not_exist_error(err: BaseException | None) -> bool:
    return _is_kind(err, ErrorKind.PATH_DOES_NOT_EXIST)


def is_too_large_error(err: BaseException | None) -> bool:
    return _is_kind(err, ErrorKind.TOO_LARGE)


def is_unspecified_type_error(err: BaseException | None) -> bool:
    return _is_kind(err, ErrorKind.UNSPECIFIED_TYPE)


def is_unregistered_type_error(err: BaseException | None) -> bool:
    return _is_kind(err, ErrorKind.UNREGISTERED_TYPE)
