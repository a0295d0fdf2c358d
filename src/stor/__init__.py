# SPDX-License-Identifier: MIT
"""stor - a uniform blob storage abstraction with interchangeable backends."""

from .config import Conf
from .exceptions import (
    ErrorKind,
    InvalidPathError,
    PathDoesNotExistError,
    StorageError,
    SubstrateError,
    TooLargeError,
    TypeRegistrationError,
    UnregisteredTypeError,
    UnspecifiedTypeError,
)
from .security import clean_path
from .storage import Meta, Storage, TypeRegistry, default_registry, get_storage, new_storage

__all__ = [
    "Conf",
    "ErrorKind",
    "InvalidPathError",
    "Meta",
    "PathDoesNotExistError",
    "Storage",
    "StorageError",
    "SubstrateError",
    "TooLargeError",
    "TypeRegistrationError",
    "TypeRegistry",
    "UnregisteredTypeError",
    "UnspecifiedTypeError",
    "clean_path",
    "default_registry",
    "get_storage",
    "new_storage",
]
