# SPDX-License-Identifier: MIT
"""Pluggable blob storage backends.

Every backend implements the :class:`Storage` protocol over its own
substrate: an in-memory dict (``Memory``), a directory on local disk
(``LocalDir``), or a call-recording mock (``Mock``).

Usage::

    from stor.config import Conf
    from stor.storage import default_registry, new_storage

    storage = new_storage(Conf(type="LocalDir", path="/srv/blobs"), default_registry())
    storage.save("reports/2024/q1.pdf", pdf_bytes)
    data = storage.load("reports/2024/q1.pdf", max_size=10_000_000)
"""

from .factory import default_registry, get_storage, new_storage
from .local import LocalStorageBackend
from .memory import MemoryStorageBackend
from .protocol import LOCALDIR_TYPE, MAX_TYPE_LEN, MEMORY_TYPE, MOCK_TYPE, UNSPECIFIED_TYPE, Meta, Storage
from .registry import TypeRegistry

__all__ = [
    "LOCALDIR_TYPE",
    "MAX_TYPE_LEN",
    "MEMORY_TYPE",
    "MOCK_TYPE",
    "UNSPECIFIED_TYPE",
    "LocalStorageBackend",
    "MemoryStorageBackend",
    "Meta",
    "Storage",
    "TypeRegistry",
    "default_registry",
    "get_storage",
    "new_storage",
]
