# SPDX-License-Identifier: MIT
"""Storage backend factory.

:func:`default_registry` is the composition root that wires the built-in
backends into a :class:`~stor.storage.registry.TypeRegistry`.
:func:`new_storage` builds a backend from a configuration, and
:func:`get_storage` returns a process-wide backend configured from the
``STORAGE_BACKEND`` / ``STORAGE_PATH`` env vars.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from ..config import Conf
from .local import LocalStorageBackend
from .memory import MemoryStorageBackend
from .mock import new_mock_storage
from .protocol import LOCALDIR_TYPE, MEMORY_TYPE, MOCK_TYPE, Storage
from .registry import TypeRegistry

logger = logging.getLogger("stor")


def default_registry() -> TypeRegistry:
    """Return a new registry with the built-in backends registered."""
    registry = TypeRegistry()
    registry.register(MEMORY_TYPE, MemoryStorageBackend.from_conf)
    registry.register(LOCALDIR_TYPE, LocalStorageBackend.from_conf)
    registry.register(MOCK_TYPE, new_mock_storage)
    return registry


def new_storage(conf: Conf, registry: TypeRegistry | None = None) -> Storage:
    """Build the backend selected by *conf*.

    Args:
        conf: Storage configuration.
        registry: Registry to look the type up in.  Defaults to a fresh
            :func:`default_registry`.

    Raises:
        UnspecifiedTypeError: If ``conf.type`` is empty.
        UnregisteredTypeError: If ``conf.type`` is not registered.
    """
    if registry is None:
        registry = default_registry()
    return registry.construct(conf)


@lru_cache(maxsize=1)
def get_storage() -> Storage:
    """Return the configured :class:`Storage` (cached singleton).

    Configuration
    -------------
    ``STORAGE_BACKEND``
        ``"Memory"`` – volatile in-process storage.
        ``"LocalDir"`` – files below ``STORAGE_PATH``, which must be an
            existing directory.
    """
    conf = Conf.from_env()
    storage = new_storage(conf)
    logger.info("Using %s storage", storage.type())
    return storage
