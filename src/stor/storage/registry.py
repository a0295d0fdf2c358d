# SPDX-License-Identifier: MIT
"""Storage type registry.

Binds a storage type identifier (the ``type`` field of :class:`~stor.config.Conf`)
to the constructor that builds that backend.  A registry is an ordinary
object created at the composition root; see
:func:`stor.storage.factory.default_registry`.

The registry does no locking.  Register every type during application
wiring, before the first :meth:`TypeRegistry.construct` call.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..config import Conf
from ..exceptions import TypeRegistrationError, UnregisteredTypeError, UnspecifiedTypeError
from .protocol import MAX_TYPE_LEN, UNSPECIFIED_TYPE, Storage

logger = logging.getLogger("stor")

Constructor = Callable[[Conf], Storage]
"""Builds a backend from a configuration; may raise backend-specific errors."""


class TypeRegistry:
    """Mapping from storage type identifiers to backend constructors."""

    def __init__(self) -> None:
        self._constructors: dict[str, Constructor] = {}

    def register(self, storage_type: str, constructor: Constructor) -> None:
        """Register *constructor* under *storage_type*.

        Raises:
            TypeRegistrationError: If the type is unspecified, longer than
                :data:`MAX_TYPE_LEN`, or already registered.  These are wiring
                bugs and are not meant to be handled.
        """
        if storage_type == UNSPECIFIED_TYPE:
            raise TypeRegistrationError("Cannot register the unspecified storage type")
        if len(storage_type) > MAX_TYPE_LEN:
            raise TypeRegistrationError(
                f"Storage type {storage_type!r} is longer than {MAX_TYPE_LEN} characters"
            )
        if storage_type in self._constructors:
            raise TypeRegistrationError(f"Storage type {storage_type!r} is already registered")

        self._constructors[storage_type] = constructor
        logger.debug("Registered storage type %s", storage_type)

    def construct(self, conf: Conf) -> Storage:
        """Build the backend selected by ``conf.type``.

        Errors raised by the constructor propagate unchanged.

        Raises:
            UnspecifiedTypeError: If ``conf.type`` is empty.
            UnregisteredTypeError: If nothing is registered under ``conf.type``.
        """
        if conf.type == UNSPECIFIED_TYPE:
            raise UnspecifiedTypeError()

        constructor = self._constructors.get(conf.type)
        if constructor is None:
            raise UnregisteredTypeError(conf.type, self.types())

        logger.debug("Constructing %s storage", conf.type)
        return constructor(conf)

    def types(self) -> tuple[str, ...]:
        """Return the registered storage types, sorted."""
        return tuple(sorted(self._constructors))

    def __contains__(self, storage_type: object) -> bool:
        return storage_type in self._constructors

    def __len__(self) -> int:
        return len(self._constructors)
