# SPDX-License-Identifier: MIT
"""Mock storage backend for tests of code that consumes a :class:`Storage`.

Usage::

    from stor.storage.mock import new_mock_storage

    storage = new_mock_storage()
    storage.load.return_value = b"payload"
    assert storage.load("a/b", 100) == b"payload"
    storage.load.assert_called_once_with("a/b", 100)
"""

from __future__ import annotations

from unittest.mock import NonCallableMagicMock, create_autospec

from ..config import Conf
from .protocol import MOCK_TYPE, Storage


def new_mock_storage(conf: Conf | None = None) -> NonCallableMagicMock:
    """Return an autospecced :class:`Storage` that records every call.

    Method signatures are enforced, so calling an operation with the wrong
    arguments fails just as it would on a real backend.  ``type()`` reports
    ``"Mock"``; every other operation returns a plain mock until the test
    configures it.
    """
    storage = create_autospec(Storage, instance=True)
    storage.type.return_value = MOCK_TYPE
    return storage
