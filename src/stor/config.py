# SPDX-License-Identifier: MIT
"""Configuration management for stor.

This module handles:
- Logging setup
- The storage configuration model
- Loading the configuration from environment variables
"""

from __future__ import annotations

import logging
import os
import sys

from pydantic import BaseModel, field_validator

# ---------- Logging configuration ----------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("stor")


# ---------- Storage configuration ----------
class Conf(BaseModel, frozen=True):
    """Configuration for creating a storage backend.

    ``type`` selects the registered backend; the empty string means no type
    was chosen.  ``path`` is backend specific (the base directory for
    ``LocalDir``) and ignored by backends that have no substrate location.
    """

    type: str = ""
    path: str = ""

    @field_validator("type", "path")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()

    @classmethod
    def from_env(cls) -> Conf:
        """Build a configuration from ``STORAGE_BACKEND`` and ``STORAGE_PATH``.

        Returns:
            Conf populated from the environment (unset variables give the
            empty defaults).
        """
        return cls(
            type=os.getenv("STORAGE_BACKEND", ""),
            path=os.getenv("STORAGE_PATH", ""),
        )
