# SPDX-License-Identifier: MIT
"""Shared pytest fixtures for stor tests."""

import pathlib

import pytest

from stor.storage.factory import default_registry, get_storage
from stor.storage.registry import TypeRegistry


@pytest.fixture
def base_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Create an empty base directory for a LocalDir backend."""
    store = tmp_path / "store"
    store.mkdir()
    return store


@pytest.fixture
def registry() -> TypeRegistry:
    """A registry with the built-in backends, independent per test."""
    return default_registry()


@pytest.fixture
def empty_registry() -> TypeRegistry:
    return TypeRegistry()


@pytest.fixture(autouse=True)
def clear_storage_cache():
    """Clear get_storage() cache before each test to ensure isolation."""
    get_storage.cache_clear()
    yield
    get_storage.cache_clear()
