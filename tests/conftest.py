"""Shared pytest fixtures for phiwire tests."""

import pytest

from phiwire.container import Container
from phiwire.introspection import SignatureIntrospector
from phiwire.lock_mode import LockMode

pytest_plugins = ["phiwire.integrations.pytest_plugin"]


@pytest.fixture()
def container() -> Container:
    """Default container with thread locking and cycle detection."""
    return Container()


@pytest.fixture()
def container_unlocked() -> Container:
    """Container with LockMode.NONE."""
    return Container(lock_mode=LockMode.NONE)


@pytest.fixture()
def introspector() -> SignatureIntrospector:
    """SignatureIntrospector instance."""
    return SignatureIntrospector()
