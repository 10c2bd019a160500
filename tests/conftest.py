"""Shared pytest fixtures for autowire tests."""

import pytest

from autowire.container import Container
from autowire.lock_mode import LockMode


@pytest.fixture()
def container() -> Container:
    """Default container with exactly-once singleton construction."""
    return Container()


@pytest.fixture()
def container_without_locks() -> Container:
    """Container with singleton locking disabled."""
    return Container(lock_mode=LockMode.NONE)
