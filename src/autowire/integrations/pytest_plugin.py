from __future__ import annotations

import pytest

from autowire.container import Container


@pytest.fixture()
def autowire_container() -> Container:
    """Create a per-test container.

    The fixture is function-scoped, so singletons are isolated between tests
    unless users override fixture scope explicitly. Enable the plugin with
    ``pytest_plugins = ["autowire.integrations.pytest_plugin"]`` in a
    ``conftest.py``.

    Returns:
        A new ``Container`` instance.

    """
    return Container()
