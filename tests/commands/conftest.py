"""Fixtures for CLI command tests."""

from contextlib import ExitStack
from unittest.mock import patch

import httpx
import pytest

from tasksync.config import ConfigManager
from tasksync.factory import ServiceFactory


@pytest.fixture()
def config_manager(isolated_dirs):
    return ConfigManager()


@pytest.fixture()
def factory(config_manager, db, server):
    """ServiceFactory over the in-memory store and the fake server."""
    return ServiceFactory(
        config_manager,
        connection=db,
        transport=httpx.MockTransport(server.handler),
    )


@pytest.fixture()
def use_factory(factory):
    """Make every command module build services from the test factory."""
    with ExitStack() as stack:
        for module in ("tasksync.commands.tasks", "tasksync.commands.sync"):
            stack.enter_context(patch(f"{module}.get_factory", return_value=factory))
        yield factory
