"""Global test fixtures."""

import logfire
import pytest

from namewatch.application import api

# Spans stay in-process during tests
logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture(autouse=True)
def _reset_watchers():
    """Each test starts without cached per-connection watchers."""
    api.reset()
    yield
    api.reset()
