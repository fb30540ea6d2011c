"""Shared pytest configuration and fixtures for jxauth tests."""

import os

import pytest

from jxauth.core.game import GameSessionClient
from jxauth.core.oauth import InMemorySessionStore, MockHttpClient, TokenExchanger
from tests.fixtures.sessions import FakeClock

# Import HTTP mocking fixtures from fixtures module
pytest_plugins = ["tests.fixtures.mock_http"]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store():
    return InMemorySessionStore()


@pytest.fixture
def token_http():
    """Token endpoint double; tests queue replies on ``.replies``."""
    return MockHttpClient()


@pytest.fixture
def game_http():
    """Game API double answering every session creation with ``S1``."""
    return MockHttpClient(json_response={"sessionId": "S1"})


@pytest.fixture
def exchanger(token_http, clock):
    return TokenExchanger(token_http, clock=clock)


@pytest.fixture
def game_client(game_http):
    return GameSessionClient(game_http)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep every test away from the real data directory and JXAUTH_* settings."""
    for key in list(os.environ):
        if key.startswith("JXAUTH_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
    monkeypatch.setenv("JXAUTH_HOME", str(tmp_path / "jxauth"))
    monkeypatch.setenv("JXAUTH_OPEN_BROWSER", "false")
    yield


def pytest_collection_modifyitems(config, items):
    """Add markers to tests based on their location."""
    for item in items:
        if "tests/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
