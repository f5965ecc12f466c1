"""Shared fixtures for the test suite."""

import pytest

from marketmatch.config import CONFIG_LOCATION_ENV, ConfigStore
from marketmatch.logging.context import clear_log_context
from marketmatch.persistence import close_database, init_database

from tests.helpers import FIXED_NOW, FakeClock


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep the developer's environment out of config resolution."""
    for name in (CONFIG_LOCATION_ENV, "MATCHING_CONFIG_TTL", "LOG_LEVEL", "LOG_FORMAT", "DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def config_store(fake_clock):
    """Config store over the bundled default document."""
    return ConfigStore(clock=fake_clock)


@pytest.fixture
def fixed_now():
    return lambda: FIXED_NOW


@pytest.fixture
def memory_db():
    """Initialize an in-memory SQLite database for one test."""
    init_database("sqlite:///:memory:")
    yield
    close_database()
