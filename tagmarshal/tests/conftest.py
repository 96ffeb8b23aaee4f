"""Unit tests configuration file."""

import pytest

from tagmarshal.codec import DescriptorCache, Options


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def cache():
    """A private descriptor cache so tests don't share state."""
    return DescriptorCache()


@pytest.fixture
def options(cache):
    return Options(cache=cache)
