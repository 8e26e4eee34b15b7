"""Pytest hooks and fixtures."""

import sys

import pytest


def pytest_configure(config):
    """Register custom markers (also in pyproject.toml)."""
    config.addinivalue_line(
        "markers",
        "unix_socket: needs Unix domain socket support (skipped on Windows)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip unix_socket tests where AF_UNIX servers are unavailable."""
    if sys.platform != "win32":
        return
    skip = pytest.mark.skip(reason="Unix domain sockets not available on Windows")
    for item in items:
        if "unix_socket" in item.keywords:
            item.add_marker(skip)
