"""Pytest configuration and shared fixtures."""

pytest_plugins = [
    "tests.fixtures.store",
    "tests.fixtures.api",
]
