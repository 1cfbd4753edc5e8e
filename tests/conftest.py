"""Pytest configuration and shared fixtures."""

import logging
from collections.abc import Iterator

import pytest

# The unitduration testing plugin is registered via a ``pytest11`` entry
# point (pyproject.toml) for external consumers.  In our own test
# suite we disable it (``-p no:unitduration``) and load explicitly here
# instead, so that the import chain is measured by pytest-cov.
pytest_plugins = ["unitduration.testing._plugin"]


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    """Save and restore root logger handlers and level.

    Ensures tests that call ``configure_logging()`` (directly or via the
    CLI) don't leak handlers across subsequent tests.
    """
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    for h in root.handlers:
        if h not in original_handlers:
            h.close()
    root.handlers = original_handlers
    root.setLevel(original_level)
