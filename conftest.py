"""
Repository-level pytest configuration.

Why this exists:
  - Command line options must be registered by a rootdir conftest so they
    are available whichever sub-directory pytest is pointed at
  - Expose the repo root to fixtures that build artifact paths

Defaults (base URLs, credentials) live in config/config.yaml and can be
overridden from the environment; nothing here embeds secrets.
"""

from __future__ import annotations

from pathlib import Path

import pytest


def pytest_addoption(parser):
    """Register suite-wide command line options."""
    group = parser.getgroup("booker", "Restful Booker suites")
    group.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run tests that talk to the live platform (also enabled by RUN_LIVE=1)",
    )
    group.addoption(
        "--browser",
        action="store",
        default=None,
        choices=("chromium", "firefox", "webkit"),
        help="Browser for UI tests (defaults to ui.browser)",
    )
    group.addoption(
        "--headed",
        action="store_true",
        default=False,
        help="Run the browser with a visible window",
    )


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent
