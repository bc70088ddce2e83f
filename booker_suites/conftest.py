"""
================================================================================
Suite Pytest Configuration
================================================================================

Project-wide markers, live-test gating and the global setup / teardown that
brackets every run.

    - Tests under api_testing/ and ui_testing/ are marked ``api`` / ``ui`` and
      ``live``; live tests are skipped unless ``--live`` or ``RUN_LIVE=1``
    - Global setup initializes logging and creates the result directories
    - Global teardown logs the final status

================================================================================
"""

from __future__ import annotations

import os

import pytest

from booker_tools.common import ConfigLoader, ensure_directory, get_logger, init_logger


RESULTS_DIR = "test-results"
LOG_FILE = f"{RESULTS_DIR}/logs/test-run.log"
LIVE_ENV_FLAG = "RUN_LIVE"


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )
    config.addinivalue_line(
        "markers", "P3: Low priority tests - extensive validation"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression test suite"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests simulating user flows"
    )
    config.addinivalue_line(
        "markers", "live: Talks to the deployed platform (needs --live or RUN_LIVE=1)"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "api: API-specific tests"
    )
    config.addinivalue_line(
        "markers", "ui: UI-specific tests"
    )
    config.addinivalue_line(
        "markers", "mutation: Mutation/negative tests"
    )

    # Feature markers
    config.addinivalue_line(
        "markers", "auth: Tests related to authentication"
    )
    config.addinivalue_line(
        "markers", "booking: Tests related to room bookings"
    )
    config.addinivalue_line(
        "markers", "contact: Tests related to the contact form and messages"
    )
    config.addinivalue_line(
        "markers", "admin: Tests related to the admin panel"
    )


def _live_enabled(config) -> bool:
    return bool(config.getoption("--live")) or os.environ.get(LIVE_ENV_FLAG, "") in ("1", "true", "yes")


def pytest_collection_modifyitems(config, items):
    """
    Auto-mark tests by location and skip live tests unless enabled.
    """
    run_live = _live_enabled(config)
    skip_live = pytest.mark.skip(reason=f"live test: pass --live or set {LIVE_ENV_FLAG}=1")

    for item in items:
        path = str(item.fspath)

        if "api_testing" in path:
            item.add_marker(pytest.mark.api)
            item.add_marker(pytest.mark.live)

        if "ui_testing" in path:
            item.add_marker(pytest.mark.ui)
            item.add_marker(pytest.mark.live)

        if not run_live and "live" in item.keywords:
            item.add_marker(skip_live)


def pytest_sessionstart(session):
    """Global setup: logging sinks and artifact directories."""
    init_logger(log_file=LOG_FILE)
    log = get_logger("GlobalSetup")
    log.info("Starting global test setup")

    config = ConfigLoader()
    ensure_directory(RESULTS_DIR)
    ensure_directory(config.get("ui.screenshot_dir", f"{RESULTS_DIR}/screenshots"))

    log.info(
        f"Targets: api={config.api_base_url} ui={config.ui_base_url} "
        f"ci={config.is_ci()} live={_live_enabled(session.config)}"
    )
    log.info("Global setup completed")


def pytest_sessionfinish(session, exitstatus):
    """Global teardown."""
    log = get_logger("GlobalTeardown")
    log.info("Starting global test teardown")
    log.info(f"Test session finished: exit_status={int(exitstatus)} collected={session.testscollected}")
    log.info("Global teardown completed")


def pytest_report_header(config):
    """Add custom header to pytest output."""
    loader = ConfigLoader()
    return [
        "",
        "=" * 60,
        "Restful Booker Platform Test Suites",
        f"API: {loader.api_base_url}  UI: {loader.ui_base_url}",
        f"Live tests: {'enabled' if _live_enabled(config) else 'skipped'}",
        "=" * 60,
        "",
    ]
