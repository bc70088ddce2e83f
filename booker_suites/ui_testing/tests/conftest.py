"""
================================================================================
UI Testing Pytest Configuration
================================================================================

This module configures pytest for UI tests, providing fixtures for browser
management, page objects, and test setup/teardown.

Key Features:
- One browser per session, a fresh context per test
- Page Object fixtures for all pages
- Screenshot and URL capture on failure
- Admin session fixture

All async fixtures run on the session event loop so the shared browser and
the per-test pages live on the same loop.

================================================================================
"""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from playwright.async_api import BrowserContext, Page

from booker_suites.ui_testing.framework import BasePage, BrowserManager
from booker_suites.ui_testing.pages import AdminCredentials, AdminPage, BookingPage, LoginPage
from booker_tools.common import ConfigLoader
from booker_tools.data_generator import DataGenerator


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def browser_manager(request) -> AsyncGenerator[BrowserManager, None]:
    """
    Session-scoped browser manager fixture.

    Provides a single browser for all tests in the session, reducing
    browser launch overhead. ``--browser`` / ``--headed`` override config.
    """
    headed = request.config.getoption("--headed")
    manager = BrowserManager(
        headless=False if headed else None,
        browser_type=request.config.getoption("--browser"),
    )
    await manager.start()
    yield manager
    await manager.close()


@pytest_asyncio.fixture(loop_scope="session")
async def context(browser_manager: BrowserManager) -> AsyncGenerator[BrowserContext, None]:
    """
    Function-scoped browser context fixture.

    Creates a new browser context for each test, providing isolation.
    """
    context = await browser_manager.new_context()
    yield context
    await browser_manager.close_context(context)


@pytest_asyncio.fixture(loop_scope="session")
async def page(request, context: BrowserContext) -> AsyncGenerator[Page, None]:
    """
    Function-scoped page fixture.

    After a failed test body, a screenshot and the current URL are attached
    to the report before the page is closed.
    """
    page = await context.new_page()
    yield page

    report = getattr(request.node, "rep_call", None)
    if report is not None and report.failed:
        await BasePage(page).capture_failure(request.node.name)
    await page.close()


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def ui_config() -> ConfigLoader:
    return ConfigLoader()


@pytest.fixture(scope="session")
def admin_credentials(ui_config: ConfigLoader) -> AdminCredentials:
    return AdminCredentials.from_config(ui_config)


@pytest.fixture
def booking_page(page: Page) -> BookingPage:
    """
    Provides BookingPage instance.

    Use this fixture for tests on the home page, reservation and contact flows.
    """
    return BookingPage(page)


@pytest.fixture
def login_page(page: Page) -> LoginPage:
    """Provides LoginPage instance."""
    return LoginPage(page)


@pytest.fixture
def admin_page(page: Page) -> AdminPage:
    """Provides AdminPage instance (not logged in)."""
    return AdminPage(page)


@pytest.fixture
def data_generator() -> DataGenerator:
    return DataGenerator()


# ================================================================================
# Authentication Fixtures
# ================================================================================

@pytest_asyncio.fixture(loop_scope="session")
async def logged_in_admin(
    admin_page: AdminPage,
    admin_credentials: AdminCredentials,
) -> AdminPage:
    """
    Provides AdminPage with an authenticated session.
    """
    await admin_page.navigate_to_admin_login()
    outcome = await admin_page.login(admin_credentials)
    assert outcome.name == "dashboard", f"Admin login did not reach the dashboard ({outcome.name})"
    return admin_page


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Expose each phase's report on the item (``rep_setup``, ``rep_call``, ...)
    so the ``page`` fixture can tell whether the test body failed.
    """
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)
