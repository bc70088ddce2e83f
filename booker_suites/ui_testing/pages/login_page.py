"""
================================================================================
Admin Login Page Object (Async / Playwright)
================================================================================

Login screen of the admin panel at ``/admin``.

``login`` races the dashboard against the error alert with independent
budgets (10s / 5s) so a slow successful login is never reported as a failure.
When neither shows up the outcome is returned with ``name=None`` and a warning
is logged; the calling test decides whether that is fatal.

================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

import allure

from booker_suites.ui_testing.framework.page_base import BasePage, SignalOutcome


DASHBOARD_TIMEOUT = 10000
LOGIN_ERROR_TIMEOUT = 5000
ADMIN_VIEWPORT = {"width": 1400, "height": 800}


@dataclass
class AdminCredentials:
    username: str
    password: str

    @classmethod
    def from_config(cls, config) -> "AdminCredentials":
        return cls(
            username=config.get("auth.admin_username", "admin"),
            password=config.get("auth.admin_password", "password"),
        )

    def __repr__(self) -> str:
        return f"AdminCredentials(username={self.username!r}, password='***')"


class LoginPage(BasePage):
    """Admin login page object (async)."""

    URL_PATH = "/admin"

    _SELECTORS: Mapping[str, str] = MappingProxyType({
        "username": "#username",
        "password": "#password",
        "login_button": "#doLogin, button:has-text('Login')",
        "login_error": ".alert-danger",
        "dashboard": "[data-testid='roomlisting'], a.navbar-brand:has-text('Restful Booker Platform Demo')",
        "brand_link": "a:has-text('Restful Booker Platform Demo')",
    })

    @allure.step("Open admin login page")
    async def goto(self) -> "LoginPage":
        """Open ``/admin`` at the admin layout's viewport and wait for network idle."""
        await self.page.set_viewport_size(ADMIN_VIEWPORT)
        await self.navigate(self.URL_PATH)
        return self

    @allure.step("Verify login form is displayed")
    async def assert_login_page_loaded(self) -> None:
        await self.assert_element_visible(self._SELECTORS["username"])
        await self.assert_element_visible(self._SELECTORS["password"])
        await self.assert_element_visible(self._SELECTORS["login_button"])
        self.log.info("Verified admin login form is displayed")

    @allure.step("Login to admin panel")
    async def login(self, credentials: AdminCredentials) -> SignalOutcome:
        """
        Submit the login form and report which signal appeared.

        Returns:
            SignalOutcome with name ``"dashboard"``, ``"error"`` or None
        """
        self.log.info(f"Attempting admin login username={credentials.username}")

        await self.fill_input(self._SELECTORS["username"], credentials.username)
        await self.fill_input(self._SELECTORS["password"], credentials.password)
        await self.click_element(self._SELECTORS["login_button"])

        outcome = await self.wait_for_first_visible({
            "dashboard": (self._SELECTORS["dashboard"], DASHBOARD_TIMEOUT),
            "error": (self._SELECTORS["login_error"], LOGIN_ERROR_TIMEOUT),
        })
        if not outcome.fired:
            self.log.warning("Login timeout - neither dashboard nor error appeared")
        self.log.info(f"Login attempt completed: {outcome.name}")
        return outcome

    async def is_login_successful(self) -> bool:
        return await self.is_element_visible(self._SELECTORS["dashboard"])

    async def get_login_error(self) -> str:
        if not await self.is_element_visible(self._SELECTORS["login_error"]):
            return ""
        return await self.get_element_text(self._SELECTORS["login_error"])

    @allure.step("Verify login failed")
    async def assert_login_failed(self, expected_error_text: str = "") -> None:
        error_message = await self.get_login_error()
        assert error_message, "Expected a login error message"
        if expected_error_text:
            assert expected_error_text.lower() in error_message.lower(), (
                f"Login error {error_message!r} does not mention {expected_error_text!r}"
            )
        self.log.info(f"Verified login failed error_message={error_message!r}")

    @allure.step("Verify admin dashboard is displayed")
    async def assert_dashboard_visible(self) -> None:
        await self.assert_element_visible(self._SELECTORS["brand_link"])
        await self.assert_element_visible(self._SELECTORS["dashboard"])


__all__ = [
    "AdminCredentials",
    "LoginPage",
]
