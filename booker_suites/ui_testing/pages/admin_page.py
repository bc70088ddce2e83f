"""
================================================================================
Admin Page Object (Async / Playwright)
================================================================================

Authenticated admin panel: room listing, bookings table, pagination and the
message inbox (``/admin/message``).

Table readers re-count rows on every call; the table changes under
pagination and filters.

================================================================================
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Any, Dict, List, Mapping

import allure

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from booker_suites.ui_testing.framework.page_base import (
    BasePage,
    ElementNotFoundError,
    SignalOutcome,
    sanitize_name,
)
from booker_suites.ui_testing.pages.login_page import AdminCredentials, LoginPage


FILTER_SETTLE_MS = 1000
CELL_TIMEOUT = 2000


class AdminPage(BasePage):
    """Admin dashboard page object (async)."""

    URL_PATH = "/admin"

    _SELECTORS: Mapping[str, str] = MappingProxyType({
        # Dashboard
        "dashboard": "[data-testid='roomlisting'], .admin-dashboard",
        "room_listing": "[data-testid='roomlisting']",
        "admin_title": "a.navbar-brand, h1, .admin-title",
        "logout_button": "button:has-text('Logout'), .btn-logout",
        "login_form": "#username",

        # Bookings table
        "bookings_table": ".bookings-table",
        "booking_rows": ".booking-row",
        "booking_row_by_id": "[data-booking-id='{booking_id}']",
        "booking_id": ".booking-id",
        "booking_customer": ".booking-customer",
        "booking_dates": ".booking-dates",
        "booking_status": ".booking-status",
        "edit_booking_button": ".btn-edit",
        "delete_booking_button": ".btn-delete",
        "view_booking_button": ".btn-view",

        # Filters and search
        "search_input": "input[name='search']",
        "search_button": ".btn-search",
        "filter_status": "select[name='status']",
        "clear_filters_button": ".btn-clear-filters",

        # Pagination
        "prev_page_button": ".pagination .prev",
        "next_page_button": ".pagination .next",
        "page_number": ".pagination .page-number:has-text('{number}')",

        # Booking modals and edit form
        "booking_modal": "#bookingDetailsModal",
        "modal_content": ".modal-body",
        "modal_close_button": ".modal-close, .btn-close",
        "edit_form": ".edit-booking-form",
        "edit_first_name": "input[name='edit-firstname']",
        "edit_last_name": "input[name='edit-lastname']",
        "edit_email": "input[name='edit-email']",
        "edit_phone": "input[name='edit-phone']",
        "save_changes_button": ".btn-save",
        "delete_modal": "#deleteConfirmModal",
        "confirm_delete_button": ".btn-confirm-delete",

        # Statistics
        "total_bookings": ".total-bookings",
        "active_bookings": ".active-bookings",
        "completed_bookings": ".completed-bookings",
        "revenue_total": ".revenue-total",

        # Messages
        "messages_link": "a[href='/admin/message']",
        "message_rows": ".messages .row.detail",
        "message_name": "[data-testid^='message'] p",
        "message_subject": "[data-testid^='messageDescription'] p",
        "unread_badge": "span.badge.bg-danger.text-white",

        # Alerts
        "success_alert": ".alert-success",
        "error_alert": ".alert-danger",
    })

    _EDIT_FIELDS = (
        ("first_name", "edit_first_name"),
        ("last_name", "edit_last_name"),
        ("email", "edit_email"),
        ("phone", "edit_phone"),
    )

    # =========================================================================
    # Session
    # =========================================================================

    async def navigate_to_admin_login(self) -> LoginPage:
        login_page = LoginPage(self.page, base_url=self.base_url)
        await login_page.goto()
        await self.wait_for_element(self._SELECTORS["login_form"])
        self.log.info("Navigated to admin login page")
        return login_page

    async def login(self, credentials: AdminCredentials) -> SignalOutcome:
        """Same dashboard-vs-error race as ``LoginPage.login``."""
        login_page = LoginPage(self.page, base_url=self.base_url)
        return await login_page.login(credentials)

    @allure.step("Logout")
    async def logout(self) -> None:
        await self.click_element(self._SELECTORS["logout_button"])
        await self.wait_for_element(self._SELECTORS["login_form"])
        self.log.info("Logged out from admin panel")

    async def is_login_successful(self) -> bool:
        return await self.is_element_visible(self._SELECTORS["dashboard"])

    async def get_login_error(self) -> str:
        return await self.get_error_message()

    async def get_dashboard_title(self) -> str:
        return await self.get_element_text(self._SELECTORS["admin_title"])

    async def get_room_listing_count(self) -> int:
        return await self.get_element_count(self._SELECTORS["room_listing"])

    # =========================================================================
    # Bookings table
    # =========================================================================

    @allure.step("Read bookings table")
    async def get_all_bookings(self) -> List[Dict[str, str]]:
        """
        Extract ``{id, customer, dates, status}`` from every visible row.
        """
        await self.wait_for_element(self._SELECTORS["bookings_table"])

        rows = self.page.locator(self._SELECTORS["booking_rows"])
        count = await rows.count()
        bookings = []
        for i in range(count):
            row = rows.nth(i)
            bookings.append({
                "id": await self._cell_text(row, "booking_id"),
                "customer": await self._cell_text(row, "booking_customer"),
                "dates": await self._cell_text(row, "booking_dates"),
                "status": await self._cell_text(row, "booking_status"),
            })

        self.log.info(f"Retrieved {len(bookings)} bookings from table")
        return bookings

    async def _cell_text(self, row, selector_key: str) -> str:
        """Text of the first ``selector_key`` cell inside ``row``."""
        selector = self._SELECTORS[selector_key]
        try:
            text = await row.locator(selector).first.text_content(timeout=CELL_TIMEOUT)
        except PlaywrightTimeoutError as e:
            self.log.error(f"Row has no cell: selector={selector!r} timeout={CELL_TIMEOUT}ms")
            screenshot = await self._capture_failure_screenshot(
                f"missing_cell_{sanitize_name(selector)}"
            )
            raise ElementNotFoundError(selector, CELL_TIMEOUT, screenshot) from e
        return (text or "").strip()

    async def get_bookings_count(self) -> int:
        return await self.get_element_count(self._SELECTORS["booking_rows"])

    async def is_bookings_table_loaded(self) -> bool:
        return await self.is_element_visible(self._SELECTORS["bookings_table"])

    @allure.step("Search bookings: {search_term}")
    async def search_bookings(self, search_term: str) -> None:
        await self.fill_input(self._SELECTORS["search_input"], search_term)
        await self.click_element(self._SELECTORS["search_button"])
        await self.page.wait_for_timeout(FILTER_SETTLE_MS)
        self.log.info(f"Searched for bookings with term: {search_term}")

    async def filter_by_status(self, status: str) -> None:
        await self.select_option(self._SELECTORS["filter_status"], status)
        await self.page.wait_for_timeout(FILTER_SETTLE_MS)
        self.log.info(f"Filtered bookings by status: {status}")

    async def clear_filters(self) -> None:
        await self.click_element(self._SELECTORS["clear_filters_button"])
        await self.page.wait_for_timeout(FILTER_SETTLE_MS)
        self.log.info("Cleared all filters")

    def _booking_row_selector(self, booking_id: Any, selector_key: str) -> str:
        row = self._SELECTORS["booking_row_by_id"].format(booking_id=booking_id)
        return f"{row} {self._SELECTORS[selector_key]}"

    @allure.step("Edit booking {booking_id}")
    async def edit_booking(self, booking_id: Any, edit_data: Mapping[str, str]) -> None:
        """Only the keys present in ``edit_data`` are changed."""
        await self.click_element(self._booking_row_selector(booking_id, "edit_booking_button"))
        await self.wait_for_element(self._SELECTORS["edit_form"])

        for field_name, selector_key in self._EDIT_FIELDS:
            if edit_data.get(field_name):
                await self.fill_input(self._SELECTORS[selector_key], edit_data[field_name])

        await self.click_element(self._SELECTORS["save_changes_button"])
        self.log.info(f"Edited booking {booking_id} fields={sorted(edit_data)}")

    @allure.step("Delete booking {booking_id}")
    async def delete_booking(self, booking_id: Any) -> None:
        await self.click_element(self._booking_row_selector(booking_id, "delete_booking_button"))
        await self.wait_for_element(self._SELECTORS["delete_modal"])
        await self.click_element(self._SELECTORS["confirm_delete_button"])
        self.log.info(f"Deleted booking {booking_id}")

    async def view_booking_details(self, booking_id: Any) -> str:
        await self.click_element(self._booking_row_selector(booking_id, "view_booking_button"))
        await self.wait_for_element(self._SELECTORS["booking_modal"])
        details = await self.get_element_text(self._SELECTORS["modal_content"])
        await self.click_element(self._SELECTORS["modal_close_button"])
        self.log.info(f"Viewed details for booking {booking_id}")
        return details

    async def get_booking_stats(self) -> Dict[str, str]:
        stats = {
            "total": await self.get_element_text(self._SELECTORS["total_bookings"]),
            "active": await self.get_element_text(self._SELECTORS["active_bookings"]),
            "completed": await self.get_element_text(self._SELECTORS["completed_bookings"]),
            "revenue": await self.get_element_text(self._SELECTORS["revenue_total"]),
        }
        self.log.info(f"Retrieved booking statistics {stats}")
        return stats

    # =========================================================================
    # Pagination
    # =========================================================================

    async def go_to_next_page(self) -> bool:
        """Click "next" if it is enabled. Returns whether a click happened."""
        return await self._paginate("next_page_button", "next")

    async def go_to_previous_page(self) -> bool:
        return await self._paginate("prev_page_button", "previous")

    async def _paginate(self, selector_key: str, direction: str) -> bool:
        selector = self._SELECTORS[selector_key]
        if not await self.is_element_enabled(selector):
            self.log.warning(f"{direction.capitalize()} page button is disabled")
            return False
        await self.click_element(selector)
        await self.page.wait_for_timeout(FILTER_SETTLE_MS)
        self.log.info(f"Navigated to {direction} page")
        return True

    async def go_to_page(self, page_number: int) -> None:
        await self.click_element(self._SELECTORS["page_number"].format(number=page_number))
        await self.page.wait_for_timeout(FILTER_SETTLE_MS)
        self.log.info(f"Navigated to page {page_number}")

    # =========================================================================
    # Messages
    # =========================================================================

    @allure.step("Open messages")
    async def open_messages(self) -> None:
        await self.click_element(self._SELECTORS["messages_link"])
        await self.wait_for_url_contains("/admin/message")
        await self.wait_for_page_load()
        self.log.info("Opened admin message inbox")

    async def get_messages(self) -> List[Dict[str, Any]]:
        """``{name, subject, unread}`` for every row of the inbox."""
        rows = self.page.locator(self._SELECTORS["message_rows"])
        count = await rows.count()
        messages = []
        for i in range(count):
            row = rows.nth(i)
            classes = await row.get_attribute("class") or ""
            messages.append({
                "name": await self._cell_text(row, "message_name"),
                "subject": await self._cell_text(row, "message_subject"),
                "unread": "read-false" in classes.split(),
            })
        self.log.info(f"Retrieved {len(messages)} messages")
        return messages

    async def has_message_from(self, name: str) -> bool:
        messages = await self.get_messages()
        return any(message["name"] == name for message in messages)

    async def get_unread_count(self) -> int:
        """Number on the navbar's unread badge; 0 when the badge is absent."""
        if not await self.is_element_visible(self._SELECTORS["unread_badge"], timeout=2000):
            return 0
        text = await self.get_element_text(self._SELECTORS["unread_badge"])
        digits = re.sub(r"[^\d]", "", text)
        return int(digits) if digits else 0

    # =========================================================================
    # Alerts and assertions
    # =========================================================================

    async def get_success_message(self) -> str:
        if not await self.is_element_visible(self._SELECTORS["success_alert"]):
            return ""
        return await self.get_element_text(self._SELECTORS["success_alert"])

    async def get_error_message(self) -> str:
        if not await self.is_element_visible(self._SELECTORS["error_alert"]):
            return ""
        return await self.get_element_text(self._SELECTORS["error_alert"])

    @allure.step("Verify admin dashboard is loaded")
    async def assert_admin_dashboard_loaded(self) -> None:
        await self.assert_element_visible(self._SELECTORS["dashboard"])
        await self.assert_element_visible(self._SELECTORS["logout_button"])
        self.log.info("Verified admin dashboard is loaded")

    @allure.step("Verify login failed")
    async def assert_login_failed(self, expected_error_text: str = "") -> None:
        error_message = await self.get_login_error()
        assert error_message, "Expected a login error message"
        if expected_error_text:
            assert expected_error_text.lower() in error_message.lower(), (
                f"Login error {error_message!r} does not mention {expected_error_text!r}"
            )
        self.log.info(f"Verified login failed error_message={error_message!r}")

    @allure.step("Verify booking operation success")
    async def assert_booking_operation_success(self) -> None:
        success_message = await self.get_success_message()
        assert success_message, "Expected a success message after the booking operation"
        self.log.info("Verified booking operation was successful")


__all__ = [
    "AdminPage",
]
