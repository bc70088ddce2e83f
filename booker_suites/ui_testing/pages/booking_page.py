"""
================================================================================
Booking Page Object (Async / Playwright)
================================================================================

Public site of the Restful Booker Platform: hero, navbar, availability form,
room listing, reservation flow (``/reservation/{roomId}``) and contact form.

Composite actions (``complete_booking``, ``complete_contact_form``) fill the
form, submit it and race the possible outcomes. The returned SignalOutcome is
None-named when nothing appeared; that case is logged as a warning and left to
the calling test.

================================================================================
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import allure
from playwright.async_api import expect

from booker_suites.ui_testing.framework.page_base import BasePage, SignalOutcome


CLEANING_FEE = 25
SERVICE_FEE = 15
SUBMIT_SIGNAL_TIMEOUT = 5000
CONFIRMATION_TIMEOUT = 10000
NAV_SECTIONS = ("rooms", "booking", "amenities", "location", "contact")
ROOM_TYPES = ("Single", "Double", "Suite")

ISO_FORMAT = "%Y-%m-%d"
PICKER_FORMAT = "%d/%m/%Y"


@dataclass
class BookingFormData:
    first_name: str
    last_name: str
    email: str
    phone: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BookingFormData":
        return cls(
            first_name=data["first_name"],
            last_name=data["last_name"],
            email=data["email"],
            phone=data["phone"],
        )


@dataclass
class ContactFormData:
    name: str
    email: str
    phone: str
    subject: str
    message: str

    @classmethod
    def from_message(cls, data: Mapping[str, Any]) -> "ContactFormData":
        """Build from an API-shaped contact message (``description`` body)."""
        return cls(
            name=data["name"],
            email=data["email"],
            phone=data["phone"],
            subject=data["subject"],
            message=data["description"],
        )


def expected_total(nightly_rate: int, nights: int) -> int:
    """
    Total shown in the price summary: nightly rate times nights plus the
    fixed cleaning and service fees.

    >>> expected_total(100, 13)
    1340
    """
    return nightly_rate * nights + CLEANING_FEE + SERVICE_FEE


def to_picker_date(iso_date: str) -> str:
    """``2025-08-08`` -> ``08/08/2025`` (react-datepicker input format)."""
    return datetime.strptime(iso_date, ISO_FORMAT).strftime(PICKER_FORMAT)


class BookingPage(BasePage):
    """Home page, reservation flow and contact form (async)."""

    URL_PATH = "/"

    _SELECTORS: Mapping[str, str] = MappingProxyType({
        # Hero and navbar
        "hero_book_now": "a.btn.btn-primary.btn-lg",
        "nav_link": "nav a.nav-link:has-text('{label}')",

        # Availability form
        "booking_section": "#booking",
        "checkin_input": "#booking input.form-control >> nth=0",
        "checkout_input": "#booking input.form-control >> nth=1",
        "check_availability": "#booking button:has-text('Check Availability')",
        "datepicker": ".react-datepicker",
        "datepicker_day": ".react-datepicker__day--0{day:02d}:not(.react-datepicker__day--outside-month)",
        "calendar_next": "button[aria-label='Next Month']",
        "calendar_prev": "button[aria-label='Previous Month']",

        # Room listing
        "rooms_section": "#rooms",
        "room_card": "#rooms .room-card",
        "room_book_link": "a:has-text('Book now')",
        "room_image": ".room-card img",
        "room_title": ".room-card .card-title",
        "room_description": ".room-card .card-text",
        "room_price": ".room-card .card-footer .fw-bold",
        "amenities_heading": "h2:has-text('Our Amenities')",
        "location_heading": "h2:has-text('Our Location')",

        # Reservation form
        "reserve_start": "#doReservation",
        "reserve_submit": "button.btn-primary:has-text('Reserve Now'):not(#doReservation)",
        "first_name": "input[name='firstname']",
        "last_name": "input[name='lastname']",
        "email": "input[name='email']",
        "phone": "input[name='phone']",
        "price_line": "text=/£\\d+ x \\d+ nights/",
        "total_price": "div:has(> span:text-is('Total')) > span:last-child",
        "booking_confirmed": "text=Booking Confirmed",

        # Outcomes
        "success_message": ".alert-success",
        "error_message": ".alert-danger",
        "validation_error": ".invalid-feedback, .alert-danger li",
        "loading_spinner": ".spinner-border",

        # Confirmation modal
        "confirmation_modal": ".modal.show",
        "confirmation_details": ".modal.show .modal-body",
        "confirm_button": ".modal.show .btn-primary",
        "close_modal_button": ".modal.show .btn-close, .modal.show .close",

        # Contact form
        "contact_section": "#contact",
        "contact_name": "[data-testid='ContactName']",
        "contact_email": "[data-testid='ContactEmail']",
        "contact_phone": "[data-testid='ContactPhone']",
        "contact_subject": "[data-testid='ContactSubject']",
        "contact_message": "[data-testid='ContactDescription']",
        "contact_submit": "#contact button:has-text('Submit')",
        "contact_success": "#contact h3:has-text('Thanks for getting in touch')",
    })

    _BOOKING_FIELDS = ("first_name", "last_name", "email", "phone")
    _CONTACT_FIELDS = (
        ("name", "contact_name"),
        ("email", "contact_email"),
        ("phone", "contact_phone"),
        ("subject", "contact_subject"),
        ("message", "contact_message"),
    )

    expected_total = staticmethod(expected_total)

    # =========================================================================
    # Navigation
    # =========================================================================

    @allure.step("Open home page")
    async def goto(self) -> "BookingPage":
        await self.navigate(self.URL_PATH)
        return self

    async def navigate_to_main_page(self) -> None:
        await self.goto()
        await self.wait_for_element(self._SELECTORS["booking_section"])
        self.log.info("Navigated to main page with booking and contact sections")

    async def navigate_to_booking_page(self) -> None:
        await self.navigate_to_main_page()

    @allure.step("Click hero 'Book Now'")
    async def click_book_now(self) -> None:
        await self.click_element(self._SELECTORS["hero_book_now"])

    @allure.step("Click 'Check Availability'")
    async def click_check_availability(self) -> None:
        await self.click_element(self._SELECTORS["check_availability"])

    @allure.step("Open navbar section: {section}")
    async def open_nav_section(self, section: str) -> None:
        """Click a navbar link: rooms, booking, amenities, location or contact."""
        if section.lower() not in NAV_SECTIONS:
            raise ValueError(f"Unknown section '{section}'. Choose one of {NAV_SECTIONS}")
        label = section.capitalize()
        await self.click_element(self._SELECTORS["nav_link"].format(label=label))

    @allure.step("Verify room types are visible")
    async def expect_room_types_visible(self) -> None:
        rooms = self.page.locator(self._SELECTORS["rooms_section"])
        await expect(rooms).to_be_visible()
        for room_type in ROOM_TYPES:
            await expect(rooms.get_by_text(room_type, exact=True).first).to_be_visible()
        self.log.info(f"Room types visible: {', '.join(ROOM_TYPES)}")

    async def is_section_visible(self, section: str) -> bool:
        selectors = {
            "rooms": self._SELECTORS["rooms_section"],
            "booking": self._SELECTORS["booking_section"],
            "amenities": self._SELECTORS["amenities_heading"],
            "location": self._SELECTORS["location_heading"],
            "contact": self._SELECTORS["contact_section"],
        }
        return await self.is_element_visible(selectors[section.lower()])

    # =========================================================================
    # Availability form and calendar
    # =========================================================================

    async def select_checkin_date(self, date: str) -> None:
        """Type an ISO date into the check-in picker and close it."""
        await self.click_element(self._SELECTORS["checkin_input"])
        await self.fill_input(self._SELECTORS["checkin_input"], to_picker_date(date))
        await self.press_key("Tab")
        self.log.info(f"Selected check-in date: {date}")

    async def select_checkout_date(self, date: str) -> None:
        await self.click_element(self._SELECTORS["checkout_input"])
        await self.fill_input(self._SELECTORS["checkout_input"], to_picker_date(date))
        await self.press_key("Tab")
        self.log.info(f"Selected check-out date: {date}")

    @allure.step("Select stay {checkin} to {checkout}")
    async def select_stay_dates(self, checkin: str, checkout: str) -> None:
        await self.select_checkin_date(checkin)
        await self.select_checkout_date(checkout)

    async def select_dates_using_calendar(
        self,
        checkin_day: int,
        checkout_day: int,
        months_ahead: int = 0,
    ) -> None:
        """Pick both days from the calendar, ``months_ahead`` months from now."""
        for input_key, day in (("checkin_input", checkin_day), ("checkout_input", checkout_day)):
            await self.click_element(self._SELECTORS[input_key])
            await self.wait_for_element(self._SELECTORS["datepicker"])
            for _ in range(months_ahead):
                await self.navigate_to_next_month()
            await self.click_element(self._SELECTORS["datepicker_day"].format(day=day))
        self.log.info(f"Selected dates using calendar: {checkin_day} to {checkout_day}")

    async def navigate_to_next_month(self) -> None:
        await self.click_element(self._SELECTORS["calendar_next"])
        self.log.info("Navigated to next month in calendar")

    async def navigate_to_previous_month(self) -> None:
        await self.click_element(self._SELECTORS["calendar_prev"])
        self.log.info("Navigated to previous month in calendar")

    async def check_date_availability(self, day: int) -> bool:
        """Open the check-in calendar and report whether ``day`` is selectable."""
        await self.click_element(self._SELECTORS["checkin_input"])
        await self.wait_for_element(self._SELECTORS["datepicker"])
        day_cell = await self.wait_for_element(self._SELECTORS["datepicker_day"].format(day=day))
        disabled = await day_cell.get_attribute("aria-disabled")
        await self.press_key("Escape")
        return disabled != "true"

    # =========================================================================
    # Room listing and reservation flow
    # =========================================================================

    @allure.step("Book room #{room_index}")
    async def book_room(
        self,
        room_index: int,
        checkin: Optional[str] = None,
        checkout: Optional[str] = None,
        guest: Optional[BookingFormData] = None,
    ) -> None:
        """
        Open a room's reservation page from the listing.

        ``room_index`` counts the "Book now" links after the hero button, so
        1 is the first listed room. With dates the availability form is filled
        first; with a guest the reservation form is opened and filled too.
        """
        if checkin and checkout:
            await self.select_stay_dates(checkin, checkout)
            await self.click_check_availability()

        await self.click_element(f"{self._SELECTORS['room_book_link']} >> nth={room_index}")
        await self.wait_for_url_contains("/reservation/")
        await self.wait_for_page_load()
        self.log.info(f"Opened reservation page for room #{room_index}: {self.page.url}")

        if guest is not None:
            await self.start_reservation()
            await self.fill_booking_form(guest)

    @allure.step("Open reservation for room {room_id}")
    async def open_reservation(self, room_id: int, checkin: str, checkout: str) -> None:
        await self.navigate(f"/reservation/{room_id}?checkin={checkin}&checkout={checkout}")

    async def start_reservation(self) -> None:
        """Reveal the guest form on a reservation page."""
        await self.click_element(self._SELECTORS["reserve_start"])
        await self.wait_for_element(self._SELECTORS["first_name"])

    async def get_price_summary(self) -> str:
        """The ``£<rate> x <n> nights`` line."""
        return await self.get_element_text(self._SELECTORS["price_line"])

    async def get_total_price(self) -> str:
        """Digits of the total, e.g. ``"1340"``."""
        text = await self.get_element_text(self._SELECTORS["total_price"])
        return re.sub(r"[^\d]", "", text)

    @allure.step("Verify price summary")
    async def assert_price_summary(self, nightly_rate: int, nights: int) -> None:
        await expect(self.page.get_by_text(f"£{nightly_rate} x {nights} nights")).to_be_visible()
        await expect(self.page.get_by_text(str(expected_total(nightly_rate, nights))).first).to_be_visible()

    @allure.step("Click 'Reserve Now'")
    async def reserve_now(self) -> None:
        await self.click_element(self._SELECTORS["reserve_submit"])

    @allure.step("Verify booking confirmed")
    async def assert_booking_confirmed(self, checkin: str, checkout: str) -> None:
        await self.assert_element_visible(self._SELECTORS["booking_confirmed"], timeout=CONFIRMATION_TIMEOUT)
        await expect(self.page.get_by_text(f"{checkin} - {checkout}")).to_be_visible()
        self.log.info(f"Verified booking confirmed for {checkin} - {checkout}")

    # =========================================================================
    # Booking form
    # =========================================================================

    async def is_booking_form_displayed(self) -> bool:
        return await self.is_element_visible(self._SELECTORS["first_name"])

    @allure.step("Fill booking form")
    async def fill_booking_form(self, form_data: BookingFormData) -> None:
        self.log.info(
            f"Filling booking form first_name={form_data.first_name} "
            f"last_name={form_data.last_name} email={form_data.email}"
        )
        for field_name in self._BOOKING_FIELDS:
            await self.fill_input(self._SELECTORS[field_name], getattr(form_data, field_name))
        self.log.info("Booking form filled successfully")

    async def click_book_button(self) -> None:
        await self.reserve_now()

    @allure.step("Submit booking")
    async def submit_booking(self) -> SignalOutcome:
        """Submit and race confirmation, success alert, error alert and modal."""
        await self.click_book_button()
        outcome = await self.wait_for_first_visible({
            "confirmed": (self._SELECTORS["booking_confirmed"], CONFIRMATION_TIMEOUT),
            "success": (self._SELECTORS["success_message"], SUBMIT_SIGNAL_TIMEOUT),
            "error": (self._SELECTORS["error_message"], SUBMIT_SIGNAL_TIMEOUT),
            "modal": (self._SELECTORS["confirmation_modal"], SUBMIT_SIGNAL_TIMEOUT),
        })
        if not outcome.fired:
            self.log.warning("No success/error message appeared after booking submission")
        self.log.info("Booking form submitted")
        return outcome

    @allure.step("Complete booking")
    async def complete_booking(
        self,
        form_data: BookingFormData,
        checkin: str,
        checkout: str,
        room_id: int = 1,
    ) -> SignalOutcome:
        await self.open_reservation(room_id, checkin, checkout)
        await self.start_reservation()
        await self.fill_booking_form(form_data)
        outcome = await self.submit_booking()
        self.log.info("Completed booking process")
        return outcome

    async def get_success_message(self) -> str:
        if not await self.is_element_visible(self._SELECTORS["success_message"]):
            return ""
        return await self.get_element_text(self._SELECTORS["success_message"])

    async def get_error_message(self) -> str:
        if not await self.is_element_visible(self._SELECTORS["error_message"]):
            return ""
        return await self.get_element_text(self._SELECTORS["error_message"])

    async def get_validation_errors(self) -> List[str]:
        errors = self.page.locator(self._SELECTORS["validation_error"])
        texts = await errors.all_text_contents()
        return [text.strip() for text in texts if text.strip()]

    async def is_book_button_enabled(self) -> bool:
        return await self.is_element_enabled(self._SELECTORS["reserve_submit"])

    async def is_loading_spinner_visible(self) -> bool:
        return await self.is_element_visible(self._SELECTORS["loading_spinner"])

    async def wait_for_confirmation_modal(self) -> None:
        await self.wait_for_element(self._SELECTORS["confirmation_modal"])
        self.log.info("Booking confirmation modal appeared")

    async def get_confirmation_details(self) -> str:
        await self.wait_for_confirmation_modal()
        return await self.get_element_text(self._SELECTORS["confirmation_details"])

    async def confirm_booking_in_modal(self) -> None:
        await self.wait_for_confirmation_modal()
        await self.click_element(self._SELECTORS["confirm_button"])
        self.log.info("Confirmed booking in modal")

    async def close_confirmation_modal(self) -> None:
        await self.wait_for_confirmation_modal()
        await self.click_element(self._SELECTORS["close_modal_button"])
        self.log.info("Closed booking confirmation modal")

    async def get_room_info(self) -> Dict[str, str]:
        return {
            "title": await self.get_element_text(self._SELECTORS["room_title"]),
            "description": await self.get_element_text(self._SELECTORS["room_description"]),
            "price": await self.get_element_text(self._SELECTORS["room_price"]),
        }

    async def is_room_image_displayed(self) -> bool:
        return await self.is_element_visible(self._SELECTORS["room_image"])

    async def clear_form_fields(self) -> None:
        for field_name in self._BOOKING_FIELDS:
            await self.fill_input(self._SELECTORS[field_name], "")
        self.log.info("Cleared all form fields")

    async def get_form_field_values(self) -> Dict[str, str]:
        return {
            field_name: await self.get_input_value(self._SELECTORS[field_name])
            for field_name in self._BOOKING_FIELDS
        }

    async def validate_form_fields(self) -> Dict[str, bool]:
        """Map each guest field to whether the browser flags it ``:invalid``."""
        validations = {}
        for field_name in self._BOOKING_FIELDS:
            validations[field_name] = await self.is_element_visible(
                f"{self._SELECTORS[field_name]}:invalid", timeout=1000
            )
        self.log.info(f"Validated form field requirements {validations}")
        return validations

    async def measure_field_character_limits(self, length: int = 1000) -> Dict[str, int]:
        """Fill every guest field with ``length`` characters and read back what stuck."""
        long_text = "a" * length
        values = BookingFormData(
            first_name=long_text,
            last_name=long_text,
            email=f"{long_text}@example.com",
            phone=long_text,
        )
        await self.fill_booking_form(values)
        actual = await self.get_form_field_values()
        limits = {name: len(value) for name, value in actual.items()}
        self.log.info(f"Measured field character limits {limits}")
        return limits

    @allure.step("Verify booking form is displayed")
    async def assert_booking_form_valid(self) -> None:
        for field_name in self._BOOKING_FIELDS:
            await self.assert_element_visible(self._SELECTORS[field_name])
        await self.assert_element_visible(self._SELECTORS["reserve_submit"])
        self.log.info("Verified booking form is valid and all elements are present")

    @allure.step("Verify booking success")
    async def assert_booking_success(self) -> None:
        message = await self.get_success_message()
        assert message, "Expected a booking success message"
        assert "success" in message.lower() or "confirmed" in message.lower(), (
            f"Unexpected success message: {message!r}"
        )
        self.log.info("Verified booking was successful")

    @allure.step("Verify booking error")
    async def assert_booking_error(self, expected_error_text: str = "") -> None:
        message = await self.get_error_message()
        assert message, "Expected a booking error message"
        if expected_error_text:
            assert expected_error_text.lower() in message.lower(), (
                f"Booking error {message!r} does not mention {expected_error_text!r}"
            )
        self.log.info(f"Verified booking error occurred error_message={message!r}")

    # =========================================================================
    # Contact form
    # =========================================================================

    async def is_contact_form_displayed(self) -> bool:
        return await self.is_element_visible(self._SELECTORS["contact_section"])

    @allure.step("Fill contact form")
    async def fill_contact_form(self, form_data: ContactFormData) -> None:
        self.log.info(f"Filling contact form name={form_data.name} subject={form_data.subject!r}")
        await self.scroll_to_element(self._SELECTORS["contact_section"])
        values = asdict(form_data)
        for field_name, selector_key in self._CONTACT_FIELDS:
            await self.fill_input(self._SELECTORS[selector_key], values[field_name])
        self.log.info("Contact form filled successfully")

    @allure.step("Submit contact form")
    async def submit_contact_form(self) -> None:
        await self.click_element(self._SELECTORS["contact_submit"])
        self.log.info("Contact form submitted")

    @allure.step("Complete contact form")
    async def complete_contact_form(self, form_data: ContactFormData) -> SignalOutcome:
        await self.fill_contact_form(form_data)
        await self.submit_contact_form()
        outcome = await self.wait_for_first_visible({
            "success": (self._SELECTORS["contact_success"], SUBMIT_SIGNAL_TIMEOUT),
            "error": (self._SELECTORS["error_message"], SUBMIT_SIGNAL_TIMEOUT),
        })
        if not outcome.fired:
            self.log.warning("No success/error message appeared after contact form submission")
        self.log.info("Completed contact form submission")
        return outcome

    async def get_contact_form_field_values(self) -> ContactFormData:
        values = {}
        for field_name, selector_key in self._CONTACT_FIELDS:
            values[field_name] = await self.get_input_value(self._SELECTORS[selector_key])
        return ContactFormData(**values)

    async def clear_contact_form_fields(self) -> None:
        for _, selector_key in self._CONTACT_FIELDS:
            await self.fill_input(self._SELECTORS[selector_key], "")
        self.log.info("Cleared all contact form fields")

    async def is_contact_submit_button_enabled(self) -> bool:
        return await self.is_element_enabled(self._SELECTORS["contact_submit"])

    @allure.step("Verify contact form is displayed")
    async def assert_contact_form_valid(self) -> None:
        await self.assert_element_visible(self._SELECTORS["contact_section"])
        for _, selector_key in self._CONTACT_FIELDS:
            await self.assert_element_visible(self._SELECTORS[selector_key])
        await self.assert_element_visible(self._SELECTORS["contact_submit"])
        self.log.info("Verified contact form is valid and all elements are present")

    @allure.step("Verify contact form success")
    async def assert_contact_form_success(self, name: str = "") -> None:
        """The thank-you heading names the sender: ``Thanks for getting in touch <name>!``."""
        expected = f"Thanks for getting in touch {name}".strip()
        await self.assert_element_text(self._SELECTORS["contact_success"], expected)
        self.log.info("Verified contact form submission was successful")

    @allure.step("Verify contact form error")
    async def assert_contact_form_error(self, expected_error_text: str = "") -> None:
        message = await self.get_error_message()
        assert message, "Expected a contact form error message"
        if expected_error_text:
            assert expected_error_text.lower() in message.lower(), (
                f"Contact error {message!r} does not mention {expected_error_text!r}"
            )
        self.log.info(f"Verified contact form error occurred error_message={message!r}")

    # =========================================================================
    # Shared
    # =========================================================================

    @allure.step("Verify main page loaded")
    async def assert_main_page_loaded(self) -> None:
        await self.assert_element_visible(self._SELECTORS["hero_book_now"])
        await self.assert_element_visible(self._SELECTORS["booking_section"])
        await self.assert_element_visible(self._SELECTORS["contact_section"])
        self.log.info("Verified main page loaded with both booking and contact sections")

    async def scroll_to_booking_section(self) -> None:
        await self.scroll_to_element(self._SELECTORS["booking_section"])
        self.log.info("Scrolled to booking section")

    async def scroll_to_contact_section(self) -> None:
        await self.scroll_to_element(self._SELECTORS["contact_section"])
        self.log.info("Scrolled to contact section")


__all__ = [
    "BookingFormData",
    "BookingPage",
    "ContactFormData",
    "expected_total",
    "to_picker_date",
]
