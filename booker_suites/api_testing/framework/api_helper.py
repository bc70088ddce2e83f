"""
================================================================================
API Helper
================================================================================

Typed operations against the booking REST API.

The platform has a few non-standard status codes which are asserted as-is:
    - POST /auth answers 200 even for bad credentials (``reason`` instead
      of ``token`` in the body)
    - DELETE /booking/{id} and GET /ping answer 201
    - POST /message answers 201

Each ``ApiHelper`` owns its auth token. Tokens are never shared between
instances, so parallel tests cannot invalidate each other's sessions.

================================================================================
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, List, Mapping, Optional, Union

import allure
import httpx

from booker_tools.common import get_logger

from .http_client import HttpClient
from .models import AuthCredentials, BookingData, BookingResponse, ContactMessage
from .response_validator import BOOKING_RULES, ResponseValidator


class AuthTokenRequiredError(Exception):
    """Raised when a mutating call has neither an explicit nor a cached token."""
    pass


class UnexpectedResponseError(AssertionError):
    """The API answered with an unexpected status code or body shape."""

    def __init__(self, message: str, response: Optional[httpx.Response] = None):
        super().__init__(message)
        self.response = response


def _credentials(credentials: Union[AuthCredentials, Mapping[str, Any]]) -> AuthCredentials:
    if isinstance(credentials, AuthCredentials):
        return credentials
    return AuthCredentials(
        username=credentials.get("username", ""),
        password=credentials.get("password", ""),
    )


class ApiHelper:
    """
    High-level client for the booking, auth, message and ping endpoints.

    Usage:
        with HttpClient() as client:
            api = ApiHelper(client)
            api.authenticate(AuthCredentials("admin", "password123"))
            created = api.create_booking(booking)
            api.delete_booking(created["bookingid"])
    """

    def __init__(self, client: HttpClient):
        self.client = client
        self.log = get_logger("ApiHelper")
        self.validator = ResponseValidator()
        self._auth_token: Optional[str] = None

    @property
    def token(self) -> Optional[str]:
        """The cached token, if ``authenticate`` has succeeded."""
        return self._auth_token

    def clear_token(self) -> None:
        self._auth_token = None

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    @allure.step("Authenticate")
    def authenticate(self, credentials: Union[AuthCredentials, Mapping[str, Any]]) -> str:
        """
        Exchange credentials for a token and cache it on this instance.

        Raises:
            UnexpectedResponseError: Non-200 status, or a body without ``token``
        """
        creds = _credentials(credentials)
        self.log.info(f"Authenticating user username={creds.username}")

        body = self.try_authenticate(creds)
        token = body.get("token") if isinstance(body, dict) else None
        if not token:
            reason = body.get("reason") if isinstance(body, dict) else None
            raise UnexpectedResponseError(
                f"Authentication returned no token (reason: {reason or 'none given'})"
            )

        self._auth_token = token
        self.log.info("Authentication successful")
        return token

    def try_authenticate(self, credentials: Union[AuthCredentials, Mapping[str, Any]]) -> Dict[str, Any]:
        """
        POST /auth and return the raw body without requiring a token.

        Used by negative tests; the status must still be 200.
        """
        payload = credentials.to_payload() if isinstance(credentials, AuthCredentials) else dict(credentials)
        response = self.client.post("/auth", json=payload)
        self._expect_status(response, 200, "authenticate")
        return self._json(response, "authenticate")

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------

    @allure.step("Get all bookings")
    def get_all_bookings(self) -> List[Dict[str, Any]]:
        self.log.info("Getting all bookings")
        response = self.client.get("/booking")
        self._expect_status(response, 200, "get all bookings")
        bookings = self._json(response, "get all bookings")
        self.log.info(f"Retrieved {len(bookings)} bookings")
        return bookings

    @allure.step("Get booking {booking_id}")
    def get_booking_by_id(self, booking_id: int) -> BookingData:
        self.log.info(f"Getting booking by ID booking_id={booking_id}")
        response = self.client.get(f"/booking/{booking_id}")
        self._expect_status(response, 200, f"get booking {booking_id}")
        booking = self._json(response, f"get booking {booking_id}")
        self.log.info(f"Booking retrieved successfully booking_id={booking_id}")
        return booking

    def booking_exists(self, booking_id: int) -> bool:
        """True on 200, False on 404; anything else is unexpected."""
        response = self.client.get(f"/booking/{booking_id}")
        if response.status_code == 404:
            return False
        self._expect_status(response, 200, f"look up booking {booking_id}")
        return True

    @allure.step("Create booking")
    def create_booking(self, booking_data: BookingData) -> BookingResponse:
        """
        Create a booking.

        Returns:
            ``{"bookingid": int, "booking": {...}}`` as echoed by the API
        """
        self.log.info(f"Creating new booking firstname={booking_data.get('firstname')}")
        response = self.client.post("/booking", json=booking_data)
        self._expect_status(response, 200, "create booking")

        body = self._json(response, "create booking")
        missing = [key for key in ("bookingid", "booking") if not isinstance(body, dict) or key not in body]
        if missing:
            raise UnexpectedResponseError(
                f"Create booking response is missing {', '.join(missing)}", response
            )

        self.log.info(f"Booking created successfully booking_id={body['bookingid']}")
        return body

    @allure.step("Update booking {booking_id}")
    def update_booking(
        self,
        booking_id: int,
        booking_data: BookingData,
        token: Optional[str] = None,
    ) -> BookingData:
        auth_token = self._require_token(token, "updating booking")
        self.log.info(f"Updating booking booking_id={booking_id}")
        response = self.client.put(
            f"/booking/{booking_id}",
            json=booking_data,
            headers=self._auth_headers(auth_token),
        )
        self._expect_status(response, 200, f"update booking {booking_id}")
        self.log.info(f"Booking updated successfully booking_id={booking_id}")
        return self._json(response, f"update booking {booking_id}")

    @allure.step("Partially update booking {booking_id}")
    def partial_update_booking(
        self,
        booking_id: int,
        partial_data: Dict[str, Any],
        token: Optional[str] = None,
    ) -> BookingData:
        auth_token = self._require_token(token, "updating booking")
        self.log.info(f"Partially updating booking booking_id={booking_id} fields={sorted(partial_data)}")
        response = self.client.patch(
            f"/booking/{booking_id}",
            json=partial_data,
            headers=self._auth_headers(auth_token),
        )
        self._expect_status(response, 200, f"partially update booking {booking_id}")
        self.log.info(f"Booking partially updated successfully booking_id={booking_id}")
        return self._json(response, f"partially update booking {booking_id}")

    @allure.step("Delete booking {booking_id}")
    def delete_booking(self, booking_id: int, token: Optional[str] = None) -> None:
        auth_token = self._require_token(token, "deleting booking")
        self.log.info(f"Deleting booking booking_id={booking_id}")
        response = self.client.delete(
            f"/booking/{booking_id}",
            headers=self._auth_headers(auth_token),
        )
        self._expect_status(response, 201, f"delete booking {booking_id}")
        self.log.info(f"Booking deleted successfully booking_id={booking_id}")

    @allure.step("Get bookings with filters")
    def get_bookings_with_filters(self, filters: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """Falsy filter values are left out of the query string."""
        params = {key: value for key, value in filters.items() if value}
        self.log.info(f"Getting bookings with filters {params}")
        response = self.client.get("/booking", params=params)
        self._expect_status(response, 200, "get filtered bookings")
        bookings = self._json(response, "get filtered bookings")
        self.log.info(f"Retrieved {len(bookings)} filtered bookings")
        return bookings

    # ------------------------------------------------------------------
    # Health and messages
    # ------------------------------------------------------------------

    @allure.step("Health check")
    def health_check(self) -> str:
        self.log.info("Performing health check")
        response = self.client.get("/ping")
        self._expect_status(response, 201, "health check")
        self.log.info(f"Health check successful response={response.text!r}")
        return response.text

    @allure.step("Send contact message")
    def send_contact_message(self, message: ContactMessage) -> Dict[str, Any]:
        self.log.info(f"Sending contact message subject={message.get('subject')!r}")
        response = self.client.post("/message", json=message)
        self._expect_status(response, 201, "send contact message")
        return self._json(response, "send contact message")

    @allure.step("Get messages")
    def get_messages(self, token: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        List contact messages. Requires an admin token.

        Accepts both a bare JSON array and the ``{"messages": [...]}`` envelope.
        """
        auth_token = self._require_token(token, "reading messages")
        response = self.client.get("/message", headers=self._auth_headers(auth_token))
        self._expect_status(response, 200, "get messages")
        body = self._json(response, "get messages")
        if isinstance(body, dict) and "messages" in body:
            body = body["messages"]
        if not isinstance(body, list):
            raise UnexpectedResponseError("Messages response is not a list", response)
        self.log.info(f"Retrieved {len(body)} messages")
        return body

    # ------------------------------------------------------------------
    # Validation and helpers
    # ------------------------------------------------------------------

    def validate_booking_structure(self, booking: Any) -> None:
        """
        Check field presence and primitive types of a booking.

        Raises:
            AssertionError: Listing every violation
        """
        self.validator.validate_and_assert(booking, BOOKING_RULES)

    @staticmethod
    def generate_booking_dates(
        days_from_now: int = 7,
        stay_duration: int = 3,
        today: Optional[date] = None,
    ) -> Dict[str, str]:
        """
        Check-in ``days_from_now`` days out, check-out ``stay_duration`` nights later.
        """
        checkin = (today or date.today()) + timedelta(days=days_from_now)
        checkout = checkin + timedelta(days=stay_duration)
        return {
            "checkin": checkin.isoformat(),
            "checkout": checkout.isoformat(),
        }

    def _require_token(self, token: Optional[str], action: str) -> str:
        auth_token = token or self._auth_token
        if not auth_token:
            raise AuthTokenRequiredError(f"Authentication token required for {action}")
        return auth_token

    @staticmethod
    def _auth_headers(token: str) -> Dict[str, str]:
        return {"Cookie": f"token={token}"}

    def _expect_status(self, response: httpx.Response, expected: int, action: str) -> None:
        if response.status_code != expected:
            self.log.error(
                f"Unexpected status for {action}: expected={expected} actual={response.status_code}"
            )
            raise UnexpectedResponseError(
                f"Expected {expected} from {action}, got {response.status_code}: "
                f"{response.text[:200]}",
                response,
            )

    @staticmethod
    def _json(response: httpx.Response, action: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise UnexpectedResponseError(
                f"Response to {action} is not JSON: {response.text[:200]!r}", response
            ) from e


__all__ = [
    "ApiHelper",
    "AuthTokenRequiredError",
    "UnexpectedResponseError",
]
