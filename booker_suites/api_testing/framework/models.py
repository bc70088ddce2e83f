"""
Payload shapes exchanged with the booking REST API.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, TypedDict


class BookingDates(TypedDict):
    checkin: str
    checkout: str


class BookingData(TypedDict, total=False):
    firstname: str
    lastname: str
    totalprice: int
    depositpaid: bool
    bookingdates: BookingDates
    additionalneeds: str


class BookingResponse(TypedDict):
    bookingid: int
    booking: BookingData


class ContactMessage(TypedDict):
    name: str
    email: str
    phone: str
    subject: str
    description: str


@dataclass(frozen=True)
class AuthCredentials:
    """Username / password pair for ``POST /auth``."""
    username: str
    password: str

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)

    def __repr__(self) -> str:
        return f"AuthCredentials(username={self.username!r}, password='***')"


BOOKING_FILTER_KEYS: List[str] = ["firstname", "lastname", "checkin", "checkout"]


__all__ = [
    "AuthCredentials",
    "BookingData",
    "BookingDates",
    "BookingResponse",
    "ContactMessage",
    "BOOKING_FILTER_KEYS",
]
