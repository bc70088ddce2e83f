"""
================================================================================
Test Data Factory
================================================================================

Factory classes producing randomized fixture data for booking API and UI flows.

Features:
- Random data generation with reproducible seeds
- Booking, guest and contact-message payloads in the API's own field names
- Relative date helpers (future / past) with an injectable reference date
- Adversarial credential payloads for negative authentication tests

Values are NOT unique across calls. Tests that need a distinguishable record
should override the relevant field themselves.

================================================================================
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple
import random
import string


DATE_FORMAT = "%Y-%m-%d"


def generate_future_date(days_from_now: int = 7, today: Optional[date] = None) -> str:
    """Return the date ``days_from_now`` days after ``today`` as YYYY-MM-DD."""
    base = today or date.today()
    return (base + timedelta(days=days_from_now)).strftime(DATE_FORMAT)


def generate_past_date(days_ago: int = 7, today: Optional[date] = None) -> str:
    """Return the date ``days_ago`` days before ``today`` as YYYY-MM-DD."""
    base = today or date.today()
    return (base - timedelta(days=days_ago)).strftime(DATE_FORMAT)


# ================================================================================
# Data Models
# ================================================================================

@dataclass
class MutationCase:
    """
    A single adversarial payload for negative testing.

    Attributes:
        name: Short identifier, used as the pytest parametrize id
        description: What the payload probes
        payload: Request body to send
        accepted_statuses: Status codes the remote API may legitimately answer
        expect_reason: Whether a 200 answer must carry ``reason: Bad credentials``
    """
    name: str
    description: str
    payload: Dict[str, Any] = field(default_factory=dict)
    accepted_statuses: Tuple[int, ...] = (200,)
    expect_reason: bool = True


# ================================================================================
# Factory Base
# ================================================================================

class DataFactoryBase:
    """
    Base class for test data factories.

    Each factory owns its own ``random.Random`` so seeding one factory never
    affects another running in the same process.
    """

    FIRST_NAMES = [
        "James", "Mary", "Oliver", "Amelia", "Noah", "Isla", "Jack", "Ava",
        "Harry", "Mia", "George", "Sophia", "Leo", "Grace", "Arthur", "Lily",
    ]
    LAST_NAMES = [
        "Smith", "Jones", "Taylor", "Brown", "Williams", "Wilson", "Johnson",
        "Davies", "Robinson", "Wright", "Thompson", "Evans", "Walker", "White",
    ]
    WORDS = [
        "breakfast", "late", "checkout", "parking", "quiet", "room", "view",
        "extra", "pillows", "crib", "airport", "transfer", "vegan", "dinner",
    ]
    EMAIL_DOMAINS = ["example.com", "test.example.com", "mail.example.org"]

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize factory with optional random seed.

        Args:
            seed: Random seed for reproducible data generation
        """
        self._rng = random.Random(seed)

    def _random_string(self, length: int = 10) -> str:
        """Generate random alphanumeric string."""
        chars = string.ascii_lowercase + string.digits
        return ''.join(self._rng.choice(chars) for _ in range(length))

    def _random_choice(self, options: List[Any]) -> Any:
        """Select random item from list."""
        return self._rng.choice(options)

    def _random_words(self, count: int = 3) -> str:
        return " ".join(self._rng.sample(self.WORDS, k=count))

    def _random_phone(self) -> str:
        """UK-style mobile number; the platform requires 11-21 digits."""
        return "07" + "".join(self._rng.choice(string.digits) for _ in range(9))

    def _random_email(self, first: Optional[str] = None, last: Optional[str] = None) -> str:
        local = ".".join(
            part.lower() for part in (first, last) if part
        ) or self._random_string(8)
        return f"{local}{self._rng.randint(1, 999)}@{self._random_choice(self.EMAIL_DOMAINS)}"


# ================================================================================
# Booking Factory
# ================================================================================

class BookingFactory(DataFactoryBase):
    """Factory for booking payloads in the REST API's shape."""

    def create_valid(
        self,
        days_from_now: Optional[int] = None,
        stay_duration: Optional[int] = None,
        today: Optional[date] = None,
        **overrides: Any,
    ) -> Dict[str, Any]:
        """
        Create a valid booking payload.

        Check-in is always on or before check-out.

        Args:
            days_from_now: Check-in offset; random 1-180 when omitted
            stay_duration: Nights; random 1-14 when omitted
            today: Reference date for the offsets
            **overrides: Field overrides applied last
        """
        offset = days_from_now if days_from_now is not None else self._rng.randint(1, 180)
        nights = stay_duration if stay_duration is not None else self._rng.randint(1, 14)

        data = {
            "firstname": self._random_choice(self.FIRST_NAMES),
            "lastname": self._random_choice(self.LAST_NAMES),
            "totalprice": self._rng.randint(50, 500),
            "depositpaid": self._rng.choice([True, False]),
            "bookingdates": {
                "checkin": generate_future_date(offset, today),
                "checkout": generate_future_date(offset + nights, today),
            },
            "additionalneeds": self._random_words(3),
        }

        data.update(overrides)
        return data


# ================================================================================
# Guest Factory
# ================================================================================

class GuestFactory(DataFactoryBase):
    """Factory for guest details used by the reservation form."""

    def create_valid(self, **overrides: Any) -> Dict[str, Any]:
        first = self._random_choice(self.FIRST_NAMES)
        last = self._random_choice(self.LAST_NAMES)
        data = {
            "first_name": first,
            "last_name": last,
            "email": self._random_email(first, last),
            "phone": self._random_phone(),
        }
        data.update(overrides)
        return data

    def create_valid_email(self) -> str:
        return self._random_email()

    def create_invalid_email(self) -> str:
        """A single lowercase word: no '@', no domain."""
        return self._random_choice(self.WORDS)


# ================================================================================
# Contact Message Factory
# ================================================================================

class ContactMessageFactory(DataFactoryBase):
    """
    Factory for contact-form messages.

    The platform validates subject (5-100 chars) and description (20-2000
    chars); generated values stay inside those bounds.
    """

    SUBJECTS = [
        "Room availability question",
        "Booking enquiry for next month",
        "Cancellation policy",
        "Accessibility requirements",
    ]

    def create_valid(self, **overrides: Any) -> Dict[str, Any]:
        first = self._random_choice(self.FIRST_NAMES)
        last = self._random_choice(self.LAST_NAMES)
        data = {
            "name": f"{first} {last}",
            "email": self._random_email(first, last),
            "phone": self._random_phone(),
            "subject": self._random_choice(self.SUBJECTS),
            "description": (
                f"Hello, I would like to ask about {self._random_words(4)} "
                f"for an upcoming stay. Reference {self._random_string(6)}."
            ),
        }
        data.update(overrides)
        return data


# ================================================================================
# Credential Mutations
# ================================================================================

def credential_mutations(valid_username: str = "admin") -> List[MutationCase]:
    """
    Adversarial credential payloads for ``POST /auth``.

    The platform answers bad credentials with HTTP 200 and a ``reason`` field,
    so most cases accept only 200. Oversized input may instead be rejected by
    the edge (400/413).
    """
    long_string = "a" * 10000
    return [
        MutationCase(
            name="invalid_username",
            description="Unknown username with a plausible password",
            payload={"username": "invaliduser", "password": "password123"},
        ),
        MutationCase(
            name="invalid_password",
            description="Known username with the wrong password",
            payload={"username": valid_username, "password": "wrongpassword"},
        ),
        MutationCase(
            name="empty_credentials",
            description="Both fields present but empty",
            payload={"username": "", "password": ""},
        ),
        MutationCase(
            name="missing_username",
            description="Username field omitted",
            payload={"password": "password123"},
        ),
        MutationCase(
            name="missing_password",
            description="Password field omitted",
            payload={"username": valid_username},
        ),
        MutationCase(
            name="sql_injection",
            description="SQL injection in the username",
            payload={"username": "admin'; DROP TABLE users; --", "password": "password123"},
        ),
        MutationCase(
            name="xss_username",
            description="Script tag in the username",
            payload={"username": '<script>alert("xss")</script>', "password": "password123"},
        ),
        MutationCase(
            name="very_long_strings",
            description="10k character username and password",
            payload={"username": long_string, "password": long_string},
            accepted_statuses=(200, 400, 413),
        ),
    ]


# ================================================================================
# Composite Generator
# ================================================================================

class DataGenerator:
    """
    Composite factory providing every kind of fixture record.

    Usage:
        generator = DataGenerator(seed=42)
        booking = generator.generate_booking_data()
        message = generator.generate_contact_message()
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize all factories.

        Args:
            seed: Optional random seed for reproducibility
        """
        self.booking = BookingFactory(seed)
        self.guest = GuestFactory(seed)
        self.contact = ContactMessageFactory(seed)

    def generate_booking_data(self, **overrides: Any) -> Dict[str, Any]:
        return self.booking.create_valid(**overrides)

    def generate_user_data(self, **overrides: Any) -> Dict[str, Any]:
        return self.guest.create_valid(**overrides)

    def generate_contact_message(self, **overrides: Any) -> Dict[str, Any]:
        return self.contact.create_valid(**overrides)

    def generate_booking_form_data(
        self,
        days_from_now: int = 7,
        stay_duration: int = 3,
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        """Guest details plus a check-in / check-out pair for the reservation form."""
        data = self.guest.create_valid()
        data["checkin"] = generate_future_date(days_from_now, today)
        data["checkout"] = generate_future_date(days_from_now + stay_duration, today)
        return data

    def generate_valid_email(self) -> str:
        return self.guest.create_valid_email()

    def generate_invalid_email(self) -> str:
        return self.guest.create_invalid_email()

    @staticmethod
    def generate_future_date(days_from_now: int = 7, today: Optional[date] = None) -> str:
        return generate_future_date(days_from_now, today)

    @staticmethod
    def generate_past_date(days_ago: int = 7, today: Optional[date] = None) -> str:
        return generate_past_date(days_ago, today)


__all__ = [
    "DataGenerator",
    "BookingFactory",
    "GuestFactory",
    "ContactMessageFactory",
    "MutationCase",
    "credential_mutations",
    "generate_future_date",
    "generate_past_date",
]
