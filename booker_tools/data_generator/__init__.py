"""Randomized fixture data for the booking suites."""

from .data_factory import (
    BookingFactory,
    ContactMessageFactory,
    DataGenerator,
    GuestFactory,
    MutationCase,
    credential_mutations,
    generate_future_date,
    generate_past_date,
)

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
