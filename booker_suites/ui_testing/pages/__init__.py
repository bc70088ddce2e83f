"""
Page Objects

    - BookingPage: home page, reservation flow, contact form
    - LoginPage: admin login
    - AdminPage: admin dashboard, bookings table, message inbox
"""

from .admin_page import AdminPage
from .booking_page import BookingFormData, BookingPage, ContactFormData, expected_total
from .login_page import AdminCredentials, LoginPage

__all__ = [
    "AdminCredentials",
    "AdminPage",
    "BookingFormData",
    "BookingPage",
    "ContactFormData",
    "LoginPage",
    "expected_total",
]
