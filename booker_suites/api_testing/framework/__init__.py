"""
API Testing Framework

Core modules:
    - http_client: httpx wrapper with retry, allure logging and redaction
    - api_helper: booking / auth / message operations
    - response_validator: rule-based payload checks
    - models: payload shapes
"""

from .api_helper import ApiHelper, AuthTokenRequiredError, UnexpectedResponseError
from .http_client import HttpClient, HttpClientError, RateLimitExceeded
from .models import AuthCredentials, BookingData, BookingResponse, ContactMessage
from .response_validator import (
    AUTH_TOKEN_RULES,
    BAD_CREDENTIALS_RULES,
    BOOKING_RULES,
    CREATED_BOOKING_RULES,
    ResponseValidator,
    ValidationRule,
    ValidationType,
    message_echo_rules,
)

__all__ = [
    "ApiHelper",
    "AuthTokenRequiredError",
    "UnexpectedResponseError",
    "HttpClient",
    "HttpClientError",
    "RateLimitExceeded",
    "AuthCredentials",
    "BookingData",
    "BookingResponse",
    "ContactMessage",
    "ResponseValidator",
    "ValidationRule",
    "ValidationType",
    "BOOKING_RULES",
    "CREATED_BOOKING_RULES",
    "AUTH_TOKEN_RULES",
    "BAD_CREDENTIALS_RULES",
    "message_echo_rules",
]
