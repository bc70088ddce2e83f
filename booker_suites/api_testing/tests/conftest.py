"""
================================================================================
API Testing Pytest Configuration
================================================================================

Shared fixtures for the booking REST API tests.

Fixtures:
    - config: Configuration loader instance
    - http_client: Configured HTTP client for API requests
    - api_helper / authenticated_api: Anonymous and token-holding helpers
    - data_generator: Randomized payload factory
    - cleanup_bookings: Bookings deleted after the test

License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Generator, List

import allure
import pytest
from loguru import logger

from booker_suites.api_testing.framework import ApiHelper, AuthCredentials, HttpClient
from booker_tools.common import ConfigLoader
from booker_tools.data_generator import DataGenerator


# =============================================================================
# Session-Scoped Fixtures (Shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def config() -> ConfigLoader:
    """
    Provide configuration loader instance.

    Session-scoped to ensure configuration is loaded only once.
    """
    return ConfigLoader()


@pytest.fixture(scope="session")
def api_credentials(config: ConfigLoader) -> AuthCredentials:
    """Credentials accepted by ``POST /auth``."""
    return AuthCredentials(
        username=config.get("auth.api_username", "admin"),
        password=config.get("auth.api_password", "password123"),
    )


# =============================================================================
# Function-Scoped Fixtures (Fresh for each test)
# =============================================================================

@pytest.fixture
def http_client(config: ConfigLoader) -> Generator[HttpClient, None, None]:
    """
    Provide configured HTTP client for API requests.

    Usage:
        def test_example(http_client):
            response = http_client.get("/ping")
            assert response.status_code == 201
    """
    with HttpClient(config) as client:
        yield client


@pytest.fixture
def api_helper(http_client: HttpClient) -> ApiHelper:
    """Helper without a token; mutating calls need an explicit one."""
    return ApiHelper(http_client)


@pytest.fixture
def authenticated_api(http_client: HttpClient, api_credentials: AuthCredentials) -> ApiHelper:
    """
    Helper holding its own token.

    Each test gets a fresh token so parallel workers never share a session.
    """
    helper = ApiHelper(http_client)
    helper.authenticate(api_credentials)
    return helper


@pytest.fixture
def data_generator() -> DataGenerator:
    return DataGenerator()


# =============================================================================
# Cleanup Fixtures
# =============================================================================

@pytest.fixture
def cleanup_bookings(authenticated_api: ApiHelper) -> Generator[List[int], None, None]:
    """
    Track created bookings and delete them after the test.

    Usage:
        def test_create(authenticated_api, cleanup_bookings):
            created = authenticated_api.create_booking(data)
            cleanup_bookings.append(created["bookingid"])
    """
    created_ids: List[int] = []
    yield created_ids

    for booking_id in reversed(created_ids):
        try:
            if authenticated_api.booking_exists(booking_id):
                authenticated_api.delete_booking(booking_id)
                logger.debug(f"Cleaned up booking: {booking_id}")
        except Exception as e:
            logger.warning(f"Failed to cleanup booking {booking_id}: {e}")


# =============================================================================
# Allure Reporting Hooks
# =============================================================================

def pytest_exception_interact(node, call, report):
    """Attach additional info on test failure."""
    if report.failed:
        allure.attach(
            str(call.excinfo.value),
            name="Error Details",
            attachment_type=allure.attachment_type.TEXT
        )
