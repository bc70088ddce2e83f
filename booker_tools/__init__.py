"""
================================================================================
Booker Tools
================================================================================

Shared utilities for the Restful Booker automation suites.

Modules:
    - common: Configuration loading and logging setup
    - data_generator: Randomized fixture data for API and UI flows

Example:
    from booker_tools.common import ConfigLoader, get_logger
    from booker_tools.data_generator import DataGenerator

    log = get_logger("Example")
    config = ConfigLoader()
    booking = DataGenerator().generate_booking_data()
    log.info(f"Creating booking on {config.get('api.base_url')}")

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "data_generator",
]
