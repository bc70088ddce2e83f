"""
Test suites package.

Kept importable so the runner script, IDEs and CI jobs can reach the
framework and page objects as ``booker_suites.*``.

Layout:
    - api_testing: HTTP client, API helper, validators and API tests
    - ui_testing: browser manager, page objects and UI tests
    - unit: offline tests of the framework itself
"""
