"""
Offline unit tests of the framework. Nothing here touches the network or a
browser, so these always run.
"""

import pytest

from booker_tools.common import ConfigLoader


ENV_OVERRIDES = ("API_BASE_URL", "UI_BASE_URL", "BASE_URL", "CI", "LOG_LEVEL", "RUNNER_CI")


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Each test starts from config/config.yaml without environment overrides."""
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
    ConfigLoader.reset()
    yield
    ConfigLoader.reset()
