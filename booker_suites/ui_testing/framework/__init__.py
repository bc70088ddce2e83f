"""
UI Testing Framework

Core modules:
    - page_base: BasePage interaction helper, signal race, dialog handling
    - browser_manager: Browser lifecycle management
"""

from .browser_manager import BrowserManager
from .page_base import BasePage, ElementNotFoundError, SignalOutcome, sanitize_name

__all__ = [
    "BasePage",
    "BrowserManager",
    "ElementNotFoundError",
    "SignalOutcome",
    "sanitize_name",
]
