"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle management for UI automation.

Features:
    - One browser per session, one isolated context per test
    - Settings from ``ui.*`` configuration (browser, headless, video)
    - Longer default timeouts on CI

================================================================================
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
)

from booker_tools.common import ConfigLoader, get_logger


SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")
CI_TIMEOUT_FACTOR = 2

log = get_logger("BrowserManager")


class BrowserManager:
    """
    Manages the browser instance and per-test contexts.

    Usage:
        async with BrowserManager() as manager:
            page = await manager.new_page()
            await page.goto("https://automationintesting.online")
    """

    DEFAULT_LAUNCH_OPTIONS: Dict[str, Any] = {
        "args": ["--ignore-certificate-errors"],
    }

    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "viewport": {"width": 1400, "height": 800},
        "ignore_https_errors": True,
    }

    def __init__(
        self,
        headless: Optional[bool] = None,
        browser_type: Optional[str] = None,
        config: Optional[ConfigLoader] = None,
    ):
        """
        Initialize browser manager.

        Args:
            headless: Run browser headless (defaults to ``ui.headless``)
            browser_type: 'chromium', 'firefox' or 'webkit' (defaults to ``ui.browser``)
            config: Configuration loader instance
        """
        self.config = config or ConfigLoader()
        self.headless = self.config.get("ui.headless", True) if headless is None else headless
        self.browser_type = (browser_type or self.config.get("ui.browser", "chromium")).lower()
        if self.browser_type not in SUPPORTED_BROWSERS:
            raise ValueError(
                f"Unsupported browser '{self.browser_type}'. Choose one of {SUPPORTED_BROWSERS}"
            )

        timeout = int(self.config.get("ui.default_timeout", 10000))
        self.default_timeout = timeout * CI_TIMEOUT_FACTOR if self.config.is_ci() else timeout
        self.record_video = bool(self.config.get("ui.video", False))
        self.video_dir = Path(self.config.get("ui.video_dir", "test-results/videos"))

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    async def __aenter__(self) -> "BrowserManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def start(self) -> None:
        """Start Playwright and launch browser."""
        self._playwright = await async_playwright().start()
        browser_launcher = getattr(self._playwright, self.browser_type)

        self._browser = await browser_launcher.launch(
            **self.DEFAULT_LAUNCH_OPTIONS,
            headless=self.headless,
        )
        log.info(
            f"Browser started: {self.browser_type} "
            f"(headless={self.headless}, default_timeout={self.default_timeout}ms)"
        )

    async def close(self) -> None:
        """Close all contexts and browser."""
        for context in self._contexts:
            try:
                await context.close()
            except PlaywrightError as e:
                log.debug(f"Context already closed: {e}")
        self._contexts.clear()

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        log.debug("Browser closed")

    async def new_context(self, **options: Any) -> BrowserContext:
        """
        Create new isolated browser context (own cookies and storage).

        Args:
            **options: Overrides for the default context options
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context_options = {**self.DEFAULT_CONTEXT_OPTIONS, **options}
        if self.record_video and "record_video_dir" not in context_options:
            context_options["record_video_dir"] = str(self.video_dir)

        context = await self._browser.new_context(**context_options)
        context.set_default_timeout(self.default_timeout)
        self._contexts.append(context)
        return context

    async def new_page(
        self,
        context: Optional[BrowserContext] = None,
        **context_options: Any,
    ) -> Page:
        """
        Create new page in new or existing context.
        """
        if context is None:
            context = await self.new_context(**context_options)
        return await context.new_page()

    async def close_context(self, context: BrowserContext) -> None:
        if context in self._contexts:
            self._contexts.remove(context)
        await context.close()

    @property
    def browser(self) -> Optional[Browser]:
        """Get browser instance."""
        return self._browser


__all__ = [
    "BrowserManager",
    "SUPPORTED_BROWSERS",
]
