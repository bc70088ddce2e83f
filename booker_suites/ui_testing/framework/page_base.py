"""
================================================================================
Base Page Object
================================================================================

Foundation class for the Page Object Model and the single choke point for
every browser interaction.

Provides:
    - Navigation that waits for network idle, document readiness and a
      short settling delay for client-rendered content
    - Wait-then-act element helpers (click, fill, select, hover, ...)
    - Screenshot on failure, attached to Allure
    - Non-throwing visibility / enabled probes
    - Polling assertions built on Playwright's ``expect``
    - First-of-N signal race returning an inspectable ``SignalOutcome``
    - Idempotent native dialog handling

Every mutating or reading helper resolves its element through
``wait_for_element`` first, so nothing ever acts on a not-yet-rendered node.

================================================================================
"""

from __future__ import annotations

import asyncio
import re
import time
import weakref
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

import allure
from playwright.async_api import (
    Dialog,
    Error as PlaywrightError,
    FrameLocator,
    Locator,
    Page,
    TimeoutError as PlaywrightTimeoutError,
    expect,
)

from booker_tools.common import ConfigLoader, get_logger


DEFAULT_TIMEOUT = 10000
PROBE_TIMEOUT = 5000
STABILIZE_DELAY_MS = 100
DEFAULT_SETTLE_DELAY_MS = 500
DEFAULT_SCREENSHOT_DIR = "test-results/screenshots"

SignalSpec = Tuple[str, int]


class ElementNotFoundError(Exception):
    """Element did not become visible within its wait budget."""

    def __init__(
        self,
        selector: str,
        timeout: int,
        screenshot: Optional[Path] = None,
    ):
        self.selector = selector
        self.timeout = timeout
        self.screenshot = screenshot
        message = f"Element '{selector}' not visible within {timeout}ms"
        if screenshot:
            message += f" (screenshot: {screenshot})"
        super().__init__(message)


@dataclass(frozen=True)
class SignalOutcome:
    """
    Result of racing several UI signals.

    Attributes:
        name: Key of the signal that became visible first, or None
        elapsed_ms: Time spent waiting
    """
    name: Optional[str]
    elapsed_ms: float

    @property
    def fired(self) -> bool:
        return self.name is not None


def sanitize_name(selector: str, max_length: int = 80) -> str:
    """
    Turn a selector into a filesystem-safe artifact name.

    >>> sanitize_name("button:has-text('Book now')")
    'button_has-text_Book_now'
    """
    cleaned = re.sub(r"[^A-Za-z0-9_-]+", "_", selector).strip("_")
    return cleaned[:max_length] or "element"


class _DialogPolicy:
    """Per-page dialog listener; registered once, policy mutable."""

    def __init__(self, accept: bool, log):
        self.accept = accept
        self.log = log

    async def __call__(self, dialog: Dialog) -> None:
        self.log.info(f"Dialog appeared: type={dialog.type} message={dialog.message!r}")
        if self.accept:
            await dialog.accept()
            self.log.info("Dialog accepted")
        else:
            await dialog.dismiss()
            self.log.info("Dialog dismissed")


# One listener per Page, shared by every page object bound to it.
_dialog_policies: "weakref.WeakKeyDictionary[Page, _DialogPolicy]" = weakref.WeakKeyDictionary()


class BasePage:
    """
    Base class for all page objects.

    Subclasses declare ``URL_PATH`` and a private, read-only selector map:

        class LoginPage(BasePage):
            URL_PATH = "/admin"
            _SELECTORS = MappingProxyType({"username": "#username"})

            async def enter_username(self, value: str) -> None:
                await self.fill_input(self._SELECTORS["username"], value)
    """

    URL_PATH: str = "/"
    _SELECTORS: Mapping[str, str] = MappingProxyType({})

    def __init__(
        self,
        page: Page,
        base_url: str = "",
        config: Optional[ConfigLoader] = None,
    ):
        """
        Initialize page object.

        Args:
            page: Playwright Page object
            base_url: Base URL for the application (defaults to ``ui.base_url``)
            config: Configuration loader instance
        """
        config = config or ConfigLoader()
        self.page = page
        self.base_url = (base_url or config.ui_base_url).rstrip("/")
        self.settle_delay_ms = int(config.get("ui.settle_delay_ms", DEFAULT_SETTLE_DELAY_MS))
        self.screenshot_dir = Path(config.get("ui.screenshot_dir", DEFAULT_SCREENSHOT_DIR))
        self.log = get_logger(type(self).__name__)

    @property
    def url(self) -> str:
        """Full URL of this page."""
        return self._absolute_url(self.URL_PATH)

    def _absolute_url(self, url: str) -> str:
        if url.startswith(("http://", "https://")):
            return url
        return f"{self.base_url}/{url.lstrip('/')}"

    # =========================================================================
    # Navigation
    # =========================================================================

    async def navigate(self, url: str = "") -> None:
        """
        Load ``url`` (relative URLs are joined to ``base_url``) and wait until
        the client-rendered page has settled.
        """
        target = self._absolute_url(url) if url else self.url
        with allure.step(f"Navigate to {target}"):
            self.log.info(f"Navigating to: {target}")
            await self.page.goto(target)
            await self.wait_for_page_load()
            await self.page.wait_for_function("document.readyState === 'complete'")
            await self.page.wait_for_timeout(self.settle_delay_ms)
            self.log.info(f"Navigation complete: {self.page.url}")

    async def wait_for_page_load(self, state: str = "networkidle", timeout: int = 30000) -> None:
        await self.page.wait_for_load_state(state, timeout=timeout)
        self.log.debug("Page loaded successfully")

    async def get_title(self) -> str:
        return await self.page.title()

    def get_current_url(self) -> str:
        return self.page.url

    async def refresh(self) -> None:
        await self.page.reload()
        await self.wait_for_page_load()
        self.log.info("Page refreshed")

    async def go_back(self) -> None:
        await self.page.go_back()
        await self.wait_for_page_load()
        self.log.info("Navigated back")

    async def wait_for_url_contains(self, text: str, timeout: int = DEFAULT_TIMEOUT) -> None:
        await self.page.wait_for_url(lambda url: text in url, timeout=timeout)
        self.log.info(f"URL now contains: {text}")

    # =========================================================================
    # Element Interactions
    # =========================================================================

    async def wait_for_element(self, selector: str, timeout: int = DEFAULT_TIMEOUT) -> Locator:
        """
        Wait until ``selector`` is visible.

        Args:
            selector: Playwright selector
            timeout: Budget in milliseconds

        Returns:
            The resolved Locator

        Raises:
            ElementNotFoundError: Not visible within ``timeout``; a screenshot
                named after the selector is captured first
        """
        locator = self.page.locator(selector).first
        try:
            await locator.wait_for(state="visible", timeout=timeout)
        except PlaywrightTimeoutError as e:
            self.log.error(f"Element not visible: selector={selector!r} timeout={timeout}ms")
            screenshot = await self._capture_failure_screenshot(
                f"element_not_found_{sanitize_name(selector)}"
            )
            raise ElementNotFoundError(selector, timeout, screenshot) from e
        return locator

    async def click_element(self, selector: str, timeout: int = DEFAULT_TIMEOUT) -> None:
        """
        Wait, scroll into view, stabilize, click, then let the UI settle.
        """
        with allure.step(f"Click: {selector}"):
            locator = await self.wait_for_element(selector, timeout)
            try:
                await locator.scroll_into_view_if_needed()
                await self.page.wait_for_timeout(STABILIZE_DELAY_MS)
                await locator.click()
                await self.page.wait_for_timeout(self.settle_delay_ms)
            except PlaywrightError:
                self.log.error(f"Click failed: selector={selector!r}")
                await self._capture_failure_screenshot(f"click_failed_{sanitize_name(selector)}")
                raise
            self.log.info(f"Clicked element: {selector}")

    async def fill_input(self, selector: str, value: str, timeout: int = DEFAULT_TIMEOUT) -> None:
        """
        Focus, clear and fill an input, then dispatch ``change`` and ``blur``
        so React-controlled inputs register the new value.
        """
        shown = self._display_value(selector, value)
        with allure.step(f"Fill {selector}: {shown}"):
            locator = await self.wait_for_element(selector, timeout)
            try:
                await locator.focus()
                await locator.clear()
                await locator.fill(value)
                await locator.dispatch_event("change")
                await locator.dispatch_event("blur")
            except PlaywrightError:
                self.log.error(f"Fill failed: selector={selector!r}")
                await self._capture_failure_screenshot(f"fill_failed_{sanitize_name(selector)}")
                raise
            self.log.info(f"Filled input {selector} with: {shown}")

    async def select_option(self, selector: str, option: str) -> None:
        with allure.step(f"Select '{option}' in {selector}"):
            locator = await self.wait_for_element(selector)
            await locator.select_option(option)
            self.log.info(f"Selected option {option!r} from dropdown: {selector}")

    async def get_element_text(self, selector: str, timeout: int = DEFAULT_TIMEOUT) -> str:
        locator = await self.wait_for_element(selector, timeout)
        text = await locator.text_content()
        return (text or "").strip()

    async def get_input_value(self, selector: str, timeout: int = DEFAULT_TIMEOUT) -> str:
        locator = await self.wait_for_element(selector, timeout)
        return await locator.input_value()

    async def wait_for_text(
        self,
        selector: str,
        expected_text: str,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        await expect(self.page.locator(selector)).to_contain_text(expected_text, timeout=timeout)
        self.log.info(f"Text {expected_text!r} appeared in element: {selector}")

    async def scroll_to_element(self, selector: str) -> None:
        locator = await self.wait_for_element(selector)
        await locator.scroll_into_view_if_needed()
        self.log.info(f"Scrolled to element: {selector}")

    async def hover_element(self, selector: str) -> None:
        locator = await self.wait_for_element(selector)
        await locator.hover()
        self.log.info(f"Hovered over element: {selector}")

    async def double_click_element(self, selector: str) -> None:
        locator = await self.wait_for_element(selector)
        await locator.dblclick()
        self.log.info(f"Double clicked element: {selector}")

    async def right_click_element(self, selector: str) -> None:
        locator = await self.wait_for_element(selector)
        await locator.click(button="right")
        self.log.info(f"Right clicked element: {selector}")

    async def press_key(self, key: str) -> None:
        await self.page.keyboard.press(key)
        self.log.info(f"Pressed key: {key}")

    async def type_text(self, text: str, delay: int = 100) -> None:
        await self.page.keyboard.type(text, delay=delay)
        self.log.info(f"Typed text: {text}")

    async def upload_file(self, selector: str, file_path: Union[str, Path]) -> None:
        locator = await self.wait_for_element(selector)
        await locator.set_input_files(str(file_path))
        self.log.info(f"Uploaded file: {file_path} to {selector}")

    def switch_to_frame(self, frame_selector: str) -> FrameLocator:
        self.log.info(f"Switched to frame: {frame_selector}")
        return self.page.frame_locator(frame_selector)

    async def get_element_count(self, selector: str) -> int:
        count = await self.page.locator(selector).count()
        self.log.debug(f"Element count for {selector}: {count}")
        return count

    async def click_element_by_text(self, text: str, tag: str = "*") -> None:
        if tag == "*":
            locator = self.page.get_by_text(text).first
        else:
            locator = self.page.locator(f'{tag}:has-text("{text}")').first
        with allure.step(f"Click text: {text}"):
            await locator.wait_for(state="visible", timeout=DEFAULT_TIMEOUT)
            await locator.click()
            self.log.info(f"Clicked element with text: {text}")

    # =========================================================================
    # Probes (never raise)
    # =========================================================================

    async def is_element_visible(self, selector: str, timeout: int = PROBE_TIMEOUT) -> bool:
        """Return False instead of raising when nothing becomes visible."""
        try:
            await self.page.locator(selector).first.wait_for(state="visible", timeout=timeout)
            return True
        except PlaywrightError:
            self.log.debug(f"Element not visible: selector={selector!r} timeout={timeout}ms")
            return False

    async def is_element_enabled(self, selector: str, timeout: int = PROBE_TIMEOUT) -> bool:
        """Return False when the element is disabled or absent."""
        locator = self.page.locator(selector).first
        try:
            await locator.wait_for(state="attached", timeout=timeout)
            return await locator.is_enabled(timeout=timeout)
        except PlaywrightError:
            self.log.debug(f"Element not present: selector={selector!r}")
            return False

    # =========================================================================
    # Assertions
    # =========================================================================

    async def assert_element_visible(self, selector: str, timeout: int = DEFAULT_TIMEOUT) -> None:
        await expect(self.page.locator(selector).first).to_be_visible(timeout=timeout)
        self.log.info(f"Verified element is visible: {selector}")

    async def assert_element_not_visible(self, selector: str, timeout: int = DEFAULT_TIMEOUT) -> None:
        await expect(self.page.locator(selector)).not_to_be_visible(timeout=timeout)
        self.log.info(f"Verified element is not visible: {selector}")

    async def assert_element_enabled(self, selector: str, timeout: int = DEFAULT_TIMEOUT) -> None:
        await expect(self.page.locator(selector)).to_be_enabled(timeout=timeout)
        self.log.info(f"Verified element is enabled: {selector}")

    async def assert_element_disabled(self, selector: str, timeout: int = DEFAULT_TIMEOUT) -> None:
        await expect(self.page.locator(selector)).to_be_disabled(timeout=timeout)
        self.log.info(f"Verified element is disabled: {selector}")

    async def assert_element_text(
        self,
        selector: str,
        expected_text: str,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        await expect(self.page.locator(selector).first).to_contain_text(expected_text, timeout=timeout)
        self.log.info(f"Verified element {selector} contains text: {expected_text}")

    # =========================================================================
    # Signals and Dialogs
    # =========================================================================

    async def wait_for_first_visible(
        self,
        signals: Union[Mapping[str, SignalSpec], Iterable[Tuple[str, SignalSpec]]],
    ) -> SignalOutcome:
        """
        Race several named ``(selector, timeout_ms)`` signals.

        Returns the first one to become visible. When several finish in the
        same tick, declaration order decides. When none appears the outcome
        has ``name=None``; callers decide whether that is fatal.
        """
        specs = list(signals.items()) if isinstance(signals, Mapping) else list(signals)
        started = time.monotonic()

        async def watch(selector: str, timeout: int) -> None:
            await self.page.locator(selector).first.wait_for(state="visible", timeout=timeout)

        tasks: Dict[str, asyncio.Task] = {
            name: asyncio.ensure_future(watch(selector, timeout))
            for name, (selector, timeout) in specs
        }
        winner: Optional[str] = None
        pending = set(tasks.values())
        try:
            while pending and winner is None:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for name, task in tasks.items():
                    if task not in done:
                        continue
                    error = task.exception()
                    if error is None:
                        winner = name
                        break
                    if not isinstance(error, PlaywrightError):
                        raise error
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        elapsed_ms = (time.monotonic() - started) * 1000
        outcome = SignalOutcome(winner, round(elapsed_ms, 1))
        if outcome.fired:
            self.log.info(f"Signal '{winner}' appeared after {outcome.elapsed_ms}ms")
        else:
            self.log.warning(
                f"None of the signals appeared: {[name for name, _ in specs]} "
                f"after {outcome.elapsed_ms}ms"
            )
        return outcome

    async def handle_dialog(self, accept: bool = True) -> None:
        """
        Auto-answer native alert/confirm dialogs for the rest of the session.

        The listener is registered once per page; later calls only switch the
        accept / dismiss policy, so a dialog is never answered twice.
        """
        policy = _dialog_policies.get(self.page)
        if policy is None:
            policy = _DialogPolicy(accept, self.log)
            _dialog_policies[self.page] = policy
            self.page.on("dialog", policy)
            self.log.info(f"Dialog handler registered (accept={accept})")
        else:
            policy.accept = accept
            self.log.debug(f"Dialog policy updated (accept={accept})")

    # =========================================================================
    # Screenshot and Debug Utilities
    # =========================================================================

    async def take_screenshot(self, name: str, full_page: bool = True) -> Path:
        """
        Save a PNG under the screenshot directory and attach it to Allure.

        Returns:
            Path to saved screenshot
        """
        self.screenshot_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        filepath = self.screenshot_dir / f"{sanitize_name(name)}_{timestamp}.png"

        png = await self.page.screenshot(path=str(filepath), full_page=full_page)
        allure.attach(png, name=name, attachment_type=allure.attachment_type.PNG)

        self.log.info(f"Screenshot taken: {filepath}")
        return filepath

    async def capture_failure(self, test_name: str) -> None:
        """Attach a screenshot and the current URL after a failed test."""
        with allure.step("Capture failure details"):
            await self._capture_failure_screenshot(f"failure_{test_name}")
            allure.attach(
                self.page.url,
                name="Current URL",
                attachment_type=allure.attachment_type.TEXT
            )

    async def _capture_failure_screenshot(self, name: str) -> Optional[Path]:
        # A closed page must not mask the original failure.
        try:
            return await self.take_screenshot(name)
        except PlaywrightError as e:
            self.log.warning(f"Could not capture screenshot {name}: {e}")
            return None

    @staticmethod
    def _display_value(selector: str, value: str) -> str:
        if "password" in selector.lower():
            return "*" * len(value)
        return value


__all__ = [
    "BasePage",
    "ElementNotFoundError",
    "SignalOutcome",
    "sanitize_name",
]
