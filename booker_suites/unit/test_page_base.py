import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from booker_suites.ui_testing.framework import (
    BasePage,
    ElementNotFoundError,
    SignalOutcome,
    sanitize_name,
)


BASE_URL = "https://booker.test"


def make_locator(wait_for=None):
    locator = MagicMock()
    locator.first = locator
    locator.wait_for = AsyncMock(side_effect=wait_for)
    for name in ("click", "fill", "focus", "clear", "dispatch_event", "scroll_into_view_if_needed", "is_enabled"):
        setattr(locator, name, AsyncMock())
    locator.text_content = AsyncMock(return_value="  Booking Confirmed  ")
    return locator


def make_page(locators):
    page = MagicMock()
    page.url = f"{BASE_URL}/"
    page.locator = MagicMock(side_effect=lambda selector: locators[selector])
    for name in ("goto", "wait_for_load_state", "wait_for_function", "wait_for_timeout", "reload", "go_back"):
        setattr(page, name, AsyncMock())
    page.screenshot = AsyncMock(return_value=b"png")
    return page


def make_base_page(page, tmp_path):
    base_page = BasePage(page, base_url=BASE_URL)
    base_page.screenshot_dir = tmp_path / "screenshots"
    return base_page


async def _timeout(*args, **kwargs):
    raise PlaywrightTimeoutError("Timeout exceeded")


def _slow_timeout(delay):
    async def wait_for(*args, **kwargs):
        await asyncio.sleep(delay)
        raise PlaywrightTimeoutError("Timeout exceeded")
    return wait_for


def test_sanitize_name():
    assert sanitize_name("button:has-text('Book now')") == "button_has-text_Book_now"
    assert sanitize_name("#doReservation") == "doReservation"
    assert sanitize_name("!!!") == "element"
    assert len(sanitize_name("a" * 200)) == 80


def test_absolute_url(tmp_path):
    base_page = make_base_page(make_page({}), tmp_path)

    assert base_page.url == f"{BASE_URL}/"
    assert base_page._absolute_url("/admin") == f"{BASE_URL}/admin"
    assert base_page._absolute_url("https://other.test/x") == "https://other.test/x"


def test_password_values_are_masked():
    assert BasePage._display_value("#password", "secret") == "******"
    assert BasePage._display_value("#username", "admin") == "admin"


@pytest.mark.asyncio
async def test_navigate_waits_for_idle_ready_and_settle(tmp_path):
    page = make_page({})
    base_page = make_base_page(page, tmp_path)

    await base_page.navigate("/admin")

    page.goto.assert_awaited_once_with(f"{BASE_URL}/admin")
    page.wait_for_load_state.assert_awaited_once_with("networkidle", timeout=30000)
    page.wait_for_function.assert_awaited_once_with("document.readyState === 'complete'")
    page.wait_for_timeout.assert_awaited_once_with(base_page.settle_delay_ms)


@pytest.mark.asyncio
async def test_is_element_visible_never_raises(tmp_path):
    page = make_page({".alert-danger": make_locator(wait_for=_timeout)})
    base_page = make_base_page(page, tmp_path)

    assert await base_page.is_element_visible(".alert-danger") is False


@pytest.mark.asyncio
async def test_is_element_enabled_false_when_absent(tmp_path):
    page = make_page({"#doReservation": make_locator(wait_for=_timeout)})
    base_page = make_base_page(page, tmp_path)

    assert await base_page.is_element_enabled("#doReservation") is False


@pytest.mark.asyncio
async def test_wait_for_element_raises_with_screenshot(tmp_path):
    selector = "a:has-text('Book now')"
    page = make_page({selector: make_locator(wait_for=_timeout)})
    base_page = make_base_page(page, tmp_path)

    with pytest.raises(ElementNotFoundError) as excinfo:
        await base_page.wait_for_element(selector, timeout=1000)

    error = excinfo.value
    assert error.selector == selector
    assert error.timeout == 1000
    assert error.screenshot.parent == tmp_path / "screenshots"
    assert error.screenshot.name.startswith("element_not_found_a_has-text_Book_now_")
    assert isinstance(error.__cause__, PlaywrightTimeoutError)


@pytest.mark.asyncio
async def test_screenshot_failure_does_not_mask_error(tmp_path):
    page = make_page({"#missing": make_locator(wait_for=_timeout)})
    page.screenshot = AsyncMock(side_effect=PlaywrightError("Target page closed"))
    base_page = make_base_page(page, tmp_path)

    with pytest.raises(ElementNotFoundError) as excinfo:
        await base_page.wait_for_element("#missing")

    assert excinfo.value.screenshot is None


@pytest.mark.asyncio
async def test_click_element_waits_then_clicks(tmp_path):
    locator = make_locator()
    page = make_page({"#doReservation": locator})
    base_page = make_base_page(page, tmp_path)

    await base_page.click_element("#doReservation")

    locator.wait_for.assert_awaited_once_with(state="visible", timeout=10000)
    locator.scroll_into_view_if_needed.assert_awaited_once()
    locator.click.assert_awaited_once()
    page.wait_for_timeout.assert_awaited_with(base_page.settle_delay_ms)


@pytest.mark.asyncio
async def test_click_failure_is_reraised(tmp_path):
    locator = make_locator()
    locator.click = AsyncMock(side_effect=PlaywrightError("Element is detached"))
    page = make_page({"#doReservation": locator})
    base_page = make_base_page(page, tmp_path)

    with pytest.raises(PlaywrightError):
        await base_page.click_element("#doReservation")

    page.screenshot.assert_awaited_once()


@pytest.mark.asyncio
async def test_fill_input_dispatches_change_and_blur(tmp_path):
    locator = make_locator()
    page = make_page({"input[name='firstname']": locator})
    base_page = make_base_page(page, tmp_path)

    await base_page.fill_input("input[name='firstname']", "Mary")

    locator.clear.assert_awaited_once()
    locator.fill.assert_awaited_once_with("Mary")
    assert [c.args[0] for c in locator.dispatch_event.await_args_list] == ["change", "blur"]


@pytest.mark.asyncio
async def test_get_element_text_is_stripped(tmp_path):
    page = make_page({"text=Booking Confirmed": make_locator()})
    base_page = make_base_page(page, tmp_path)

    assert await base_page.get_element_text("text=Booking Confirmed") == "Booking Confirmed"


@pytest.mark.asyncio
async def test_take_screenshot_saves_under_sanitized_name(tmp_path):
    page = make_page({})
    base_page = make_base_page(page, tmp_path)

    path = await base_page.take_screenshot("failure test/login")

    assert path.parent == tmp_path / "screenshots"
    assert path.name.startswith("failure_test_login_")
    assert path.suffix == ".png"
    page.screenshot.assert_awaited_once_with(path=str(path), full_page=True)


# =============================================================================
# Signal race
# =============================================================================

@pytest.mark.asyncio
async def test_first_visible_signal_wins(tmp_path):
    page = make_page({
        "#dashboard": make_locator(wait_for=_slow_timeout(0.05)),
        ".alert-danger": make_locator(),
    })
    base_page = make_base_page(page, tmp_path)

    outcome = await base_page.wait_for_first_visible({
        "dashboard": ("#dashboard", 10000),
        "error": (".alert-danger", 5000),
    })

    assert outcome.name == "error"
    assert outcome.fired


@pytest.mark.asyncio
async def test_simultaneous_signals_follow_declaration_order(tmp_path):
    page = make_page({"#a": make_locator(), "#b": make_locator()})
    base_page = make_base_page(page, tmp_path)

    outcome = await base_page.wait_for_first_visible([
        ("second", ("#b", 1000)),
        ("first", ("#a", 1000)),
    ])

    assert outcome.name == "second"


@pytest.mark.asyncio
async def test_no_signal_returns_unfired_outcome(tmp_path):
    page = make_page({
        "#dashboard": make_locator(wait_for=_timeout),
        ".alert-danger": make_locator(wait_for=_timeout),
    })
    base_page = make_base_page(page, tmp_path)

    outcome = await base_page.wait_for_first_visible({
        "dashboard": ("#dashboard", 10000),
        "error": (".alert-danger", 5000),
    })

    assert outcome == SignalOutcome(None, outcome.elapsed_ms)
    assert not outcome.fired


@pytest.mark.asyncio
async def test_unexpected_error_in_race_propagates(tmp_path):
    page = make_page({
        "#slow": make_locator(wait_for=_slow_timeout(1)),
        "#broken": make_locator(wait_for=RuntimeError("driver crashed")),
    })
    base_page = make_base_page(page, tmp_path)

    with pytest.raises(RuntimeError, match="driver crashed"):
        await base_page.wait_for_first_visible({
            "slow": ("#slow", 1000),
            "broken": ("#broken", 1000),
        })


# =============================================================================
# Dialogs
# =============================================================================

@pytest.mark.asyncio
async def test_dialog_listener_registered_once_per_page(tmp_path):
    page = make_page({})
    first = make_base_page(page, tmp_path)
    second = make_base_page(page, tmp_path)

    await first.handle_dialog(accept=True)
    await second.handle_dialog(accept=False)

    page.on.assert_called_once()
    event, listener = page.on.call_args.args
    assert event == "dialog"

    dialog = MagicMock()
    dialog.accept = AsyncMock()
    dialog.dismiss = AsyncMock()
    await listener(dialog)

    dialog.dismiss.assert_awaited_once()
    dialog.accept.assert_not_awaited()
