from __future__ import annotations

from typing import Any

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from search_e2e.config import ScenarioConfig


class FakeLocator:
    def __init__(self, page: "FakePage", role: str, name: str | None = None, level: int | None = None) -> None:
        self.page = page
        self.role = role
        self.name = name
        self.level = level

    async def click(self) -> None:
        self.page.record("click", self.role, self.name)
        if self.role in self.page.failing_clicks:
            raise PlaywrightTimeoutError("Locator.click: Timeout 30000ms exceeded.")

    async def fill(self, value: str) -> None:
        self.page.input_value = value
        self.page.record("fill", self.role, self.name, value)

    async def press(self, key: str) -> None:
        self.page.record("press", self.role, self.name, key, self.page.input_value)

    async def wait_for(self, state: str = "visible", timeout: float | None = None) -> None:
        self.page.record("wait_for", self.role, self.name, self.level, state)
        if (self.level, self.name) in self.page.missing_headings:
            raise PlaywrightTimeoutError(f"Locator.wait_for: Timeout {timeout}ms exceeded.")


class FakePage:
    def __init__(self, context: "FakeContext") -> None:
        self.context = context
        self.events = context.events
        self.closed = False
        self.input_value = ""
        self.default_timeout: float | None = None
        self.missing_headings: set[tuple[int, str]] = set(context.browser.browser_type.playwright.missing_headings)
        self.goto_error: BaseException | None = context.browser.browser_type.playwright.goto_error
        self.remaining_caches = context.browser.browser_type.playwright.remaining_caches
        self.failing_clicks: set[str] = set(context.browser.browser_type.playwright.failing_clicks)
        self.cookies_at_navigation: list[str] | None = None

    def record(self, *event: Any) -> None:
        self.events.append(event)

    def set_default_timeout(self, timeout: float) -> None:
        self.default_timeout = timeout

    async def goto(self, url: str, **kwargs: Any) -> None:
        self.record("goto", url, kwargs)
        if self.goto_error is not None:
            raise self.goto_error
        self.cookies_at_navigation = list(self.context.cookies)
        # The app under test sets a cookie on first visit.
        self.context.cookies.append("session")

    async def wait_for_load_state(self, state: str = "load") -> None:
        self.record("wait_for_load_state", state)

    def get_by_role(self, role: str, name: str | None = None, level: int | None = None, **_: Any) -> FakeLocator:
        return FakeLocator(self, role, name=name, level=level)

    async def wait_for_timeout(self, timeout: float) -> None:
        self.record("wait_for_timeout", timeout)

    async def evaluate(self, script: str) -> Any:
        self.record("evaluate")
        if self.context.browser.browser_type.playwright.evaluate_error is not None:
            raise self.context.browser.browser_type.playwright.evaluate_error
        return self.remaining_caches

    async def close(self) -> None:
        self.closed = True
        self.record("page.close")


class FakeContext:
    def __init__(self, browser: "FakeBrowser", options: dict[str, Any]) -> None:
        self.browser = browser
        self.events = browser.events
        self.options = options
        self.closed = False
        self.cookies: list[str] = []
        self.pages: list[FakePage] = []
        self.close_error: BaseException | None = browser.browser_type.playwright.context_close_error
        for _ in range(browser.browser_type.playwright.stray_pages):
            self.pages.append(FakePage(self))

    async def clear_cookies(self) -> None:
        self.cookies.clear()
        self.events.append(("clear_cookies",))

    async def new_page(self) -> FakePage:
        page = FakePage(self)
        self.pages.append(page)
        self.events.append(("new_page",))
        return page

    async def close(self) -> None:
        self.events.append(("context.close",))
        if self.close_error is not None:
            raise self.close_error
        self.closed = True


class FakeBrowser:
    def __init__(self, browser_type: "FakeBrowserType", options: dict[str, Any]) -> None:
        self.browser_type = browser_type
        self.events = browser_type.events
        self.options = options
        self.contexts: list[FakeContext] = []
        self.closed = False

    async def new_context(self, **options: Any) -> FakeContext:
        if self.browser_type.playwright.new_context_error is not None:
            raise self.browser_type.playwright.new_context_error
        context = FakeContext(self, options)
        self.contexts.append(context)
        self.events.append(("new_context", options))
        return context

    async def close(self) -> None:
        self.closed = True
        self.events.append(("browser.close",))


class FakeBrowserType:
    def __init__(self, playwright: "FakePlaywright", name: str) -> None:
        self.playwright = playwright
        self.name = name
        self.events = playwright.events
        self.launch_calls: list[dict[str, Any]] = []
        self.missing_channels: set[str] = set()

    async def launch(self, **options: Any) -> FakeBrowser:
        self.launch_calls.append(options)
        self.events.append(("launch", self.name, options))
        channel = options.get("channel")
        if channel in self.missing_channels:
            raise RuntimeError(
                f"BrowserType.launch: Chromium distribution '{channel}' is not found at /opt/microsoft/{channel}"
            )
        browser = FakeBrowser(self, options)
        self.playwright.browsers.append(browser)
        return browser


class FakePlaywright:
    """In-memory stand-in for the Playwright object graph with handle accounting."""

    def __init__(self) -> None:
        self.events: list[tuple[Any, ...]] = []
        self.browsers: list[FakeBrowser] = []
        self.missing_headings: set[tuple[int, str]] = set()
        self.goto_error: BaseException | None = None
        self.evaluate_error: BaseException | None = None
        self.context_close_error: BaseException | None = None
        self.new_context_error: BaseException | None = None
        self.failing_clicks: set[str] = set()
        self.remaining_caches = 0
        self.stray_pages = 0
        self.stopped = False
        self.chromium = FakeBrowserType(self, "chromium")
        self.firefox = FakeBrowserType(self, "firefox")
        self.webkit = FakeBrowserType(self, "webkit")

    @property
    def open_browsers(self) -> list[FakeBrowser]:
        return [b for b in self.browsers if not b.closed]

    def event_names(self) -> list[str]:
        return [str(event[0]) for event in self.events]

    async def stop(self) -> None:
        self.stopped = True


@pytest.fixture()
def fake_playwright() -> FakePlaywright:
    return FakePlaywright()


@pytest.fixture()
def scenario_config() -> ScenarioConfig:
    return ScenarioConfig(headless=True, expect_timeout_ms=100)
