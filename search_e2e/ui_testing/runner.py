"""Cross-engine search scenario runner using Playwright."""

import time
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator

import structlog
from playwright.async_api import async_playwright

from ..config import ScenarioConfig, get_config
from ..engines import EngineDescriptor
from .errors import (
    AssertionFailure,
    CleanupFailure,
    InteractionFailure,
    LaunchFailure,
    NavigationFailure,
    ScenarioError,
    is_browser_infra_error,
)
from .session import ScenarioSession, release_session

logger = structlog.get_logger(__name__)


class ScenarioResult:
    """Represents the outcome of the search scenario on one engine."""

    def __init__(
        self,
        engine: str,
        success: bool,
        duration: float,
        error: str | None = None,
        error_kind: str | None = None,
        phase: str | None = None,
        browser_infra_error: bool = False,
        cleanup_errors: list[str] | None = None,
    ):
        self.engine = engine
        self.success = success
        self.duration = duration
        self.error = error
        self.error_kind = error_kind
        self.phase = phase
        self.browser_infra_error = browser_infra_error
        self.cleanup_errors = cleanup_errors or []
        self.timestamp = datetime.utcnow().isoformat()

    def to_dict(self) -> dict[str, Any]:
        """Convert scenario result to dictionary."""
        return {
            "engine": self.engine,
            "success": self.success,
            "duration": self.duration,
            "error": self.error,
            "error_kind": self.error_kind,
            "phase": self.phase,
            "browser_infra_error": self.browser_infra_error,
            "cleanup_errors": self.cleanup_errors,
            "timestamp": self.timestamp,
        }


class SearchScenarioRunner:
    """Runs the movie search scenario once per browser engine.

    Each run gets a fresh browser process and a fresh storage-isolated
    context, and releases both before returning, whatever the outcome.
    """

    def __init__(self, config: ScenarioConfig | None = None, playwright: Any = None):
        self.config = config if config is not None else get_config()
        self.playwright = playwright
        self._owns_playwright = False

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.stop()

    async def start(self):
        """Start Playwright unless an instance was supplied."""
        if self.playwright is None:
            logger.info("Starting Playwright")
            self.playwright = await async_playwright().start()
            self._owns_playwright = True

    async def stop(self):
        if self._owns_playwright and self.playwright is not None:
            logger.info("Stopping Playwright")
            await self.playwright.stop()
            self.playwright = None
            self._owns_playwright = False

    @contextmanager
    def _phase(self, session: ScenarioSession, phase: str, error_cls: type[ScenarioError]) -> Iterator[None]:
        logger.debug("Scenario phase", engine=session.engine.name, phase=phase)
        try:
            yield
        except ScenarioError:
            raise
        except Exception as e:
            raise error_cls(session.engine.name, phase, e) from e

    async def run_scenario(self, engine: EngineDescriptor) -> ScenarioResult:
        """Run the search scenario on one engine.

        Raises the phase's ``ScenarioError`` after cleanup has finished when
        any step fails; the failing ``ScenarioResult`` is attached as
        ``error.result``.
        """
        if self.playwright is None:
            raise RuntimeError("Runner not started; use 'async with SearchScenarioRunner()'")

        log = logger.bind(engine=engine.name)
        session = ScenarioSession(engine=engine)
        start_time = time.time()
        failure: ScenarioError | None = None
        cleanup_failures: list[CleanupFailure] = []

        log.info("Running search scenario", target_url=self.config.target_url)

        try:
            await self._launch(session)
            await self._isolate(session)
            await self._navigate(session)
            await self._search(session)
            await self._assert_results(session)
            await self._observe(session)
        except ScenarioError as e:
            failure = e
        finally:
            cleanup_failures = await release_session(session)

        duration = time.time() - start_time
        cleanup_errors = [str(f) for f in cleanup_failures]

        if failure is None:
            log.info("Search scenario passed", duration=duration)
            return ScenarioResult(
                engine=engine.name,
                success=True,
                duration=duration,
                cleanup_errors=cleanup_errors,
            )

        failure.cleanup_errors = cleanup_failures
        failure.result = ScenarioResult(
            engine=engine.name,
            success=False,
            duration=duration,
            error=str(failure),
            error_kind=failure.kind,
            phase=failure.phase,
            browser_infra_error=is_browser_infra_error(failure),
            cleanup_errors=cleanup_errors,
        )
        log.error(
            "Search scenario failed",
            phase=failure.phase,
            error_kind=failure.kind,
            error=str(failure),
            duration=duration,
        )
        raise failure

    async def _launch(self, session: ScenarioSession):
        engine = session.engine
        with self._phase(session, "launch", LaunchFailure):
            logger.info("Launching browser", engine=engine.name)
            driver = engine.resolve_driver(self.playwright)
            session.browser = await driver.launch(**engine.build_launch_options(headless=self.config.headless))

    async def _isolate(self, session: ScenarioSession):
        with self._phase(session, "isolate", LaunchFailure):
            logger.info("Creating isolated browser context", engine=session.engine.name)
            # No persisted cookies, auth or cache entries from earlier runs.
            session.context = await session.browser.new_context(storage_state=None)
            for stray_page in list(session.context.pages):
                await stray_page.close()
            await session.context.clear_cookies()

    async def _navigate(self, session: ScenarioSession):
        with self._phase(session, "navigate", NavigationFailure):
            session.page = await session.context.new_page()
            page = session.page
            page.set_default_timeout(self.config.action_timeout_ms)

            logger.info("Navigating to target", engine=session.engine.name, url=self.config.target_url)
            await page.goto(
                self.config.target_url,
                wait_until="networkidle",
                referer="",
                timeout=self.config.navigation_timeout_ms,
            )
            # Client-side rendering issues more requests after the document loads.
            await page.wait_for_load_state("networkidle")

    async def _search(self, session: ScenarioSession):
        page = session.page
        with self._phase(session, "interact", InteractionFailure):
            await page.get_by_role("search").click()

            search_input = page.get_by_role("textbox", name=self.config.search_input_name)
            await search_input.fill(self.config.search_term)
            await search_input.press("Enter")

            await page.wait_for_load_state("networkidle")

    async def _assert_results(self, session: ScenarioSession):
        page = session.page
        expected = [
            (1, self.config.expected_title_heading),
            (2, self.config.expected_result_heading),
        ]
        with self._phase(session, "assert", AssertionFailure):
            for level, name in expected:
                heading = page.get_by_role("heading", name=name, level=level)
                await heading.wait_for(state="visible", timeout=self.config.expect_timeout_ms)

    async def _observe(self, session: ScenarioSession):
        delay_ms = self.config.demo_delay_ms
        if delay_ms > 0:
            with self._phase(session, "observe", ScenarioError):
                await session.page.wait_for_timeout(delay_ms)

    async def run_suite(self, engines: list[EngineDescriptor] | None = None) -> list[ScenarioResult]:
        """Run the scenario on every engine in turn and collect results."""
        engines = self.config.engines if engines is None else engines
        results = []

        logger.info("Running search scenario suite", engine_count=len(engines))

        # One engine at a time; never concurrent.
        for engine in engines:
            try:
                result = await self.run_scenario(engine)
            except ScenarioError as e:
                result = e.result
            results.append(result)

        passed = sum(1 for r in results if r.success)
        failed = len(results) - passed

        logger.info("Search scenario suite completed", total=len(results), passed=passed, failed=failed)

        return results
