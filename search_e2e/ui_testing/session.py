"""Per-scenario browser session state and its guaranteed release."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import structlog

from ..engines import EngineDescriptor
from .errors import CleanupFailure

logger = structlog.get_logger(__name__)


# Awaits every cache deletion and reports how many cache keys survived.
CLEAR_STORAGE_SCRIPT = """
async () => {
    let remaining = 0;
    if (window.caches) {
        const keys = await caches.keys();
        await Promise.all(keys.map((key) => caches.delete(key)));
        remaining = (await caches.keys()).length;
    }
    localStorage.clear();
    sessionStorage.clear();
    return remaining;
}
"""


@dataclass
class ScenarioSession:
    """Browser, context and page owned by a single scenario run.

    Ownership is a strict chain: the page belongs to the context and the
    context to the browser. Only the scenario task touches these handles.
    """

    engine: EngineDescriptor
    browser: Any = None
    context: Any = None
    page: Any = None

    @property
    def is_open(self) -> bool:
        return any(handle is not None for handle in (self.browser, self.context, self.page))


async def clear_page_storage(page: Any) -> None:
    remaining = await page.evaluate(CLEAR_STORAGE_SCRIPT)
    if remaining:
        raise RuntimeError(f"{remaining} cache storage entries survived deletion")


async def release_session(session: ScenarioSession) -> list[CleanupFailure]:
    """Release everything the session holds, page storage first and browser last.

    Every step runs in its own failure boundary, so a failing step never
    skips the ones after it. Failures are logged and returned, never raised.
    Calling this on a session that holds nothing is a no-op.
    """
    log = logger.bind(engine=session.engine.name)
    failures: list[CleanupFailure] = []

    async def _attempt(step: str, action: Callable[[], Awaitable[Any]]) -> None:
        try:
            await action()
        except Exception as e:
            failure = CleanupFailure(session.engine.name, step, e)
            log.warning("Cleanup step failed", step=step, error=str(e))
            failures.append(failure)

    context, page, browser = session.context, session.page, session.browser
    session.page = session.context = session.browser = None

    if context is not None:
        log.info("Cleaning up browser context")
        await _attempt("clear_cookies", context.clear_cookies)
        if page is not None:
            await _attempt("clear_storage", lambda: clear_page_storage(page))
        await _attempt("close_context", context.close)

    if browser is not None:
        log.info("Closing browser")
        await _attempt("close_browser", browser.close)

    return failures
