"""Failure taxonomy for the search scenario."""

from __future__ import annotations


class ScenarioError(Exception):
    """A scenario phase failed for one engine."""

    kind = "scenario_failure"

    def __init__(self, engine: str, phase: str, cause: BaseException | None = None, message: str | None = None):
        self.engine = engine
        self.phase = phase
        self.cause = cause
        self.cleanup_errors: list[CleanupFailure] = []
        # Set by the runner once the failing run has been cleaned up.
        self.result = None
        if message is None:
            detail = f"{type(cause).__name__}: {cause}" if cause is not None else "failed"
            message = f"[{engine}] {phase}: {detail}"
        super().__init__(message)


class LaunchFailure(ScenarioError):
    """Engine binary missing or misconfigured, or no usable browser context."""

    kind = "launch_failure"


class NavigationFailure(ScenarioError):
    kind = "navigation_failure"


class InteractionFailure(ScenarioError):
    kind = "interaction_failure"


class AssertionFailure(ScenarioError):
    kind = "assertion_failure"


class CleanupFailure(ScenarioError):
    """Best-effort cleanup step failed; logged, never raised over a scenario outcome."""

    kind = "cleanup_failure"


def is_browser_infra_error(exc: BaseException) -> bool:
    if isinstance(exc, ScenarioError) and exc.cause is not None:
        exc = exc.cause

    name = type(exc).__name__
    msg = str(exc or "").lower()

    if name == "TargetClosedError":
        return True
    if "target page, context or browser has been closed" in msg:
        return True
    if "browser has been closed" in msg:
        return True

    # Renderer crashes point at resource pressure on the host, not the site.
    if "page crashed" in msg:
        return True
    if "target crashed" in msg:
        return True

    # Playwright driver transport died.
    if "connection closed while reading from the driver" in msg:
        return True
    if "connection closed while writing to the driver" in msg:
        return True
    if "pipe closed by peer" in msg:
        return True

    # Channel or browser binary not installed.
    if "executable doesn't exist" in msg:
        return True
    if "is not found at" in msg and "chromium distribution" in msg:
        return True

    return False
