"""Browser engine descriptors for the cross-engine scenario."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class EngineDescriptor(BaseModel):
    """One browser engine the scenario runs against.

    ``driver`` names a Playwright browser type (``playwright.chromium`` etc).
    Several descriptors may share a driver and differ only in their launch
    options, e.g. Microsoft Edge is the chromium driver on the ``msedge``
    channel.
    """

    name: str = Field(description="Human-readable engine label, unique per run")
    driver: Literal["chromium", "firefox", "webkit"] = Field(description="Playwright browser type")
    launch_options: dict[str, Any] = Field(default_factory=dict, description="Extra BrowserType.launch kwargs")
    extra_launch_args: list[str] = Field(default_factory=list, description="Extra browser command-line args")

    def resolve_driver(self, playwright: Any) -> Any:
        """Return the browser type on a running Playwright instance."""
        driver = getattr(playwright, self.driver, None)
        if driver is None or not callable(getattr(driver, "launch", None)):
            raise RuntimeError(f"Browser driver {self.driver!r} not available in Playwright")
        return driver

    def build_launch_options(self, *, headless: bool) -> dict[str, Any]:
        options: dict[str, Any] = {**self.launch_options, "headless": headless}
        args = [*options.pop("args", []), *self.extra_launch_args]
        if args:
            options["args"] = args
        return options


def default_engines() -> list[EngineDescriptor]:
    return [
        EngineDescriptor(name="Chromium", driver="chromium"),
        # Several Firefox processes in one environment fight over the remote instance.
        EngineDescriptor(name="Firefox", driver="firefox", extra_launch_args=["--no-remote"]),
        EngineDescriptor(name="Microsoft Edge", driver="chromium", launch_options={"channel": "msedge"}),
    ]
