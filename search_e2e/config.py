"""Configuration management for the search scenario."""

import os
from typing import Iterable, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .engines import EngineDescriptor, default_engines


DEFAULT_TARGET_URL = "https://debs-obrien.github.io/playwright-movies-app"


class ScenarioConfig(BaseModel):
    """Main configuration for the cross-engine search scenario."""

    # Target settings
    target_url: str = Field(default=DEFAULT_TARGET_URL, description="Single-page app under test")
    search_term: str = Field(default="Garfield", description="Text typed into the search input")
    search_input_name: str = Field(default="Search Input", description="Accessible name of the search textbox")
    expected_title_heading: str = Field(default="Garfield", description="Level-1 heading expected after search")
    expected_result_heading: str = Field(default="The Garfield Movie", description="Level-2 heading expected after search")

    # Browser settings
    headless: bool = Field(default=False, description="Run browsers without a visible UI")
    demo_delay_ms: int = Field(default=0, ge=0, description="Pause after assertions for manual inspection")

    # Timeouts
    navigation_timeout_ms: int = Field(default=30000, gt=0, description="Page.goto timeout")
    action_timeout_ms: int = Field(default=30000, gt=0, description="Default timeout for page actions")
    expect_timeout_ms: int = Field(default=5000, gt=0, description="Polling timeout for visibility assertions")

    log_level: str = Field(default="INFO", description="Logging level")

    engines: list[EngineDescriptor] = Field(default_factory=default_engines)

    @field_validator("engines")
    @classmethod
    def _unique_engine_names(cls, engines: list[EngineDescriptor]) -> list[EngineDescriptor]:
        seen: set[str] = set()
        for engine in engines:
            key = engine.name.lower()
            if key in seen:
                raise ValueError(f"Duplicate engine name: {engine.name}")
            seen.add(key)
        return engines

    def select_engines(self, names: Optional[Iterable[str]] = None) -> list[EngineDescriptor]:
        """Return the configured engines, optionally filtered by name."""
        if not names:
            return list(self.engines)

        by_name = {engine.name.lower(): engine for engine in self.engines}
        selected = []
        for name in names:
            engine = by_name.get(name.lower())
            if engine is None:
                raise KeyError(f"Unknown engine: {name}")
            selected.append(engine)
        return selected


def load_config(config_path: Optional[str] = None) -> ScenarioConfig:
    """Load configuration from file or environment variables."""
    if config_path is None:
        config_path = os.getenv("SEARCH_E2E_CONFIG", "config/search_e2e.yaml")

    config_data = {}

    # Load from file if exists
    if os.path.exists(config_path):
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f) or {}

    # Override with environment variables
    env_overrides = {
        "target_url": os.getenv("SEARCH_E2E_TARGET_URL"),
        "search_term": os.getenv("SEARCH_E2E_SEARCH_TERM"),
        "headless": os.getenv("BROWSER_HEADLESS"),
        "demo_delay_ms": os.getenv("DEMO_DELAY_MS"),
        "navigation_timeout_ms": os.getenv("NAVIGATION_TIMEOUT_MS"),
        "expect_timeout_ms": os.getenv("EXPECT_TIMEOUT_MS"),
        "log_level": os.getenv("LOG_LEVEL"),
    }

    # Filter out None values and convert types
    for key, value in env_overrides.items():
        if value is not None:
            if key in ["demo_delay_ms", "navigation_timeout_ms", "expect_timeout_ms"]:
                value = int(value)
            elif key in ["headless"]:
                value = value.lower() in ("true", "1", "yes")
            config_data[key] = value

    return ScenarioConfig(**config_data)


def get_config() -> ScenarioConfig:
    """Get the global configuration instance."""
    return load_config()
