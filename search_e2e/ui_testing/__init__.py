"""UI testing module for the cross-engine search scenario."""

from ..engines import EngineDescriptor, default_engines
from .errors import (
    AssertionFailure,
    CleanupFailure,
    InteractionFailure,
    LaunchFailure,
    NavigationFailure,
    ScenarioError,
)
from .runner import ScenarioResult, SearchScenarioRunner

__all__ = [
    "EngineDescriptor",
    "default_engines",
    "ScenarioError",
    "LaunchFailure",
    "NavigationFailure",
    "InteractionFailure",
    "AssertionFailure",
    "CleanupFailure",
    "ScenarioResult",
    "SearchScenarioRunner",
]
