"""
Scenario Harness

Explicitly registered end-to-end scenarios run against Playwright page and
HTTP capabilities.
"""

__version__ = "0.1.0"

from .browser_engine import BrowserEngine, Element, HttpResponse, PageHandle, RequestHandle
from .config import HarnessConfig
from .context_manager import ContextProvider, ScenarioContext
from .errors import (
    CapabilityUnavailableError,
    DuplicateSuiteError,
    ExpectationError,
    HarnessError,
    ScenarioTimeoutError,
)
from .expectations import (
    expect_contains,
    expect_equal,
    expect_object_subset,
    expect_title,
    expect_truthy,
    expect_visible,
)
from .models import Capability, RunReport, Scenario, ScenarioResult, ScenarioState, Suite
from .registry import ScenarioRegistry, scenario
from .runner import ScenarioRunner

__all__ = [
    "BrowserEngine",
    "Element",
    "HttpResponse",
    "PageHandle",
    "RequestHandle",
    "HarnessConfig",
    "ContextProvider",
    "ScenarioContext",
    "CapabilityUnavailableError",
    "DuplicateSuiteError",
    "ExpectationError",
    "HarnessError",
    "ScenarioTimeoutError",
    "expect_contains",
    "expect_equal",
    "expect_object_subset",
    "expect_title",
    "expect_truthy",
    "expect_visible",
    "Capability",
    "RunReport",
    "Scenario",
    "ScenarioResult",
    "ScenarioState",
    "Suite",
    "ScenarioRegistry",
    "scenario",
    "ScenarioRunner",
]
