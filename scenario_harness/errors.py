class HarnessError(Exception):
    """Base class for harness errors"""


class DuplicateSuiteError(HarnessError):
    """A suite with the same name is already registered"""

    def __init__(self, name: str):
        super().__init__(f"Suite already registered: {name!r}")
        self.name = name


class CapabilityUnavailableError(HarnessError):
    """The browser engine could not supply a requested capability"""

    def __init__(self, capability: str, detail: str = ""):
        message = f"Capability unavailable: {capability}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.capability = capability


class ScenarioTimeoutError(HarnessError, TimeoutError):
    """A scenario exceeded its time budget"""

    def __init__(self, scenario: str, timeout: float):
        super().__init__(f"Scenario {scenario!r} timed out after {timeout:g}s")
        self.scenario = scenario
        self.timeout = timeout


class ExpectationError(AssertionError):
    """An expectation did not hold"""

    def __init__(self, message: str, actual=None, expected=None):
        super().__init__(message)
        self.actual = actual
        self.expected = expected
