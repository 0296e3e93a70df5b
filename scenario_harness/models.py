import inspect
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Capability(str, Enum):
    PAGE = "page"
    REQUEST = "request"


class ScenarioState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    ERRORED = "errored"

    @property
    def terminal(self) -> bool:
        return self in (ScenarioState.PASSED, ScenarioState.FAILED, ScenarioState.ERRORED)


ScenarioBody = Callable[[Any], Awaitable[None]]


class Scenario(BaseModel):
    """A named test case: an async body taking a scenario context"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    body: ScenarioBody
    tags: Tuple[str, ...] = ()
    requires: FrozenSet[Capability] = frozenset({Capability.PAGE})
    timeout: Optional[float] = Field(default=None, gt=0)

    @field_validator("body")
    @classmethod
    def _body_is_async(cls, body):
        if not inspect.iscoroutinefunction(body):
            raise ValueError("scenario body must be an async function")
        return body


class Suite(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    scenarios: Tuple[Scenario, ...] = ()


class ScenarioResult(BaseModel):
    suite: str
    scenario: str
    state: ScenarioState = ScenarioState.PENDING
    reason: Optional[str] = None
    duration: float = 0.0
    tags: Tuple[str, ...] = ()

    @property
    def passed(self) -> bool:
        return self.state == ScenarioState.PASSED


class RunReport(BaseModel):
    """Results of a run, in registration order"""

    results: List[ScenarioResult] = Field(default_factory=list)

    def count(self, state: ScenarioState) -> int:
        return sum(1 for result in self.results if result.state == state)

    @property
    def passed(self) -> int:
        return self.count(ScenarioState.PASSED)

    @property
    def failed(self) -> int:
        return self.count(ScenarioState.FAILED)

    @property
    def errored(self) -> int:
        return self.count(ScenarioState.ERRORED)

    @property
    def ok(self) -> bool:
        return all(result.passed for result in self.results)

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def summary(self) -> Dict[str, Any]:
        return {
            "total": len(self.results),
            "passed": self.passed,
            "failed": self.failed,
            "errored": self.errored,
            "success": self.ok,
        }
