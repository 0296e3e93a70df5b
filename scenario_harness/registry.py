import logging
from typing import Callable, Iterable, Iterator, List, Optional

from .errors import DuplicateSuiteError
from .models import Capability, Scenario, ScenarioBody, Suite

logger = logging.getLogger(__name__)


def scenario(
        name: str,
        *,
        requires: Iterable[Capability] = (Capability.PAGE,),
        tags: Iterable[str] = (),
        timeout: Optional[float] = None
) -> Callable[[ScenarioBody], Scenario]:
    """Turn an async function into a Scenario value.

    Nothing is registered globally; collect the returned scenarios and pass
    them to ScenarioRegistry.register_suite.
    """

    def decorator(body: ScenarioBody) -> Scenario:
        return Scenario(
            name=name,
            body=body,
            requires=frozenset(requires),
            tags=tuple(tags),
            timeout=timeout
        )

    return decorator


class SuiteListing:
    """Restartable view over the registered suites"""

    def __init__(self, suites: List[Suite]):
        self._suites = suites

    def __iter__(self) -> Iterator[Suite]:
        for suite in self._suites:
            yield suite

    def __len__(self) -> int:
        return len(self._suites)


class ScenarioRegistry:
    """Suites in registration order, keyed by unique name"""

    def __init__(self):
        self._suites: List[Suite] = []

    def register_suite(self, name: str, scenarios: Iterable[Scenario]) -> Suite:
        if any(existing.name == name for existing in self._suites):
            raise DuplicateSuiteError(name)

        # Build the suite fully before touching the list
        suite = Suite(name=name, scenarios=tuple(scenarios))
        self._suites.append(suite)
        logger.debug("Registered suite %r with %d scenarios", name, len(suite.scenarios))
        return suite

    def list_suites(self) -> SuiteListing:
        return SuiteListing(self._suites)

    def get_suite(self, name: str) -> Suite:
        for suite in self._suites:
            if suite.name == name:
                return suite
        raise KeyError(name)

    def __len__(self) -> int:
        return len(self._suites)
