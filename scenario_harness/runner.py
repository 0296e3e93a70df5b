import asyncio
import logging
import time
from typing import Iterable, List, Optional, Tuple

from .config import HarnessConfig
from .context_manager import ContextProvider
from .errors import CapabilityUnavailableError, ScenarioTimeoutError
from .models import RunReport, Scenario, ScenarioResult, ScenarioState, Suite
from .registry import ScenarioRegistry

logger = logging.getLogger(__name__)


class ScenarioRunner:
    """Runs every registered scenario, isolating failures"""

    def __init__(self, provider: ContextProvider, config: Optional[HarnessConfig] = None):
        self.provider = provider
        self.config = config or HarnessConfig()

    def _select(self, registry: ScenarioRegistry, suite_names: Optional[Iterable[str]]) -> List[Suite]:
        if suite_names is None:
            return list(registry.list_suites())
        # Unknown names fail before anything runs
        return [registry.get_suite(name) for name in suite_names]

    async def run(self, registry: ScenarioRegistry, suite_names: Optional[Iterable[str]] = None) -> RunReport:
        suites = self._select(registry, suite_names)

        planned: List[Tuple[Suite, Scenario, ScenarioResult]] = []
        for suite in suites:
            for scenario in suite.scenarios:
                result = ScenarioResult(suite=suite.name, scenario=scenario.name, tags=scenario.tags)
                planned.append((suite, scenario, result))

        if self.config.workers == 1:
            for suite, scenario, result in planned:
                await self.run_scenario(suite, scenario, result)
        else:
            semaphore = asyncio.Semaphore(self.config.workers)

            async def bounded(suite, scenario, result):
                async with semaphore:
                    await self.run_scenario(suite, scenario, result)

            await asyncio.gather(*(bounded(*item) for item in planned))

        report = RunReport(results=[result for _, _, result in planned])
        logger.info(
            "%d scenarios: %d passed, %d failed, %d errored",
            len(report.results), report.passed, report.failed, report.errored
        )
        return report

    async def _execute(self, suite: Suite, scenario: Scenario):
        async with self.provider.create_context(
                scenario.requires, suite=suite.name, scenario=scenario.name
        ) as context:
            await scenario.body(context)

    async def _execute_within(self, suite: Suite, scenario: Scenario, timeout: float):
        """Run the scenario, cancelling it and raising ScenarioTimeoutError past the budget"""
        task = asyncio.ensure_future(self._execute(suite, scenario))
        try:
            done, _ = await asyncio.wait({task}, timeout=timeout)
        finally:
            if not task.done():
                task.cancel()
                # Let the context release before moving on
                await asyncio.wait({task})

        if task not in done:
            raise ScenarioTimeoutError(scenario.name, timeout)
        task.result()

    async def run_scenario(
            self,
            suite: Suite,
            scenario: Scenario,
            result: Optional[ScenarioResult] = None
    ) -> ScenarioResult:
        if result is None:
            result = ScenarioResult(suite=suite.name, scenario=scenario.name, tags=scenario.tags)

        timeout = scenario.timeout or self.config.scenario_timeout
        result.state = ScenarioState.RUNNING
        started = time.monotonic()

        try:
            await self._execute_within(suite, scenario, timeout)
            result.state = ScenarioState.PASSED
        except ScenarioTimeoutError as e:
            result.state = ScenarioState.ERRORED
            result.reason = str(e)
        except AssertionError as e:
            result.state = ScenarioState.FAILED
            result.reason = str(e) or type(e).__name__
        except CapabilityUnavailableError as e:
            result.state = ScenarioState.ERRORED
            result.reason = str(e)
        except Exception as e:
            result.state = ScenarioState.ERRORED
            result.reason = f"{type(e).__name__}: {e}"
        finally:
            result.duration = time.monotonic() - started

        log = logger.info if result.passed else logger.warning
        log("[%s] %s / %s (%.2fs)", result.state.value, suite.name, scenario.name, result.duration)
        if result.reason:
            logger.debug("Reason: %s", result.reason)
        return result
