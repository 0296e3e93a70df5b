import asyncio
import logging
import sys
from typing import Optional

from pydantic import ValidationError

from .config import HarnessConfig
from .context_manager import ContextProvider
from .errors import DuplicateSuiteError
from .example_suites import build_registry
from .models import RunReport
from .registry import ScenarioRegistry
from .runner import ScenarioRunner

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = "INFO"):
    logging.basicConfig(level=level, format=LOG_FORMAT)


async def run_registry(registry: ScenarioRegistry, config: HarnessConfig) -> RunReport:
    provider = ContextProvider(config=config)
    try:
        return await ScenarioRunner(provider, config).run(registry)
    finally:
        await provider.close()


def print_report(report: RunReport, stream=None):
    stream = stream or sys.stdout
    for result in report.results:
        print(f"{result.state.value.upper():8} {result.suite} > {result.scenario}", file=stream)
        if result.reason:
            for line in result.reason.splitlines():
                print(f"         {line}", file=stream)
    summary = report.summary()
    print(
        f"\n{summary['passed']} passed, {summary['failed']} failed, "
        f"{summary['errored']} errored ({summary['total']} total)",
        file=stream
    )


def main(registry: Optional[ScenarioRegistry] = None) -> int:
    """Entry point: run every registered scenario and exit 0 iff all passed"""
    try:
        config = HarnessConfig.from_env()
    except ValidationError as e:
        configure_logging()
        logging.error(f"Invalid configuration: {e}")
        return 2

    configure_logging(config.log_level)

    try:
        if registry is None:
            registry = build_registry(config)
    except DuplicateSuiteError as e:
        logging.error(f"Registration failed: {e}")
        return 2

    try:
        report = asyncio.run(run_registry(registry, config))
    except KeyboardInterrupt:
        logging.info("Run interrupted by user")
        return 130

    print_report(report)
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
