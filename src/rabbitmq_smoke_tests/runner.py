"""Scenario runner for the rabbitmq-smoke console command.

Runs scenarios one after another outside pytest and records a result for
every lifecycle step. A failing step fails its scenario, later steps of that
scenario are skipped, cleanup always runs, and the next scenario starts
regardless.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum

from .cf import CloudFoundryCLI
from .config import SmokeTestConfig
from .errors import PrerequisiteError, SmokeTestError
from .lifecycle import CLEANUP, STEPS, ServiceLifecycle
from .scenarios import Scenario
from .shared import get_logger, scenario_context

logger = get_logger(__name__)


class StepStatus(Enum):
    """Outcome of one lifecycle step."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class StepResult:
    """Result of one lifecycle step."""

    name: str
    status: StepStatus
    error: str | None = None


@dataclass
class ScenarioResult:
    """Results of every step of one scenario."""

    scenario: Scenario
    steps: list[StepResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(step.status != StepStatus.FAILED for step in self.steps)

    @property
    def failed_steps(self) -> list[StepResult]:
        return [step for step in self.steps if step.status == StepStatus.FAILED]


class ScenarioRunner:
    """Run scenarios sequentially against one platform context."""

    def __init__(
        self,
        config: SmokeTestConfig,
        cli: CloudFoundryCLI,
        lifecycle_factory: Callable[[SmokeTestConfig, Scenario, CloudFoundryCLI], ServiceLifecycle]
        | None = None,
    ):
        self.config = config
        self.cli = cli
        self.lifecycle_factory = lifecycle_factory or ServiceLifecycle

    def run(self, scenario: Scenario) -> ScenarioResult:
        """Run every lifecycle step of a scenario."""
        with scenario_context(scenario.id):
            lifecycle = self.lifecycle_factory(self.config, scenario, self.cli)
            result = ScenarioResult(scenario)
            failed = False

            for name in STEPS:
                if failed and name != CLEANUP:
                    result.steps.append(StepResult(name, StepStatus.SKIPPED, "earlier step failed"))
                    continue

                step = getattr(lifecycle, name)
                try:
                    step()
                except PrerequisiteError as e:
                    logger.warning("step skipped", step=name, reason=str(e))
                    result.steps.append(StepResult(name, StepStatus.SKIPPED, str(e)))
                except (SmokeTestError, AssertionError) as e:
                    logger.error("step failed", step=name, error=str(e))
                    result.steps.append(StepResult(name, StepStatus.FAILED, str(e)))
                    failed = True
                else:
                    logger.info("step passed", step=name)
                    result.steps.append(StepResult(name, StepStatus.PASSED))

        return result

    def run_all(
        self,
        scenarios: Iterable[Scenario],
        on_result: Callable[[ScenarioResult], None] | None = None,
    ) -> list[ScenarioResult]:
        """Run scenarios in order.

        Args:
            scenarios: Scenarios to run
            on_result: Optional callback invoked after each scenario

        Returns:
            One ScenarioResult per scenario
        """
        results = []
        for scenario in scenarios:
            result = self.run(scenario)
            results.append(result)
            if on_result:
                on_result(result)
        return results
