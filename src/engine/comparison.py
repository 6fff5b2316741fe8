"""Side-by-side evaluation of up to three scenario slots."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from src.config import settings
from src.engine.amortization import compute_schedule
from src.engine.summary import ScheduleSummary, summarize
from src.models.loan import Scenario, Schedule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScenarioResult:
    slot: int  # 1-based position of the scenario among the slots
    title: str
    scenario: Scenario
    schedule: Schedule
    summary: ScheduleSummary


def evaluate_scenario(scenario: Scenario, slot: int = 1) -> ScenarioResult:
    schedule = compute_schedule(scenario.terms, scenario.early_repayments)
    return ScenarioResult(
        slot=slot,
        title=f"Scenario {slot}",
        scenario=scenario,
        schedule=schedule,
        summary=summarize(schedule, scenario.terms.principal),
    )


def compare_scenarios(slots: Sequence[Scenario | None]) -> list[ScenarioResult]:
    """Compute every filled slot; empty (None) slots are skipped.

    Raises ValueError if more slots are given than max_scenarios allows.
    """
    if len(slots) > settings.max_scenarios:
        raise ValueError(f"At most {settings.max_scenarios} scenarios can be compared, got {len(slots)}")

    results = [
        evaluate_scenario(scenario, slot=index)
        for index, scenario in enumerate(slots, start=1)
        if scenario is not None
    ]
    logger.debug("Compared %d of %d scenario slots", len(results), len(slots))
    return results
