"""
Scenario Comparator — Ranking Stored Scenarios.

Compares stored scenarios on three fixed metrics:

- total expected financial impact (lower is better)
- aggregated risk score (lower is better)
- mitigation-plan ROI (higher is better)

Each metric reports the full value-per-scenario map and a single winner.
Ties go to the scenario listed first in the request. Unknown scenario ids
are dropped with a warning, or raise NotFoundError when ``strict_ids`` is
set.

Version: scenario_comparator_v1
"""

from typing import Callable, Iterable

import structlog

from constraint_engine.errors import NotFoundError
from constraint_engine.models.enums import ComparisonMetric
from constraint_engine.models.scenarios import MetricComparison, Scenario, ScenarioComparison
from constraint_engine.storage.base import ScenarioRegistry

logger = structlog.get_logger()

# metric -> (value extractor, higher is better)
METRICS: dict[ComparisonMetric, tuple[Callable[[Scenario], float], bool]] = {
    ComparisonMetric.TOTAL_EXPECTED_IMPACT: (
        lambda s: s.aggregated_impact.financial.expected,
        False,
    ),
    ComparisonMetric.RISK_SCORE: (
        lambda s: s.aggregated_impact.risk.risk_score,
        False,
    ),
    ComparisonMetric.MITIGATION_ROI: (
        lambda s: s.optimal_mitigation_plan.roi,
        True,
    ),
}


class ScenarioComparator:
    """
    Ranks stored scenarios by cost, risk and mitigation ROI.

    Attributes:
        registry: Scenario registry to resolve ids against
        strict_ids: Raise on unknown scenario ids instead of dropping them
        logger: Structured logger

    Example:
        >>> comparator = ScenarioComparator(registry)
        >>> result = comparator.compare_scenarios([baseline.id, high_demand.id])
        >>> result.for_metric(ComparisonMetric.TOTAL_EXPECTED_IMPACT).winner
        'scenario_...'
    """

    def __init__(self, registry: ScenarioRegistry, strict_ids: bool = False):
        self.registry = registry
        self.strict_ids = strict_ids
        self.logger = structlog.get_logger()

    def compare_scenarios(self, scenario_ids: Iterable[str]) -> ScenarioComparison:
        """
        Compare stored scenarios.

        Args:
            scenario_ids: Scenario ids in request order

        Returns:
            ScenarioComparison with one MetricComparison per metric. With no
            resolvable scenario every metric has empty values and no winner.

        Raises:
            NotFoundError: Unknown id while ``strict_ids`` is set
        """
        scenarios = self._resolve(list(scenario_ids))

        comparison = [
            self._compare_metric(scenarios, metric, extract, higher_is_better)
            for metric, (extract, higher_is_better) in METRICS.items()
        ]

        self.logger.info(
            "scenarios_compared",
            scenario_count=len(scenarios),
            winners={c.metric.value: c.winner for c in comparison},
        )
        return ScenarioComparison(scenarios=scenarios, comparison=comparison)

    def _resolve(self, scenario_ids: list[str]) -> list[Scenario]:
        resolved: dict[str, Scenario] = {}
        missing: list[str] = []
        for sid in scenario_ids:
            scenario = self.registry.get(sid)
            if scenario is None:
                missing.append(sid)
            else:
                resolved.setdefault(sid, scenario)

        if missing:
            if self.strict_ids:
                raise NotFoundError(f"Scenarios not found: {missing}")
            self.logger.warning(
                "comparison_scenarios_dropped",
                missing_ids=missing,
                reason="unknown scenario ids are filtered silently",
            )
        return list(resolved.values())

    @staticmethod
    def _compare_metric(
        scenarios: list[Scenario],
        metric: ComparisonMetric,
        extract: Callable[[Scenario], float],
        higher_is_better: bool,
    ) -> MetricComparison:
        values = {s.id: float(extract(s)) for s in scenarios}

        winner = None
        best = None
        for scenario_id, value in values.items():
            if best is None:
                winner, best = scenario_id, value
            elif (value > best) if higher_is_better else (value < best):
                winner, best = scenario_id, value

        return MetricComparison(metric=metric, values=values, winner=winner)
