"""
Scenario Composer — Named Constraint Bundles with Mitigation Plans.

Builds an immutable Scenario from a named set of constraints:

1. Resolve ids to records. Unknown ids are dropped with a warning, or raise
   NotFoundError when ``strict_ids`` is set.
2. Flat impact aggregation over exactly this set (no decay).
3. Dependency graph confined to the named ids, then the critical path.
4. Pool every mitigation option of every named constraint (ids shared
   across constraints are qualified by constraint id) and optimize
   (ranking without a budget, knapsack with one).
5. Sequence the selected actions with the ready-set scheduler.
6. Scenario probability = product of the constituent risk probabilities
   (independence assumed).
7. Store under a generated, collision-resistant id.
"""

from collections import Counter
from typing import Iterable, Optional

import numpy as np
import structlog

from constraint_engine.errors import DegenerateResultError, NotFoundError
from constraint_engine.models.constraints import Constraint, MitigationAction, ScalarValue
from constraint_engine.models.scenarios import Scenario
from constraint_engine.storage.base import ConstraintStore, ScenarioRegistry

from .critical_path import CriticalPathFinder
from .dependency_graph import DependencyGraphBuilder
from .impact_aggregator import ImpactAggregator
from .mitigation_optimizer import MitigationOptimizer

logger = structlog.get_logger()


class ScenarioComposer:
    """
    Creates and registers scenarios.

    Attributes:
        store: Constraint store
        registry: Scenario registry receiving created scenarios
        builder: Dependency graph builder
        aggregator: Impact aggregator (flat mode)
        optimizer: Mitigation optimizer
        path_finder: Critical path finder
        strict_ids: Raise on unknown constraint ids instead of dropping them
        logger: Structured logger

    Example:
        >>> composer = ScenarioComposer(store, registry, aggregator=agg, optimizer=opt)
        >>> scenario = composer.create_scenario(
        ...     "High Demand", "40% demand increase",
        ...     ["cobalt_supply_drc", "ev_demand_surge"],
        ...     {"demand_growth": 0.4},
        ... )
        >>> scenario.critical_path
        ['cobalt_supply_drc', 'ev_demand_surge']
    """

    def __init__(
        self,
        store: ConstraintStore,
        registry: ScenarioRegistry,
        builder: Optional[DependencyGraphBuilder] = None,
        aggregator: Optional[ImpactAggregator] = None,
        optimizer: Optional[MitigationOptimizer] = None,
        path_finder: Optional[CriticalPathFinder] = None,
        strict_ids: bool = False,
    ):
        self.store = store
        self.registry = registry
        self.builder = builder or DependencyGraphBuilder(store)
        self.aggregator = aggregator or ImpactAggregator(store, builder=self.builder)
        self.optimizer = optimizer or MitigationOptimizer(store)
        self.path_finder = path_finder or CriticalPathFinder()
        self.strict_ids = strict_ids
        self.logger = structlog.get_logger()

    def create_scenario(
        self,
        name: str,
        description: str,
        constraint_ids: Iterable[str],
        assumptions: Optional[dict[str, ScalarValue]] = None,
        budget: Optional[float] = None,
    ) -> Scenario:
        """
        Compose, store and return a scenario.

        Args:
            name: Scenario name
            description: Scenario description
            constraint_ids: Constraints making up the scenario
            assumptions: Opaque pass-through assumptions
            budget: Optional mitigation budget; None ranks all eligible actions

        Returns:
            The stored, immutable Scenario

        Raises:
            NotFoundError: Unknown id while ``strict_ids`` is set
            DegenerateResultError: No constraint id could be resolved
            InvalidInputError: Negative budget or mixed currencies
        """
        constraint_ids = list(constraint_ids)
        constraints = self._resolve(constraint_ids)
        if not constraints:
            raise DegenerateResultError(
                f"Scenario '{name}' resolves to zero constraints "
                f"(requested: {constraint_ids})"
            )

        aggregated_impact = self.aggregator.aggregate(constraints)

        resolved_ids = [c.id for c in constraints]
        graph = self.builder.build(resolved_ids, confine=True)
        critical_path = self.path_finder.find(graph)

        pooled = self._pool_actions(constraints)
        plan = self.optimizer.optimize(pooled, budget)

        probability = float(np.prod([c.impact.risk.probability for c in constraints]))

        scenario = Scenario(
            name=name,
            description=description,
            constraints=constraints,
            assumptions=dict(assumptions or {}),
            probability=probability,
            aggregated_impact=aggregated_impact,
            critical_path=critical_path,
            optimal_mitigation_plan=plan,
        )
        self.registry.save(scenario)

        self.logger.info(
            "scenario_created",
            scenario_id=scenario.id,
            name=scenario.name,
            constraint_count=len(constraints),
            probability=round(probability, 6),
            expected_impact=round(aggregated_impact.financial.expected, 2),
            critical_path=critical_path,
            selected_actions=plan.action_ids,
            roi=round(plan.roi, 4),
        )
        return scenario

    def _resolve(self, constraint_ids: list[str]) -> list[Constraint]:
        resolved: dict[str, Constraint] = {}
        missing: list[str] = []
        for cid in constraint_ids:
            constraint = self.store.get(cid)
            if constraint is None:
                missing.append(cid)
            else:
                resolved.setdefault(cid, constraint)

        if missing:
            if self.strict_ids:
                raise NotFoundError(f"Constraints not found: {missing}")
            self.logger.warning(
                "scenario_constraints_dropped",
                missing_ids=missing,
                reason="unknown constraint ids are filtered silently",
            )
        return list(resolved.values())

    def _pool_actions(self, constraints: list[Constraint]) -> list[MitigationAction]:
        """
        Every mitigation option of every constraint.

        Action ids are unique only within their constraint. Ids shared by
        several constraints are qualified as ``"{constraint_id}:{action_id}"``,
        as are same-constraint dependencies on them, so pooled ids stay unique.
        """
        owners = Counter(a.id for c in constraints for a in c.mitigation_options)
        shared = {action_id for action_id, count in owners.items() if count > 1}

        pooled: list[MitigationAction] = []
        for constraint in constraints:
            local = {a.id for a in constraint.mitigation_options} & shared
            for action in constraint.mitigation_options:
                if not local:
                    pooled.append(action)
                    continue
                pooled.append(
                    action.model_copy(
                        update={
                            "id": _qualify(constraint.id, action.id, local),
                            "dependencies": [
                                _qualify(constraint.id, dep, local) for dep in action.dependencies
                            ],
                        }
                    )
                )

        if shared:
            self.logger.info("shared_mitigation_ids_qualified", action_ids=sorted(shared))
        return pooled


def _qualify(constraint_id: str, action_id: str, local: set[str]) -> str:
    return f"{constraint_id}:{action_id}" if action_id in local else action_id
