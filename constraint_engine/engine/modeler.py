"""
Constraint Modeler — Public Facade of the Constraint Engine.

Wires the store, scenario registry and analysis components together and
exposes the operations used by ingestion, presentation and
operational-state collaborators:

- add_constraint / get_constraint / update_constraint_status
- build_dependency_graph / quantify_total_impact / find_optimal_mitigation
- create_scenario / compare_scenarios / get_scenario / list_scenarios
- get_constraints_by_type / get_active_constraints
- snapshot_operational_state

Tunables (feasibility threshold, decay factor, knapsack resolution, strict
id resolution) come from Settings unless explicit components are injected.
"""

from typing import Any, Iterable, Optional, Union

import structlog
from pydantic import ValidationError

from constraint_engine.config import Settings, get_settings
from constraint_engine.errors import InvalidInputError, NotFoundError
from constraint_engine.models.constraints import Constraint, QuantifiedImpact, ScalarValue
from constraint_engine.models.enums import ConstraintStatus, ConstraintType
from constraint_engine.models.graph import DependencyGraph
from constraint_engine.models.scenarios import (
    MitigationPlan,
    OperationalSnapshot,
    Scenario,
    ScenarioComparison,
)
from constraint_engine.storage.base import ConstraintStore, ScenarioRegistry
from constraint_engine.storage.memory import InMemoryConstraintStore, InMemoryScenarioRegistry

from .critical_path import CriticalPathFinder
from .dependency_graph import DependencyGraphBuilder
from .impact_aggregator import ImpactAggregator
from .mitigation_optimizer import MitigationOptimizer
from .scenario_comparator import ScenarioComparator
from .scenario_composer import ScenarioComposer

logger = structlog.get_logger()

# Allowed status changes; resolved is terminal
STATUS_TRANSITIONS: dict[ConstraintStatus, set[ConstraintStatus]] = {
    ConstraintStatus.ACTIVE: {ConstraintStatus.INACTIVE, ConstraintStatus.RESOLVED},
    ConstraintStatus.INACTIVE: {ConstraintStatus.ACTIVE, ConstraintStatus.RESOLVED},
    ConstraintStatus.RESOLVED: set(),
}


class ConstraintModeler:
    """
    Entry point for constraint modeling and mitigation planning.

    Attributes:
        store: Constraint store (in-memory by default)
        scenarios: Scenario registry (in-memory by default)
        settings: Engine settings
        graph_builder: Dependency graph builder
        aggregator: Impact aggregator
        optimizer: Mitigation optimizer
        path_finder: Critical path finder
        composer: Scenario composer
        comparator: Scenario comparator
        logger: Structured logger

    Example:
        >>> modeler = ConstraintModeler()
        >>> modeler.add_constraint(cobalt_constraint)
        >>> impact = modeler.quantify_total_impact("cobalt_supply_drc")
        >>> plan = modeler.find_optimal_mitigation("cobalt_supply_drc", budget=100_000_000)
    """

    def __init__(
        self,
        store: Optional[ConstraintStore] = None,
        scenarios: Optional[ScenarioRegistry] = None,
        settings: Optional[Settings] = None,
    ):
        self.store = store if store is not None else InMemoryConstraintStore()
        self.scenarios = scenarios if scenarios is not None else InMemoryScenarioRegistry()
        self.settings = settings or get_settings()
        self.logger = structlog.get_logger()

        self.graph_builder = DependencyGraphBuilder(self.store)
        self.aggregator = ImpactAggregator(
            self.store,
            builder=self.graph_builder,
            decay_factor=self.settings.impact_decay_factor,
            default_currency=self.settings.default_currency,
        )
        self.optimizer = MitigationOptimizer(
            self.store,
            feasibility_threshold=self.settings.feasibility_threshold,
            max_capacity=self.settings.knapsack_max_capacity,
        )
        self.path_finder = CriticalPathFinder()
        self.composer = ScenarioComposer(
            self.store,
            self.scenarios,
            builder=self.graph_builder,
            aggregator=self.aggregator,
            optimizer=self.optimizer,
            path_finder=self.path_finder,
            strict_ids=self.settings.strict_id_resolution,
        )
        self.comparator = ScenarioComparator(
            self.scenarios, strict_ids=self.settings.strict_id_resolution
        )

    # ------------------------------------------------------------------
    # Constraint registration and lookup
    # ------------------------------------------------------------------

    def add_constraint(self, constraint: Union[Constraint, dict[str, Any]]) -> Constraint:
        """
        Register a constraint, replacing any record with the same id.

        Args:
            constraint: A Constraint, or a dict validated into one

        Returns:
            The stored Constraint

        Raises:
            InvalidInputError: If the dict fails model validation
        """
        if not isinstance(constraint, Constraint):
            try:
                constraint = Constraint.model_validate(constraint)
            except ValidationError as e:
                raise InvalidInputError(f"Invalid constraint: {e}") from e

        self.store.add(constraint)
        self.logger.info(
            "constraint_added",
            constraint_id=constraint.id,
            type=constraint.type.value,
            severity=constraint.severity.value,
            mitigation_options=len(constraint.mitigation_options),
        )
        return constraint

    def get_constraint(self, constraint_id: str) -> Constraint:
        """
        Raises:
            NotFoundError: If the constraint is not registered
        """
        constraint = self.store.get(constraint_id)
        if constraint is None:
            raise NotFoundError(f"Constraint {constraint_id} not found")
        return constraint

    def update_constraint_status(
        self, constraint_id: str, status: Union[ConstraintStatus, str]
    ) -> Constraint:
        """
        Move a constraint to a new lifecycle status.

        Active and inactive are interchangeable; resolved is terminal.
        Setting the current status again is a no-op.

        Args:
            constraint_id: Constraint to update
            status: Target status

        Returns:
            The stored (replaced) Constraint

        Raises:
            NotFoundError: If the constraint is not registered
            InvalidInputError: On an unknown status or a transition out of resolved
        """
        status = self._coerce(ConstraintStatus, status, "status")
        current = self.get_constraint(constraint_id)
        if current.status == status:
            return current

        if status not in STATUS_TRANSITIONS[current.status]:
            raise InvalidInputError(
                f"Illegal status transition for {constraint_id}: "
                f"{current.status.value} -> {status.value}"
            )

        updated = current.model_copy(update={"status": status})
        self.store.add(updated)
        self.logger.info(
            "constraint_status_updated",
            constraint_id=constraint_id,
            from_status=current.status.value,
            to_status=status.value,
        )
        return updated

    def get_constraints_by_type(
        self, constraint_type: Union[ConstraintType, str]
    ) -> list[Constraint]:
        """All constraints of one type, in registration order."""
        constraint_type = self._coerce(ConstraintType, constraint_type, "constraint type")
        return [c for c in self.store.list_all() if c.type == constraint_type]

    def get_active_constraints(self) -> list[Constraint]:
        """All constraints with status active, in registration order."""
        return [c for c in self.store.list_all() if c.status == ConstraintStatus.ACTIVE]

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def build_dependency_graph(
        self, constraint_ids: Optional[Iterable[str]] = None
    ) -> DependencyGraph:
        """Leveled dependency graph over all (or the given) constraints."""
        return self.graph_builder.build(constraint_ids)

    def quantify_total_impact(self, constraint_id: str) -> QuantifiedImpact:
        """Decayed cascade impact of a constraint. See ImpactAggregator."""
        return self.aggregator.quantify_total_impact(constraint_id)

    def find_optimal_mitigation(
        self, constraint_id: str, budget: Optional[float] = None
    ) -> MitigationPlan:
        """Best mitigation plan for one constraint. See MitigationOptimizer."""
        return self.optimizer.find_optimal_mitigation(constraint_id, budget)

    # ------------------------------------------------------------------
    # Scenarios
    # ------------------------------------------------------------------

    def create_scenario(
        self,
        name: str,
        description: str,
        constraint_ids: Iterable[str],
        assumptions: Optional[dict[str, ScalarValue]] = None,
        budget: Optional[float] = None,
    ) -> Scenario:
        """Compose and store a scenario. See ScenarioComposer."""
        return self.composer.create_scenario(
            name, description, constraint_ids, assumptions, budget
        )

    def compare_scenarios(self, scenario_ids: Iterable[str]) -> ScenarioComparison:
        """Rank stored scenarios. See ScenarioComparator."""
        return self.comparator.compare_scenarios(scenario_ids)

    def get_scenario(self, scenario_id: str) -> Scenario:
        """
        Raises:
            NotFoundError: If no scenario has this id
        """
        scenario = self.scenarios.get(scenario_id)
        if scenario is None:
            raise NotFoundError(f"Scenario {scenario_id} not found")
        return scenario

    def list_scenarios(self) -> list[Scenario]:
        return self.scenarios.list_all()

    # ------------------------------------------------------------------
    # Operational state
    # ------------------------------------------------------------------

    def snapshot_operational_state(
        self, scenario_id: Optional[str] = None
    ) -> OperationalSnapshot:
        """
        Constraint state for the operational-state collaborator.

        Without a scenario id the snapshot covers the active constraints;
        with one it covers that scenario's constraints. The dependency graph
        is confined to the covered constraints.

        Raises:
            NotFoundError: If ``scenario_id`` is unknown
        """
        if scenario_id is not None:
            constraints = self.get_scenario(scenario_id).constraints
        else:
            constraints = self.get_active_constraints()

        graph = self.graph_builder.build([c.id for c in constraints], confine=True)
        snapshot = OperationalSnapshot(
            active_constraints=constraints,
            constraint_graph=graph,
            scenario_id=scenario_id,
            confidence=self.settings.snapshot_confidence,
        )

        self.logger.info(
            "operational_snapshot_taken",
            scenario_id=scenario_id,
            constraint_count=len(constraints),
            edge_count=len(graph.edges),
        )
        return snapshot

    @staticmethod
    def _coerce(enum_cls, value, label: str):
        try:
            return enum_cls(value)
        except ValueError as e:
            raise InvalidInputError(f"Unknown {label}: {value!r}") from e
