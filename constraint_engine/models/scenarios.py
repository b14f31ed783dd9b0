"""
Scenario, mitigation plan and comparison models for the constraint engine.

Scenarios are immutable once created and stored append-only in a scenario
registry. Comparisons and operational snapshots are plain result records
handed to presentation collaborators.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from .constraints import Constraint, MitigationAction, QuantifiedImpact, ScalarValue
from .enums import ComparisonMetric
from .graph import DependencyGraph


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_scenario_id() -> str:
    """Collision-resistant scenario identifier."""
    return f"scenario_{uuid4()}"


class MitigationPlan(BaseModel):
    """
    A selected set of mitigation actions with its economics.

    Attributes:
        actions: Selected actions
        total_cost: Sum of selected action costs
        expected_benefit: Sum of selected action NPV impacts
        roi: expected_benefit / total_cost, or 0.0 when total_cost is 0
        implementation_sequence: Action ids in an order honoring dependencies
        budget: Budget the plan was optimized against (None = unconstrained)
    """

    actions: list[MitigationAction] = Field(default_factory=list)
    total_cost: float = Field(default=0.0, ge=0.0)
    expected_benefit: float = Field(default=0.0)
    roi: float = Field(default=0.0)
    implementation_sequence: list[str] = Field(default_factory=list)
    budget: Optional[float] = Field(default=None, ge=0.0)

    @classmethod
    def from_actions(
        cls,
        actions: list[MitigationAction],
        implementation_sequence: list[str],
        budget: Optional[float] = None,
    ) -> "MitigationPlan":
        """
        Build a plan, computing totals and a division-safe ROI.

        Args:
            actions: Selected mitigation actions
            implementation_sequence: Scheduled action ids
            budget: Budget used for selection, if any

        Returns:
            MitigationPlan with ROI 0.0 for zero-cost selections
        """
        total_cost = sum(a.cost for a in actions)
        expected_benefit = sum(a.npv_impact for a in actions)
        roi = expected_benefit / total_cost if total_cost > 0 else 0.0
        return cls(
            actions=list(actions),
            total_cost=total_cost,
            expected_benefit=expected_benefit,
            roi=roi,
            implementation_sequence=list(implementation_sequence),
            budget=budget,
        )

    @property
    def action_ids(self) -> list[str]:
        return [a.id for a in self.actions]

    class Config:
        """Pydantic configuration."""

        frozen = True


class Scenario(BaseModel):
    """
    A named bundle of constraints with its impact analysis and mitigation plan.

    ``probability`` and ``aggregated_impact.risk.probability`` are products of
    the constituent probabilities and assume independence.

    Attributes:
        id: Unique generated identifier
        name: Display name
        description: Free-text description
        constraints: Resolved constraint records
        assumptions: Opaque pass-through assumptions
        probability: Joint probability of the constituent constraints
        aggregated_impact: Flat aggregation over the constraints
        critical_path: Longest root-to-sink chain of constraint ids
        optimal_mitigation_plan: Selected mitigation plan
        created_at: Creation timestamp (UTC)
    """

    id: str = Field(default_factory=new_scenario_id, description="Scenario id")
    name: str = Field(description="Display name")
    description: str = Field(default="", description="Free-text description")
    constraints: list[Constraint] = Field(description="Resolved constraints")
    assumptions: dict[str, ScalarValue] = Field(default_factory=dict)
    probability: float = Field(ge=0.0, le=1.0)
    aggregated_impact: QuantifiedImpact
    critical_path: list[str] = Field(default_factory=list)
    optimal_mitigation_plan: MitigationPlan
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("name")
    @classmethod
    def validate_name_not_empty(cls, v: str) -> str:
        """Ensure the scenario has a usable name."""
        if not v or not v.strip():
            raise ValueError("Scenario name cannot be empty")
        return v.strip()

    @property
    def constraint_ids(self) -> list[str]:
        return [c.id for c in self.constraints]

    class Config:
        """Pydantic configuration."""

        frozen = True
        json_schema_extra = {
            "example": {
                "id": "scenario_123e4567-e89b-12d3-a456-426614174000",
                "name": "High Demand Scenario",
                "description": "Mining boom with 40% demand increase",
                "assumptions": {"demand_growth": 0.4, "supply_stability": 0.6},
                "probability": 0.34125,
                "critical_path": ["cobalt_supply_drc", "ev_demand_surge"],
            }
        }


class MetricComparison(BaseModel):
    """
    Ranking of scenarios on one metric.

    Attributes:
        metric: Metric compared
        values: Metric value per scenario id
        winner: Best scenario id (minimum cost/risk, maximum ROI), None if empty
    """

    metric: ComparisonMetric
    values: dict[str, float] = Field(default_factory=dict)
    winner: Optional[str] = None

    class Config:
        """Pydantic configuration."""

        frozen = True


class ScenarioComparison(BaseModel):
    """Result of comparing stored scenarios across the fixed metrics."""

    scenarios: list[Scenario] = Field(default_factory=list)
    comparison: list[MetricComparison] = Field(default_factory=list)

    def for_metric(self, metric: ComparisonMetric) -> MetricComparison:
        for entry in self.comparison:
            if entry.metric == metric:
                return entry
        raise KeyError(metric)

    class Config:
        """Pydantic configuration."""

        frozen = True


class OperationalSnapshot(BaseModel):
    """
    Constraint state handed to the operational-state collaborator.

    Attributes:
        active_constraints: Active constraints, or the scenario's constraints
        constraint_graph: Dependency graph over those constraints
        scenario_id: Scenario the snapshot was taken for, if any
        timestamp: When the snapshot was taken (UTC)
        confidence: Confidence stamped on the snapshot
    """

    active_constraints: list[Constraint] = Field(default_factory=list)
    constraint_graph: DependencyGraph
    scenario_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=utc_now)
    confidence: float = Field(ge=0.0, le=1.0)

    class Config:
        """Pydantic configuration."""

        frozen = True
