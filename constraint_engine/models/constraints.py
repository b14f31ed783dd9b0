"""
Constraint and impact models for the constraint engine.

This module defines the records the ingestion collaborator hands to the
engine: constraints, their quantified financial/operational/risk impact,
and the candidate mitigation actions each constraint owns.

All models are immutable once validated. Status changes replace the stored
record with an updated copy rather than mutating it in place.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from .enums import ConstraintSeverity, ConstraintStatus, ConstraintType, MitigationType

# Opaque pass-through values for metadata and scenario assumptions
ScalarValue = Union[bool, int, float, str]


def _normalize_id_list(values: list[str], field_name: str) -> list[str]:
    """Strip ids, reject blanks, drop duplicates while keeping order."""
    seen: dict[str, None] = {}
    for raw in values:
        value = raw.strip()
        if not value:
            raise ValueError(f"{field_name} entries must be non-empty identifiers")
        seen.setdefault(value, None)
    return list(seen)


class FinancialImpact(BaseModel):
    """
    Financial exposure range of a constraint.

    Attributes:
        min: Best-case financial impact
        max: Worst-case financial impact
        expected: Expected financial impact (min <= expected <= max)
        currency: ISO 4217 style currency code
    """

    min: float = Field(default=0.0, allow_inf_nan=False, description="Best-case impact")
    max: float = Field(default=0.0, allow_inf_nan=False, description="Worst-case impact")
    expected: float = Field(
        default=0.0, allow_inf_nan=False, description="Expected impact"
    )
    currency: str = Field(default="USD", description="Currency code")

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Normalize to an upper-case 3-letter code."""
        v = v.strip().upper()
        if len(v) != 3 or not v.isalpha():
            raise ValueError("Currency must be a 3-letter currency code")
        return v

    @model_validator(mode="after")
    def validate_range(self) -> "FinancialImpact":
        """Expected impact must lie inside [min, max]."""
        if not (self.min <= self.expected <= self.max):
            raise ValueError(
                f"Financial impact requires min <= expected <= max, got "
                f"min={self.min}, expected={self.expected}, max={self.max}"
            )
        return self

    class Config:
        """Pydantic configuration."""

        frozen = True


class OperationalImpact(BaseModel):
    """
    Operational disruption caused by a constraint.

    Attributes:
        delay: Optional delay in hours
        throughput_reduction: Optional fraction of throughput lost, in [0, 1]
    """

    delay: Optional[float] = Field(
        default=None, ge=0.0, allow_inf_nan=False, description="Delay (hours)"
    )
    throughput_reduction: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Fraction of throughput lost",
    )

    class Config:
        """Pydantic configuration."""

        frozen = True


class RiskImpact(BaseModel):
    """
    Probability/consequence pair; ``risk_score`` is always their product.

    Attributes:
        probability: Likelihood the constraint materializes, in [0, 1]
        consequence: Non-negative consequence magnitude
    """

    probability: float = Field(ge=0.0, le=1.0, description="Probability in [0, 1]")
    consequence: float = Field(
        default=0.0, ge=0.0, allow_inf_nan=False, description="Consequence magnitude"
    )

    @computed_field  # type: ignore[misc]
    @property
    def risk_score(self) -> float:
        """Probability x consequence."""
        return self.probability * self.consequence

    class Config:
        """Pydantic configuration."""

        frozen = True


class QuantifiedImpact(BaseModel):
    """
    Financial, operational and risk impact of a constraint or aggregation.

    When produced by aggregation, ``risk.probability`` is a product of the
    constituent probabilities and therefore assumes they are independent.
    """

    financial: FinancialImpact = Field(default_factory=FinancialImpact)
    operational: OperationalImpact = Field(default_factory=OperationalImpact)
    risk: RiskImpact = Field(default_factory=lambda: RiskImpact(probability=1.0))

    class Config:
        """Pydantic configuration."""

        frozen = True
        json_schema_extra = {
            "example": {
                "financial": {
                    "min": 800000000,
                    "max": 1200000000,
                    "expected": 950000000,
                    "currency": "USD",
                },
                "operational": {"delay": 90, "throughput_reduction": 0.35},
                "risk": {"probability": 0.75, "consequence": 0.85},
            }
        }


class MitigationAction(BaseModel):
    """
    A candidate intervention owned by exactly one constraint.

    Attributes:
        id: Identifier, unique within the owning constraint
        name: Short display name
        description: What the action does
        action_type: Preventive, corrective or contingency
        cost: Non-negative cost in the owning constraint's currency
        npv_impact: Signed expected net benefit
        feasibility: Feasibility score in [0, 1]
        time_to_implement: Lead time in hours
        effectiveness: Optional fractional impact reduction
        risk_reduction: Optional fractional risk reduction
        dependencies: Ids of actions that must be scheduled first
    """

    id: str = Field(min_length=1, description="Action identifier")
    name: str = Field(default="", description="Short display name")
    description: str = Field(default="", description="What the action does")
    action_type: Optional[MitigationType] = Field(
        default=None, description="Preventive, corrective or contingency"
    )
    cost: float = Field(ge=0.0, allow_inf_nan=False, description="Cost of the action")
    npv_impact: float = Field(allow_inf_nan=False, description="Expected net benefit")
    feasibility: float = Field(ge=0.0, le=1.0, description="Feasibility score")
    time_to_implement: float = Field(
        default=0.0, ge=0.0, allow_inf_nan=False, description="Lead time (hours)"
    )
    effectiveness: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    risk_reduction: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    dependencies: list[str] = Field(
        default_factory=list,
        description="Ids of actions that must be scheduled before this one",
    )

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Ensure the action id is meaningful."""
        v = v.strip()
        if not v:
            raise ValueError("Mitigation action id cannot be empty")
        return v

    @field_validator("dependencies")
    @classmethod
    def validate_dependencies(cls, v: list[str]) -> list[str]:
        return _normalize_id_list(v, "dependencies")

    @model_validator(mode="after")
    def validate_not_self_dependent(self) -> "MitigationAction":
        if self.id in self.dependencies:
            raise ValueError(f"Mitigation action {self.id} cannot depend on itself")
        return self

    class Config:
        """Pydantic configuration."""

        frozen = True
        json_schema_extra = {
            "example": {
                "id": "cobalt_diversify_suppliers",
                "name": "Diversify Cobalt Suppliers",
                "description": "Source cobalt from Australia and Indonesia",
                "action_type": "preventive",
                "cost": 45000000,
                "npv_impact": 350000000,
                "feasibility": 0.85,
                "time_to_implement": 4320,
                "dependencies": [],
            }
        }


class Constraint(BaseModel):
    """
    A modeled risk or operational factor.

    ``dependencies`` (upstream: constraints that fire before this one) and
    ``downstream_impacts`` (constraints this one triggers) are the two
    directions of one relation. The store answers both directions even when
    a record only lists one of them.

    Attributes:
        id: Unique identifier
        name: Display name
        description: Free-text description
        type: Domain category
        severity: critical / major / moderate / minor
        status: active / inactive / resolved
        impact_area: Impact-area tags, treated as a set
        affected_assets: Assets touched by the constraint
        dependencies: Upstream constraint ids
        downstream_impacts: Downstream constraint ids
        impact: Quantified impact
        mitigation_options: Ordered candidate mitigation actions
        confidence: Optional confidence of the source signal
        tags: Free-form labels
        metadata: Opaque scalar metadata, passed through uninterpreted
        detected_at: When the ingestion collaborator detected it
    """

    id: str = Field(min_length=1, description="Constraint identifier")
    name: str = Field(default="", description="Display name")
    description: str = Field(default="", description="Free-text description")
    type: ConstraintType = Field(description="Domain category")
    severity: ConstraintSeverity = Field(description="Severity level")
    status: ConstraintStatus = Field(
        default=ConstraintStatus.ACTIVE, description="Lifecycle status"
    )
    impact_area: list[str] = Field(
        default_factory=list, description="Impact-area tags"
    )
    affected_assets: list[str] = Field(default_factory=list)
    dependencies: list[str] = Field(
        default_factory=list, description="Upstream constraint ids"
    )
    downstream_impacts: list[str] = Field(
        default_factory=list, description="Downstream constraint ids"
    )
    impact: QuantifiedImpact = Field(description="Quantified impact")
    mitigation_options: list[MitigationAction] = Field(default_factory=list)
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    tags: list[str] = Field(default_factory=list)
    metadata: dict[str, ScalarValue] = Field(default_factory=dict)
    detected_at: Optional[datetime] = None

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Ensure the constraint id is meaningful."""
        v = v.strip()
        if not v:
            raise ValueError("Constraint id cannot be empty")
        return v

    @field_validator("impact_area")
    @classmethod
    def validate_impact_area(cls, v: list[str]) -> list[str]:
        """Impact areas are non-blank tags with set semantics."""
        tags: dict[str, None] = {}
        for raw in v:
            tag = raw.strip()
            if not tag:
                raise ValueError("Impact-area tags must be non-empty strings")
            tags.setdefault(tag, None)
        return list(tags)

    @field_validator("dependencies", "downstream_impacts")
    @classmethod
    def validate_relation_ids(cls, v: list[str], info) -> list[str]:
        return _normalize_id_list(v, info.field_name)

    @model_validator(mode="after")
    def validate_relations(self) -> "Constraint":
        """No self-loops; mitigation ids unique within the constraint."""
        if self.id in self.dependencies or self.id in self.downstream_impacts:
            raise ValueError(f"Constraint {self.id} cannot reference itself")

        action_ids = [m.id for m in self.mitigation_options]
        duplicates = {a for a in action_ids if action_ids.count(a) > 1}
        if duplicates:
            raise ValueError(
                f"Duplicate mitigation action ids on {self.id}: {sorted(duplicates)}"
            )
        return self

    @property
    def currency(self) -> str:
        """Currency of the constraint's impact and mitigation costs."""
        return self.impact.financial.currency

    class Config:
        """Pydantic configuration."""

        frozen = True
        json_schema_extra = {
            "example": {
                "id": "cobalt_supply_drc",
                "name": "DRC Cobalt Supply Constraint",
                "type": "resource",
                "severity": "critical",
                "status": "active",
                "impact_area": ["supply_chain", "production", "costs"],
                "dependencies": [],
                "downstream_impacts": ["ev_demand_surge"],
                "impact": {
                    "financial": {
                        "min": 800000000,
                        "max": 1200000000,
                        "expected": 950000000,
                        "currency": "USD",
                    },
                    "operational": {"delay": 90, "throughput_reduction": 0.35},
                    "risk": {"probability": 0.75, "consequence": 0.85},
                },
                "mitigation_options": [],
            }
        }
