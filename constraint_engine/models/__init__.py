"""
Pydantic v2 data models for the constraint engine.

Model Organization:
    - enums: Enumeration types for consistent classification
    - constraints: Constraints, quantified impact and mitigation actions
    - graph: Leveled dependency graph
    - scenarios: Scenarios, mitigation plans, comparisons and snapshots

Usage:
    >>> from constraint_engine.models import (
    ...     Constraint, ConstraintSeverity, ConstraintType, QuantifiedImpact, RiskImpact,
    ... )
    >>> constraint = Constraint(
    ...     id="port_congestion",
    ...     type=ConstraintType.LOGISTICS,
    ...     severity=ConstraintSeverity.MAJOR,
    ...     impact=QuantifiedImpact(risk=RiskImpact(probability=0.8, consequence=0.6)),
    ... )
"""

# Enumerations
from .enums import (
    ComparisonMetric,
    ConstraintSeverity,
    ConstraintStatus,
    ConstraintType,
    EdgeType,
    MitigationType,
    SEVERITY_SCORES,
)

# Constraint models
from .constraints import (
    Constraint,
    FinancialImpact,
    MitigationAction,
    OperationalImpact,
    QuantifiedImpact,
    RiskImpact,
    ScalarValue,
)

# Graph models
from .graph import DependencyEdge, DependencyGraph, DependencyNode

# Scenario models
from .scenarios import (
    MetricComparison,
    MitigationPlan,
    OperationalSnapshot,
    Scenario,
    ScenarioComparison,
)

__all__ = [
    # Enumerations
    "ComparisonMetric",
    "ConstraintSeverity",
    "ConstraintStatus",
    "ConstraintType",
    "EdgeType",
    "MitigationType",
    "SEVERITY_SCORES",
    # Constraint models
    "Constraint",
    "FinancialImpact",
    "MitigationAction",
    "OperationalImpact",
    "QuantifiedImpact",
    "RiskImpact",
    "ScalarValue",
    # Graph models
    "DependencyEdge",
    "DependencyGraph",
    "DependencyNode",
    # Scenario models
    "MetricComparison",
    "MitigationPlan",
    "OperationalSnapshot",
    "Scenario",
    "ScenarioComparison",
]
