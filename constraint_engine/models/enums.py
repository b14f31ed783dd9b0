"""
Enumeration types for the constraint engine.

This module defines all enum types used across the engine for type safety
and consistent validation. All enums inherit from str to ensure JSON
serialization compatibility.
"""

from enum import Enum


class ConstraintType(str, Enum):
    """
    Domain categories a constraint can belong to.

    The set is closed: ingestion collaborators must map their own
    classifications onto one of these tags.
    """

    GEOLOGICAL = "geological"
    METALLURGICAL = "metallurgical"
    LOGISTICAL = "logistical"
    LOGISTICS = "logistics"
    REGULATORY = "regulatory"
    FINANCIAL = "financial"
    EQUIPMENT = "equipment"
    LABOR = "labor"
    ENVIRONMENTAL = "environmental"
    RESOURCE = "resource"
    CAPACITY = "capacity"
    DEMAND = "demand"
    SYSTEMIC = "systemic"
    OPPORTUNITY = "opportunity"


class ConstraintSeverity(str, Enum):
    """
    Severity levels for constraints, totally ordered by ``score``.

    The score feeds the edge-strength formula of the dependency graph.
    """

    CRITICAL = "critical"
    MAJOR = "major"
    MODERATE = "moderate"
    MINOR = "minor"

    @property
    def score(self) -> float:
        """Numeric weight in (0, 1]; critical is the heaviest."""
        return SEVERITY_SCORES[self]

    def __lt__(self, other):
        if not isinstance(other, ConstraintSeverity):
            return NotImplemented
        return self.score < other.score

    def __le__(self, other):
        if not isinstance(other, ConstraintSeverity):
            return NotImplemented
        return self.score <= other.score

    def __gt__(self, other):
        if not isinstance(other, ConstraintSeverity):
            return NotImplemented
        return self.score > other.score

    def __ge__(self, other):
        if not isinstance(other, ConstraintSeverity):
            return NotImplemented
        return self.score >= other.score


SEVERITY_SCORES = {
    ConstraintSeverity.CRITICAL: 1.0,
    ConstraintSeverity.MAJOR: 0.75,
    ConstraintSeverity.MODERATE: 0.5,
    ConstraintSeverity.MINOR: 0.25,
}


class ConstraintStatus(str, Enum):
    """
    Lifecycle status for constraints.

    ``resolved`` is terminal; ``active`` and ``inactive`` may alternate.
    """

    ACTIVE = "active"
    INACTIVE = "inactive"
    RESOLVED = "resolved"


class MitigationType(str, Enum):
    """Intent of a mitigation action."""

    PREVENTIVE = "preventive"
    CORRECTIVE = "corrective"
    CONTINGENCY = "contingency"


class EdgeType(str, Enum):
    """Relationship carried by a dependency graph edge."""

    TRIGGERS = "triggers"


class ComparisonMetric(str, Enum):
    """Metrics used to rank scenarios against each other."""

    TOTAL_EXPECTED_IMPACT = "total_expected_impact"
    RISK_SCORE = "risk_score"
    MITIGATION_ROI = "mitigation_roi"
