"""
Pytest configuration and shared fixtures for the constraint engine test suite.

Provides model factories with sensible defaults (override any field via
keyword arguments), isolated in-memory stores and a ready-wired
ConstraintModeler for unit, integration and property-based tests.
"""

from typing import Optional

import pytest

from constraint_engine.config import Settings
from constraint_engine.engine.modeler import ConstraintModeler
from constraint_engine.models.constraints import (
    Constraint,
    FinancialImpact,
    MitigationAction,
    OperationalImpact,
    QuantifiedImpact,
    RiskImpact,
)
from constraint_engine.models.enums import ConstraintSeverity, ConstraintType
from constraint_engine.storage.memory import InMemoryConstraintStore, InMemoryScenarioRegistry


# ---------------------------------------------------------------------------
# Model factories (override any field via keyword arguments)
# ---------------------------------------------------------------------------


def make_impact(
    expected: float = 100.0,
    spread: float = 0.0,
    probability: float = 0.5,
    consequence: float = 0.5,
    delay: Optional[float] = None,
    throughput_reduction: Optional[float] = None,
    currency: str = "USD",
) -> QuantifiedImpact:
    """Factory function for creating test QuantifiedImpact objects."""
    return QuantifiedImpact(
        financial=FinancialImpact(
            min=expected - spread,
            max=expected + spread,
            expected=expected,
            currency=currency,
        ),
        operational=OperationalImpact(delay=delay, throughput_reduction=throughput_reduction),
        risk=RiskImpact(probability=probability, consequence=consequence),
    )


def make_action(
    action_id: str = "action_001",
    cost: float = 100.0,
    npv_impact: float = 150.0,
    feasibility: float = 0.8,
    dependencies: Optional[list[str]] = None,
    **overrides,
) -> MitigationAction:
    """Factory function for creating test MitigationAction objects."""
    defaults = dict(
        id=action_id,
        name=action_id.replace("_", " ").title(),
        cost=cost,
        npv_impact=npv_impact,
        feasibility=feasibility,
        dependencies=dependencies or [],
    )
    defaults.update(overrides)
    return MitigationAction(**defaults)


def make_constraint(
    constraint_id: str = "constraint_001",
    severity: ConstraintSeverity = ConstraintSeverity.MAJOR,
    constraint_type: ConstraintType = ConstraintType.RESOURCE,
    dependencies: Optional[list[str]] = None,
    downstream_impacts: Optional[list[str]] = None,
    impact: Optional[QuantifiedImpact] = None,
    mitigation_options: Optional[list[MitigationAction]] = None,
    impact_area: Optional[list[str]] = None,
    **overrides,
) -> Constraint:
    """Factory function for creating test Constraint objects."""
    defaults = dict(
        id=constraint_id,
        name=constraint_id.replace("_", " ").title(),
        type=constraint_type,
        severity=severity,
        impact_area=impact_area if impact_area is not None else ["supply_chain"],
        dependencies=dependencies or [],
        downstream_impacts=downstream_impacts or [],
        impact=impact or make_impact(),
        mitigation_options=mitigation_options or [],
    )
    defaults.update(overrides)
    return Constraint(**defaults)


def make_chain(*ids: str, probabilities: Optional[list[float]] = None) -> list[Constraint]:
    """Linear chain ids[0] -> ids[1] -> ... declared via ``dependencies``."""
    probabilities = probabilities or [0.5] * len(ids)
    constraints = []
    for i, cid in enumerate(ids):
        constraints.append(
            make_constraint(
                cid,
                dependencies=[ids[i - 1]] if i > 0 else [],
                impact=make_impact(probability=probabilities[i]),
            )
        )
    return constraints


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def engine_settings():
    """Settings with documented defaults, independent of the environment."""
    return Settings(
        _env_file=None,
        log_level="info",
        log_format="console",
        dev_mode=True,
        feasibility_threshold=0.7,
        impact_decay_factor=0.8,
        knapsack_max_capacity=100_000,
        strict_id_resolution=False,
        default_currency="USD",
        snapshot_confidence=0.85,
    )


@pytest.fixture
def store():
    """Empty in-memory constraint store."""
    return InMemoryConstraintStore()


@pytest.fixture
def registry():
    """Empty in-memory scenario registry."""
    return InMemoryScenarioRegistry()


@pytest.fixture
def modeler(store, registry, engine_settings):
    """ConstraintModeler over fresh in-memory storage."""
    return ConstraintModeler(store=store, scenarios=registry, settings=engine_settings)


@pytest.fixture
def supply_chain(modeler):
    """
    Small supply chain registered on the modeler:

        mine -> smelter -> factory
        port (independent root)
    """
    constraints = [
        make_constraint(
            "mine",
            severity=ConstraintSeverity.CRITICAL,
            downstream_impacts=["smelter"],
            impact=make_impact(expected=1000.0, spread=200.0, probability=0.5, consequence=0.9),
            mitigation_options=[make_action("mine_a", cost=100, npv_impact=150, feasibility=0.8)],
        ),
        make_constraint(
            "smelter",
            dependencies=["mine"],
            impact=make_impact(expected=500.0, probability=0.4, consequence=0.6, delay=48.0),
            mitigation_options=[make_action("smelter_a", cost=50, npv_impact=80, feasibility=0.75)],
        ),
        make_constraint(
            "factory",
            severity=ConstraintSeverity.MINOR,
            dependencies=["smelter"],
            impact=make_impact(expected=250.0, probability=0.5, consequence=0.3, throughput_reduction=0.2),
            mitigation_options=[make_action("factory_a", cost=60, npv_impact=40, feasibility=0.9)],
        ),
        make_constraint(
            "port",
            constraint_type=ConstraintType.LOGISTICS,
            impact_area=["logistics"],
            impact=make_impact(expected=300.0, probability=0.8, consequence=0.6),
        ),
    ]
    for constraint in constraints:
        modeler.add_constraint(constraint)
    return constraints
