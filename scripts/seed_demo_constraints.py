#!/usr/bin/env python3
"""
Seed demo constraints and scenarios for the constraint engine.

Registers a battery-materials supply chain under stress: DRC cobalt supply,
lithium processing capacity, African port congestion and an EV demand
surge that depends on both material constraints. Then composes the four
demo scenarios (baseline, high demand, constrained supply, rapid
expansion).

Usage:
    python scripts/seed_demo_constraints.py
    python scripts/seed_demo_constraints.py --budget 300000000
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).parent.parent))

from constraint_engine import ConstraintModeler
from constraint_engine.models import (
    Constraint,
    ConstraintSeverity,
    ConstraintType,
    FinancialImpact,
    MitigationAction,
    MitigationType,
    OperationalImpact,
    QuantifiedImpact,
    RiskImpact,
    Scenario,
)
from constraint_engine.utils import configure_logging

HOURS_PER_DAY = 24


def make_action(
    action_id: str,
    name: str,
    description: str,
    action_type: MitigationType,
    cost: float,
    npv_impact: float,
    feasibility: float,
    days_to_implement: int,
    effectiveness: float,
    risk_reduction: float,
) -> MitigationAction:
    """Create mitigation action for demo."""
    return MitigationAction(
        id=action_id,
        name=name,
        description=description,
        action_type=action_type,
        cost=cost,
        npv_impact=npv_impact,
        feasibility=feasibility,
        time_to_implement=days_to_implement * HOURS_PER_DAY,
        effectiveness=effectiveness,
        risk_reduction=risk_reduction,
    )


def make_impact(
    financial: tuple[float, float, float],
    probability: float,
    consequence: float,
    delay_days: Optional[int] = None,
    throughput_reduction: Optional[float] = None,
) -> QuantifiedImpact:
    """Create quantified impact from (min, expected, max) in USD."""
    low, expected, high = financial
    return QuantifiedImpact(
        financial=FinancialImpact(min=low, max=high, expected=expected, currency="USD"),
        operational=OperationalImpact(
            delay=delay_days * HOURS_PER_DAY if delay_days is not None else None,
            throughput_reduction=throughput_reduction,
        ),
        risk=RiskImpact(probability=probability, consequence=consequence),
    )


def build_demo_constraints() -> list[Constraint]:
    """The four demo supply-chain constraints, upstream first."""
    cobalt = Constraint(
        id="cobalt_supply_drc",
        type=ConstraintType.RESOURCE,
        name="DRC Cobalt Supply Constraint",
        description="Limited cobalt supply from Democratic Republic of Congo",
        severity=ConstraintSeverity.CRITICAL,
        impact_area=["supply_chain", "production", "costs"],
        downstream_impacts=["battery_production", "ev_manufacturing"],
        impact=make_impact(
            (800_000_000, 950_000_000, 1_200_000_000),
            probability=0.75,
            consequence=0.85,
            delay_days=90,
            throughput_reduction=0.35,
        ),
        mitigation_options=[
            make_action(
                "cobalt_diversify_suppliers",
                "Diversify Cobalt Suppliers",
                "Source cobalt from Australia and Indonesia",
                MitigationType.PREVENTIVE,
                cost=45_000_000,
                npv_impact=350_000_000,
                feasibility=0.85,
                days_to_implement=180,
                effectiveness=0.6,
                risk_reduction=0.4,
            ),
            make_action(
                "cobalt_recycling",
                "Battery Recycling Program",
                "Establish closed-loop cobalt recycling",
                MitigationType.PREVENTIVE,
                cost=120_000_000,
                npv_impact=500_000_000,
                feasibility=0.75,
                days_to_implement=365,
                effectiveness=0.5,
                risk_reduction=0.3,
            ),
        ],
    )

    lithium = Constraint(
        id="lithium_processing",
        type=ConstraintType.CAPACITY,
        name="Lithium Processing Capacity Constraint",
        description="Insufficient lithium processing infrastructure",
        severity=ConstraintSeverity.MAJOR,
        impact_area=["production", "supply_chain"],
        downstream_impacts=["battery_production"],
        impact=make_impact(
            (500_000_000, 650_000_000, 800_000_000),
            probability=0.65,
            consequence=0.7,
            delay_days=120,
            throughput_reduction=0.25,
        ),
        mitigation_options=[
            make_action(
                "lithium_expand_capacity",
                "Expand Processing Capacity",
                "Build new lithium processing plants",
                MitigationType.PREVENTIVE,
                cost=200_000_000,
                npv_impact=450_000_000,
                feasibility=0.8,
                days_to_implement=540,
                effectiveness=0.7,
                risk_reduction=0.5,
            ),
            make_action(
                "lithium_efficiency",
                "Process Efficiency Improvements",
                "Optimize existing lithium extraction processes",
                MitigationType.PREVENTIVE,
                cost=35_000_000,
                npv_impact=180_000_000,
                feasibility=0.9,
                days_to_implement=180,
                effectiveness=0.5,
                risk_reduction=0.3,
            ),
        ],
    )

    port = Constraint(
        id="port_congestion",
        type=ConstraintType.LOGISTICS,
        name="Port Congestion - Durban/Lagos",
        description="Critical bottleneck at major African shipping ports",
        severity=ConstraintSeverity.MAJOR,
        impact_area=["logistics", "costs", "delivery"],
        downstream_impacts=["global_supply"],
        impact=make_impact(
            (300_000_000, 450_000_000, 600_000_000),
            probability=0.8,
            consequence=0.6,
            delay_days=45,
            throughput_reduction=0.15,
        ),
        mitigation_options=[
            make_action(
                "logistics_alternative_routes",
                "Alternative Shipping Routes",
                "Utilize Cape Town and Mombasa ports",
                MitigationType.PREVENTIVE,
                cost=25_000_000,
                npv_impact=220_000_000,
                feasibility=0.9,
                days_to_implement=90,
                effectiveness=0.6,
                risk_reduction=0.45,
            ),
            make_action(
                "logistics_direct_shipping",
                "Direct Shipping Contracts",
                "Negotiate priority shipping agreements",
                MitigationType.CORRECTIVE,
                cost=15_000_000,
                npv_impact=150_000_000,
                feasibility=0.85,
                days_to_implement=60,
                effectiveness=0.5,
                risk_reduction=0.35,
            ),
        ],
    )

    demand = Constraint(
        id="ev_demand_surge",
        type=ConstraintType.DEMAND,
        name="EV Demand Surge",
        description="40% increase in electric vehicle production demand",
        severity=ConstraintSeverity.MAJOR,
        impact_area=["demand", "production", "supply_chain"],
        dependencies=["cobalt_supply_drc", "lithium_processing"],
        impact=make_impact(
            (1_000_000_000, 1_400_000_000, 1_800_000_000),
            probability=0.7,
            consequence=0.75,
            throughput_reduction=0.4,
        ),
        mitigation_options=[
            make_action(
                "demand_capacity_expansion",
                "Rapid Capacity Expansion",
                "Accelerate mining and processing capacity",
                MitigationType.PREVENTIVE,
                cost=350_000_000,
                npv_impact=800_000_000,
                feasibility=0.7,
                days_to_implement=365,
                effectiveness=0.75,
                risk_reduction=0.6,
            ),
            make_action(
                "demand_hedging",
                "Demand Hedging Strategy",
                "Long-term contracts to stabilize supply",
                MitigationType.CONTINGENCY,
                cost=50_000_000,
                npv_impact=400_000_000,
                feasibility=0.85,
                days_to_implement=120,
                effectiveness=0.5,
                risk_reduction=0.4,
            ),
        ],
    )

    return [cobalt, lithium, port, demand]


# (name, description, constraint ids, assumptions)
DEMO_SCENARIOS: list[tuple[str, str, list[str], dict[str, float]]] = [
    (
        "Baseline Scenario",
        "Current market conditions with existing constraints",
        ["cobalt_supply_drc", "lithium_processing"],
        {"demand_growth": 0.025, "supply_stability": 0.8},
    ),
    (
        "High Demand Scenario",
        "Mining boom with 40% demand increase",
        ["cobalt_supply_drc", "lithium_processing", "ev_demand_surge"],
        {"demand_growth": 0.4, "supply_stability": 0.6},
    ),
    (
        "Constrained Supply Scenario",
        "Supply chain disruptions with 50% material reduction",
        ["cobalt_supply_drc", "lithium_processing", "port_congestion"],
        {"demand_growth": 0.1, "supply_stability": 0.4},
    ),
    (
        "Rapid Expansion Scenario",
        "Accelerated deployment with reduced lead times",
        ["lithium_processing"],
        {"demand_growth": 0.15, "supply_stability": 0.9, "lead_time_reduction": 0.3},
    ),
]


def seed(modeler: ConstraintModeler, budget: Optional[float] = None) -> list[Scenario]:
    """
    Register the demo constraints and compose the demo scenarios.

    Args:
        modeler: Modeler to populate
        budget: Optional mitigation budget applied to every scenario

    Returns:
        Created scenarios in DEMO_SCENARIOS order
    """
    for constraint in build_demo_constraints():
        modeler.add_constraint(constraint)

    return [
        modeler.create_scenario(name, description, ids, assumptions, budget=budget)
        for name, description, ids, assumptions in DEMO_SCENARIOS
    ]


def main():
    parser = argparse.ArgumentParser(description="Seed demo constraints and scenarios")
    parser.add_argument(
        "--budget", type=float, default=None, help="Mitigation budget per scenario (USD)"
    )
    args = parser.parse_args()

    configure_logging()
    modeler = ConstraintModeler()
    scenarios = seed(modeler, budget=args.budget)

    print(f"\nSeeded {len(modeler.store)} constraints and {len(scenarios)} scenarios:")
    for scenario in scenarios:
        print(f"  {scenario.id}  {scenario.name}")


if __name__ == "__main__":
    main()
