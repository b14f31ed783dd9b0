"""
Constraint engine core components.

This package contains the analytical components behind the
ConstraintModeler facade:

- Dependency graph: BFS-leveled triggering graph with edge strengths
- Impact aggregation: decayed cascade and flat multi-metric aggregation
- Mitigation optimization: feasibility gate, NPV ranking and 0/1 knapsack
- Scheduling: ready-set implementation sequencing
- Critical path: longest root-to-sink triggering chain
- Scenarios: composition and comparison of named constraint bundles

All components take their store explicitly and hold no module-level state.
"""

__all__ = [
    "ConstraintModeler",
    "CriticalPathFinder",
    "DependencyGraphBuilder",
    "ImpactAggregator",
    "MitigationOptimizer",
    "ScenarioComparator",
    "ScenarioComposer",
    "compute_edge_strength",
    "schedule_actions",
]

from constraint_engine.engine.critical_path import CriticalPathFinder
from constraint_engine.engine.dependency_graph import DependencyGraphBuilder, compute_edge_strength
from constraint_engine.engine.impact_aggregator import ImpactAggregator
from constraint_engine.engine.mitigation_optimizer import MitigationOptimizer
from constraint_engine.engine.modeler import ConstraintModeler
from constraint_engine.engine.scenario_comparator import ScenarioComparator
from constraint_engine.engine.scenario_composer import ScenarioComposer
from constraint_engine.engine.scheduling import schedule_actions
