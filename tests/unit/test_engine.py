"""
Unit tests for the constraint engine components.

Requirements:
- Independent tests (no shared state; every test gets fresh stores)
- Clear naming (test_<method>_<scenario>)
- Worked examples checked against hand-computed values
- Error paths asserted via the engine's exception taxonomy
"""

import math

import pytest

from constraint_engine.engine.critical_path import CriticalPathFinder
from constraint_engine.engine.dependency_graph import DependencyGraphBuilder, compute_edge_strength
from constraint_engine.engine.impact_aggregator import ImpactAggregator
from constraint_engine.engine.mitigation_optimizer import MitigationOptimizer
from constraint_engine.engine.scenario_comparator import ScenarioComparator
from constraint_engine.engine.scenario_composer import ScenarioComposer
from constraint_engine.engine.scheduling import schedule_actions
from constraint_engine.errors import DegenerateResultError, InvalidInputError, NotFoundError
from constraint_engine.models.enums import ComparisonMetric, ConstraintSeverity
from constraint_engine.storage.memory import InMemoryConstraintStore, InMemoryScenarioRegistry
from tests.conftest import make_action, make_chain, make_constraint, make_impact


# ============================================================================
# DependencyGraphBuilder Tests
# ============================================================================


class TestComputeEdgeStrength:
    """Test the edge strength formula."""

    def test_edge_strength_capped_at_one(self):
        """Critical -> major with a shared area exceeds 1.0 and is capped."""
        source = make_constraint("a", severity=ConstraintSeverity.CRITICAL)
        target = make_constraint("b", severity=ConstraintSeverity.MAJOR)
        assert compute_edge_strength(source, target) == 1.0

    def test_edge_strength_no_shared_areas(self):
        """Minor -> minor with disjoint areas: 0.5 + 0.5 / 4."""
        source = make_constraint("a", severity=ConstraintSeverity.MINOR, impact_area=["x"])
        target = make_constraint("b", severity=ConstraintSeverity.MINOR, impact_area=["y"])
        assert compute_edge_strength(source, target) == pytest.approx(0.625)

    def test_edge_strength_counts_shared_areas(self):
        """Each shared impact area adds 0.1."""
        source = make_constraint(
            "a", severity=ConstraintSeverity.MINOR, impact_area=["x", "y"]
        )
        target = make_constraint(
            "b", severity=ConstraintSeverity.MINOR, impact_area=["x", "y", "z"]
        )
        assert compute_edge_strength(source, target) == pytest.approx(0.825)


class TestDependencyGraphBuilderBuild:
    """Test BFS leveling, edge collection and scoping."""

    def test_build_assigns_levels(self, modeler, supply_chain):
        """Roots at level 0, descendants at their BFS depth."""
        graph = modeler.build_dependency_graph()
        levels = {n.id: n.level for n in graph.nodes}
        assert levels == {"mine": 0, "port": 0, "smelter": 1, "factory": 2}

    def test_build_deduplicates_edges(self, modeler, supply_chain):
        """mine lists smelter downstream and smelter lists mine upstream: one edge."""
        graph = modeler.build_dependency_graph()
        pairs = [(e.source, e.target) for e in graph.edges]
        assert pairs == [("mine", "smelter"), ("smelter", "factory")]

    def test_build_edge_strengths(self, modeler, supply_chain):
        """Edge strengths follow the severity/shared-area formula."""
        graph = modeler.build_dependency_graph()
        strengths = {(e.source, e.target): e.strength for e in graph.edges}
        assert strengths[("mine", "smelter")] == 1.0
        assert strengths[("smelter", "factory")] == pytest.approx(0.85)

    def test_build_empty_store(self, store):
        """No constraints: empty graph."""
        graph = DependencyGraphBuilder(store).build()
        assert graph.nodes == []
        assert graph.edges == []

    def test_build_ignores_dangling_references(self, store):
        """Downstream ids that are not registered produce no node and no edge."""
        store.add(make_constraint("a", downstream_impacts=["ghost"]))
        graph = DependencyGraphBuilder(store).build()
        assert graph.node_ids == ["a"]
        assert graph.edges == []

    def test_build_follows_derived_downstream(self, store):
        """A relation declared only on the dependent side is still traversed."""
        store.add(make_constraint("a"))
        store.add(make_constraint("b", dependencies=["a"]))
        graph = DependencyGraphBuilder(store).build(["a"])
        assert {n.id: n.level for n in graph.nodes} == {"a": 0, "b": 1}

    def test_build_subset_includes_reachable_descendants(self, modeler, supply_chain):
        """Unconfined builds follow downstream links outside the named ids."""
        graph = modeler.build_dependency_graph(["mine"])
        assert graph.node_ids == ["mine", "smelter", "factory"]

    def test_build_confined_keeps_inside_scope(self, store):
        """Confined builds use in-scope dependencies for roots and stay in scope."""
        for constraint in make_chain("a", "b", "c"):
            store.add(constraint)
        graph = DependencyGraphBuilder(store).build(["b", "c"], confine=True)
        assert {n.id: n.level for n in graph.nodes} == {"b": 0, "c": 1}
        assert [(e.source, e.target) for e in graph.edges] == [("b", "c")]

    def test_build_cycle_terminates(self, store):
        """A cycle below a root is leveled once per node."""
        store.add(make_constraint("x"))
        store.add(make_constraint("y", dependencies=["x", "z"]))
        store.add(make_constraint("z", dependencies=["y"]))
        graph = DependencyGraphBuilder(store).build()
        assert {n.id: n.level for n in graph.nodes} == {"x": 0, "y": 1, "z": 2}

    def test_build_excludes_rootless_cycle(self, store):
        """Constraints reachable only through a root-less cycle are left out."""
        store.add(make_constraint("r"))
        store.add(make_constraint("p", dependencies=["q"]))
        store.add(make_constraint("q", dependencies=["p"]))
        graph = DependencyGraphBuilder(store).build()
        assert graph.node_ids == ["r"]

    def test_build_unknown_ids_ignored(self, modeler, supply_chain):
        """Unknown ids in the subset are skipped."""
        graph = modeler.build_dependency_graph(["port", "ghost"])
        assert graph.node_ids == ["port"]

    def test_to_networkx_exports_attributes(self, modeler, supply_chain):
        """NetworkX export carries levels and strengths."""
        digraph = modeler.build_dependency_graph().to_networkx()
        assert digraph.nodes["factory"]["level"] == 2
        assert digraph.edges["smelter", "factory"]["strength"] == pytest.approx(0.85)


# ============================================================================
# ImpactAggregator Tests
# ============================================================================


class TestImpactAggregatorInit:
    """Test ImpactAggregator construction."""

    def test_init_default_decay(self, store):
        assert ImpactAggregator(store).decay_factor == 0.8

    @pytest.mark.parametrize("decay", [0.0, -0.1, 1.5])
    def test_init_invalid_decay_raises(self, store, decay):
        with pytest.raises(InvalidInputError):
            ImpactAggregator(store, decay_factor=decay)


class TestImpactAggregatorQuantifyTotalImpact:
    """Test cascade aggregation with decay."""

    def test_quantify_probability_product(self, store):
        """A (0.5) triggers B (0.4): aggregated probability is 0.20."""
        for constraint in make_chain("A", "B", probabilities=[0.5, 0.4]):
            store.add(constraint)
        impact = ImpactAggregator(store).quantify_total_impact("A")
        assert impact.risk.probability == pytest.approx(0.20)

    def test_quantify_decayed_financials(self, modeler, supply_chain):
        """Financial figures are summed with 0.8 ** level weights."""
        impact = modeler.quantify_total_impact("mine")
        assert impact.financial.expected == pytest.approx(1000 + 500 * 0.8 + 250 * 0.64)
        assert impact.financial.min == pytest.approx(800 + 500 * 0.8 + 250 * 0.64)
        assert impact.financial.max == pytest.approx(1200 + 500 * 0.8 + 250 * 0.64)

    def test_quantify_operational_maximum(self, modeler, supply_chain):
        """Delay and throughput reduction take the undecayed maximum."""
        impact = modeler.quantify_total_impact("mine")
        assert impact.operational.delay == 48.0
        assert impact.operational.throughput_reduction == 0.2

    def test_quantify_risk_score(self, modeler, supply_chain):
        """Risk score is aggregated probability x maximum consequence."""
        impact = modeler.quantify_total_impact("mine")
        assert impact.risk.probability == pytest.approx(0.5 * 0.4 * 0.5)
        assert impact.risk.consequence == 0.9
        assert impact.risk.risk_score == pytest.approx(0.1 * 0.9)

    def test_quantify_non_root_seeded_at_level_zero(self, modeler, supply_chain):
        """A constraint with dependencies is still the origin of its own cascade."""
        impact = modeler.quantify_total_impact("smelter")
        assert impact.financial.expected == pytest.approx(500 + 250 * 0.8)
        assert impact.risk.probability == pytest.approx(0.2)

    def test_quantify_isolated_constraint(self, modeler, supply_chain):
        """No downstream: the constraint's own impact."""
        impact = modeler.quantify_total_impact("port")
        assert impact.financial.expected == 300.0
        assert impact.risk.probability == 0.8

    def test_quantify_unknown_raises(self, modeler):
        with pytest.raises(NotFoundError):
            modeler.quantify_total_impact("ghost")

    def test_quantify_mixed_currencies_raises(self, store):
        store.add(make_constraint("a", downstream_impacts=["b"]))
        store.add(make_constraint("b", impact=make_impact(currency="EUR")))
        with pytest.raises(InvalidInputError):
            ImpactAggregator(store).quantify_total_impact("a")


class TestImpactAggregatorAggregate:
    """Test flat aggregation."""

    def test_aggregate_sums_without_decay(self, store):
        constraints = [
            make_constraint("a", impact=make_impact(expected=100.0)),
            make_constraint("b", impact=make_impact(expected=50.0)),
        ]
        impact = ImpactAggregator(store).aggregate(constraints)
        assert impact.financial.expected == 150.0

    def test_aggregate_empty(self, store):
        """Empty aggregation: zero financials, neutral probability, default currency."""
        impact = ImpactAggregator(store, default_currency="EUR").aggregate([])
        assert impact.financial.expected == 0.0
        assert impact.financial.currency == "EUR"
        assert impact.risk.probability == 1.0
        assert impact.operational.delay is None


# ============================================================================
# MitigationOptimizer Tests
# ============================================================================


def _knapsack_example():
    return [
        make_action("first", cost=100, npv_impact=150, feasibility=0.8),
        make_action("second", cost=50, npv_impact=80, feasibility=0.75),
        make_action("third", cost=60, npv_impact=40, feasibility=0.9),
    ]


class TestMitigationOptimizerFindOptimalMitigation:
    """Test single-constraint mitigation planning."""

    def test_knapsack_example(self, store):
        """Budget 150 selects the first two actions (cost 150, npv 230)."""
        store.add(make_constraint("c", mitigation_options=_knapsack_example()))
        plan = MitigationOptimizer(store).find_optimal_mitigation("c", budget=150)
        assert plan.action_ids == ["first", "second"]
        assert plan.total_cost == 150
        assert plan.expected_benefit == 230
        assert plan.roi == pytest.approx(230 / 150)
        assert plan.budget == 150

    def test_no_options_returns_empty_plan(self, store):
        """Zero options with a budget: empty plan with ROI 0, not NaN."""
        store.add(make_constraint("c"))
        plan = MitigationOptimizer(store).find_optimal_mitigation("c", budget=1000)
        assert plan.actions == []
        assert plan.total_cost == 0
        assert plan.expected_benefit == 0
        assert plan.roi == 0.0
        assert not math.isnan(plan.roi)

    def test_no_budget_ranks_by_npv(self, store):
        """Without a budget every eligible action is returned, best NPV first."""
        store.add(make_constraint("c", mitigation_options=_knapsack_example()))
        plan = MitigationOptimizer(store).find_optimal_mitigation("c")
        assert plan.action_ids == ["first", "second", "third"]
        assert plan.budget is None

    def test_feasibility_gate(self, store):
        """Actions below 0.7 feasibility are never selected; 0.7 itself is eligible."""
        actions = [
            make_action("weak", cost=1, npv_impact=1000, feasibility=0.69),
            make_action("edge", cost=1, npv_impact=10, feasibility=0.7),
        ]
        store.add(make_constraint("c", mitigation_options=actions))
        optimizer = MitigationOptimizer(store)
        assert optimizer.find_optimal_mitigation("c").action_ids == ["edge"]
        assert optimizer.find_optimal_mitigation("c", budget=100).action_ids == ["edge"]

    def test_unknown_constraint_raises(self, store):
        with pytest.raises(NotFoundError):
            MitigationOptimizer(store).find_optimal_mitigation("ghost", budget=10)

    @pytest.mark.parametrize("budget", [-1, float("nan"), float("inf"), True, "100"])
    def test_invalid_budget_raises(self, store, budget):
        store.add(make_constraint("c", mitigation_options=_knapsack_example()))
        with pytest.raises(InvalidInputError):
            MitigationOptimizer(store).find_optimal_mitigation("c", budget=budget)

    def test_custom_threshold(self, store):
        store.add(make_constraint("c", mitigation_options=_knapsack_example()))
        plan = MitigationOptimizer(store, feasibility_threshold=0.85).find_optimal_mitigation("c")
        assert plan.action_ids == ["third"]


class TestMitigationOptimizerSolveKnapsack:
    """Test the knapsack solver directly."""

    def test_zero_budget_selects_zero_cost_items(self, store):
        actions = [
            make_action("free", cost=0, npv_impact=10),
            make_action("paid", cost=5, npv_impact=100),
            make_action("free_too", cost=0, npv_impact=3),
        ]
        selected = MitigationOptimizer(store).solve_knapsack(actions, budget=0)
        assert [a.id for a in selected] == ["free", "free_too"]

    def test_zero_cost_negative_npv_excluded(self, store):
        actions = [make_action("harmful", cost=0, npv_impact=-5)]
        assert MitigationOptimizer(store).solve_knapsack(actions, budget=10) == []

    def test_rounds_fractional_costs_up(self, store):
        """Fractional costs round up so the real total stays within budget."""
        actions = [make_action("a", cost=10.9, npv_impact=5), make_action("b", cost=0.5, npv_impact=5)]
        selected = MitigationOptimizer(store).solve_knapsack(actions, budget=10.99)
        assert [a.id for a in selected] == ["b"]

    def test_fractional_cost_over_budget_not_selected(self, store):
        store.add(make_constraint("c", mitigation_options=[make_action("a", cost=100.5, npv_impact=50)]))
        plan = MitigationOptimizer(store).find_optimal_mitigation("c", budget=100)
        assert plan.action_ids == []
        assert plan.total_cost == 0

    def test_values_beyond_int64_range(self, store):
        actions = [
            make_action("a", cost=1, npv_impact=1e19),
            make_action("b", cost=1, npv_impact=1e19),
            make_action("c", cost=2, npv_impact=5),
        ]
        selected = MitigationOptimizer(store).solve_knapsack(actions, budget=2)
        assert [a.id for a in selected] == ["a", "b"]

    def test_budget_bucketing_stays_within_budget(self, store):
        """Budgets above max_capacity are bucketed; weights round up."""
        actions = [
            make_action("a", cost=400, npv_impact=500),
            make_action("b", cost=500, npv_impact=600),
            make_action("c", cost=700, npv_impact=900),
        ]
        optimizer = MitigationOptimizer(store, max_capacity=100)
        selected = optimizer.solve_knapsack(actions, budget=1000)
        assert [a.id for a in selected] == ["a", "b"]
        assert sum(a.cost for a in selected) <= 1000

    def test_empty_actions(self, store):
        assert MitigationOptimizer(store).solve_knapsack([], budget=100) == []

    def test_invalid_max_capacity_raises(self, store):
        with pytest.raises(InvalidInputError):
            MitigationOptimizer(store, max_capacity=0)


# ============================================================================
# Scheduling Tests
# ============================================================================


class TestScheduleActions:
    """Test ready-set implementation sequencing."""

    def test_dependencies_first(self):
        actions = [make_action("a", dependencies=["b"]), make_action("b")]
        assert schedule_actions(actions) == ["b", "a"]

    def test_independent_actions_keep_selection_order(self):
        actions = [make_action("x"), make_action("y"), make_action("z")]
        assert schedule_actions(actions) == ["x", "y", "z"]

    def test_external_dependencies_satisfied(self):
        """Dependencies on unselected actions do not block."""
        actions = [make_action("a", dependencies=["not_selected"])]
        assert schedule_actions(actions) == ["a"]

    def test_cycle_forces_first_remaining(self):
        """A dependency cycle is broken by forcing the first remaining action."""
        actions = [make_action("a", dependencies=["b"]), make_action("b", dependencies=["a"])]
        assert schedule_actions(actions) == ["a", "b"]

    def test_empty(self):
        assert schedule_actions([]) == []

    def test_plan_carries_sequence(self, store):
        actions = [
            make_action("build", cost=10, npv_impact=100, dependencies=["permit"]),
            make_action("permit", cost=5, npv_impact=20),
        ]
        store.add(make_constraint("c", mitigation_options=actions))
        plan = MitigationOptimizer(store).find_optimal_mitigation("c")
        assert plan.action_ids == ["build", "permit"]
        assert plan.implementation_sequence == ["permit", "build"]


# ============================================================================
# CriticalPathFinder Tests
# ============================================================================


class TestCriticalPathFinderFind:
    """Test longest root-to-sink path selection."""

    def test_find_longest_chain(self, modeler, supply_chain):
        graph = modeler.build_dependency_graph()
        assert CriticalPathFinder().find(graph) == ["mine", "smelter", "factory"]

    def test_find_empty_graph(self, store):
        graph = DependencyGraphBuilder(store).build()
        assert CriticalPathFinder().find(graph) == []

    def test_find_tie_breaks_lexicographically(self, store):
        for constraint in make_chain("b1", "b2") + make_chain("a1", "a2"):
            store.add(constraint)
        graph = DependencyGraphBuilder(store).build()
        assert CriticalPathFinder().find(graph) == ["a1", "a2"]

    def test_find_branching_prefers_smallest_successor_on_tie(self, store):
        store.add(make_constraint("root"))
        store.add(make_constraint("z_leaf", dependencies=["root"]))
        store.add(make_constraint("a_leaf", dependencies=["root"]))
        graph = DependencyGraphBuilder(store).build()
        assert CriticalPathFinder().find(graph) == ["root", "a_leaf"]

    def test_find_terminates_on_cyclic_edges(self, store):
        store.add(make_constraint("x"))
        store.add(make_constraint("y", dependencies=["x", "z"]))
        store.add(make_constraint("z", dependencies=["y"]))
        graph = DependencyGraphBuilder(store).build()
        assert CriticalPathFinder().find(graph) == ["x", "y", "z"]

    def test_enumerate_paths(self, modeler, supply_chain):
        graph = modeler.build_dependency_graph()
        paths = CriticalPathFinder().enumerate_paths(graph)
        assert paths == [["mine", "smelter", "factory"], ["port"]]


# ============================================================================
# ScenarioComposer Tests
# ============================================================================


@pytest.fixture
def composer(store, registry):
    return ScenarioComposer(store, registry)


class TestScenarioComposerCreateScenario:
    """Test scenario composition."""

    def test_create_scenario_aggregates_flat(self, modeler, supply_chain):
        scenario = modeler.create_scenario(
            "Full chain", "All processing steps", ["mine", "smelter", "factory"]
        )
        assert scenario.aggregated_impact.financial.expected == pytest.approx(1750.0)
        assert scenario.probability == pytest.approx(0.1)
        assert scenario.constraint_ids == ["mine", "smelter", "factory"]

    def test_create_scenario_critical_path(self, modeler, supply_chain):
        scenario = modeler.create_scenario("Full chain", "", ["mine", "smelter", "factory"])
        assert scenario.critical_path == ["mine", "smelter", "factory"]

    def test_create_scenario_confines_graph(self, modeler, supply_chain):
        """Constraints outside the scenario do not appear in its critical path."""
        scenario = modeler.create_scenario("Downstream", "", ["smelter", "factory"])
        assert scenario.critical_path == ["smelter", "factory"]

    def test_create_scenario_unconstrained_plan(self, modeler, supply_chain):
        scenario = modeler.create_scenario("Full chain", "", ["mine", "smelter", "factory"])
        plan = scenario.optimal_mitigation_plan
        assert plan.action_ids == ["mine_a", "smelter_a", "factory_a"]
        assert plan.total_cost == 210
        assert plan.roi == pytest.approx(270 / 210)

    def test_create_scenario_with_budget(self, modeler, supply_chain):
        scenario = modeler.create_scenario(
            "Full chain", "", ["mine", "smelter", "factory"], budget=150
        )
        assert scenario.optimal_mitigation_plan.action_ids == ["mine_a", "smelter_a"]

    def test_create_scenario_stores_assumptions(self, modeler, supply_chain):
        scenario = modeler.create_scenario(
            "Boom", "", ["mine"], {"demand_growth": 0.4, "label": "boom", "stable": False}
        )
        assert scenario.assumptions == {"demand_growth": 0.4, "label": "boom", "stable": False}

    def test_create_scenario_ids_unique(self, modeler, supply_chain):
        first = modeler.create_scenario("One", "", ["mine"])
        second = modeler.create_scenario("One", "", ["mine"])
        assert first.id != second.id
        assert first.id.startswith("scenario_")
        assert modeler.get_scenario(first.id) == first
        assert [s.id for s in modeler.list_scenarios()] == [first.id, second.id]

    def test_create_scenario_drops_unknown_ids(self, modeler, supply_chain):
        scenario = modeler.create_scenario("Partial", "", ["mine", "ghost"])
        assert scenario.constraint_ids == ["mine"]

    def test_create_scenario_strict_unknown_raises(self, store, registry, supply_chain):
        composer = ScenarioComposer(store, registry, strict_ids=True)
        with pytest.raises(NotFoundError):
            composer.create_scenario("Partial", "", ["mine", "ghost"])

    def test_create_scenario_zero_constraints_raises(self, composer):
        with pytest.raises(DegenerateResultError):
            composer.create_scenario("Empty", "", ["ghost"])

    def test_create_scenario_pools_shared_action_ids_from_every_constraint(self, store, composer):
        store.add(make_constraint("a", mitigation_options=[make_action("hedge", cost=90, npv_impact=10)]))
        store.add(make_constraint("b", mitigation_options=[make_action("hedge", cost=10, npv_impact=500)]))

        unbudgeted = composer.create_scenario("Shared", "", ["a", "b"]).optimal_mitigation_plan
        assert unbudgeted.action_ids == ["b:hedge", "a:hedge"]

        budgeted = composer.create_scenario("Shared", "", ["a", "b"], budget=50).optimal_mitigation_plan
        assert budgeted.action_ids == ["b:hedge"]
        assert budgeted.expected_benefit == 500
        assert budgeted.total_cost == 10

    def test_create_scenario_qualifies_dependencies_within_constraint(self, store, composer):
        store.add(
            make_constraint(
                "a",
                mitigation_options=[
                    make_action("audit", cost=5, npv_impact=20, dependencies=["hedge"]),
                    make_action("hedge", cost=5, npv_impact=10),
                ],
            )
        )
        store.add(make_constraint("b", mitigation_options=[make_action("hedge", cost=5, npv_impact=30)]))
        plan = composer.create_scenario("Shared", "", ["a", "b"]).optimal_mitigation_plan
        audit = next(a for a in plan.actions if a.id == "audit")
        assert audit.dependencies == ["a:hedge"]
        sequence = plan.implementation_sequence
        assert sequence.index("a:hedge") < sequence.index("audit")

    def test_create_scenario_unshared_action_ids_unchanged(self, modeler, supply_chain):
        plan = modeler.create_scenario("Chain", "", ["mine", "smelter"]).optimal_mitigation_plan
        assert sorted(plan.action_ids) == ["mine_a", "smelter_a"]

    def test_create_scenario_negative_budget_raises(self, modeler, supply_chain):
        with pytest.raises(InvalidInputError):
            modeler.create_scenario("Bad", "", ["mine"], budget=-5)


# ============================================================================
# ScenarioComparator Tests
# ============================================================================


class TestScenarioComparatorCompareScenarios:
    """Test scenario ranking."""

    @pytest.fixture
    def three_scenarios(self, modeler, supply_chain):
        mine = modeler.create_scenario("Mine", "", ["mine"])
        port = modeler.create_scenario("Port", "", ["port"])
        smelter = modeler.create_scenario("Smelter", "", ["smelter"])
        return mine, port, smelter

    def test_compare_winners(self, modeler, three_scenarios):
        mine, port, smelter = three_scenarios
        result = modeler.compare_scenarios([mine.id, port.id, smelter.id])
        assert result.for_metric(ComparisonMetric.TOTAL_EXPECTED_IMPACT).winner == port.id
        assert result.for_metric(ComparisonMetric.RISK_SCORE).winner == smelter.id
        assert result.for_metric(ComparisonMetric.MITIGATION_ROI).winner == smelter.id

    def test_compare_values(self, modeler, three_scenarios):
        mine, port, smelter = three_scenarios
        result = modeler.compare_scenarios([mine.id, port.id, smelter.id])
        cost = result.for_metric(ComparisonMetric.TOTAL_EXPECTED_IMPACT)
        risk = result.for_metric(ComparisonMetric.RISK_SCORE)
        roi = result.for_metric(ComparisonMetric.MITIGATION_ROI)
        assert cost.values == {mine.id: 1000.0, port.id: 300.0, smelter.id: 500.0}
        assert risk.values[mine.id] == pytest.approx(0.45)
        assert roi.values[port.id] == 0.0
        assert roi.values[mine.id] == pytest.approx(1.5)

    def test_compare_reports_all_metrics(self, modeler, three_scenarios):
        result = modeler.compare_scenarios([s.id for s in three_scenarios])
        assert [c.metric for c in result.comparison] == list(ComparisonMetric)
        assert len(result.scenarios) == 3

    def test_compare_tie_goes_to_first_requested(self, modeler, supply_chain):
        a = modeler.create_scenario("A", "", ["port"])
        b = modeler.create_scenario("B", "", ["port"])
        result = modeler.compare_scenarios([b.id, a.id])
        for entry in result.comparison:
            assert entry.winner == b.id

    def test_compare_unknown_ids_filtered(self, modeler, three_scenarios):
        mine = three_scenarios[0]
        result = modeler.compare_scenarios([mine.id, "scenario_missing"])
        assert [s.id for s in result.scenarios] == [mine.id]

    def test_compare_nothing_resolvable(self, modeler):
        result = modeler.compare_scenarios(["scenario_missing"])
        assert result.scenarios == []
        for entry in result.comparison:
            assert entry.values == {}
            assert entry.winner is None

    def test_compare_strict_unknown_raises(self, registry):
        with pytest.raises(NotFoundError):
            ScenarioComparator(registry, strict_ids=True).compare_scenarios(["nope"])

    def test_compare_empty_request(self, modeler):
        result = modeler.compare_scenarios([])
        assert result.for_metric(ComparisonMetric.RISK_SCORE).winner is None


# ============================================================================
# Storage Tests
# ============================================================================


class TestInMemoryConstraintStore:
    """Test the in-memory store and its derived relation."""

    def test_add_replaces_existing(self, store):
        store.add(make_constraint("a", impact=make_impact(expected=1.0)))
        store.add(make_constraint("a", impact=make_impact(expected=2.0)))
        assert len(store) == 1
        assert store.get("a").impact.financial.expected == 2.0

    def test_downstream_ids_merges_both_directions(self, store):
        store.add(make_constraint("a", downstream_impacts=["b"]))
        store.add(make_constraint("b"))
        store.add(make_constraint("c", dependencies=["a"]))
        assert store.downstream_ids("a") == ["b", "c"]

    def test_upstream_ids_merges_both_directions(self, store):
        store.add(make_constraint("a", downstream_impacts=["c"]))
        store.add(make_constraint("b"))
        store.add(make_constraint("c", dependencies=["b"]))
        assert store.upstream_ids("c") == ["b", "a"]

    def test_contains(self, store):
        store.add(make_constraint("a"))
        assert "a" in store
        assert "b" not in store

    def test_initial_constraints(self):
        store = InMemoryConstraintStore(make_chain("a", "b"))
        assert [c.id for c in store.list_all()] == ["a", "b"]


class TestInMemoryScenarioRegistry:
    """Test the append-only scenario registry."""

    def test_duplicate_id_rejected(self, modeler, supply_chain):
        scenario = modeler.create_scenario("One", "", ["mine"])
        registry = InMemoryScenarioRegistry()
        registry.save(scenario)
        with pytest.raises(InvalidInputError):
            registry.save(scenario)
        assert len(registry) == 1
