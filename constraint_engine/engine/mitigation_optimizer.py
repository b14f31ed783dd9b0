"""
Mitigation Optimizer — Budget-Constrained Action Selection.

Selects which candidate mitigation actions to fund.

Eligibility: only actions with ``feasibility >= feasibility_threshold``
(default 0.7) take part in any selection path.

Without a budget the eligible actions are ranked by NPV impact, descending,
and all of them are returned. With a budget the selection is a 0/1
knapsack solved exactly by dynamic programming:

- item weight = ceil(cost), item value = floor(npv_impact),
  capacity = floor(budget)
- the (n+1) x (capacity+1) table is filled row by row with numpy and
  backtracked to recover the chosen subset
- total value is the maximum over all eligible subsets within budget

Precision contract: costs round up and NPVs and budgets round down to whole
units before indexing the table, so the selected total cost never exceeds
the budget. Callers wanting exact packings should express money in integer
minor units. Table width is bounded by ``max_capacity``; above it the budget
is bucketed: ``scale = ceil(floor(budget) / max_capacity)``, capacity =
``floor(budget / scale)`` and weight = ``ceil(cost / scale)``. Rounding
weights up keeps the selection within budget at the cost of possibly
missing a tighter packing. Memory is ``8 * (n + 1) * (capacity + 1)`` bytes;
values whose sum could overflow int64 switch the table to Python integers.

Version: mitigation_knapsack_v1
"""

import math
from typing import Optional

import numpy as np
import structlog

from constraint_engine.errors import InvalidInputError, NotFoundError
from constraint_engine.models.constraints import MitigationAction
from constraint_engine.models.scenarios import MitigationPlan
from constraint_engine.storage.base import ConstraintStore

from .scheduling import schedule_actions

logger = structlog.get_logger()

DEFAULT_FEASIBILITY_THRESHOLD = 0.7
DEFAULT_MAX_CAPACITY = 100_000
INT64_MAX = int(np.iinfo(np.int64).max)


class MitigationOptimizer:
    """
    Chooses a value-maximizing, cost-bounded set of mitigation actions.

    Attributes:
        store: Constraint store used to look up a constraint's options
        feasibility_threshold: Minimum feasibility for eligibility
        max_capacity: Maximum knapsack table width before bucketing
        logger: Structured logger

    Example:
        >>> optimizer = MitigationOptimizer(store)
        >>> plan = optimizer.find_optimal_mitigation("port_congestion", budget=30_000_000)
        >>> print(plan.action_ids, plan.total_cost, plan.roi)
    """

    def __init__(
        self,
        store: ConstraintStore,
        feasibility_threshold: float = DEFAULT_FEASIBILITY_THRESHOLD,
        max_capacity: int = DEFAULT_MAX_CAPACITY,
    ):
        if not 0.0 <= feasibility_threshold <= 1.0:
            raise InvalidInputError(
                f"feasibility_threshold must be in [0, 1], got {feasibility_threshold}"
            )
        if max_capacity < 1:
            raise InvalidInputError(f"max_capacity must be >= 1, got {max_capacity}")
        self.store = store
        self.feasibility_threshold = feasibility_threshold
        self.max_capacity = max_capacity
        self.logger = structlog.get_logger()

    def find_optimal_mitigation(
        self,
        constraint_id: str,
        budget: Optional[float] = None,
    ) -> MitigationPlan:
        """
        Optimal mitigation plan for a single constraint.

        Args:
            constraint_id: Constraint whose mitigation options are considered
            budget: Optional spending cap in the constraint's currency

        Returns:
            MitigationPlan (empty with ROI 0.0 when nothing is eligible)

        Raises:
            NotFoundError: If the constraint is not registered
            InvalidInputError: If the budget is negative or not finite
        """
        constraint = self.store.get(constraint_id)
        if constraint is None:
            raise NotFoundError(f"Constraint {constraint_id} not found")

        plan = self.optimize(constraint.mitigation_options, budget)

        self.logger.info(
            "mitigation_plan_computed",
            constraint_id=constraint_id,
            budget=budget,
            candidates=len(constraint.mitigation_options),
            selected=plan.action_ids,
            total_cost=plan.total_cost,
            expected_benefit=plan.expected_benefit,
        )
        return plan

    def optimize(
        self,
        actions: list[MitigationAction],
        budget: Optional[float] = None,
    ) -> MitigationPlan:
        """
        Select actions from an arbitrary pool and build a plan.

        Args:
            actions: Candidate actions
            budget: Optional spending cap; None ranks instead of optimizing

        Returns:
            MitigationPlan with an implementation sequence

        Raises:
            InvalidInputError: If the budget is negative or not finite
        """
        self._validate_budget(budget)
        eligible = self.eligible_actions(actions)

        if budget is None:
            selected = sorted(eligible, key=lambda a: a.npv_impact, reverse=True)
        else:
            selected = self.solve_knapsack(eligible, budget)

        if not selected:
            self.logger.warning(
                "mitigation_plan_empty",
                candidates=len(actions),
                eligible=len(eligible),
                budget=budget,
            )

        return MitigationPlan.from_actions(
            selected, schedule_actions(selected), budget=budget
        )

    def eligible_actions(self, actions: list[MitigationAction]) -> list[MitigationAction]:
        """Actions passing the feasibility gate, in input order."""
        return [a for a in actions if a.feasibility >= self.feasibility_threshold]

    def solve_knapsack(
        self,
        actions: list[MitigationAction],
        budget: float,
    ) -> list[MitigationAction]:
        """
        Exact 0/1 knapsack over the given actions.

        The feasibility gate is not applied here; callers pass eligible
        actions.

        Args:
            actions: Candidate actions
            budget: Non-negative spending cap

        Returns:
            Selected actions in input order
        """
        self._validate_budget(budget)
        if not actions:
            return []

        capacity, scale = self._capacity_and_scale(budget)
        weights = [self._weight(a.cost, scale) for a in actions]
        values = [math.floor(a.npv_impact) for a in actions]

        n = len(actions)
        dtype = np.int64 if sum(abs(v) for v in values) < INT64_MAX else object
        table = np.zeros((n + 1, capacity + 1), dtype=dtype)
        for i in range(1, n + 1):
            prev = table[i - 1]
            row = prev.copy()
            weight, value = weights[i - 1], values[i - 1]
            if weight <= capacity:
                with_item = prev[: capacity + 1 - weight] + value
                row[weight:] = np.maximum(prev[weight:], with_item)
            table[i] = row

        # Backtrack every row: zero-weight items can still change the value at w == 0
        selected: list[MitigationAction] = []
        w = capacity
        for i in range(n, 0, -1):
            if table[i, w] != table[i - 1, w]:
                selected.append(actions[i - 1])
                w -= weights[i - 1]
        selected.reverse()

        self.logger.debug(
            "knapsack_solved",
            items=n,
            budget=budget,
            capacity=capacity,
            scale=scale,
            best_value=int(table[n, capacity]),
            selected=[a.id for a in selected],
        )
        return selected

    def _capacity_and_scale(self, budget: float) -> tuple[int, int]:
        units = math.floor(budget)
        if units <= self.max_capacity:
            return units, 1

        scale = math.ceil(units / self.max_capacity)
        capacity = math.floor(budget / scale)

        self.logger.info(
            "knapsack_budget_bucketed",
            budget=budget,
            scale=scale,
            capacity=capacity,
            max_capacity=self.max_capacity,
        )
        return capacity, scale

    @staticmethod
    def _weight(cost: float, scale: int) -> int:
        return math.ceil(cost / scale)

    @staticmethod
    def _validate_budget(budget: Optional[float]) -> None:
        if budget is None:
            return
        if isinstance(budget, bool) or not isinstance(budget, (int, float)):
            raise InvalidInputError(f"Budget must be a number, got {budget!r}")
        if not math.isfinite(budget) or budget < 0:
            raise InvalidInputError(f"Budget must be a finite non-negative number, got {budget}")
