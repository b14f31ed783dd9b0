"""
Impact Aggregator — Cascading Multi-Metric Impact Quantification.

Combines the quantified impact of several constraints into one
QuantifiedImpact. Two modes share the same combination rules:

- Cascade (``quantify_total_impact``): walks the dependency subgraph rooted
  at one constraint and discounts each node's financial figures by
  ``decay_factor ** level``, so directly caused impacts count fully and
  indirect ones count less.
- Flat (``aggregate``): combines an explicit set with no decay.

Combination rules:
- financial min/max/expected: weighted sum
- operational delay, throughput reduction: maximum, undecayed
- risk probability: product (assumes the constraints are independent;
  correlated constraints make this an underestimate of joint likelihood)
- risk consequence: maximum
- risk score: aggregated probability x aggregated consequence

Version: impact_aggregation_v1
"""

from typing import Iterable, Optional

import numpy as np
import structlog

from constraint_engine.errors import InvalidInputError, NotFoundError
from constraint_engine.models.constraints import (
    Constraint,
    FinancialImpact,
    OperationalImpact,
    QuantifiedImpact,
    RiskImpact,
)
from constraint_engine.storage.base import ConstraintStore

from .dependency_graph import DependencyGraphBuilder

logger = structlog.get_logger()

DEFAULT_DECAY_FACTOR = 0.8


class ImpactAggregator:
    """
    Quantifies the total impact of constraints and their cascades.

    Attributes:
        store: Constraint store
        builder: Dependency graph builder used for cascade walks
        decay_factor: Per-level financial discount in (0, 1]
        default_currency: Currency reported when nothing is aggregated
        logger: Structured logger

    Example:
        >>> aggregator = ImpactAggregator(store)
        >>> impact = aggregator.quantify_total_impact("cobalt_supply_drc")
        >>> print(f"Expected exposure: ${impact.financial.expected:,.0f}")
    """

    def __init__(
        self,
        store: ConstraintStore,
        builder: Optional[DependencyGraphBuilder] = None,
        decay_factor: float = DEFAULT_DECAY_FACTOR,
        default_currency: str = "USD",
    ):
        if not 0.0 < decay_factor <= 1.0:
            raise InvalidInputError(
                f"decay_factor must be in (0, 1], got {decay_factor}"
            )
        self.store = store
        self.builder = builder or DependencyGraphBuilder(store)
        self.decay_factor = decay_factor
        self.default_currency = default_currency
        self.logger = structlog.get_logger()

    def quantify_total_impact(self, constraint_id: str) -> QuantifiedImpact:
        """
        Total impact of a constraint including everything it triggers.

        Builds a dependency graph seeded with exactly ``constraint_id`` at
        level 0 and combines every node with decay ``decay_factor ** level``.

        Args:
            constraint_id: Impact-origin constraint

        Returns:
            Aggregated QuantifiedImpact (risk probability assumes independence)

        Raises:
            NotFoundError: If the constraint is not registered
            InvalidInputError: If the cascade mixes currencies
        """
        if self.store.get(constraint_id) is None:
            raise NotFoundError(f"Constraint {constraint_id} not found")

        graph = self.builder.build([constraint_id], roots=[constraint_id])
        weighted = [
            (node.constraint, self.decay_factor ** node.level)
            for node in graph.nodes
        ]
        impact = self._combine(weighted)

        self.logger.info(
            "total_impact_quantified",
            constraint_id=constraint_id,
            cascade_size=len(graph.nodes),
            max_level=max(n.level for n in graph.nodes),
            expected=round(impact.financial.expected, 2),
            risk_probability=round(impact.risk.probability, 6),
        )
        return impact

    def aggregate(self, constraints: Iterable[Constraint]) -> QuantifiedImpact:
        """
        Flat aggregation over an explicit set of constraints (no decay).

        Args:
            constraints: Constraints to combine

        Returns:
            Aggregated QuantifiedImpact (risk probability assumes independence)

        Raises:
            InvalidInputError: If the constraints mix currencies
        """
        return self._combine([(c, 1.0) for c in constraints])

    def _combine(self, weighted: list[tuple[Constraint, float]]) -> QuantifiedImpact:
        currencies = {c.currency for c, _ in weighted}
        if len(currencies) > 1:
            raise InvalidInputError(
                f"Cannot aggregate impacts across currencies {sorted(currencies)}"
            )
        currency = currencies.pop() if currencies else self.default_currency

        financial = FinancialImpact(
            min=sum(c.impact.financial.min * w for c, w in weighted),
            max=sum(c.impact.financial.max * w for c, w in weighted),
            expected=sum(c.impact.financial.expected * w for c, w in weighted),
            currency=currency,
        )

        delays = [
            c.impact.operational.delay for c, _ in weighted
            if c.impact.operational.delay is not None
        ]
        reductions = [
            c.impact.operational.throughput_reduction for c, _ in weighted
            if c.impact.operational.throughput_reduction is not None
        ]
        operational = OperationalImpact(
            delay=max(delays) if delays else None,
            throughput_reduction=max(reductions) if reductions else None,
        )

        probabilities = [c.impact.risk.probability for c, _ in weighted]
        risk = RiskImpact(
            probability=float(np.prod(probabilities)) if probabilities else 1.0,
            consequence=max((c.impact.risk.consequence for c, _ in weighted), default=0.0),
        )

        return QuantifiedImpact(financial=financial, operational=operational, risk=risk)
