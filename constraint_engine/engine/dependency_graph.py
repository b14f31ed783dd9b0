"""
Constraint Dependency Graph Builder.

Converts a set of registered constraints into a leveled, directed graph.
An edge A -> B means "A triggers B": B lists A in ``dependencies`` or A
lists B in ``downstream_impacts``.

Leveling algorithm (BFS):
1. Seed the queue with every root at level 0. A root is an analyzed
   constraint whose own dependency list is empty (restricted to the named
   set when the graph is confined).
2. Pop (id, level); skip ids already visited. A node therefore keeps the
   level it was first assigned, which is what makes the walk cycle-safe.
3. Push each downstream id with level + 1.

Edges are collected independently of the BFS by scanning every analyzed
constraint's dependency and downstream-impact lists. Strength:

    strength = min(1.0, 0.5 + (sev(from) + sev(to)) / 4 + 0.1 * |shared impact areas|)

Known limitation: constraints reachable only through a cycle with no root
are left out of the node set. They are reported in the
``constraints_unreachable_from_roots`` log event rather than given a
synthetic root.
"""

from collections import deque
from typing import Iterable, Optional

import structlog

from constraint_engine.models.constraints import Constraint
from constraint_engine.models.graph import DependencyEdge, DependencyGraph, DependencyNode
from constraint_engine.storage.base import ConstraintStore

logger = structlog.get_logger()

BASE_EDGE_STRENGTH = 0.5
SHARED_AREA_BONUS = 0.1


def compute_edge_strength(source: Constraint, target: Constraint) -> float:
    """
    Triggering strength between two constraints.

    Args:
        source: Upstream constraint
        target: Downstream constraint

    Returns:
        Strength in [0.625, 1.0]

    Example:
        >>> # critical -> major with one shared area: 0.5 + 1.75 / 4 + 0.1, capped
        >>> compute_edge_strength(critical_supply, major_demand)
        1.0
    """
    shared_areas = set(source.impact_area) & set(target.impact_area)
    strength = (
        BASE_EDGE_STRENGTH
        + (source.severity.score + target.severity.score) / 4
        + SHARED_AREA_BONUS * len(shared_areas)
    )
    return min(strength, 1.0)


class DependencyGraphBuilder:
    """
    Builds DependencyGraph snapshots from a ConstraintStore.

    Every call produces a fresh graph; nothing is cached, so the graph always
    reflects the store contents at build time.

    Attributes:
        store: Constraint store to read from
        logger: Structured logger

    Example:
        >>> builder = DependencyGraphBuilder(store)
        >>> graph = builder.build()
        >>> [(n.id, n.level) for n in graph.nodes]
        [('cobalt_supply_drc', 0), ('lithium_processing', 0), ('ev_demand_surge', 1)]
    """

    def __init__(self, store: ConstraintStore):
        self.store = store
        self.logger = structlog.get_logger()

    def build(
        self,
        constraint_ids: Optional[Iterable[str]] = None,
        *,
        roots: Optional[Iterable[str]] = None,
        confine: bool = False,
    ) -> DependencyGraph:
        """
        Build a leveled dependency graph.

        Args:
            constraint_ids: Constraints to analyze (default: all registered).
                Unknown ids are ignored.
            roots: Explicit BFS seeds at level 0, overriding root detection.
            confine: Keep traversal and edges inside ``constraint_ids``. When
                False, the BFS follows downstream links through the whole store.

        Returns:
            DependencyGraph with nodes in BFS order and deduplicated edges
        """
        analyzed = self._resolve(constraint_ids)
        scope = {c.id for c in analyzed} if confine else None

        if roots is not None:
            seeds = list(roots)
        else:
            seeds = [
                c.id for c in analyzed
                if not self._upstream_in_scope(c, scope)
            ]

        nodes = self._level_nodes(seeds, scope)
        edges = self._collect_edges(analyzed, scope)

        node_ids = {n.id for n in nodes}
        unreachable = [c.id for c in analyzed if c.id not in node_ids]
        if unreachable and roots is None:
            self.logger.warning(
                "constraints_unreachable_from_roots",
                constraint_ids=unreachable,
                reason="reachable only through a cycle with no root",
            )

        graph = DependencyGraph(nodes=nodes, edges=edges)

        self.logger.debug(
            "dependency_graph_built",
            analyzed_count=len(analyzed),
            node_count=len(nodes),
            edge_count=len(edges),
            root_count=len(seeds),
            max_level=max((n.level for n in nodes), default=None),
            confined=confine,
        )

        return graph

    def _resolve(self, constraint_ids: Optional[Iterable[str]]) -> list[Constraint]:
        if constraint_ids is None:
            return self.store.list_all()

        resolved: dict[str, Constraint] = {}
        missing = []
        for cid in constraint_ids:
            constraint = self.store.get(cid)
            if constraint is None:
                missing.append(cid)
            else:
                resolved.setdefault(cid, constraint)

        if missing:
            self.logger.debug("graph_ids_not_registered", constraint_ids=missing)

        return list(resolved.values())

    @staticmethod
    def _upstream_in_scope(constraint: Constraint, scope: Optional[set[str]]) -> list[str]:
        if scope is None:
            return constraint.dependencies
        return [d for d in constraint.dependencies if d in scope]

    def _level_nodes(
        self, seeds: list[str], scope: Optional[set[str]]
    ) -> list[DependencyNode]:
        """BFS from the seeds, assigning each node its first-seen level."""
        queue: deque[tuple[str, int]] = deque((cid, 0) for cid in seeds)
        visited: set[str] = set()
        nodes: list[DependencyNode] = []

        while queue:
            cid, level = queue.popleft()
            if cid in visited:
                continue
            if scope is not None and cid not in scope:
                continue

            constraint = self.store.get(cid)
            if constraint is None:
                # Dangling reference to an unregistered constraint
                continue

            visited.add(cid)
            nodes.append(DependencyNode(id=cid, constraint=constraint, level=level))

            for downstream_id in self.store.downstream_ids(cid):
                if downstream_id not in visited:
                    queue.append((downstream_id, level + 1))

        return nodes

    def _collect_edges(
        self, analyzed: list[Constraint], scope: Optional[set[str]]
    ) -> list[DependencyEdge]:
        """One edge per ordered pair between registered (and in-scope) constraints."""
        pairs: dict[tuple[str, str], None] = {}
        for constraint in analyzed:
            for upstream_id in constraint.dependencies:
                pairs.setdefault((upstream_id, constraint.id), None)
            for downstream_id in constraint.downstream_impacts:
                pairs.setdefault((constraint.id, downstream_id), None)

        edges = []
        for source_id, target_id in pairs:
            if scope is not None and (source_id not in scope or target_id not in scope):
                continue
            source = self.store.get(source_id)
            target = self.store.get(target_id)
            if source is None or target is None:
                continue
            edges.append(
                DependencyEdge(
                    source=source_id,
                    target=target_id,
                    strength=compute_edge_strength(source, target),
                )
            )
        return edges
