"""
Critical Path Finder — Longest Root-to-Sink Triggering Chain.

Depth-first enumeration over a built DependencyGraph: starting from every
level-0 node, follow outgoing edges until a node with no further successor
is reached, and keep the path with the most nodes.

Traversal order is deterministic: roots and successors are visited in
lexicographic id order and the first strictly longest path wins, so ties
resolve to the lexicographically smallest path prefix. A node already on
the current path is not revisited, which keeps enumeration finite even if
the edge set contains a cycle the BFS leveling skipped.

Enumeration is exponential in the worst case (all simple paths); graphs are
expected to be small, human-curated constraint sets.
"""

import networkx as nx
import structlog

from constraint_engine.models.graph import DependencyGraph

logger = structlog.get_logger()


class CriticalPathFinder:
    """
    Finds the longest root-to-sink path in a dependency graph.

    Example:
        >>> finder = CriticalPathFinder()
        >>> finder.find(graph)
        ['cobalt_supply_drc', 'ev_demand_surge']
    """

    def __init__(self):
        self.logger = structlog.get_logger()

    def find(self, graph: DependencyGraph) -> list[str]:
        """
        Longest root-to-sink path, by node count.

        Args:
            graph: Dependency graph built by DependencyGraphBuilder

        Returns:
            Ordered constraint ids; empty if the graph has no roots
        """
        longest: list[str] = []
        path_count = 0
        for path in self.enumerate_paths(graph):
            path_count += 1
            if len(path) > len(longest):
                longest = path

        self.logger.debug(
            "critical_path_found",
            path_count=path_count,
            length=len(longest),
            critical_path=longest,
        )
        return longest

    def enumerate_paths(self, graph: DependencyGraph) -> list[list[str]]:
        """
        Every root-to-sink path in deterministic order.

        Args:
            graph: Dependency graph

        Returns:
            List of paths, each a list of constraint ids
        """
        digraph = graph.to_networkx()
        paths: list[list[str]] = []
        for root in sorted(n.id for n in graph.roots):
            self._walk(digraph, [root], {root}, paths)
        return paths

    def _walk(
        self,
        digraph: nx.DiGraph,
        path: list[str],
        on_path: set[str],
        paths: list[list[str]],
    ) -> None:
        successors = sorted(s for s in digraph.successors(path[-1]) if s not in on_path)
        if not successors:
            paths.append(list(path))
            return

        for successor in successors:
            path.append(successor)
            on_path.add(successor)
            self._walk(digraph, path, on_path, paths)
            on_path.discard(successor)
            path.pop()
