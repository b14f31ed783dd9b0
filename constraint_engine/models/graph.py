"""
Dependency graph models for the constraint engine.

A DependencyGraph is built fresh for every query and never mutated in place.
Nodes carry their BFS level (distance from the nearest root); edges carry the
triggering strength between two constraints.
"""

import networkx as nx
from pydantic import BaseModel, Field

from .constraints import Constraint
from .enums import EdgeType


class DependencyNode(BaseModel):
    """
    A constraint placed in a dependency graph.

    Attributes:
        id: Constraint id
        constraint: The constraint record at build time
        level: BFS depth from the nearest root (0 for roots)
    """

    id: str = Field(description="Constraint id")
    constraint: Constraint = Field(description="Constraint record")
    level: int = Field(ge=0, description="BFS depth from the nearest root")

    class Config:
        """Pydantic configuration."""

        frozen = True


class DependencyEdge(BaseModel):
    """
    A directed triggering relationship between two constraints.

    Attributes:
        source: Upstream constraint id
        target: Downstream constraint id
        type: Relationship kind
        strength: Triggering strength in [0, 1]
    """

    source: str = Field(description="Upstream constraint id")
    target: str = Field(description="Downstream constraint id")
    type: EdgeType = Field(default=EdgeType.TRIGGERS)
    strength: float = Field(ge=0.0, le=1.0, description="Triggering strength")

    class Config:
        """Pydantic configuration."""

        frozen = True


class DependencyGraph(BaseModel):
    """
    Leveled directed graph over a set of constraints.

    Nodes appear in BFS visitation order. Edges are deduplicated per
    ordered (source, target) pair.
    """

    nodes: list[DependencyNode] = Field(default_factory=list)
    edges: list[DependencyEdge] = Field(default_factory=list)

    @property
    def node_ids(self) -> list[str]:
        return [n.id for n in self.nodes]

    @property
    def roots(self) -> list[DependencyNode]:
        """Nodes at level 0."""
        return [n for n in self.nodes if n.level == 0]

    def to_networkx(self) -> nx.DiGraph:
        """
        Export as a NetworkX DiGraph.

        Node attributes: ``level``. Edge attributes: ``strength``, ``type``.
        Edges whose endpoints are not graph nodes are kept so traversal sees
        the same edge set the graph reports.
        """
        graph = nx.DiGraph()
        for node in self.nodes:
            graph.add_node(node.id, level=node.level)
        for edge in self.edges:
            graph.add_edge(
                edge.source,
                edge.target,
                strength=edge.strength,
                type=edge.type.value,
            )
        return graph

    class Config:
        """Pydantic configuration."""

        frozen = True
