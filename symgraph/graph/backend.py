"""Graph backend abstraction layer.

Wraps NetworkX for easy backend replacement in the future.
"""

import logging
from typing import Any, Dict, Iterable, Optional

import networkx as nx

logger = logging.getLogger("symgraph.graph.backend")


class GraphBackend:
    """Graph backend wrapping a NetworkX ``DiGraph``.

    A ``DiGraph`` holds at most one edge per ordered node pair, which is
    exactly the edge model of the dependency graph: additional symbols
    between the same two files extend the existing edge.
    """

    def __init__(self) -> None:
        """Initialize backend with an empty NetworkX DiGraph."""
        self._graph = nx.DiGraph()
        logger.debug("Graph backend initialized with NetworkX")

    def add_node(self, node_id: int, **attributes: Any) -> None:
        """Add node to graph, updating attributes if it already exists.

        Args:
            node_id: Node identifier.
            **attributes: Node attributes.
        """
        self._graph.add_node(node_id, **attributes)

    def add_edge(self, source: int, target: int, **attributes: Any) -> None:
        """Add edge to graph.

        Args:
            source: Source node ID.
            target: Target node ID.
            **attributes: Edge attributes.
        """
        self._graph.add_edge(source, target, **attributes)

    def has_node(self, node_id: int) -> bool:
        """Check if node exists."""
        return self._graph.has_node(node_id)

    def has_edge(self, source: int, target: int) -> bool:
        """Check if edge exists."""
        return self._graph.has_edge(source, target)

    def get_node_data(self, node_id: int) -> Optional[Dict[str, Any]]:
        """Get node attributes.

        Args:
            node_id: Node identifier.

        Returns:
            Optional[Dict[str, Any]]: Live attribute dict or None if not found.
        """
        return self._graph.nodes.get(node_id)

    def get_edge_data(self, source: int, target: int) -> Optional[Dict[str, Any]]:
        """Get edge attributes.

        Args:
            source: Source node ID.
            target: Target node ID.

        Returns:
            Optional[Dict[str, Any]]: Live attribute dict or None if not found.
        """
        return self._graph.get_edge_data(source, target)

    def nodes(self, data: bool = False) -> Iterable:
        """Iterate over nodes.

        Args:
            data: If True, return (node_id, attributes) tuples.
        """
        return self._graph.nodes(data=data)

    def edges(self, data: bool = False) -> Iterable:
        """Iterate over edges.

        Args:
            data: If True, include edge attributes.
        """
        return self._graph.edges(data=data)

    def node_count(self) -> int:
        """Get number of nodes."""
        return self._graph.number_of_nodes()

    def edge_count(self) -> int:
        """Get number of edges."""
        return self._graph.number_of_edges()
