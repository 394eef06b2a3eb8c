"""Dependency graph for one build run.

DependencyGraph is the persistent result of symbol resolution: one node per
input file, annotated with the symbols it defines, and one directed edge per
(consumer, provider) pair, annotated with the symbols justifying it.

Node and symbol names share a single :class:`StringTable`. A file whose
sanitized name equals a sanitized symbol name therefore has the same id as
that symbol; accessors taking a node id accept any interned id and only
report what was actually added as a node.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from symgraph.graph.backend import GraphBackend
from symgraph.graph.strings import StringTable

logger = logging.getLogger("symgraph.graph.manager")


@dataclass
class Cluster:
    """Named group of node ids, used only when rendering.

    Attributes:
        name_id: Interned id of the cluster name, or None for an anonymous
            cluster.
        members: Node ids in insertion order, without duplicates.
    """

    name_id: Optional[int] = None
    members: List[int] = field(default_factory=list)

    def add(self, node_id: int) -> None:
        """Add a node id to the cluster once."""
        if node_id not in self.members:
            self.members.append(node_id)


class DependencyGraph:
    """Directed file dependency graph keyed by canonical ids.

    Each node carries a ``symbols`` list (defined symbol ids, display only).
    Each edge ``consumer -> provider`` carries a ``symbols`` list; linking the
    same pair again appends to it instead of adding a parallel edge.
    """

    def __init__(self, name: str = "", strings: Optional[StringTable] = None) -> None:
        """Initialize graph.

        Args:
            name: Graph name written in the output header.
            strings: Shared string table, a new one is created when omitted.
        """
        self.name = name
        self._strings = strings if strings is not None else StringTable()
        self._backend = GraphBackend()
        self._clusters: List[Cluster] = []

        logger.debug("DependencyGraph initialized with name: %r", self.name)

    @property
    def strings(self) -> StringTable:
        """String table resolving node and symbol ids."""
        return self._strings

    @property
    def clusters(self) -> List[Cluster]:
        """Clusters in creation order."""
        return self._clusters

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def add_node(self, node_id: int) -> None:
        """Add a file node; existing nodes are left untouched."""
        if self._backend.has_node(node_id):
            logger.debug("Node %d already exists, skipping", node_id)
            return
        self._backend.add_node(node_id, symbols=[])
        logger.debug("Added node: n%d (%s)", node_id, self.label(node_id))

    def add_defined_symbol(self, node_id: int, symbol_id: int) -> None:
        """Record that ``node_id`` defines ``symbol_id`` (display only).

        Raises:
            KeyError: If ``node_id`` is not a node of the graph.
        """
        data = self._backend.get_node_data(node_id)
        if data is None:
            raise KeyError(node_id)
        data["symbols"].append(symbol_id)

    def has_node(self, node_id: int) -> bool:
        """Check if ``node_id`` is a file node of the graph."""
        return self._backend.has_node(node_id)

    def node_symbols(self, node_id: int) -> List[int]:
        """Return the defined symbol ids of a node (empty if unknown)."""
        data = self._backend.get_node_data(node_id)
        if data is None:
            return []
        return list(data["symbols"])

    def nodes(self) -> List[int]:
        """Return node ids sorted ascending."""
        return sorted(self._backend.nodes())

    def find_node(self, name: str) -> Optional[int]:
        """Return the node id for a canonical name, or None."""
        node_id = self._strings.get(name)
        if node_id is None or not self._backend.has_node(node_id):
            return None
        return node_id

    def label(self, string_id: int) -> Optional[str]:
        """Resolve an id to its name, or None if it was never interned."""
        try:
            return self._strings.resolve(string_id)
        except KeyError:
            return None

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def link(self, consumer_id: int, provider_id: int, symbol_id: int) -> None:
        """Create or extend the edge ``consumer_id -> provider_id``.

        Args:
            consumer_id: File requiring the symbol.
            provider_id: File defining the symbol.
            symbol_id: Symbol justifying the edge.
        """
        data = self._backend.get_edge_data(consumer_id, provider_id)
        if data is not None:
            data["symbols"].append(symbol_id)
            return

        self._backend.add_edge(consumer_id, provider_id, symbols=[symbol_id])
        logger.debug(
            "Added edge: n%d -> n%d (symbol=%s)",
            consumer_id,
            provider_id,
            self.label(symbol_id),
        )

    def has_edge(self, consumer_id: int, provider_id: int) -> bool:
        """Check if an edge exists between two nodes."""
        return self._backend.has_edge(consumer_id, provider_id)

    def edge_symbols(self, consumer_id: int, provider_id: int) -> Optional[List[int]]:
        """Return the symbol ids of an edge, or None if there is no edge."""
        data = self._backend.get_edge_data(consumer_id, provider_id)
        if data is None:
            return None
        return list(data["symbols"])

    def edges(self) -> List[Tuple[int, int, List[int]]]:
        """Return ``(consumer, provider, symbols)`` sorted by node pair."""
        return sorted(
            (source, target, list(attrs["symbols"]))
            for source, target, attrs in self._backend.edges(data=True)
        )

    def iter_edge_labels(self) -> Iterator[Tuple[str, str, List[str]]]:
        """Yield edges with every id resolved to its name."""
        for source, target, symbols in self.edges():
            yield (
                self._strings.resolve(source),
                self._strings.resolve(target),
                [self._strings.resolve(symbol) for symbol in symbols],
            )

    def merge(self) -> None:
        """Drop symbol labels from all edges, keeping connectivity.

        Calling it again on a merged graph changes nothing.
        """
        for _, _, attrs in self._backend.edges(data=True):
            attrs["symbols"].clear()
        logger.debug("Merged labels of %d edges", self.edge_count())

    # ------------------------------------------------------------------
    # Clusters
    # ------------------------------------------------------------------

    def add_cluster(
        self, name: Optional[str] = None, members: Iterable[int] = ()
    ) -> Cluster:
        """Create a cluster, reusing an existing one with the same name.

        Args:
            name: Cluster name (interned), None for an anonymous cluster.
            members: Node ids to place in the cluster.

        Returns:
            Cluster: The created or existing cluster.
        """
        name_id = self._strings.intern(name) if name is not None else None

        cluster = None
        if name_id is not None:
            cluster = next(
                (c for c in self._clusters if c.name_id == name_id), None
            )
        if cluster is None:
            cluster = Cluster(name_id=name_id)
            self._clusters.append(cluster)

        for node_id in members:
            cluster.add(node_id)
        return cluster

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def node_count(self) -> int:
        """Get number of nodes."""
        return self._backend.node_count()

    def edge_count(self) -> int:
        """Get number of edges (pairs, not rendered edge lines)."""
        return self._backend.edge_count()

    def get_statistics(self) -> Dict[str, Any]:
        """Return basic counters for logging."""
        return {
            "nodes": self.node_count(),
            "edges": self.edge_count(),
            "labelled_edges": sum(1 for _, _, s in self.edges() if s),
            "clusters": len(self._clusters),
            "strings": len(self._strings),
        }
