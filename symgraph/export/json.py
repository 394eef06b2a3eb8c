"""JSON export for dependency graphs."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

import networkx as nx

from symgraph.binary.base import OutputWriteError
from symgraph.graph.manager import DependencyGraph

logger = logging.getLogger("symgraph.export.json")


def to_named_graph(graph: DependencyGraph) -> nx.DiGraph:
    """Copy ``graph`` with every symbol id replaced by its name.

    Node keys stay the canonical ids so the JSON matches the DOT ``n<id>``
    identifiers.
    """
    named = nx.DiGraph(name=graph.name)
    for node_id in graph.nodes():
        named.add_node(
            node_id,
            label=graph.label(node_id),
            symbols=[graph.label(s) for s in graph.node_symbols(node_id)],
        )
    for source, target, symbols in graph.edges():
        named.add_edge(source, target, symbols=[graph.label(s) for s in symbols])

    named.graph["clusters"] = [
        {
            "name": graph.label(c.name_id) if c.name_id is not None else None,
            "members": [graph.label(m) for m in c.members],
        }
        for c in graph.clusters
    ]
    return named


def graph_to_dict(graph: DependencyGraph) -> Dict[str, Any]:
    """Return node-link data for ``graph``."""
    return nx.readwrite.json_graph.node_link_data(to_named_graph(graph), edges="edges")


def render_json(graph: DependencyGraph) -> str:
    """Render ``graph`` as indented JSON text."""
    return json.dumps(graph_to_dict(graph), indent=2, ensure_ascii=False) + "\n"


def export_json(graph: DependencyGraph, output_path: Union[str, Path]) -> None:
    """Export graph to JSON format.

    Args:
        graph: Dependency graph to export.
        output_path: Output file path.

    Raises:
        OutputWriteError: If the file cannot be created or written.
    """
    output_path = Path(output_path)
    logger.info("Exporting graph to JSON: %s", output_path)

    data = graph_to_dict(graph)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
    except OSError as err:
        raise OutputWriteError(f"Unable to write {output_path}: {err}") from err

    logger.info("JSON export completed: %d nodes, %d edges",
                graph.node_count(), graph.edge_count())
