"""DOT export for dependency graphs.

Output shape::

    digraph <name> {
        subgraph <cluster> {
            n<id> [label="<name>"]
        }
        n<id> [label="<name>"]
        n<src> -> n<dst>
        n<src> -> n<dst> [label="<symbol>"]
    }

Nodes are written sorted by id and edges sorted by (source, target); a
labelled edge becomes one line per symbol.
"""

import logging
import re
from pathlib import Path
from typing import Iterator, Optional, Union

from symgraph.binary.base import OutputWriteError
from symgraph.graph.manager import Cluster, DependencyGraph

logger = logging.getLogger("symgraph.export.dot")

INDENT = "    "

_BARE_ID = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Reserved words are case-insensitive and cannot appear as bare ids
DOT_KEYWORDS = frozenset({"node", "edge", "graph", "digraph", "subgraph", "strict"})


def quote(value: str) -> str:
    """Return ``value`` as a double-quoted DOT string."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def graph_id(value: str) -> str:
    """Return ``value`` bare when it is a plain DOT identifier, quoted otherwise.

    DOT keywords (``graph``, ``node``, ...) are quoted in any letter case.
    """
    if _BARE_ID.fullmatch(value) and value.lower() not in DOT_KEYWORDS:
        return value
    return quote(value)


def _node_line(graph: DependencyGraph, node_id: int, indent: str) -> str:
    label = graph.label(node_id)
    if label is None:
        return f"{indent}n{node_id}"
    return f"{indent}n{node_id} [label={quote(label)}]"


def _cluster_lines(graph: DependencyGraph, cluster: Cluster) -> Iterator[str]:
    name: Optional[str] = None
    if cluster.name_id is not None:
        name = graph.label(cluster.name_id)

    yield f"{INDENT}subgraph {graph_id(name)} {{" if name else f"{INDENT}subgraph {{"
    for node_id in cluster.members:
        yield _node_line(graph, node_id, INDENT * 2)
    yield f"{INDENT}}}"


def iter_dot_lines(graph: DependencyGraph) -> Iterator[str]:
    """Yield the DOT description of ``graph`` line by line."""
    yield f"digraph {graph_id(graph.name)} {{" if graph.name else "digraph {"

    for cluster in graph.clusters:
        yield from _cluster_lines(graph, cluster)

    for node_id in graph.nodes():
        yield _node_line(graph, node_id, INDENT)

    for source, target, symbols in graph.edges():
        if not symbols:
            yield f"{INDENT}n{source} -> n{target}"
            continue
        for symbol_id in symbols:
            label = graph.label(symbol_id)
            if label is None:
                continue
            yield f"{INDENT}n{source} -> n{target} [label={quote(label)}]"

    yield "}"


def render_dot(graph: DependencyGraph) -> str:
    """Render ``graph`` as DOT text (with trailing newline)."""
    return "\n".join(iter_dot_lines(graph)) + "\n"


def export_dot(graph: DependencyGraph, output_path: Union[str, Path]) -> None:
    """Export graph to a DOT file.

    Args:
        graph: Dependency graph to export.
        output_path: Output file path.

    Raises:
        OutputWriteError: If the file cannot be created or written.
    """
    output_path = Path(output_path)
    logger.info("Exporting graph to DOT: %s", output_path)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            for line in iter_dot_lines(graph):
                f.write(line)
                f.write("\n")
    except OSError as err:
        raise OutputWriteError(f"Unable to write {output_path}: {err}") from err

    logger.info("DOT export completed: %d nodes, %d edges",
                graph.node_count(), graph.edge_count())
