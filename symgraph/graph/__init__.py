"""Graph package: name sanitizing, interning, resolution and the dependency graph."""

from symgraph.graph.manager import Cluster, DependencyGraph
from symgraph.graph.names import NameSanitizer, sanitize_name
from symgraph.graph.resolver import SymbolResolver
from symgraph.graph.strings import StringTable

__all__ = [
    "Cluster",
    "DependencyGraph",
    "NameSanitizer",
    "StringTable",
    "SymbolResolver",
    "sanitize_name",
]
