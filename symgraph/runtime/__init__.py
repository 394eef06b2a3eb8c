"""Build orchestration."""

from symgraph.runtime.builder import BuildResult, GraphBuilder, build_graph

__all__ = ["BuildResult", "GraphBuilder", "build_graph"]
