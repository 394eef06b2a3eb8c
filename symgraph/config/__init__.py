"""Configuration schema and loading for symgraph."""

from .loader import load_graph_build_config
from .schema import DecoderConfig, GraphBuildConfig, SanitizerConfig

__all__ = [
    "DecoderConfig",
    "GraphBuildConfig",
    "SanitizerConfig",
    "load_graph_build_config",
]
