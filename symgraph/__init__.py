"""symgraph - symbol dependency graphs for compiled binaries."""

__version__ = "0.1.0"
