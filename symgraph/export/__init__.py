"""Graph exporters."""

from symgraph.export.dot import export_dot, render_dot
from symgraph.export.json import export_json, render_json

EXPORTERS = {
    "dot": (render_dot, export_dot),
    "json": (render_json, export_json),
}

__all__ = ["EXPORTERS", "export_dot", "export_json", "render_dot", "render_json"]
