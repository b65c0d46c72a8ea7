"""vis-network export of a render model.

The document holds the render model's nodes and edges plus the layout
options the visualizer is expected to use: a top-down hierarchical layout
with box nodes and curved vertical edges.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..graph.models import RenderModel

VIS_OPTIONS: dict[str, Any] = {
    "layout": {
        "hierarchical": {
            "enabled": True,
            "sortMethod": "directed",
            "shakeTowards": "roots",
            "direction": "UD",
        },
    },
    "physics": {
        "enabled": True,
        "solver": "hierarchicalRepulsion",
        "hierarchicalRepulsion": {
            "centralGravity": 0.0,
            "springLength": 100,
            "springConstant": 0.01,
            "nodeDistance": 150,
            "damping": 0.09,
        },
    },
    "groups": {
        "central": {"color": {"background": "#FFD700", "border": "#FFA500"}},
        "default": {"color": {"background": "#DAE4EF", "border": "#666666"}},
    },
    "nodes": {
        "shape": "box",
        "margin": {"top": 10, "right": 10, "bottom": 10, "left": 10},
        "font": {"face": "Tahoma", "color": "#333333", "size": 14},
    },
    "edges": {
        "smooth": {"enabled": True, "type": "cubicBezier", "forceDirection": "vertical", "roundness": 0.4},
        "font": {"align": "middle", "size": 12, "color": "#555555"},
        "color": {"color": "#848484", "highlight": "#2B7CE9", "hover": "#2B7CE9"},
    },
    "interaction": {"hover": True, "tooltipDelay": 200},
}

# Edge groups are not a vis-network concept; colors are resolved here.
EDGE_COLORS = {
    "default": "#848484",
    "spouse": "#D9534F",
    "sibling": "#5CB85C",
}


def to_vis_document(model: RenderModel) -> dict[str, Any]:
    """Build the vis-network ``{nodes, edges, options}`` document."""
    edges = []
    for edge in model.edges:
        data = edge.to_dict()
        data["color"] = {"color": EDGE_COLORS.get(edge.color_class, EDGE_COLORS["default"])}
        edges.append(data)

    return {
        "nodes": [node.to_dict() for node in model.nodes],
        "edges": edges,
        "options": VIS_OPTIONS,
    }


def export_vis_json(model: RenderModel, out_file: Path) -> Path:
    """Write the vis-network document to ``out_file``."""
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(
        json.dumps(to_vis_document(model), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    return out_file
