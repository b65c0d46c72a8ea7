"""Export modules for resolved family graphs.

Supported formats:
- JSON: vis-network data and options for the interactive visualizer
- Mermaid: Diagram markup for GitHub/GitLab
"""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .mermaid import export_mermaid, to_mermaid
from .vis import VIS_OPTIONS, export_vis_json, to_vis_document

if TYPE_CHECKING:
    from ..service import ResolvedNeighborhood

__all__ = [
    "VIS_OPTIONS",
    "export_by_format",
    "export_mermaid",
    "export_vis_json",
    "to_mermaid",
    "to_vis_document",
]


def export_by_format(resolved: ResolvedNeighborhood, out_file: str | Path) -> Path:
    """Export to format based on file extension.

    Raises:
        ValueError: If format not supported
    """
    out_path = Path(out_file)
    suffix = out_path.suffix.lower()

    if suffix == ".json":
        return export_vis_json(resolved.model, out_path)
    if suffix in (".mmd", ".mermaid"):
        return export_mermaid(resolved.graph, out_path)
    raise ValueError(f"Unsupported format '{suffix}'. Supported: .json, .mmd, .mermaid")
