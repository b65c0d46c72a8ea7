from __future__ import annotations

from pathlib import Path

from ..graph.models import CanonicalGraph, KinshipType


def to_mermaid(graph: CanonicalGraph) -> str:
    """Render a canonical graph as a mermaid flowchart (BT: parents on top)."""
    lines = ["flowchart BT"]
    for person_id, person in graph.nodes.items():
        nid = _node_id(person_id)
        label = _label(person.name)
        if person_id == graph.central_id:
            lines.append(f"  {nid}[[\"{label}\"]]")
        else:
            lines.append(f"  {nid}[\"{label}\"]")

    for edge in graph.edges.values():
        na = _node_id(edge.source_id)
        nb = _node_id(edge.target_id)
        if edge.edge_type is KinshipType.CHILD_OF:
            # child --> parent
            lines.append(f"  {na} --> {nb}")
        elif edge.edge_type is KinshipType.MARRIED_TO:
            lines.append(f"  {na} --- {nb}")
        else:
            lines.append(f"  {na} -.- {nb}")
    return "\n".join(lines)


def export_mermaid(graph: CanonicalGraph, out_file: Path) -> Path:
    """Write the mermaid flowchart for ``graph`` to ``out_file``."""
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(to_mermaid(graph), encoding="utf-8")
    return out_file


def _node_id(person_id: str) -> str:
    # Generate a mermaid-safe identifier
    return "N_" + "".join(ch if ch.isalnum() else "_" for ch in person_id)[:60]


def _label(name: str | None) -> str:
    # Quotes end a mermaid label
    return (name or "").replace('"', "#quot;")
