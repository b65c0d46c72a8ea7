"""Display attributes for a canonical kinship graph."""
from __future__ import annotations

from .models import (
    CanonicalGraph,
    DisplayEdge,
    DisplayNode,
    KinshipEdge,
    KinshipType,
    Person,
    RenderModel,
)

CENTRAL_COLOR = "central"
DEFAULT_COLOR = "default"
SPOUSE_COLOR = "spouse"
SIBLING_COLOR = "sibling"

NODE_SHAPE = "box"
DEFAULT_FONT_SIZE = 14
CENTRAL_FONT_SIZE = 18


class RenderModelBuilder:
    """Maps a CanonicalGraph onto display nodes and edges.

    Attribute assignment only: every node and edge of the graph appears
    exactly once in the model, in graph order.
    """

    def build(self, graph: CanonicalGraph) -> RenderModel:
        return RenderModel(
            nodes=[self._node(person, person.id == graph.central_id) for person in graph.nodes.values()],
            edges=[self._edge(edge) for edge in graph.edges.values()],
        )

    def _node(self, person: Person, is_central: bool) -> DisplayNode:
        if is_central:
            return DisplayNode(
                id=person.id,
                label=person.name,
                color_class=CENTRAL_COLOR,
                shape=NODE_SHAPE,
                fixed=True,
                font_size=CENTRAL_FONT_SIZE,
            )
        return DisplayNode(
            id=person.id,
            label=person.name,
            color_class=DEFAULT_COLOR,
            shape=NODE_SHAPE,
            font_size=DEFAULT_FONT_SIZE,
        )

    def _edge(self, edge: KinshipEdge) -> DisplayEdge:
        label = edge.edge_type.display_label
        if edge.edge_type is KinshipType.MARRIED_TO:
            return DisplayEdge(edge.source_id, edge.target_id, label, SPOUSE_COLOR, arrows="", dashes=True)
        if edge.edge_type is KinshipType.SIBLING_WITH:
            return DisplayEdge(edge.source_id, edge.target_id, label, SIBLING_COLOR, arrows="")
        # CHILD_OF runs child -> parent; the arrow follows it.
        return DisplayEdge(edge.source_id, edge.target_id, label, DEFAULT_COLOR, arrows="to")
