"""Canonicalization of raw neighborhood segments.

Turns the per-path segments returned by a neighborhood fetch into a single
graph where:
- each person id appears once
- each logical edge appears once
- CHILD_OF edges point child -> parent, so parents of the central person
  are edge targets and children of the central person are edge sources
"""
from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from ..errors import MissingCentralIdentity
from .models import CanonicalGraph, KinshipEdge, KinshipType, Person, RawSegment

if TYPE_CHECKING:
    from collections.abc import Hashable, Sequence


class GraphCanonicalizer:
    """Builds a CanonicalGraph from raw segments.

    Pure and deterministic: the same central person and segment sequence
    always produce the same graph, with nodes and edges in first-seen order.

    Example:
        >>> graph = GraphCanonicalizer().canonicalize(central, segments)
        >>> graph.central.name
        'Ali'
    """

    def canonicalize(self, central: Person, segments: Sequence[RawSegment]) -> CanonicalGraph:
        """Deduplicate nodes and edges and normalize CHILD_OF direction.

        Args:
            central: Query subject. Matched by id when the id is among the
                fetched nodes, otherwise by name (first match wins).
            segments: Raw segments in store order

        Returns:
            CanonicalGraph; empty when ``segments`` is empty

        Raises:
            MissingCentralIdentity: segments were supplied but none of
                their nodes is the query subject
        """
        if not segments:
            return CanonicalGraph()

        nodes = self._collect_nodes(segments)
        central_id = self._identify_central(central, nodes)
        if central_id is None:
            raise MissingCentralIdentity(
                f"central person {central.name!r} not found among fetched nodes",
                central_id=central.id,
                central_name=central.name,
                segment_count=len(segments),
            )

        oriented = [
            edge
            for edge in (self._orient(segment) for segment in segments)
            if edge is not None and edge.source_id in nodes and edge.target_id in nodes
        ]
        edges = self._dedupe_edges(oriented)

        ordered = {central_id: nodes[central_id]}
        ordered.update((pid, person) for pid, person in nodes.items() if pid != central_id)
        return CanonicalGraph(central_id=central_id, nodes=ordered, edges=edges)

    def _collect_nodes(self, segments: Sequence[RawSegment]) -> dict[str, Person]:
        nodes: dict[str, Person] = {}
        for segment in segments:
            for person in (segment.start, segment.end):
                if person.is_complete and person.id not in nodes:
                    nodes[person.id] = person
        return nodes

    def _identify_central(self, central: Person, nodes: dict[str, Person]) -> str | None:
        if central.id and central.id in nodes:
            return central.id
        for person_id, person in nodes.items():
            if person.name == central.name:
                return person_id
        return None

    def _orient(self, segment: RawSegment) -> KinshipEdge | None:
        """Resolve a segment to an edge between its two endpoints.

        The stored relationship direction is authoritative when it names
        both segment endpoints; otherwise traversal order is used.
        Symmetric edges get sorted endpoints. Self-loops are dropped.
        """
        rel = segment.relationship
        start_id, end_id = segment.start.id, segment.end.id
        if not start_id or not end_id or start_id == end_id:
            return None

        if {rel.source_id, rel.target_id} == {start_id, end_id}:
            source_id, target_id = rel.source_id, rel.target_id
        else:
            source_id, target_id = start_id, end_id

        if rel.edge_type.is_symmetric:
            source_id, target_id = sorted((source_id, target_id))
        return KinshipEdge(source_id, target_id, rel.edge_type)

    def _dedupe_edges(self, edges: list[KinshipEdge]) -> dict[Hashable, KinshipEdge]:
        """Keep one edge per logical key.

        A pair described by CHILD_OF in both directions keeps the direction
        seen more often; ties go to the first seen.
        """
        votes = Counter(e.key for e in edges if e.edge_type is KinshipType.CHILD_OF)

        result: dict[Hashable, KinshipEdge] = {}
        for edge in edges:
            if edge.key in result:
                continue
            if edge.edge_type is KinshipType.CHILD_OF:
                opposite = edge.reversed()
                if opposite.key in result:
                    continue
                if votes[opposite.key] > votes[edge.key]:
                    continue
            result[edge.key] = edge
        return result
