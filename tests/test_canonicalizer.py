"""Tests for raw segment canonicalization."""
from __future__ import annotations

import pytest

from kinship_engine import MissingCentralIdentity
from kinship_engine.errors import ErrorKind
from kinship_engine.graph import (
    Gender,
    GraphCanonicalizer,
    KinshipEdge,
    KinshipType,
    NeighborhoodPolicy,
    Person,
    RawSegment,
)

ALI = Person("p_ali", "Ali", Gender.MALE)
OMAR = Person("p_omar", "Omar", Gender.MALE)
SARA = Person("p_sara", "Sara", Gender.FEMALE)
HASSAN = Person("p_hassan", "Hassan", Gender.MALE)


def _seg(start: Person, end: Person, edge_type: KinshipType, source: str | None = None, target: str | None = None) -> RawSegment:
    rel = KinshipEdge(source or start.id, target or end.id, edge_type)
    return RawSegment(start=start, relationship=rel, end=end)


@pytest.fixture
def canonicalizer() -> GraphCanonicalizer:
    return GraphCanonicalizer()


class TestCanonicalize:
    """Tests for node and edge deduplication."""

    def test_spouse_pair_in_both_orders_is_one_edge(self, canonicalizer):
        segments = [
            _seg(ALI, SARA, KinshipType.MARRIED_TO),
            _seg(SARA, ALI, KinshipType.MARRIED_TO),
        ]

        graph = canonicalizer.canonicalize(ALI, segments)

        assert graph.edge_count == 1
        (edge,) = graph.edges.values()
        assert (edge.source_id, edge.target_id) == ("p_ali", "p_sara")

    def test_no_segments_gives_empty_graph(self, canonicalizer):
        graph = canonicalizer.canonicalize(ALI, [])

        assert graph.is_empty
        assert graph.central_id is None
        assert graph.edge_count == 0

    def test_missing_central_raises(self, canonicalizer):
        stranger = Person("p_x", "Yusuf")
        with pytest.raises(MissingCentralIdentity) as exc_info:
            canonicalizer.canonicalize(stranger, [_seg(ALI, OMAR, KinshipType.CHILD_OF)])

        error = exc_info.value
        assert error.kind is ErrorKind.MISSING_CENTRAL_IDENTITY
        assert error.context["central_name"] == "Yusuf"
        assert not error.retryable

    def test_nodes_unique_and_central_first(self, canonicalizer):
        segments = [
            _seg(OMAR, ALI, KinshipType.CHILD_OF, source="p_ali", target="p_omar"),
            _seg(ALI, OMAR, KinshipType.CHILD_OF),
            _seg(ALI, SARA, KinshipType.MARRIED_TO),
        ]

        graph = canonicalizer.canonicalize(ALI, segments)

        assert list(graph.nodes) == ["p_ali", "p_omar", "p_sara"]
        assert graph.edge_count == 2

    def test_nameless_nodes_dropped(self, canonicalizer):
        ghost = Person("p_ghost", None)
        segments = [_seg(ALI, ghost, KinshipType.SIBLING_WITH), _seg(ALI, OMAR, KinshipType.CHILD_OF)]

        graph = canonicalizer.canonicalize(ALI, segments)

        assert "p_ghost" not in graph.nodes
        assert all(not e.touches("p_ghost") for e in graph.edges.values())

    def test_self_loops_dropped(self, canonicalizer):
        graph = canonicalizer.canonicalize(ALI, [_seg(ALI, ALI, KinshipType.SIBLING_WITH)])

        assert list(graph.nodes) == ["p_ali"]
        assert graph.edge_count == 0


class TestChildOfDirection:
    """Tests for child -> parent normalization."""

    def test_stored_direction_wins_over_traversal_order(self, canonicalizer):
        # traversed parent-first, stored child -> parent
        segments = [
            _seg(OMAR, ALI, KinshipType.CHILD_OF, source="p_ali", target="p_omar"),
            _seg(ALI, HASSAN, KinshipType.CHILD_OF, source="p_hassan", target="p_ali"),
        ]

        graph = canonicalizer.canonicalize(ALI, segments)

        assert [p.id for p in graph.parents_of("p_ali")] == ["p_omar"]
        assert [p.id for p in graph.children_of("p_ali")] == ["p_hassan"]

    def test_traversal_order_used_when_relationship_is_foreign(self, canonicalizer):
        segments = [_seg(ALI, OMAR, KinshipType.CHILD_OF, source="n1", target="n2")]

        graph = canonicalizer.canonicalize(ALI, segments)

        (edge,) = graph.edges.values()
        assert (edge.source_id, edge.target_id) == ("p_ali", "p_omar")

    def test_contradiction_keeps_majority(self, canonicalizer):
        segments = [
            _seg(OMAR, ALI, KinshipType.CHILD_OF),
            _seg(ALI, OMAR, KinshipType.CHILD_OF),
            _seg(OMAR, ALI, KinshipType.CHILD_OF, source="p_ali", target="p_omar"),
        ]

        graph = canonicalizer.canonicalize(ALI, segments)

        assert graph.edge_count == 1
        (edge,) = graph.edges.values()
        assert (edge.source_id, edge.target_id) == ("p_ali", "p_omar")

    def test_contradiction_tie_keeps_first_seen(self, canonicalizer):
        segments = [
            _seg(OMAR, ALI, KinshipType.CHILD_OF),
            _seg(ALI, OMAR, KinshipType.CHILD_OF),
        ]

        graph = canonicalizer.canonicalize(ALI, segments)

        (edge,) = graph.edges.values()
        assert (edge.source_id, edge.target_id) == ("p_omar", "p_ali")


class TestCentralIdentification:
    """Tests for central person matching."""

    def test_id_preferred_over_name(self, canonicalizer):
        other_ali = Person("p_ali2", "Ali", Gender.MALE)
        segments = [_seg(other_ali, OMAR, KinshipType.CHILD_OF), _seg(ALI, SARA, KinshipType.MARRIED_TO)]

        graph = canonicalizer.canonicalize(ALI, segments)

        assert graph.central_id == "p_ali"

    def test_name_fallback_takes_first_match(self, canonicalizer):
        other_ali = Person("p_ali2", "Ali", Gender.MALE)
        segments = [_seg(other_ali, OMAR, KinshipType.CHILD_OF), _seg(ALI, SARA, KinshipType.MARRIED_TO)]

        graph = canonicalizer.canonicalize(Person(None, "Ali"), segments)

        assert graph.central_id == "p_ali2"

    def test_name_only_central_is_idempotent(self, canonicalizer):
        older = Person("p2", "Ali", Gender.MALE)
        younger = Person("p1", "Ali", Gender.MALE)
        central = Person(None, "Ali")

        graph = canonicalizer.canonicalize(central, [_seg(older, younger, KinshipType.SIBLING_WITH)])
        again = canonicalizer.canonicalize(central, graph.to_segments())

        assert graph.central_id == "p2"
        assert again == graph


class TestFetchedNeighborhood:
    """Canonicalization of in-memory store output."""

    @pytest.mark.asyncio
    async def test_duplicated_paths_collapse(self, canonicalizer, fetcher):
        segments = await fetcher.fetch_neighborhood("p_ali")

        graph = canonicalizer.canonicalize(ALI, segments)

        assert len(segments) == 2 * graph.edge_count
        assert graph.node_count == 6
        assert graph.edge_count == 8
        assert len({e.key for e in graph.edges.values()}) == graph.edge_count

    @pytest.mark.asyncio
    async def test_central_child_of_edges_point_to_parent(self, canonicalizer, fetcher):
        segments = await fetcher.fetch_neighborhood("p_ali", NeighborhoodPolicy(max_siblings=3))
        graph = canonicalizer.canonicalize(ALI, segments)

        for edge in graph.edges.values():
            if edge.edge_type is KinshipType.CHILD_OF and edge.touches("p_ali"):
                child = graph.nodes[edge.source_id]
                assert child.id == "p_ali" or child.name in ("Hassan", "Zainab")
        assert {p.name for p in graph.parents_of("p_ali")} == {"Omar", "Fatima"}
        assert [p.name for p in graph.siblings_of("p_ali")] == ["Layla"]

    @pytest.mark.asyncio
    async def test_idempotent(self, canonicalizer, fetcher):
        graph = canonicalizer.canonicalize(ALI, await fetcher.fetch_neighborhood("p_ali"))

        again = canonicalizer.canonicalize(graph.central, graph.to_segments())

        assert again == graph
        assert list(again.nodes) == list(graph.nodes)
