"""Tests for kinship data models."""
from __future__ import annotations

import pytest

from kinship_engine import InvalidQuery
from kinship_engine.graph import (
    CanonicalGraph,
    Gender,
    GraphCanonicalizer,
    KinshipEdge,
    KinshipType,
    Person,
    QueryIdentity,
)


def _graph() -> CanonicalGraph:
    ali = Person("p_ali", "Ali", Gender.MALE)
    omar = Person("p_omar", "Omar", Gender.MALE)
    fatima = Person("p_fatima", "Fatima", Gender.FEMALE)
    sara = Person("p_sara", "Sara", Gender.FEMALE)
    hassan = Person("p_hassan", "Hassan", Gender.MALE)
    edges = [
        KinshipEdge("p_ali", "p_omar", KinshipType.CHILD_OF),
        KinshipEdge("p_ali", "p_fatima", KinshipType.CHILD_OF),
        KinshipEdge("p_ali", "p_sara", KinshipType.MARRIED_TO),
        KinshipEdge("p_hassan", "p_ali", KinshipType.CHILD_OF),
    ]
    return CanonicalGraph(
        central_id="p_ali",
        nodes={p.id: p for p in (ali, omar, fatima, sara, hassan)},
        edges={e.key: e for e in edges},
    )


class TestGender:
    """Tests for registry gender codes."""

    @pytest.mark.parametrize("code", ["ذكر", "male", "Male", "M", "1", 1])
    def test_male_codes(self, code):
        assert Gender.parse(code) is Gender.MALE

    @pytest.mark.parametrize("code", ["أنثى", "female", "F", "2", 2])
    def test_female_codes(self, code):
        assert Gender.parse(code) is Gender.FEMALE

    @pytest.mark.parametrize("code", [None, "", "other", 3])
    def test_unknown_codes(self, code):
        assert Gender.parse(code) is Gender.UNKNOWN


class TestKinshipType:
    """Tests for relationship type helpers."""

    def test_display_labels(self):
        assert KinshipType.CHILD_OF.display_label == "CHILD"
        assert KinshipType.MARRIED_TO.display_label == "MARRIED"
        assert KinshipType.SIBLING_WITH.display_label == "SIBLING"

    def test_only_child_of_is_directed(self):
        assert not KinshipType.CHILD_OF.is_symmetric
        assert KinshipType.MARRIED_TO.is_symmetric
        assert KinshipType.SIBLING_WITH.is_symmetric


class TestKinshipEdge:
    """Tests for edge identity."""

    def test_symmetric_key_ignores_direction(self):
        a = KinshipEdge("p1", "p2", KinshipType.MARRIED_TO)
        assert a.key == a.reversed().key

    def test_child_of_key_keeps_direction(self):
        a = KinshipEdge("p1", "p2", KinshipType.CHILD_OF)
        assert a.key != a.reversed().key

    def test_to_dict(self):
        edge = KinshipEdge("p1", "p2", KinshipType.CHILD_OF)
        assert edge.to_dict() == {"from": "p1", "to": "p2", "type": "CHILD_OF"}


class TestPerson:
    """Tests for Person."""

    def test_equality_ignores_properties(self):
        a = Person("p1", "Ali", Gender.MALE, properties={"dob": "1990"})
        b = Person("p1", "Ali", Gender.MALE)
        assert a == b
        assert hash(a) == hash(b)

    def test_is_complete(self):
        assert Person("p1", "Ali").is_complete
        assert not Person("p1", None).is_complete
        assert not Person(None, "Ali").is_complete


class TestQueryIdentity:
    """Tests for QueryIdentity validation."""

    def test_valid_query(self):
        query = QueryIdentity(first_name="Ali", father_name="Omar")
        assert query.require_valid() is query

    @pytest.mark.parametrize("first_name", ["", "   "])
    def test_blank_first_name_rejected(self, first_name):
        with pytest.raises(InvalidQuery) as exc_info:
            QueryIdentity(first_name=first_name).require_valid()
        assert exc_info.value.context["first_name"] == first_name

    def test_as_person(self):
        person = QueryIdentity(first_name="Ali", sex=1).as_person("p_ali")
        assert person == Person("p_ali", "Ali", Gender.MALE)


class TestCanonicalGraph:
    """Tests for CanonicalGraph queries."""

    def test_family_unit(self):
        unit = _graph().family_unit()

        assert unit.focal_person.name == "Ali"
        assert unit.father.name == "Omar"
        assert unit.mother.name == "Fatima"
        assert [p.name for p in unit.spouses] == ["Sara"]
        assert [p.name for p in unit.children] == ["Hassan"]
        assert unit.siblings == []
        assert unit.is_complete
        assert unit.family_size == 5

    def test_empty_graph_has_no_family_unit(self):
        graph = CanonicalGraph()
        assert graph.is_empty
        assert graph.central is None
        assert graph.family_unit() is None

    def test_to_segments_round_trips_isolated_nodes(self):
        graph = _graph()
        graph.nodes["p_lone"] = Person("p_lone", "Lone")

        segments = graph.to_segments()
        rebuilt = GraphCanonicalizer().canonicalize(graph.central, segments)

        assert "p_lone" in rebuilt.nodes
        assert rebuilt == graph

    def test_to_dict(self):
        data = _graph().to_dict()
        assert data["central_id"] == "p_ali"
        assert len(data["nodes"]) == 5
        assert {"from": "p_hassan", "to": "p_ali", "type": "CHILD_OF"} in data["edges"]

    def test_to_segments_leads_with_central(self):
        graph = _graph()

        first, *rest = graph.to_segments()

        assert first.start.id == first.end.id == "p_ali"
        assert len(rest) == graph.edge_count
