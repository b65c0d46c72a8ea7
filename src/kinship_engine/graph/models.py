"""Kinship types shared by the scorer, canonicalizer and render builder.

Provides:
- Person nodes and kinship edges as fetched from the registry graph
- Query identities and candidate scores for ranking
- Raw traversal segments and the canonical graph built from them
- Display nodes/edges consumed by an external visualizer
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Hashable

from pydantic import BaseModel, Field

from ..errors import InvalidQuery

# Normalized (stripped, lowercased) registry gender codes.
MALE_CODES = ("ذكر", "male", "m", "1")
FEMALE_CODES = ("أنثى", "female", "f", "2")


class Gender(str, Enum):
    """Gender of a registry person."""
    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> Gender:
        """Map a registry gender code onto the enum.

        The registry stores Arabic labels ("ذكر"/"أنثى"); English words,
        single letters and numeric sex codes are accepted too.
        """
        if isinstance(value, Gender):
            return value
        if value is None:
            return cls.UNKNOWN
        code = str(value).strip().lower()
        if code in MALE_CODES:
            return cls.MALE
        if code in FEMALE_CODES:
            return cls.FEMALE
        return cls.UNKNOWN


class KinshipType(str, Enum):
    """Kinship relationship types stored in the registry graph."""
    CHILD_OF = "CHILD_OF"  # child -> parent
    MARRIED_TO = "MARRIED_TO"
    SIBLING_WITH = "SIBLING_WITH"

    @property
    def is_symmetric(self) -> bool:
        return self is not KinshipType.CHILD_OF

    @property
    def display_label(self) -> str:
        """Relation name without its connector suffix (CHILD_OF -> CHILD)."""
        head, _, _ = self.value.partition("_")
        return head


@dataclass(frozen=True)
class Person:
    """A person node from one graph snapshot."""
    id: str | None
    name: str | None
    gender: Gender = Gender.UNKNOWN
    properties: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_complete(self) -> bool:
        """True when the node has both an id and a name."""
        return bool(self.id) and bool(self.name)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "gender": self.gender.value}


@dataclass(frozen=True)
class KinshipEdge:
    """A kinship edge between two person ids."""
    source_id: str
    target_id: str
    edge_type: KinshipType

    @property
    def key(self) -> tuple[Hashable, ...]:
        """Logical identity: ordered for CHILD_OF, unordered otherwise."""
        if self.edge_type.is_symmetric:
            return (self.edge_type, frozenset((self.source_id, self.target_id)))
        return (self.edge_type, self.source_id, self.target_id)

    def touches(self, person_id: str) -> bool:
        return person_id in (self.source_id, self.target_id)

    def reversed(self) -> KinshipEdge:
        return KinshipEdge(self.target_id, self.source_id, self.edge_type)

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.source_id,
            "to": self.target_id,
            "type": self.edge_type.value,
        }


class QueryIdentity(BaseModel):
    """Partial identity submitted for matching.

    Only ``first_name``, ``father_name`` and ``mother_name`` take part in
    scoring; the remaining fields travel with the request.
    """

    first_name: str = Field(default="")
    father_name: str | None = Field(default=None)
    mother_name: str | None = Field(default=None)
    last_name: str | None = Field(default=None)
    dob: tuple[int, int, int] | None = Field(default=None, description="(day, month, year)")
    sex: int | None = Field(default=None, description="Registry sex code: 1 male, 2 female")
    place_of_birth: str | None = Field(default=None)

    def require_valid(self) -> QueryIdentity:
        """Raise InvalidQuery unless the identity can be searched."""
        if not self.first_name or not self.first_name.strip():
            raise InvalidQuery("first_name is required", first_name=self.first_name)
        return self

    def as_person(self, person_id: str | None = None) -> Person:
        """The query subject as a (possibly id-less) central person."""
        gender = Gender.parse(self.sex) if self.sex is not None else Gender.UNKNOWN
        return Person(id=person_id, name=self.first_name, gender=gender)


@dataclass(frozen=True)
class CandidateRow:
    """One candidate returned by the store with its gendered parents."""
    person: Person
    father: Person | None = None
    mother: Person | None = None


@dataclass(frozen=True)
class CandidateScore:
    """Score attached to a candidate during ranking."""
    candidate_id: str | None
    score: int
    father_matched: bool = False
    mother_matched: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "candidate_id": self.candidate_id,
            "score": self.score,
            "father_matched": self.father_matched,
            "mother_matched": self.mother_matched,
        }


@dataclass(frozen=True)
class NeighborhoodPolicy:
    """Radius of a neighborhood fetch around a candidate.

    Parents are always capped at one male and one female.
    ``max_children=None`` fetches every child.
    """
    max_spouses: int = 1
    max_children: int | None = None
    max_siblings: int = 0


@dataclass(frozen=True)
class RawSegment:
    """One hop of one traversal path, as returned by the store.

    ``start``/``end`` follow traversal order; ``relationship`` keeps the
    direction it is stored with. Several segments may describe the same
    logical edge.
    """
    start: Person
    relationship: KinshipEdge
    end: Person


@dataclass
class FamilyUnit:
    """Immediate family of the central person."""
    focal_person: Person
    father: Person | None = None
    mother: Person | None = None
    spouses: list[Person] = field(default_factory=list)
    children: list[Person] = field(default_factory=list)
    siblings: list[Person] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """Check if family unit has both parents."""
        return self.father is not None and self.mother is not None

    @property
    def family_size(self) -> int:
        """Total number of people in this family unit."""
        count = 1
        if self.father:
            count += 1
        if self.mother:
            count += 1
        return count + len(self.spouses) + len(self.children) + len(self.siblings)


@dataclass
class CanonicalGraph:
    """Deduplicated, direction-normalized kinship neighborhood.

    Invariants: every edge endpoint is a key of ``nodes``; no two CHILD_OF
    edges join the same pair in opposite directions.
    """
    central_id: str | None = None
    nodes: dict[str, Person] = field(default_factory=dict)
    edges: dict[tuple[Hashable, ...], KinshipEdge] = field(default_factory=dict)

    @property
    def central(self) -> Person | None:
        return self.nodes.get(self.central_id) if self.central_id else None

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def _related(self, person_id: str, edge_type: KinshipType, outgoing: bool | None) -> list[Person]:
        related = []
        for edge in self.edges.values():
            if edge.edge_type is not edge_type:
                continue
            if outgoing is None:
                if not edge.touches(person_id):
                    continue
                other = edge.target_id if edge.source_id == person_id else edge.source_id
            elif outgoing and edge.source_id == person_id:
                other = edge.target_id
            elif not outgoing and edge.target_id == person_id:
                other = edge.source_id
            else:
                continue
            related.append(self.nodes[other])
        return related

    def parents_of(self, person_id: str) -> list[Person]:
        return self._related(person_id, KinshipType.CHILD_OF, outgoing=True)

    def children_of(self, person_id: str) -> list[Person]:
        return self._related(person_id, KinshipType.CHILD_OF, outgoing=False)

    def spouses_of(self, person_id: str) -> list[Person]:
        return self._related(person_id, KinshipType.MARRIED_TO, outgoing=None)

    def siblings_of(self, person_id: str) -> list[Person]:
        return self._related(person_id, KinshipType.SIBLING_WITH, outgoing=None)

    def family_unit(self) -> FamilyUnit | None:
        """Reconstruct the central person's immediate family."""
        central = self.central
        if central is None:
            return None

        father = mother = None
        for parent in self.parents_of(central.id):
            if parent.gender is Gender.MALE and father is None:
                father = parent
            elif parent.gender is Gender.FEMALE and mother is None:
                mother = parent

        return FamilyUnit(
            focal_person=central,
            father=father,
            mother=mother,
            spouses=self.spouses_of(central.id),
            children=self.children_of(central.id),
            siblings=self.siblings_of(central.id),
        )

    def to_segments(self) -> list[RawSegment]:
        """Equivalent segment representation, one segment per edge.

        The central node and every node without edges are carried by
        self-loop segments, which canonicalization keeps as nodes and drops
        as edges. The central loop comes first so a name-only central match
        finds the same node again. Loop edge types are arbitrary.
        """
        segments = []
        central = self.central
        if central is not None:
            segments.append(_loop(central))
        segments.extend(
            RawSegment(
                start=self.nodes[edge.source_id],
                relationship=edge,
                end=self.nodes[edge.target_id],
            )
            for edge in self.edges.values()
        )
        linked = {pid for edge in self.edges.values() for pid in (edge.source_id, edge.target_id)}
        for person_id, person in self.nodes.items():
            if person_id not in linked and person_id != self.central_id:
                segments.append(_loop(person))
        return segments

    def to_dict(self) -> dict[str, Any]:
        return {
            "central_id": self.central_id,
            "nodes": [p.to_dict() for p in self.nodes.values()],
            "edges": [e.to_dict() for e in self.edges.values()],
        }


@dataclass(frozen=True)
class DisplayNode:
    """A node with display attributes."""
    id: str
    label: str
    color_class: str
    shape: str = "box"
    fixed: bool = False
    font_size: int = 14

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "group": self.color_class,
            "shape": self.shape,
            "fixed": self.fixed,
            "font": {"size": self.font_size},
        }


@dataclass(frozen=True)
class DisplayEdge:
    """An edge with display attributes."""
    source: str
    target: str
    label: str
    color_class: str
    arrows: str = ""
    dashes: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.source,
            "to": self.target,
            "label": self.label,
            "group": self.color_class,
            "arrows": self.arrows,
            "dashes": self.dashes,
        }


@dataclass
class RenderModel:
    """Display-attributed graph, rebuilt for every render request."""
    nodes: list[DisplayNode] = field(default_factory=list)
    edges: list[DisplayEdge] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


def _loop(person: Person) -> RawSegment:
    loop = KinshipEdge(person.id, person.id, KinshipType.SIBLING_WITH)
    return RawSegment(start=person, relationship=loop, end=person)
