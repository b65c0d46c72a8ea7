"""Graph store access for candidate search and neighborhood fetches.

Defines the fetcher contract the engine consumes and two adapters:
- Neo4j for the production registry (async driver, Cypher)
- In-memory fixture store for development/testing
"""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any

from neo4j import AsyncGraphDatabase
from neo4j.exceptions import DriverError, Neo4jError, ServiceUnavailable, SessionExpired
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from ..errors import FetchFailure
from ..logging import get_logger
from ..net import CircuitBreaker
from .models import (
    CandidateRow,
    FEMALE_CODES,
    MALE_CODES,
    Gender,
    KinshipEdge,
    KinshipType,
    NeighborhoodPolicy,
    Person,
    QueryIdentity,
    RawSegment,
)

if TYPE_CHECKING:
    from ..config import EngineConfig

logger = get_logger(__name__)


class GraphFetcher(ABC):
    """Contract between the engine and a graph store.

    The contract is data-shaped: any store that can return candidate rows
    and neighborhood segments satisfies it.
    """

    @abstractmethod
    async def score_candidates(self, query: QueryIdentity) -> list[CandidateRow]:
        """Persons named ``query.first_name`` with their gendered parents.

        Each row carries at most one male and one female CHILD_OF parent.
        Rows come back in store order.
        """

    @abstractmethod
    async def fetch_neighborhood(
        self,
        candidate_id: str,
        policy: NeighborhoodPolicy | None = None,
    ) -> list[RawSegment]:
        """Raw segments covering a candidate's immediate family.

        Covers the candidate, at most one male and one female parent,
        spouses, children and (optionally) siblings, plus every kinship
        edge among that set of persons.
        """

    async def close(self) -> None:
        """Release store resources."""

    async def __aenter__(self) -> GraphFetcher:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> bool:
        await self.close()
        return False


class InMemoryGraphFetcher(GraphFetcher):
    """Fixture-backed store.

    Every edge among the neighborhood is emitted twice, once along a path
    from each endpoint, the way a multi-path graph query repeats it.

    Fixture document shape::

        {
          "persons": [{"id": "p1", "name": "Ali", "gender": "male"}],
          "relationships": [{"from": "p1", "to": "p2", "type": "CHILD_OF"}]
        }
    """

    def __init__(
        self,
        persons: list[Person] | None = None,
        relationships: list[KinshipEdge] | None = None,
    ) -> None:
        self._persons: dict[str, Person] = {}
        self._relationships: list[KinshipEdge] = []
        for person in persons or []:
            self.add_person(person)
        for edge in relationships or []:
            self.add_relationship(edge)

    def add_person(self, person: Person) -> Person:
        if not person.id:
            raise ValueError("fixture persons need an id")
        self._persons[person.id] = person
        return person

    def add_relationship(self, edge: KinshipEdge) -> KinshipEdge:
        self._relationships.append(edge)
        return edge

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InMemoryGraphFetcher:
        """Build a store from a fixture document."""
        try:
            persons = [
                Person(
                    id=str(p["id"]),
                    name=p.get("name"),
                    gender=Gender.parse(p.get("gender")),
                    properties=dict(p),
                )
                for p in data.get("persons", [])
            ]
            relationships = [
                KinshipEdge(str(r["from"]), str(r["to"]), KinshipType(r["type"]))
                for r in data.get("relationships", [])
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise FetchFailure(f"malformed fixture: {e}", cause=e) from e
        return cls(persons, relationships)

    @classmethod
    def from_json(cls, path: str | Path) -> InMemoryGraphFetcher:
        """Load a fixture document from disk."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise FetchFailure(f"cannot read fixture {path}: {e}", cause=e, path=str(path)) from e
        return cls.from_dict(data)

    def _parents(self, person_id: str) -> list[Person]:
        return [
            self._persons[e.target_id]
            for e in self._relationships
            if e.edge_type is KinshipType.CHILD_OF and e.source_id == person_id and e.target_id in self._persons
        ]

    def _first_parent(self, person_id: str, gender: Gender) -> Person | None:
        return next((p for p in self._parents(person_id) if p.gender is gender), None)

    def _undirected(self, person_id: str, edge_type: KinshipType) -> list[Person]:
        related: list[Person] = []
        for e in self._relationships:
            if e.edge_type is not edge_type or not e.touches(person_id):
                continue
            other = e.target_id if e.source_id == person_id else e.source_id
            person = self._persons.get(other)
            if person is not None and person not in related and other != person_id:
                related.append(person)
        return related

    async def score_candidates(self, query: QueryIdentity) -> list[CandidateRow]:
        return [
            CandidateRow(
                person=person,
                father=self._first_parent(person.id, Gender.MALE),
                mother=self._first_parent(person.id, Gender.FEMALE),
            )
            for person in self._persons.values()
            if person.name == query.first_name
        ]

    async def fetch_neighborhood(
        self,
        candidate_id: str,
        policy: NeighborhoodPolicy | None = None,
    ) -> list[RawSegment]:
        policy = policy or NeighborhoodPolicy()
        candidate = self._persons.get(candidate_id)
        if candidate is None:
            return []

        children = [
            self._persons[e.source_id]
            for e in self._relationships
            if e.edge_type is KinshipType.CHILD_OF and e.target_id == candidate_id and e.source_id in self._persons
        ]
        if policy.max_children is not None:
            children = children[: policy.max_children]

        members: dict[str, Person] = {candidate_id: candidate}
        for relative in [
            self._first_parent(candidate_id, Gender.MALE),
            self._first_parent(candidate_id, Gender.FEMALE),
            *self._undirected(candidate_id, KinshipType.MARRIED_TO)[: policy.max_spouses],
            *children,
            *self._undirected(candidate_id, KinshipType.SIBLING_WITH)[: policy.max_siblings],
        ]:
            if relative is not None:
                members.setdefault(relative.id, relative)

        segments: list[RawSegment] = []
        for edge in self._relationships:
            if edge.source_id not in members or edge.target_id not in members:
                continue
            source, target = members[edge.source_id], members[edge.target_id]
            segments.append(RawSegment(start=source, relationship=edge, end=target))
            segments.append(RawSegment(start=target, relationship=edge, end=source))
        return segments


CANDIDATES_CYPHER = """
MATCH (c:Person {name: $first_name})
OPTIONAL MATCH (c)-[:CHILD_OF]->(f:Person) WHERE toLower(trim(toString(f.gender))) IN $male_codes
WITH c, collect(f)[0] AS father
OPTIONAL MATCH (c)-[:CHILD_OF]->(m:Person) WHERE toLower(trim(toString(m.gender))) IN $female_codes
WITH c, father, collect(m)[0] AS mother
WITH c, father, mother,
     CASE WHEN $father_name IS NOT NULL AND father.name = $father_name THEN 1 ELSE 0 END +
     CASE WHEN $mother_name IS NOT NULL AND mother.name = $mother_name THEN 1 ELSE 0 END AS parent_matches
RETURN c AS person, father, mother
ORDER BY parent_matches DESC
LIMIT $scan_limit
"""

NEIGHBORHOOD_CYPHER = """
MATCH (c:Person) WHERE elementId(c) = $candidate_id
OPTIONAL MATCH (c)-[:CHILD_OF]->(f:Person) WHERE toLower(trim(toString(f.gender))) IN $male_codes
WITH c, collect(DISTINCT f)[0..1] AS fathers
OPTIONAL MATCH (c)-[:CHILD_OF]->(m:Person) WHERE toLower(trim(toString(m.gender))) IN $female_codes
WITH c, fathers, collect(DISTINCT m)[0..1] AS mothers
OPTIONAL MATCH (c)-[:MARRIED_TO]-(sp:Person)
WITH c, fathers, mothers, collect(DISTINCT sp)[0..$max_spouses] AS spouses
OPTIONAL MATCH (ch:Person)-[:CHILD_OF]->(c)
WITH c, fathers, mothers, spouses,
     CASE WHEN $max_children IS NULL THEN collect(DISTINCT ch)
          ELSE collect(DISTINCT ch)[0..$max_children] END AS children
OPTIONAL MATCH (c)-[:SIBLING_WITH]-(sib:Person)
WITH c, fathers + mothers + spouses + children + collect(DISTINCT sib)[0..$max_siblings] AS relatives
WITH [c] + relatives AS members
UNWIND members AS a
MATCH path = (a)-[:CHILD_OF|MARRIED_TO|SIBLING_WITH]-(b:Person)
WHERE b IN members
RETURN path
"""


class Neo4jGraphFetcher(GraphFetcher):
    """Neo4j-backed fetcher for the identity registry.

    Person ids are Neo4j element ids. Transient driver errors are retried;
    anything left over surfaces as FetchFailure.
    """

    def __init__(
        self,
        uri: str = "bolt://localhost:7687",
        username: str = "neo4j",
        password: str = "password",
        database: str = "neo4j",
        retries: int = 3,
        scan_limit: int = 200,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        self.driver = AsyncGraphDatabase.driver(uri, auth=(username, password))
        self.database = database
        self.retries = max(1, retries)
        self.scan_limit = scan_limit
        self.breaker = breaker or CircuitBreaker()

    @classmethod
    def from_config(cls, config: EngineConfig) -> Neo4jGraphFetcher:
        return cls(
            uri=config.neo4j_uri,
            username=config.neo4j_user,
            password=config.neo4j_password,
            database=config.neo4j_database,
            retries=config.fetch_retries,
            breaker=CircuitBreaker(
                name=f"neo4j:{config.neo4j_database}",
                max_failures=config.breaker_threshold,
                cooldown_seconds=config.breaker_cooldown_seconds,
            ),
        )

    async def _run(self, cypher: str, **params: Any) -> list[Any]:
        if not self.breaker.allow_call():
            raise FetchFailure(
                "graph store circuit open",
                database=self.database,
                retry_after=round(self.breaker.retry_after(), 1),
            )

        @retry(
            reraise=True,
            stop=stop_after_attempt(self.retries),
            wait=wait_exponential_jitter(initial=0.2, max=2.0),
            retry=retry_if_exception_type((ServiceUnavailable, SessionExpired)),
        )
        async def _do() -> list[Any]:
            async with self.driver.session(database=self.database) as session:
                result = await session.run(cypher, params)
                return [record async for record in result]

        try:
            records = await _do()
        except (Neo4jError, DriverError) as e:
            self.breaker.record_failure()
            logger.warning("graph_store_error", error=str(e), database=self.database)
            raise FetchFailure(f"graph store error: {e}", cause=e, database=self.database) from e

        self.breaker.record_success()
        return records

    async def score_candidates(self, query: QueryIdentity) -> list[CandidateRow]:
        records = await self._run(
            CANDIDATES_CYPHER,
            first_name=query.first_name,
            father_name=_supplied(query.father_name),
            mother_name=_supplied(query.mother_name),
            male_codes=list(MALE_CODES),
            female_codes=list(FEMALE_CODES),
            scan_limit=self.scan_limit,
        )
        try:
            rows = [
                CandidateRow(
                    person=_to_person(record["person"]),
                    father=_to_person(record["father"]),
                    mother=_to_person(record["mother"]),
                )
                for record in records
            ]
        except (KeyError, AttributeError, TypeError) as e:
            raise FetchFailure(f"malformed candidate record: {e}", cause=e, first_name=query.first_name) from e

        logger.debug("candidates_fetched", first_name=query.first_name, count=len(rows))
        return rows

    async def fetch_neighborhood(
        self,
        candidate_id: str,
        policy: NeighborhoodPolicy | None = None,
    ) -> list[RawSegment]:
        policy = policy or NeighborhoodPolicy()
        records = await self._run(
            NEIGHBORHOOD_CYPHER,
            candidate_id=candidate_id,
            male_codes=list(MALE_CODES),
            female_codes=list(FEMALE_CODES),
            max_spouses=policy.max_spouses,
            max_children=policy.max_children,
            max_siblings=policy.max_siblings,
        )

        segments: list[RawSegment] = []
        try:
            for record in records:
                segments.extend(_path_segments(record["path"]))
        except (KeyError, AttributeError, TypeError) as e:
            raise FetchFailure(f"malformed path record: {e}", cause=e, candidate_id=candidate_id) from e

        logger.debug("neighborhood_fetched", candidate_id=candidate_id, segments=len(segments))
        return segments

    async def close(self) -> None:
        """Close the Neo4j driver."""
        await self.driver.close()


def _to_person(node: Any) -> Person | None:
    if node is None:
        return None
    props = dict(node)
    return Person(
        id=node.element_id,
        name=props.get("name"),
        gender=Gender.parse(props.get("gender")),
        properties=props,
    )


def _path_segments(path: Any) -> list[RawSegment]:
    """Split a Neo4j path into (start, relationship, end) hops."""
    nodes = list(path.nodes)
    segments = []
    for i, rel in enumerate(path.relationships):
        try:
            edge_type = KinshipType(rel.type)
        except ValueError:
            logger.debug("unknown_relationship_skipped", rel_type=rel.type)
            continue
        edge = KinshipEdge(rel.start_node.element_id, rel.end_node.element_id, edge_type)
        segments.append(RawSegment(start=_to_person(nodes[i]), relationship=edge, end=_to_person(nodes[i + 1])))
    return segments


def _supplied(name: str | None) -> str | None:
    # Blank parent names never match.
    return name if name and name.strip() else None
