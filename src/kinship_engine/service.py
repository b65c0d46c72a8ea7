"""Search and neighborhood resolution over a graph store.

Awaits the two store calls and runs the synchronous engine stages on
their results:

    query -> score_candidates -> CandidateScorer
    candidate -> fetch_neighborhood -> GraphCanonicalizer -> RenderModelBuilder
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .errors import InvalidQuery, KinshipEngineError
from .graph.canonicalizer import GraphCanonicalizer
from .graph.render import RenderModelBuilder
from .graph.scorer import CandidateScorer
from .logging import get_logger

if TYPE_CHECKING:
    from .config import EngineConfig
    from .graph.fetcher import GraphFetcher
    from .graph.models import (
        CandidateScore,
        CanonicalGraph,
        NeighborhoodPolicy,
        Person,
        QueryIdentity,
        RenderModel,
    )

logger = get_logger(__name__)


@dataclass
class ResolvedNeighborhood:
    """Canonical graph and render model for one candidate selection."""
    candidate: Person
    graph: CanonicalGraph
    model: RenderModel

    @property
    def node_count(self) -> int:
        return self.graph.node_count


class FamilyGraphService:
    """Entry point for the UI layer.

    Example:
        >>> service = FamilyGraphService(InMemoryGraphFetcher.from_json("family.json"))
        >>> ranked = await service.search(QueryIdentity(first_name="Ali", father_name="Omar"))
        >>> resolved = await service.resolve(ranked[0][0])
        >>> resolved.node_count
        4
    """

    def __init__(
        self,
        fetcher: GraphFetcher,
        scorer: CandidateScorer | None = None,
        canonicalizer: GraphCanonicalizer | None = None,
        builder: RenderModelBuilder | None = None,
        top_k: int = 3,
        policy: NeighborhoodPolicy | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.scorer = scorer or CandidateScorer()
        self.canonicalizer = canonicalizer or GraphCanonicalizer()
        self.builder = builder or RenderModelBuilder()
        self.top_k = top_k
        self.policy = policy

    @classmethod
    def from_config(cls, fetcher: GraphFetcher, config: EngineConfig) -> FamilyGraphService:
        return cls(fetcher, top_k=config.top_k, policy=config.neighborhood_policy())

    async def search(
        self,
        query: QueryIdentity,
        top_k: int | None = None,
    ) -> list[tuple[Person, CandidateScore]]:
        """Rank registry candidates for a query identity.

        Raises:
            InvalidQuery: before any fetch, for a blank first name
            FetchFailure: the store call failed
        """
        query.require_valid()
        top_k = self.top_k if top_k is None else top_k

        rows = await self.fetcher.score_candidates(query)
        ranked = self.scorer.rank(query, rows, top_k=top_k)
        logger.info(
            "candidates_ranked",
            first_name=query.first_name,
            fetched=len(rows),
            returned=len(ranked),
            top_score=ranked[0][1].score if ranked else None,
        )
        return ranked

    async def resolve(
        self,
        candidate: Person,
        policy: NeighborhoodPolicy | None = None,
    ) -> ResolvedNeighborhood:
        """Fetch and canonicalize a candidate's immediate family.

        Raises:
            InvalidQuery: the candidate has no store id
            FetchFailure: the store call failed
            MissingCentralIdentity: the fetched nodes do not include the candidate
        """
        if not candidate.id:
            raise InvalidQuery("candidate has no store id", candidate_name=candidate.name)

        segments = await self.fetcher.fetch_neighborhood(candidate.id, policy or self.policy)
        try:
            graph = self.canonicalizer.canonicalize(candidate, segments)
        except KinshipEngineError as e:
            logger.warning("canonicalization_failed", candidate_id=candidate.id, kind=e.kind.value)
            raise

        model = self.builder.build(graph)
        logger.info(
            "neighborhood_resolved",
            candidate_id=candidate.id,
            segments=len(segments),
            nodes=graph.node_count,
            edges=graph.edge_count,
        )
        return ResolvedNeighborhood(candidate=candidate, graph=graph, model=model)
