"""Family graph resolution.

Provides:
- Kinship types shared across the engine
- Candidate ranking against a query identity
- The graph store contract with Neo4j and in-memory adapters
- Canonicalization of raw neighborhood segments
- Display attribute mapping for an external visualizer
"""
from .canonicalizer import GraphCanonicalizer
from .fetcher import (
    GraphFetcher,
    InMemoryGraphFetcher,
    Neo4jGraphFetcher,
)
from .models import (
    CandidateRow,
    CandidateScore,
    CanonicalGraph,
    DisplayEdge,
    DisplayNode,
    FamilyUnit,
    Gender,
    KinshipEdge,
    KinshipType,
    NeighborhoodPolicy,
    Person,
    QueryIdentity,
    RawSegment,
    RenderModel,
)
from .render import RenderModelBuilder
from .scorer import CandidateScorer

__all__ = [
    # Kinship types
    "CandidateRow",
    "CandidateScore",
    "CanonicalGraph",
    "DisplayEdge",
    "DisplayNode",
    "FamilyUnit",
    "Gender",
    "KinshipEdge",
    "KinshipType",
    "NeighborhoodPolicy",
    "Person",
    "QueryIdentity",
    "RawSegment",
    "RenderModel",
    # Store contract
    "GraphFetcher",
    "InMemoryGraphFetcher",
    "Neo4jGraphFetcher",
    # Engine
    "CandidateScorer",
    "GraphCanonicalizer",
    "RenderModelBuilder",
]
