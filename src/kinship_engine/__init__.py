"""Family graph resolution engine.

Ranks registry candidates against a partial identity and turns raw
neighborhood query output into a canonical, renderable kinship graph.
"""
from .errors import (
    ErrorKind,
    FetchFailure,
    InvalidQuery,
    KinshipEngineError,
    MissingCentralIdentity,
)
from .graph import (
    CandidateRow,
    CandidateScore,
    CandidateScorer,
    CanonicalGraph,
    FamilyUnit,
    Gender,
    GraphCanonicalizer,
    GraphFetcher,
    InMemoryGraphFetcher,
    KinshipEdge,
    KinshipType,
    NeighborhoodPolicy,
    Person,
    QueryIdentity,
    RawSegment,
    RenderModel,
    RenderModelBuilder,
)
from .service import FamilyGraphService, ResolvedNeighborhood

__version__ = "0.1.0"

__all__ = [
    "CandidateRow",
    "CandidateScore",
    "CandidateScorer",
    "CanonicalGraph",
    "ErrorKind",
    "FamilyGraphService",
    "FamilyUnit",
    "FetchFailure",
    "Gender",
    "GraphCanonicalizer",
    "GraphFetcher",
    "InMemoryGraphFetcher",
    "InvalidQuery",
    "KinshipEdge",
    "KinshipEngineError",
    "KinshipType",
    "MissingCentralIdentity",
    "NeighborhoodPolicy",
    "Person",
    "QueryIdentity",
    "RawSegment",
    "RenderModel",
    "RenderModelBuilder",
    "ResolvedNeighborhood",
]
