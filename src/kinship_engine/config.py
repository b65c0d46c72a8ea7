"""Engine configuration with environment overrides.

Environment Variables:
    NEO4J_URI: Bolt URI of the registry graph (default bolt://localhost:7687)
    NEO4J_USER: Graph user (default neo4j)
    NEO4J_PASSWORD: Graph password (default password)
    NEO4J_DATABASE: Database name (default neo4j)

    KINSHIP_TOP_K: Candidates returned per search (default 3)
    KINSHIP_MAX_SPOUSES: Spouses fetched per neighborhood (default 1)
    KINSHIP_MAX_CHILDREN: Children fetched per neighborhood, -1 for all (default -1)
    KINSHIP_MAX_SIBLINGS: Siblings fetched per neighborhood (default 0)

    KINSHIP_FETCH_RETRIES: Attempts for transient store errors (default 3)
    KINSHIP_BREAKER_THRESHOLD: Failures before the store breaker opens (default 5)
    KINSHIP_BREAKER_COOLDOWN: Seconds the breaker stays open (default 30)

    KINSHIP_LOG_LEVEL: structlog level (default INFO)
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field

from .graph.models import NeighborhoodPolicy


def _i(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except Exception:
        return default


def _f(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except Exception:
        return default


def _s(name: str, default: str) -> str:
    return os.getenv(name) or default


@dataclass(frozen=True)
class EngineConfig:
    neo4j_uri: str = field(default_factory=lambda: _s("NEO4J_URI", "bolt://localhost:7687"))
    neo4j_user: str = field(default_factory=lambda: _s("NEO4J_USER", "neo4j"))
    neo4j_password: str = field(default_factory=lambda: _s("NEO4J_PASSWORD", "password"))
    neo4j_database: str = field(default_factory=lambda: _s("NEO4J_DATABASE", "neo4j"))

    top_k: int = field(default_factory=lambda: _i("KINSHIP_TOP_K", 3))
    max_spouses: int = field(default_factory=lambda: _i("KINSHIP_MAX_SPOUSES", 1))
    max_children: int = field(default_factory=lambda: _i("KINSHIP_MAX_CHILDREN", -1))
    max_siblings: int = field(default_factory=lambda: _i("KINSHIP_MAX_SIBLINGS", 0))

    fetch_retries: int = field(default_factory=lambda: _i("KINSHIP_FETCH_RETRIES", 3))
    breaker_threshold: int = field(default_factory=lambda: _i("KINSHIP_BREAKER_THRESHOLD", 5))
    breaker_cooldown_seconds: float = field(default_factory=lambda: _f("KINSHIP_BREAKER_COOLDOWN", 30.0))

    log_level: str = field(default_factory=lambda: _s("KINSHIP_LOG_LEVEL", "INFO").upper())

    def neighborhood_policy(self) -> NeighborhoodPolicy:
        """Radius policy derived from the configured caps."""
        return NeighborhoodPolicy(
            max_spouses=max(0, self.max_spouses),
            max_children=None if self.max_children < 0 else self.max_children,
            max_siblings=max(0, self.max_siblings),
        )


def load_config() -> EngineConfig:
    """Read configuration from the current environment."""
    return EngineConfig()
