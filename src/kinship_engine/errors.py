"""Error taxonomy for the kinship engine.

Callers receive one of these instead of a raw driver or validation
exception. Each error carries the failing identity or candidate id in
``context`` so it can be logged by whoever handles it.
"""
from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Structured error kinds surfaced to callers."""
    INVALID_QUERY = "invalid_query"
    FETCH_FAILURE = "fetch_failure"
    MISSING_CENTRAL_IDENTITY = "missing_central_identity"


class KinshipEngineError(Exception):
    """Base class for all engine errors."""

    kind: ErrorKind
    retryable: bool = False

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "retryable": self.retryable,
            "context": {k: v for k, v in self.context.items() if v is not None},
        }


class InvalidQuery(KinshipEngineError):
    """Required query input is missing; rejected before any fetch."""

    kind = ErrorKind.INVALID_QUERY


class FetchFailure(KinshipEngineError):
    """The graph store was unreachable or returned a malformed response.

    Only raised at the fetcher boundary. Safe to retry.
    """

    kind = ErrorKind.FETCH_FAILURE
    retryable = True

    def __init__(self, message: str, cause: BaseException | None = None, **context: Any) -> None:
        super().__init__(message, **context)
        self.cause = cause


class MissingCentralIdentity(KinshipEngineError):
    """No fetched node could be identified as the query subject."""

    kind = ErrorKind.MISSING_CENTRAL_IDENTITY
