"""Candidate ranking by parent-name concordance."""
from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import InvalidQuery
from .models import CandidateRow, CandidateScore, Gender, Person, QueryIdentity

if TYPE_CHECKING:
    from collections.abc import Iterable


def _supplied(name: str | None) -> bool:
    return name is not None and bool(name.strip())


def _parent_matches(parent: Person | None, gender: Gender, expected: str | None) -> bool:
    if parent is None or not _supplied(expected):
        return False
    if parent.gender is not gender:
        return False
    return parent.name == expected


class CandidateScorer:
    """Ranks candidates against a query identity.

    A candidate earns one point when its male parent's name equals the
    queried father name and one point when its female parent's name equals
    the queried mother name. Names compare by exact string equality.
    Candidates with no matching parent score 0 and stay eligible.

    Example:
        >>> scorer = CandidateScorer()
        >>> ranked = scorer.rank(query, rows, top_k=3)
        >>> [score.score for _, score in ranked]
        [2, 1, 0]
    """

    def score(self, query: QueryIdentity, row: CandidateRow) -> CandidateScore:
        """Score a single candidate row."""
        father_matched = _parent_matches(row.father, Gender.MALE, query.father_name)
        mother_matched = _parent_matches(row.mother, Gender.FEMALE, query.mother_name)
        return CandidateScore(
            candidate_id=row.person.id,
            score=int(father_matched) + int(mother_matched),
            father_matched=father_matched,
            mother_matched=mother_matched,
        )

    def rank(
        self,
        query: QueryIdentity,
        candidates: Iterable[CandidateRow],
        top_k: int = 3,
    ) -> list[tuple[Person, CandidateScore]]:
        """Rank candidates, best first.

        Args:
            query: Identity being searched for
            candidates: Rows in store order
            top_k: Maximum number of results

        Returns:
            At most ``top_k`` (person, score) pairs sorted by descending
            score; equal scores keep store order.

        Raises:
            InvalidQuery: blank first name or non-positive ``top_k``
        """
        query.require_valid()
        if top_k < 1:
            raise InvalidQuery("top_k must be at least 1", first_name=query.first_name, top_k=top_k)

        scored = [
            (row.person, self.score(query, row))
            for row in candidates
            if row.person.name == query.first_name
        ]
        scored.sort(key=lambda pair: pair[1].score, reverse=True)
        return scored[:top_k]
