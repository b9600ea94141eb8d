"""Pydantic schemas.

Only the university models are re-exported here: ``schemas.university`` is
loaded by the search adapters, while ``schemas.onboarding`` depends on the
services and must be imported from its own module.
"""

from edupath.schemas.university import (
    CandidateUniversity,
    PartialUniversity,
    ScoreBreakdown,
    ScoredUniversity,
)

__all__ = [
    "CandidateUniversity",
    "PartialUniversity",
    "ScoreBreakdown",
    "ScoredUniversity",
]
