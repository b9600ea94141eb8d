"""Candidate pool construction: normalization, synthesis, pre-ranking, merge.

Collaborator rows are partial and untrusted. normalize_pool fills the
documented defaults; synthesize_pool produces a clearly flagged placeholder
pool when the collaborator returns nothing, so scoring always has input.
"""

from collections.abc import Iterable, Sequence

from edupath.schemas.university import CandidateUniversity, PartialUniversity
from edupath.services.match_profile import MatchProfile
from edupath.services.university_match import course_tokens

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_MIN_GPA = 7.0
DEFAULT_MIN_IELTS = 6.5
DEFAULT_MIN_TOEFL = 90.0
DEFAULT_TUITION_USD = 20_000
SYNTHETIC_TUITION_USD = 30_000
DEFAULT_ACCEPTANCE_RATE = 30.0
SYNTHETIC_ACCEPTANCE_RATE = 25.0
DEFAULT_COURSE = "Various"

DEFAULT_SYNTHETIC_SIZE = 12
DEFAULT_POOL_LIMIT = 30

# Rank used for sorting when a candidate has none
_UNRANKED_SORT_RANK = 1000


def _courses_for(offered: list[str] | None, course: str) -> list[str]:
    names = offered or [course or DEFAULT_COURSE]
    return [c.lower() for c in names]


def normalize_candidate(
    partial: PartialUniversity, index: int, country: str, course: str
) -> CandidateUniversity:
    """Fill defaults on one collaborator row.

    Args:
        partial: Parsed collaborator row.
        index: Position in the response (names unnamed rows).
        country: Country the search was for.
        course: Course the search was for.

    Returns:
        CandidateUniversity; rank stays None when absent.
    """
    return CandidateUniversity(
        name=partial.name or f"Program {index + 1}",
        country=partial.country or country,
        courses_offered=_courses_for(partial.courses_offered, course),
        rank=partial.rank,
        acceptance_rate=(
            partial.acceptance_rate
            if partial.acceptance_rate is not None
            else DEFAULT_ACCEPTANCE_RATE
        ),
        min_gpa=partial.min_gpa if partial.min_gpa is not None else DEFAULT_MIN_GPA,
        min_ielts=partial.min_ielts if partial.min_ielts is not None else DEFAULT_MIN_IELTS,
        min_toefl=partial.min_toefl if partial.min_toefl is not None else DEFAULT_MIN_TOEFL,
        tuition_usd=(
            partial.tuition_usd if partial.tuition_usd is not None else DEFAULT_TUITION_USD
        ),
        offers_loan_partnership=(
            partial.offers_loan_partnership
            if partial.offers_loan_partnership is not None
            else True
        ),
    )


def normalize_pool(
    partials: Iterable[PartialUniversity], country: str, course: str
) -> list[CandidateUniversity]:
    """Normalize every row of a collaborator response."""
    return [normalize_candidate(p, i, country, course) for i, p in enumerate(partials)]


def synthesize_pool(
    country: str, course: str, size: int = DEFAULT_SYNTHETIC_SIZE
) -> list[CandidateUniversity]:
    """Placeholder candidates for when the collaborator returns nothing.

    Every row is flagged ``synthetic=True``.
    """
    label = course or "Global"
    return [
        CandidateUniversity(
            name=f"{label} University {i + 1}",
            country=country,
            courses_offered=_courses_for(None, course),
            rank=100 + i * 15,
            acceptance_rate=SYNTHETIC_ACCEPTANCE_RATE,
            min_gpa=DEFAULT_MIN_GPA,
            min_ielts=DEFAULT_MIN_IELTS,
            min_toefl=DEFAULT_MIN_TOEFL,
            tuition_usd=SYNTHETIC_TUITION_USD,
            offers_loan_partnership=True,
            synthetic=True,
        )
        for i in range(size)
    ]


def relevance_score(candidate: CandidateUniversity, profile: MatchProfile) -> int:
    """Cheap relevance used to trim the search pool before scoring.

    +3 per course keyword found in an offered course, plus a GPA bonus
    (+5 / +3 / +1) when the profile has a GPA.
    """
    relevance = 0
    for token in course_tokens(profile.course):
        if any(token in offered for offered in candidate.courses_offered):
            relevance += 3
    if profile.gpa > 0:
        gap = round(profile.gpa - candidate.min_gpa, 6)
        if gap >= 1.0:
            relevance += 5
        elif gap >= 0:
            relevance += 3
        elif gap >= -0.5:
            relevance += 1
    return relevance


def pre_rank_pool(
    pool: Sequence[CandidateUniversity],
    profile: MatchProfile,
    limit: int = DEFAULT_POOL_LIMIT,
) -> list[CandidateUniversity]:
    """Keep the ``limit`` most relevant candidates (relevance desc, rank asc)."""
    ranked = sorted(
        pool,
        key=lambda c: (
            -relevance_score(c, profile),
            c.rank if c.rank is not None else _UNRANKED_SORT_RANK,
        ),
    )
    return ranked[:limit]


def merge_pools(
    first: Sequence[CandidateUniversity], second: Sequence[CandidateUniversity]
) -> list[CandidateUniversity]:
    """Concatenate pools, dropping later duplicates by case-folded name."""
    seen: set[str] = set()
    merged: list[CandidateUniversity] = []
    for candidate in (*first, *second):
        key = candidate.name.casefold()
        if key in seen:
            continue
        seen.add(key)
        merged.append(candidate)
    return merged
