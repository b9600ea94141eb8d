"""University match scoring engine.

Match Score answers: "How good a fit is this university for me?"

Four independent sub-scores, summed and clamped to 100 (upper bound only,
never renormalized):
- GPA fit:          max 35
- English fit:      max 25
- Course relevance: max 20
- Access & fit:     max 23 before clamping (acceptance + loan + experience)

Design principles:
1. Every function here is pure and deterministic
2. Each sub-score is testable on its own
3. Country filtering never empties a non-empty pool
"""

import math
import re
from collections.abc import Sequence
from dataclasses import dataclass

from edupath.schemas.university import (
    CandidateUniversity,
    ScoreBreakdown,
    ScoredUniversity,
)
from edupath.services.match_profile import MatchProfile
from edupath.services.onboarding_steps import ENGLISH_TEST_SCALES

# =============================================================================
# Constants
# =============================================================================

MAX_MATCH_SCORE = 100

DEFAULT_MATCH_LIMIT = 40
"""Default number of scored universities returned."""

# (minimum gap, points) bands, checked in order
_GPA_BANDS: tuple[tuple[float, int], ...] = (
    (1.0, 35),
    (0.3, 30),
    (0.0, 24),
    (-0.5, 14),
    (-1.0, 6),
)

_ENGLISH_BANDS: tuple[tuple[float, int], ...] = (
    (5, 25),
    (0, 20),
    (-3, 12),
)
ENGLISH_FLOOR_POINTS = 5
ENGLISH_NO_TEST_POINTS = 12

COURSE_MATCH_POINTS = 20
COURSE_NO_MATCH_POINTS = 8

_ACCEPTANCE_BANDS: tuple[tuple[float, int], ...] = (
    (50, 15),
    (25, 10),
    (10, 5),
)
LOAN_PARTNER_POINTS = 5

DEFAULT_MIN_IELTS = 6.5
DEFAULT_MIN_TOEFL = 90
DUOLINGO_REQUIRED_SCORE = 100

# IELTS gaps are compared in tenths of a band
_IELTS_GAP_SCALE = 10

# Float subtraction noise (7.3 - 7.0) must not drop a candidate a band
_GAP_PRECISION = 6

_NON_ALPHA = re.compile(r"[^a-z\s]")


def _band(gap: float, bands: tuple[tuple[float, int], ...], floor: int) -> int:
    for threshold, points in bands:
        if gap >= threshold:
            return points
    return floor


def round_half_up(number: float) -> int:
    """Round .5 away from zero for positive numbers (2.5 -> 3, not 2)."""
    return math.floor(number + 0.5)


# =============================================================================
# Sub-scores
# =============================================================================


def gpa_fit_score(gpa: float, min_gpa: float) -> int:
    """GPA fit points (0-35) from the gap above the minimum GPA."""
    gap = round(gpa - min_gpa, _GAP_PRECISION)
    return _band(gap, _GPA_BANDS, 0)


def required_english_score(test: str, candidate: CandidateUniversity) -> float | None:
    """Candidate's minimum for a test family.

    PTE and Duolingo minimums are approximated: PTE from the IELTS minimum
    (ielts * 9 + 10, rounded half up) and Duolingo as a flat 100.

    Returns:
        Required score, or None for an unknown test family.
    """
    min_ielts = candidate.min_ielts if candidate.min_ielts is not None else DEFAULT_MIN_IELTS
    if test == "ielts":
        return min_ielts
    if test == "toefl":
        return candidate.min_toefl if candidate.min_toefl is not None else DEFAULT_MIN_TOEFL
    if test == "pte":
        return round_half_up(min_ielts * 9 + 10)
    if test == "duolingo":
        return DUOLINGO_REQUIRED_SCORE
    return None


def english_fit_score(test: str, score: float, candidate: CandidateUniversity) -> int:
    """English fit points (0-25).

    No test, an unknown test family or a zero score is neutral (12).

    IELTS gaps are scaled to tenths of a band before banding, so the same
    thresholds serve IELTS and TOEFL: 0.5 above the minimum scores 25 and
    0.3 below it scores 12. A half band below (6.0 against 6.5) is already
    past the last threshold and scores 5, where an unscaled gap would
    score 12.
    """
    if test not in ENGLISH_TEST_SCALES or score <= 0:
        return ENGLISH_NO_TEST_POINTS
    required = required_english_score(test, candidate)
    if required is None:
        return ENGLISH_NO_TEST_POINTS
    gap = score - required
    if test == "ielts":
        gap *= _IELTS_GAP_SCALE
    return _band(round(gap, _GAP_PRECISION), _ENGLISH_BANDS, ENGLISH_FLOOR_POINTS)


def course_tokens(course: str) -> list[str]:
    """Lowercased, alphabetic-only whitespace tokens of a course name."""
    return _NON_ALPHA.sub("", course.lower()).split()


def course_relevance_score(course: str, courses_offered: Sequence[str]) -> int:
    """Course relevance points (20 on a keyword hit, else 8).

    A hit is an offered course containing a profile token, or a profile
    token containing the offered course's first word.
    """
    tokens = course_tokens(course)
    if not tokens:
        return COURSE_NO_MATCH_POINTS
    for offered in courses_offered:
        offered_lower = offered.lower()
        words = offered_lower.split()
        if not words:
            continue
        first_word = words[0]
        for token in tokens:
            if token in offered_lower or first_word in token:
                return COURSE_MATCH_POINTS
    return COURSE_NO_MATCH_POINTS


def access_fit_score(
    acceptance_rate: float | None,
    offers_loan_partnership: bool,
    loan_amount: int,
    work_exp_months: int,
) -> int:
    """Access & fit points: acceptance band, loan partner bonus, experience."""
    points = _band(acceptance_rate or 0, _ACCEPTANCE_BANDS, 0)
    if offers_loan_partnership and loan_amount > 0:
        points += LOAN_PARTNER_POINTS
    if work_exp_months >= 12:
        points += 3
    elif work_exp_months >= 6:
        points += 1
    return points


# =============================================================================
# Scoring
# =============================================================================


def score_candidate(candidate: CandidateUniversity, profile: MatchProfile) -> ScoredUniversity:
    """Score one candidate against a profile.

    Args:
        candidate: Normalized candidate university.
        profile: Applicant profile.

    Returns:
        ScoredUniversity with total (clamped to 100) and breakdown.
    """
    breakdown = ScoreBreakdown(
        gpa_fit=gpa_fit_score(profile.gpa, candidate.min_gpa),
        english_fit=english_fit_score(profile.english_test, profile.english_score, candidate),
        course_relevance=course_relevance_score(profile.course, candidate.courses_offered),
        access_fit=access_fit_score(
            candidate.acceptance_rate,
            candidate.offers_loan_partnership,
            profile.loan_amount,
            profile.work_exp_months,
        ),
    )
    total = (
        breakdown.gpa_fit
        + breakdown.english_fit
        + breakdown.course_relevance
        + breakdown.access_fit
    )
    return ScoredUniversity(
        **candidate.model_dump(),
        match_score=min(max(total, 0), MAX_MATCH_SCORE),
        breakdown=breakdown,
    )


def filter_by_country(
    candidates: Sequence[CandidateUniversity], country: str
) -> list[CandidateUniversity]:
    """Case-insensitive country filter that never empties a non-empty pool."""
    wanted = country.strip().casefold()
    matching = [c for c in candidates if c.country.strip().casefold() == wanted]
    if not matching:
        return list(candidates)
    return matching


def _sort_key(scored: ScoredUniversity) -> tuple[int, int, float]:
    # Unranked candidates sort after every ranked one within a score tie
    unranked = 1 if scored.rank is None else 0
    return (-scored.match_score, unranked, scored.rank or 0)


def rank_matches(
    candidates: Sequence[CandidateUniversity],
    profile: MatchProfile,
    limit: int = DEFAULT_MATCH_LIMIT,
) -> list[ScoredUniversity]:
    """Filter, score, sort and truncate candidates.

    Args:
        candidates: Candidate pool.
        profile: Applicant profile.
        limit: Maximum number of results.

    Returns:
        Scored universities, best first (score desc, rank asc, unranked last).
    """
    pool = filter_by_country(candidates, profile.country)
    scored = [score_candidate(c, profile) for c in pool]
    scored.sort(key=_sort_key)
    return scored[:limit]


# =============================================================================
# Summary
# =============================================================================


@dataclass(frozen=True)
class MatchSummary:
    """Headline numbers for a match result.

    Attributes:
        count: Number of scored universities.
        average_score: Mean match score rounded to a whole number (0 if none).
        top_pick: Name of the best match, if any.
        country: Country the matches were computed for.
        synthetic: True when any match came from fallback synthesis.
    """

    count: int
    average_score: int
    top_pick: str | None
    country: str
    synthetic: bool


def summarize_matches(matches: Sequence[ScoredUniversity], country: str) -> MatchSummary:
    """Summarize a ranked match list."""
    if not matches:
        return MatchSummary(
            count=0, average_score=0, top_pick=None, country=country, synthetic=False
        )
    average = round_half_up(sum(m.match_score for m in matches) / len(matches))
    return MatchSummary(
        count=len(matches),
        average_score=average,
        top_pick=matches[0].name,
        country=country,
        synthetic=any(m.synthetic for m in matches),
    )
