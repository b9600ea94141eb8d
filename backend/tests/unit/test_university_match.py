"""Tests for the university match scoring engine."""

import pytest

from edupath.schemas.university import CandidateUniversity
from edupath.services.match_profile import MatchProfile
from edupath.services.university_match import (
    access_fit_score,
    course_relevance_score,
    english_fit_score,
    filter_by_country,
    gpa_fit_score,
    rank_matches,
    required_english_score,
    round_half_up,
    score_candidate,
    summarize_matches,
)


def _candidate(**overrides) -> CandidateUniversity:
    fields = {
        "name": "Test University",
        "country": "USA",
        "courses_offered": ["computer science"],
        "min_gpa": 7.0,
        "min_ielts": 6.5,
        "min_toefl": 90,
        "acceptance_rate": 40,
        "offers_loan_partnership": True,
    }
    fields.update(overrides)
    return CandidateUniversity(**fields)


class TestGpaFit:
    """GPA fit bands."""

    @pytest.mark.parametrize(
        ("gpa", "expected"),
        [
            (8.0, 35),
            (9.5, 35),
            (7.3, 30),
            (7.0, 24),
            (6.5, 14),
            (6.0, 6),
            (5.99, 0),
            (0.0, 0),
        ],
    )
    def test_bands(self, gpa, expected):
        assert gpa_fit_score(gpa, 7.0) == expected

    def test_gap_of_exactly_one_scores_full_points(self):
        assert gpa_fit_score(8.0, 7.0) == 35

    def test_gap_of_minus_one_scores_six(self):
        assert gpa_fit_score(6.0, 7.0) == 6

    def test_gap_just_below_minus_one_scores_zero(self):
        assert gpa_fit_score(5.99, 7.0) == 0


class TestEnglishFit:
    """English fit bands per test family."""

    def test_no_test_is_neutral(self):
        assert english_fit_score("none", 0, _candidate()) == 12

    def test_unknown_test_is_neutral(self):
        assert english_fit_score("cambridge", 180, _candidate()) == 12

    def test_zero_score_is_neutral(self):
        assert english_fit_score("ielts", 0, _candidate()) == 12

    @pytest.mark.parametrize(
        ("score", "expected"),
        [(7.5, 25), (7.0, 25), (6.9, 20), (6.5, 20), (6.3, 12), (6.2, 12), (6.0, 5)],
    )
    def test_ielts_gap_is_in_tenths_of_a_band(self, score, expected):
        assert english_fit_score("ielts", score, _candidate(min_ielts=6.5)) == expected

    @pytest.mark.parametrize(
        ("score", "expected"),
        [(100, 25), (95, 25), (92, 20), (90, 20), (87, 12), (86, 5)],
    )
    def test_toefl_bands(self, score, expected):
        assert english_fit_score("toefl", score, _candidate(min_toefl=90)) == expected

    def test_pte_requirement_derives_from_ielts(self):
        """PTE minimum is ielts * 9 + 10, rounded half up (6.5 -> 69)."""
        assert required_english_score("pte", _candidate(min_ielts=6.5)) == 69
        assert english_fit_score("pte", 74, _candidate(min_ielts=6.5)) == 25
        assert english_fit_score("pte", 69, _candidate(min_ielts=6.5)) == 20

    def test_duolingo_requirement_is_flat(self):
        assert required_english_score("duolingo", _candidate()) == 100
        assert english_fit_score("duolingo", 110, _candidate()) == 25

    def test_missing_candidate_minimums_use_defaults(self):
        candidate = _candidate(min_ielts=None, min_toefl=None)
        assert required_english_score("ielts", candidate) == 6.5
        assert required_english_score("toefl", candidate) == 90
        assert required_english_score("gre", candidate) is None


class TestCourseRelevance:
    """Course keyword matching."""

    def test_keyword_in_offered_course(self):
        assert course_relevance_score("Computer Science", ["computer science"]) == 20

    def test_first_word_of_offered_course_in_token(self):
        """'data' (first word of the offered course) is inside 'bigdata'."""
        assert course_relevance_score("BigData", ["data analytics"]) == 20

    def test_no_match(self):
        assert course_relevance_score("Law", ["computer science"]) == 8

    def test_empty_course_scores_baseline(self):
        assert course_relevance_score("", ["computer science"]) == 8

    def test_punctuation_is_ignored(self):
        assert course_relevance_score("M.B.A.", ["mba"]) == 20


class TestAccessFit:
    """Acceptance, loan partner and experience points."""

    @pytest.mark.parametrize(
        ("rate", "expected"),
        [(75, 15), (50, 15), (40, 10), (25, 10), (10, 5), (9.9, 0), (None, 0)],
    )
    def test_acceptance_bands(self, rate, expected):
        assert access_fit_score(rate, False, 0, 0) == expected

    def test_loan_partner_counts_only_when_a_loan_is_needed(self):
        assert access_fit_score(40, True, 1_500_000, 0) == 15
        assert access_fit_score(40, True, 0, 0) == 10
        assert access_fit_score(40, False, 1_500_000, 0) == 10

    @pytest.mark.parametrize(("months", "bonus"), [(0, 0), (5, 0), (6, 1), (11, 1), (12, 3)])
    def test_experience_bonus(self, months, bonus):
        assert access_fit_score(None, False, 0, months) == bonus


class TestScoreCandidate:
    """Whole-candidate scoring."""

    def test_reference_profile_scores_98(self):
        """Clamping is an upper bound only; 98 stays 98."""
        profile = MatchProfile(
            country="USA",
            gpa=8.5,
            course="Computer Science",
            english_test="ielts",
            english_score=7.5,
            work_exp_months=14,
            loan_amount=1_500_000,
        )
        candidate = _candidate(courses_offered=["Computer Science"])

        scored = score_candidate(candidate, profile)

        assert scored.breakdown.gpa_fit == 35
        assert scored.breakdown.english_fit == 25
        assert scored.breakdown.course_relevance == 20
        assert scored.breakdown.access_fit == 18
        assert scored.match_score == 98
        assert scored.name == candidate.name

    def test_total_is_clamped_to_100(self):
        profile = MatchProfile(
            gpa=9.5,
            course="Computer Science",
            english_test="ielts",
            english_score=8.5,
            work_exp_months=24,
            loan_amount=1,
        )
        scored = score_candidate(_candidate(acceptance_rate=80), profile)
        assert scored.match_score == 100

    def test_default_profile_scores_within_bounds(self):
        scored = score_candidate(_candidate(), MatchProfile())
        assert 0 <= scored.match_score <= 100


class TestRankMatches:
    """Filtering, ordering and truncation."""

    def test_country_filter_is_case_insensitive(self):
        pool = [_candidate(name="A", country="usa"), _candidate(name="B", country="UK")]
        assert [c.name for c in filter_by_country(pool, " USA ")] == ["A"]

    def test_no_country_match_falls_back_to_full_pool(self):
        pool = [_candidate(name="A", country="UK"), _candidate(name="B", country="Canada")]
        matches = rank_matches(pool, MatchProfile(country="Atlantis"))
        assert {m.name for m in matches} == {"A", "B"}

    def test_empty_pool_gives_no_matches(self):
        assert rank_matches([], MatchProfile()) == []

    def test_sorted_by_score_then_rank_with_unranked_last(self):
        profile = MatchProfile(gpa=8.5, course="Computer Science")
        pool = [
            _candidate(name="Unranked", rank=None),
            _candidate(name="Rank 50", rank=50),
            _candidate(name="Rank 10", rank=10),
            _candidate(name="Weak", rank=1, min_gpa=9.9),
        ]
        names = [m.name for m in rank_matches(pool, profile)]
        assert names == ["Rank 10", "Rank 50", "Unranked", "Weak"]

    def test_limit_truncates(self):
        pool = [_candidate(name=f"U{i}", rank=i + 1) for i in range(10)]
        assert len(rank_matches(pool, MatchProfile(), limit=4)) == 4


class TestSummary:
    """Match summary numbers."""

    def test_summary_of_matches(self):
        profile = MatchProfile(gpa=8.5, course="Computer Science")
        matches = rank_matches(
            [_candidate(name="A", rank=1), _candidate(name="B", rank=2, min_gpa=8.0)],
            profile,
        )
        summary = summarize_matches(matches, "USA")
        assert summary.count == 2
        assert summary.top_pick == "A"
        assert summary.country == "USA"
        assert not summary.synthetic
        expected = round_half_up((matches[0].match_score + matches[1].match_score) / 2)
        assert summary.average_score == expected

    def test_summary_of_nothing(self):
        summary = summarize_matches([], "UK")
        assert summary.count == 0
        assert summary.average_score == 0
        assert summary.top_pick is None

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(2.4) == 2
