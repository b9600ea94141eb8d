"""Tests for building the match profile from shared answer keys."""

from edupath.services.answer_store import AnswerStore
from edupath.services.match_profile import MatchProfile, build_profile
from edupath.services.onboarding_steps import DEFAULT_REGISTRY


def _store(**primary: str) -> AnswerStore:
    store = AnswerStore(DEFAULT_REGISTRY.alias_table)
    for step_id, value in primary.items():
        store.submit(step_id, value, value)
    return store


class TestBuildProfile:
    """build_profile."""

    def test_empty_store_gives_defaults(self):
        assert build_profile(_store()) == MatchProfile()
        assert MatchProfile().country == "USA"
        assert MatchProfile().gpa == 6.5

    def test_reads_aliases_from_the_loan_flow(self):
        profile = build_profile(
            _store(
                loan_country="Canada",
                loan_course="MBA",
                loan_amount="2500000",
                loan_gpa="7.8",
                loan_english_test="toefl",
                loan_english_score="104",
            )
        )
        assert profile.country == "Canada"
        assert profile.course == "MBA"
        assert profile.loan_amount == 2_500_000
        assert profile.gpa == 7.8
        assert profile.english_test == "toefl"
        assert profile.english_score == 104.0

    def test_plan_and_compare_keys_look_the_same(self):
        plan = build_profile(_store(plan_country="UK", plan_work_exp="18"))
        compare = build_profile(_store(compare_country="UK", compare_work_exp="18"))
        assert plan == compare
        assert plan.work_exp_months == 18

    def test_unparseable_numbers_fall_back(self):
        profile = build_profile(_store(plan_gpa="eight", plan_work_exp="a year"))
        assert profile.gpa == 6.5
        assert profile.work_exp_months == 0

    def test_skipped_target_university_is_empty(self):
        profile = build_profile(_store(target_university="", bachelors_degree="BA"))
        assert profile.target_university == ""
        assert profile.bachelors == "BA"
