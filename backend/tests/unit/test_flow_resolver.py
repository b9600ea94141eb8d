"""Tests for the flow resolver and the alias-writing answer store."""

from edupath.services.answer_store import AnswerStore
from edupath.services.flow_resolver import (
    is_step_visible,
    next_visible_index,
    visible_indices,
)
from edupath.services.onboarding_steps import ALL_FLOWS, DEFAULT_REGISTRY

REGISTRY = DEFAULT_REGISTRY


def _store() -> AnswerStore:
    return AnswerStore(REGISTRY.alias_table)


class TestNextVisibleIndex:
    """Tests for resolving the next visible step."""

    def test_only_flow_selection_is_visible_before_a_flow(self):
        """Before the goal is answered nothing flow-tagged is reachable."""
        answers = _store()
        assert next_visible_index(0, REGISTRY, answers, None) == 0
        assert next_visible_index(1, REGISTRY, answers, None) == len(REGISTRY)

    def test_resolving_from_a_visible_index_returns_it(self):
        """Resolution is a fixed point on visible steps."""
        answers = _store()
        for flow in ALL_FLOWS:
            for index in visible_indices(REGISTRY, answers, flow):
                assert next_visible_index(index, REGISTRY, answers, flow) == index

    def test_resolution_is_repeatable(self):
        answers = _store()
        first = next_visible_index(1, REGISTRY, answers, "loan")
        assert next_visible_index(1, REGISTRY, answers, "loan") == first
        assert REGISTRY[first].id == "loan_intro"

    def test_past_the_end_is_done(self):
        answers = _store()
        assert next_visible_index(len(REGISTRY) + 3, REGISTRY, answers, "plan") == len(
            REGISTRY
        )

    def test_negative_start_is_clamped(self):
        assert next_visible_index(-2, REGISTRY, _store(), None) == 0

    def test_skipped_step_is_jumped(self):
        """Answering 'none' to the English test skips the score step."""
        answers = _store()
        answers.submit("plan_english_test", "none", "Not taken yet")
        test_index = REGISTRY.index_of("plan_english_test")
        nxt = next_visible_index(test_index + 1, REGISTRY, answers, "plan")
        assert REGISTRY[nxt].id == "ai_search"

    def test_score_step_is_visible_after_a_real_test(self):
        answers = _store()
        answers.submit("plan_english_test", "ielts", "IELTS")
        test_index = REGISTRY.index_of("plan_english_test")
        nxt = next_visible_index(test_index + 1, REGISTRY, answers, "plan")
        assert REGISTRY[nxt].id == "plan_english_score"


class TestFlowIsolation:
    """Steps of one flow never appear in another."""

    def test_visible_steps_belong_to_the_selected_flow(self):
        answers = _store()
        for flow in ALL_FLOWS:
            for index in visible_indices(REGISTRY, answers, flow):
                step = REGISTRY[index]
                assert not step.flows or flow in step.flows

    def test_loan_steps_are_hidden_in_the_plan_flow(self):
        answers = _store()
        step = REGISTRY.get("loan_amount")
        assert not is_step_visible(step, answers, "plan")
        assert is_step_visible(step, answers, "loan")

    def test_at_most_one_visible_writer_per_shared_key(self):
        answers = _store()
        for flow in ALL_FLOWS:
            aliases = [
                REGISTRY[i].alias
                for i in visible_indices(REGISTRY, answers, flow)
                if REGISTRY[i].alias
            ]
            assert len(aliases) == len(set(aliases))


class TestAnswerStore:
    """Tests for primary and shared answer entries."""

    def test_aliased_submit_writes_both_entries(self):
        answers = _store()
        answers.submit("loan_country", "Canada", "Canada")
        assert answers.get("loan_country").value == "Canada"
        assert answers.resolve("country").value == "Canada"

    def test_unaliased_submit_writes_only_primary(self):
        answers = _store()
        answers.submit("goal", "plan", "Find a university")
        assert answers.get("goal").value == "plan"
        assert answers.shared_items() == {}
        assert answers.resolve("goal").value == "plan"

    def test_resubmit_overwrites(self):
        answers = _store()
        answers.submit("plan_gpa", "7", "7")
        answers.submit("plan_gpa", "8", "8")
        assert answers.resolve("gpa").value == "8"
        assert len(answers) == 1

    def test_discard_removes_alias_entries(self):
        answers = _store()
        answers.submit("plan_country", "UK", "UK")
        answers.submit("plan_course", "Data Science", "Data Science")
        removed = answers.discard(["plan_course", "plan_gpa"])
        assert removed == ["plan_course"]
        assert answers.resolve("course") is None
        assert answers.resolve("country").value == "UK"
        assert "plan_course" not in answers

    def test_discard_of_unanswered_step_keeps_shared_alias(self):
        answers = _store()
        answers.submit("plan_country", "UK", "UK")
        removed = answers.discard(["loan_country", "compare_country"])
        assert removed == []
        assert answers.resolve("country").value == "UK"

    def test_discard_restores_alias_from_remaining_owner(self):
        answers = _store()
        answers.submit("plan_country", "UK", "UK")
        answers.submit("loan_country", "Canada", "Canada")
        answers.discard(["loan_country"])
        assert answers.resolve("country").value == "UK"

    def test_discard_of_stale_owner_keeps_newer_alias(self):
        answers = _store()
        answers.submit("plan_country", "UK", "UK")
        answers.submit("loan_country", "Canada", "Canada")
        answers.discard(["plan_country"])
        assert answers.resolve("country").value == "Canada"

    def test_resolve_unknown_key(self):
        assert _store().resolve("country") is None

    def test_items_are_copies(self):
        answers = _store()
        answers.submit("plan_country", "UK", "UK")
        answers.primary_items().clear()
        answers.shared_items().clear()
        assert answers.answered_step_ids() == ["plan_country"]
        assert answers.resolve("country") is not None
